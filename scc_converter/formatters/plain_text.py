"""Plain text transcript formatter.

WHY: Editors and archivists need the caption text alone for review,
search, and quick reference: no timecodes, no markup, just what was on
screen, one block per screen.

HOW: Captions that share a timespan were on screen together, so their
flattened text forms one paragraph (one caption per line, in the order
given). Paragraphs are separated by a blank line.

RULES:
- One paragraph per distinct timespan, consecutive captions only
- Style nodes are dropped; only the text is written
- Trailing whitespace is stripped from every line
- Double newline between paragraphs, single trailing newline
- Output suffix: "-captions.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from scc_converter.core.ir import Caption, flatten_text
from scc_converter.core.timecode import Timespan
from scc_converter.formatters.base import BaseFormatter, FormatterOutput


def _paragraph(lines: List[str]) -> str:
    return "\n".join(line.rstrip() for line in lines)


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces one text paragraph per caption screen."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, captions: Sequence[Caption]) -> List[FormatterOutput]:
        """Convert captions into a plain text transcript.

        Returns:
            A single-element list containing the plain text output.
        """
        paragraphs: List[str] = []
        current_timespan: Optional[Timespan] = None
        current_lines: List[str] = []

        for caption in captions:
            if caption.timespan != current_timespan:
                # Flush previous screen
                if current_lines:
                    paragraphs.append(_paragraph(current_lines))
                current_timespan = caption.timespan
                current_lines = []
            current_lines.append(flatten_text(caption.content))

        if current_lines:
            paragraphs.append(_paragraph(current_lines))

        content = "\n\n".join(paragraphs)
        if content:
            content += "\n"

        return [
            FormatterOutput(
                suffix="-captions.txt",
                content=content,
                media_type="text/plain",
            )
        ]
