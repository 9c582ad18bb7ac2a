"""Abstract base formatter and output container.

WHY: Every output format consumes the same list of Caption objects but
produces different file content. This base class enforces a consistent
interface so the CLI (and any library caller) can work with any formatter
generically.

HOW: BaseFormatter is an ABC with two requirements: a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content (string or bytes) and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list; current formatters return one item each
- ``suffix`` includes the extension, e.g. ``".vtt"`` or ``"-captions.json"``
- The caller is responsible for prepending the source filename stem
- Formatters never modify the captions they are given
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence, Union

from scc_converter.core.ir import Caption


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``".vtt"`` -> ``"episode.vtt"``.
        content: The file content as a string (WebVTT, JSON, plain text)
                 or bytes (future binary formats).
        media_type: MIME type for the content, e.g. ``"text/vtt"``.
    """

    suffix: str
    content: Union[str, bytes]
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'WebVTT'."""

    @abstractmethod
    def format(self, captions: Sequence[Caption]) -> List[FormatterOutput]:
        """Convert captions into one or more output files.

        Args:
            captions: Transformed (and optionally filtered) captions in
                      display order.

        Returns:
            List of FormatterOutput objects, each containing a file suffix,
            content string/bytes, and MIME type.
        """
