"""Command-line interface for the SCC Caption Converter.

WHY: Users need a simple way to convert SCC caption files from the
terminal. The CLI wires together the full pipeline (file validation,
decoding, style-tree transformation, optional filtering, pluggable
formatter output, and file saving) behind a single command.

HOW: Uses argparse to accept an input file, the frame rate, parity
checking, filter switches, output format selection, and output directory.
Status messages go to stderr; output files are saved next to the source
(or to --output-dir). Logging is configured from --verbose or
SCC_LOG_LEVEL.

RULES:
- Positional argument: input SCC file path
- Validates file extension against SCC_FILE_EXTENSIONS before decoding
- --formats: comma-separated formatter keys (default: SCC_DEFAULT_FORMATS)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (episode-2.vtt)
- Status output goes to stderr (not stdout)
- Invalid input (bad header, bad line, parity error) prints "Error: ..."
  and exits with status 1; no output files are written
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from scc_converter import __version__
from scc_converter.config import (
    DEFAULT_CAPTION_TAIL_S,
    DEFAULT_CHECK_PARITY,
    DEFAULT_FORMATS,
    DEFAULT_FPS,
    DEFAULT_LOG_LEVEL,
    SCC_FILE_EXTENSIONS,
)
from scc_converter.core.decoder import decode
from scc_converter.core.transformer import transform
from scc_converter.filters.caption_filter import CaptionFilter, FilterOptions
from scc_converter.formatters import FORMATTERS
from scc_converter.formatters.base import BaseFormatter, FormatterOutput
from scc_converter.formatters.webvtt import WebVTTFormatter

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _error(msg: str) -> NoReturn:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _positive_float(value: str) -> float:
    try:
        result = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError("'{}' is not a number".format(value)) from None
    if result <= 0:
        raise argparse.ArgumentTypeError("'{}' must be positive".format(value))
    return result


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: Users may run the converter multiple times on the same file.
    Overwriting previous output would lose work.

    HOW: Check if {stem}{suffix} exists. If so, increment a counter
    and insert it before the file extension until a free name is found.

    RULES:
    - First attempt: {stem}{suffix} (e.g. episode-captions.json)
    - Conflict: split suffix at last dot, insert counter before extension
      (e.g. episode-captions-2.json, episode-2.vtt)
    - Counter starts at 2 and increments

    Args:
        stem: Source filename stem (without extension).
        suffix: Formatter's suffix (e.g. ".vtt").
        output_dir: Directory to save the output file.

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    # e.g. "-captions.json" -> ("-captions", ".json"), ".vtt" -> ("", ".vtt")
    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Save a single formatter output to disk.

    RULES:
    - String content written as UTF-8 text
    - Bytes content written in binary mode
    - Returns the resolved output path for status reporting
    """
    path = _resolve_output_path(stem, output.suffix, output_dir)

    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")

    return path


def _parse_format_keys(formats: str) -> List[str]:
    format_keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            _error("Unknown format '{}'. Available formats: {}".format(key, available))
    return format_keys


def _make_formatter(key: str, args: argparse.Namespace) -> BaseFormatter:
    if key == "webvtt":
        return WebVTTFormatter(trim_line_whitespace=args.trim_line_whitespace)
    return FORMATTERS[key]()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, DEFAULT_LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run(args: argparse.Namespace) -> List[Path]:
    """Execute the full conversion pipeline.

    HOW: Reads the input file, decodes it, transforms the snapshots into
    captions, applies the requested filters, runs the selected formatters,
    and saves their output.

    RULES:
    - All validation happens before anything is written
    - Decode errors abort the run; partial results are never saved

    Returns:
        Paths of all saved files.
    """
    input_path = Path(args.input_file).resolve()

    if not input_path.is_file():
        _error("File not found: {}".format(input_path))

    ext = input_path.suffix.lower()
    if ext not in SCC_FILE_EXTENSIONS:
        _error("Unsupported file type '{}'. Supported formats: {}".format(
            ext, ", ".join(sorted(SCC_FILE_EXTENSIONS))
        ))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        _error("Output directory does not exist: {}".format(output_dir))

    format_keys = _parse_format_keys(args.formats)

    _status("Decoding {} at {} fps...".format(input_path.name, args.fps))
    lines = input_path.read_text(encoding="utf-8-sig", errors="replace").splitlines()
    try:
        raw_captions = decode(lines, args.fps, check_parity=args.check_parity)
    except ValueError as e:
        # FormatError and ParityError are ValueErrors
        _error(str(e))
    _status("  {} caption snapshots".format(len(raw_captions)))

    captions = transform(raw_captions, tail_seconds=args.tail_seconds)
    _status("  {} captions".format(len(captions)))

    options = FilterOptions(
        remove_color=args.remove_color,
        remove_flash=args.remove_flash,
        simple_positions=args.simple_positions,
        merge_by_position=args.merge_by_position,
    )
    if options != FilterOptions():
        captions = CaptionFilter(options).process(captions)
        _status("  {} captions after filtering".format(len(captions)))

    _status("Formatting output...")
    saved_files: List[Path] = []
    for key in format_keys:
        formatter = _make_formatter(key, args)
        _status("  Running {} formatter...".format(formatter.name))
        for output in formatter.format(captions):
            saved_path = _save_output(output, input_path.stem, output_dir)
            saved_files.append(saved_path)
            _status("  Saved: {}".format(saved_path.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    return saved_files


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="scc-converter",
        description="Convert Scenarist SCC (CEA-608 pop-on) captions to "
                    "WebVTT, a JSON caption timeline, or plain text.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the SCC file to convert.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    parser.add_argument(
        "--fps",
        type=_positive_float,
        default=DEFAULT_FPS,
        help="Frame rate of the SCC timecodes (default: %(default)s).",
    )

    parser.add_argument(
        "--check-parity",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_CHECK_PARITY,
        help="Reject bytes with wrong odd parity (default: %(default)s).",
    )

    parser.add_argument(
        "--tail-seconds",
        type=_positive_float,
        default=DEFAULT_CAPTION_TAIL_S,
        help="How long the last caption stays on screen when the file does not "
             "clear it (default: %(default)s).",
    )

    parser.add_argument(
        "--formats",
        default=DEFAULT_FORMATS,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: %(default)s.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    filters = parser.add_argument_group("filters")
    filters.add_argument(
        "--remove-color",
        action="store_true",
        help="Drop color information, keeping the text.",
    )
    filters.add_argument(
        "--remove-flash",
        action="store_true",
        help="Drop flash (blink) information, keeping the text.",
    )
    filters.add_argument(
        "--simple-positions",
        action="store_true",
        help="Place captions at the top or bottom of the screen, centered, "
             "instead of at their exact grid position.",
    )
    filters.add_argument(
        "--merge-by-position",
        action="store_true",
        help="Merge captions shown at the same time and position into one.",
    )

    parser.add_argument(
        "--trim-line-whitespace",
        action="store_true",
        help="Strip leading and trailing whitespace from each WebVTT cue line.",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    run(args)


if __name__ == "__main__":
    main()
