"""Configuration defaults and .env loading.

WHY: Frame rate, parity checking, caption tail length, output formats, and
log level are the knobs users change most. Keeping their defaults in one
module (overridable from the environment) means neither the CLI nor the
library buries them in logic.

HOW: python-dotenv loads the .env file on import. Each default is read from
an environment variable with a fallback value. Numeric values are parsed
with a clear error message instead of a bare ValueError traceback.

RULES:
- SCC_DEFAULT_FPS: frame rate for timecodes (default 29.97)
- SCC_CHECK_PARITY: "true"/"false", odd parity checking (default true)
- SCC_CAPTION_TAIL_SECONDS: display time of the final caption (default 5.0)
- SCC_DEFAULT_FORMATS: comma-separated formatter keys (default "webvtt")
- SCC_LOG_LEVEL: logging level name for the CLI (default "WARNING")
- Invalid numeric values raise ValueError naming the variable
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip()
    try:
        value = float(raw)
    except ValueError:
        raise ValueError("{} must be a number, got '{}'".format(name, raw)) from None
    if value <= 0:
        raise ValueError("{} must be positive, got '{}'".format(name, raw))
    return value


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Decoding defaults
# ---------------------------------------------------------------------------

SCC_FILE_EXTENSIONS: set[str] = {".scc"}
"""Input file extensions the CLI accepts (lowercase, with dot)."""

DEFAULT_FPS = _env_float("SCC_DEFAULT_FPS", "29.97")
DEFAULT_CHECK_PARITY = _env_bool("SCC_CHECK_PARITY", "true")

# ---------------------------------------------------------------------------
# Transformation and output defaults
# ---------------------------------------------------------------------------

DEFAULT_CAPTION_TAIL_S = _env_float("SCC_CAPTION_TAIL_SECONDS", "5.0")
"""Seconds a caption still on screen at the end of the stream stays visible."""

DEFAULT_FORMATS = os.getenv("SCC_DEFAULT_FORMATS", "webvtt")
DEFAULT_LOG_LEVEL = os.getenv("SCC_LOG_LEVEL", "WARNING").upper()
