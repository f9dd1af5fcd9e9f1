"""
Text sanitizer producing the flat, canonical string handed to prompt assembly.
"""

from __future__ import annotations

import re
import unicodedata

import structlog

logger = structlog.get_logger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE = re.compile(r"\s+")
BOM = "\ufeff"


def sanitize(text: object) -> str:
    """Normalize text into a single NFC line.

    Steps, in order: drop NULs, drop ASCII control characters other than
    tab/newline/carriage return, drop every BOM, trim, NFC-normalize, then
    collapse each whitespace run (newlines included) to one space. Paragraph
    structure is intentionally lost.

    Never raises; non-string or empty input yields "".
    """
    if not isinstance(text, str) or not text:
        return ""

    sanitized = text.replace("\x00", "")
    sanitized = _CONTROL_CHARS.sub("", sanitized)
    sanitized = sanitized.replace(BOM, "")
    sanitized = sanitized.strip()

    try:
        sanitized = unicodedata.normalize("NFC", sanitized)
    except (TypeError, ValueError) as e:
        logger.warning("Unicode normalization failed, keeping un-normalized text", error=str(e))

    return _WHITESPACE.sub(" ", sanitized)
