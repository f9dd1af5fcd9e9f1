"""
Content classifier: readable prose vs. leaked PDF syntax or binary noise.

Two independent signals decide the verdict. Counting structural indicators
catches ASCII-only leaked syntax; the control/high-byte ratio catches raw
binary that contains no recognisable keywords. Either one firing marks the
text as binary-like.
"""

from __future__ import annotations

import re
from typing import List, Optional, Pattern, Tuple

import structlog

from ..config.config import ClassifierSettings
from .models import ClassificationVerdict

logger = structlog.get_logger(__name__)

_NUM = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)"

_BINARY_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\xFF]")


def _keyword(word: str) -> Pattern[str]:
    return re.compile(rf"\b{word}\b")


def _metadata(key: str) -> Pattern[str]:
    return re.compile(rf"/{key}\s*\(")


def _operator(token: str, operands: int = 0) -> Pattern[str]:
    """Content-stream operator as a whitespace-delimited token after `operands` numbers."""
    lead = rf"(?:{_NUM}\s+){{{operands}}}" if operands else ""
    return re.compile(rf"(?<!\S){lead}{re.escape(token)}(?!\S)")


# Ordered (name, pattern) pairs. Order only matters for diagnostics output.
RAW_PDF_INDICATORS: Tuple[Tuple[str, Pattern[str]], ...] = (
    # file structure
    ("header", re.compile(r"\A%PDF-")),
    ("obj", re.compile(r"\bobj\s*<<")),
    ("endobj", _keyword("endobj")),
    ("stream", _keyword("stream")),
    ("endstream", _keyword("endstream")),
    ("xref", _keyword("xref")),
    ("trailer", _keyword("trailer")),
    ("startxref", _keyword("startxref")),
    # document information dictionary
    ("Title", _metadata("Title")),
    ("Producer", _metadata("Producer")),
    ("Creator", _metadata("Creator")),
    ("CreationDate", _metadata("CreationDate")),
    ("ModDate", _metadata("ModDate")),
    ("Author", _metadata("Author")),
    ("Subject", _metadata("Subject")),
    ("Keywords", _metadata("Keywords")),
    # text objects and positioning
    ("BT", _operator("BT")),
    ("ET", _operator("ET")),
    ("Tf", re.compile(rf"/\S+\s+{_NUM}\s+Tf(?!\S)")),
    ("Tm", _operator("Tm", 6)),
    ("Td", _operator("Td", 2)),
    ("TD", _operator("TD", 2)),
    ("T*", _operator("T*")),
    ("TL", _operator("TL", 1)),
    ("Tc", _operator("Tc", 1)),
    ("Tw", _operator("Tw", 1)),
    ("Tj", re.compile(r"\)\s*Tj(?!\S)")),
    ("TJ", re.compile(r"\]\s*TJ(?!\S)")),
    # graphics state and colour
    ("q", _operator("q")),
    ("Q", _operator("Q")),
    ("cm", _operator("cm", 6)),
    ("gs", re.compile(r"/\S+\s+gs(?!\S)")),
    ("rg", _operator("rg", 3)),
    ("RG", _operator("RG", 3)),
    # path construction
    ("m", _operator("m", 2)),
    ("l", _operator("l", 2)),
    ("c", _operator("c", 6)),
    ("v", _operator("v", 4)),
    ("y", _operator("y", 4)),
    ("re", _operator("re", 4)),
    ("h", _operator("h")),
    # path painting
    ("S", _operator("S")),
    ("s", _operator("s")),
    ("f", _operator("f")),
    ("F", _operator("F")),
    ("B", _operator("B")),
    ("b", _operator("b")),
    ("n", _operator("n")),
)


def binary_ratio(text: str) -> float:
    """Fraction of characters in the control / high-byte ranges."""
    if not text:
        return 0.0
    return len(_BINARY_CHARS.findall(text)) / len(text)


class ContentClassifier:
    """Decides whether extracted text is genuine prose."""

    def __init__(self, settings: Optional[ClassifierSettings] = None) -> None:
        self.settings = settings or ClassifierSettings()
        self.indicators = RAW_PDF_INDICATORS
        self.logger = logger.bind(component="ContentClassifier")

    def matched_indicators(self, text: str) -> List[str]:
        return [name for name, pattern in self.indicators if pattern.search(text)]

    def classify(self, text: object) -> ClassificationVerdict:
        if not isinstance(text, str) or not text:
            return ClassificationVerdict(is_binary_like=False, indicator_count=0, binary_ratio=0.0)

        matched = self.matched_indicators(text)
        ratio = binary_ratio(text)
        is_binary_like = (
            len(matched) > self.settings.indicator_threshold or ratio > self.settings.binary_ratio_threshold
        )

        if is_binary_like:
            self.logger.debug(
                "Text classified as binary-like",
                indicator_count=len(matched),
                indicators=matched,
                binary_ratio=round(ratio, 4),
                length=len(text),
            )

        return ClassificationVerdict(
            is_binary_like=is_binary_like,
            indicator_count=len(matched),
            binary_ratio=ratio,
            matched_indicators=tuple(matched),
        )

    def is_binary_like(self, text: object) -> bool:
        return self.classify(text).is_binary_like
