"""
Multi-encoding fallback decoder.

Used when the page text provider fails or returns garbage. The raw bytes are
decoded under several encodings; for each decoding two recovery strategies
run (text between BT/ET operators, and a printable-character filter). Every
result becomes a ranked ExtractionCandidate and the longest one wins.
"""

from __future__ import annotations

import codecs
import re
import unicodedata
from typing import Iterable, List, Optional, Sequence

import charset_normalizer
import structlog

from ..config.config import DecoderSettings
from .models import CandidateOrigin, ExtractionCandidate

logger = structlog.get_logger(__name__)

# Whitespace-delimited text object markers; objects never span a line.
_TEXT_MARKER = re.compile(r"(?<!\S)(BT|ET)(?!\S)")
_WHITESPACE = re.compile(r"\s+")

_PRINTABLE_CATEGORIES = frozenset("LNPSZ")


class _PrintableTable(dict):
    """str.translate table mapping non-printable code points to a space, memoised."""

    def __missing__(self, codepoint: int) -> int:
        category = unicodedata.category(chr(codepoint))
        value = codepoint if category[0] in _PRINTABLE_CATEGORIES else 0x20
        self[codepoint] = value
        return value


_PRINTABLE = _PrintableTable()


def extract_structural_spans(text: str) -> str:
    """Join the inner contents of every BT ... ET text object.

    Each line is scanned once: a BT opens an object (a nested BT is part of
    its content) and the next ET closes it. Empty objects are skipped.
    """
    spans: List[str] = []
    for line in text.split("\n"):
        start: Optional[int] = None
        for marker in _TEXT_MARKER.finditer(line):
            if marker.group(1) == "BT":
                if start is None:
                    start = marker.end()
            elif start is not None:
                inner = line[start : marker.start()].strip()
                if inner:
                    spans.append(inner)
                start = None
    return " ".join(spans)


def filter_printable(text: str) -> str:
    """Replace everything outside Unicode L/N/P/S/Z with spaces and collapse whitespace."""
    return _WHITESPACE.sub(" ", text.translate(_PRINTABLE)).strip()


def rank_candidates(
    candidates: Iterable[ExtractionCandidate], encodings: Sequence[str] = ()
) -> List[ExtractionCandidate]:
    """Order candidates best first: score, then origin preference, then encoding order."""
    order = {name: index for index, name in enumerate(encodings)}

    def key(candidate: ExtractionCandidate) -> tuple:
        return (
            -candidate.score,
            candidate.origin.preference,
            order.get(candidate.encoding or "", len(order)),
        )

    return sorted(candidates, key=key)


def _canonical_codec(name: str) -> str:
    return codecs.lookup(name).name


class MultiEncodingDecoder:
    """Recovers readable text from raw document bytes without a parser."""

    def __init__(self, settings: Optional[DecoderSettings] = None) -> None:
        self.settings = settings or DecoderSettings()
        self.logger = logger.bind(component="MultiEncodingDecoder")

    def encodings_for(self, data: bytes) -> List[str]:
        """Configured encodings, plus the detected one when enabled and new."""
        encodings = list(self.settings.encodings)
        if not self.settings.detect_encoding or not data:
            return encodings

        best = charset_normalizer.from_bytes(data).best()
        if best is None:
            return encodings

        known = {_canonical_codec(name) for name in encodings}
        try:
            detected = _canonical_codec(best.encoding)
        except LookupError:
            self.logger.debug("Detected encoding has no Python codec", encoding=best.encoding)
            return encodings
        if detected not in known:
            encodings.append(best.encoding)
        return encodings

    def candidates(self, data: bytes) -> List[ExtractionCandidate]:
        """Every non-empty candidate across encodings and strategies, best first."""
        encodings = self.encodings_for(data)
        found: List[ExtractionCandidate] = []

        for encoding in encodings:
            text = data.decode(encoding, errors="replace")

            structural = extract_structural_spans(text)
            if structural:
                found.append(ExtractionCandidate.from_text(CandidateOrigin.STRUCTURAL, structural, encoding))

            printable = filter_printable(text)
            if printable:
                found.append(ExtractionCandidate.from_text(CandidateOrigin.ENCODING, printable, encoding))

        return rank_candidates(found, encodings)

    def best(self, data: bytes) -> Optional[ExtractionCandidate]:
        ranked = self.candidates(data)
        return ranked[0] if ranked else None

    def decode(self, data: bytes) -> Optional[ExtractionCandidate]:
        """Best candidate, or None when nothing beats the minimum length."""
        candidate = self.best(data)
        if candidate is None or candidate.score <= self.settings.min_candidate_length:
            self.logger.info(
                "No usable fallback candidate",
                best_score=candidate.score if candidate else 0,
                min_candidate_length=self.settings.min_candidate_length,
                input_bytes=len(data),
            )
            return None

        self.logger.info(
            "Fallback candidate selected",
            candidate=candidate.label,
            encoding=candidate.encoding,
            score=candidate.score,
        )
        return candidate
