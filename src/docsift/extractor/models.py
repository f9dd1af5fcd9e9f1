"""
Data models shared by the extraction pipeline.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, Optional, Tuple

from ..errors import UnsupportedMediaType


class MediaType(str, Enum):
    PDF = "pdf"
    PLAIN_TEXT = "plain-text"


_MEDIA_TYPE_ALIASES: Dict[str, MediaType] = {
    "pdf": MediaType.PDF,
    "application/pdf": MediaType.PDF,
    "application/x-pdf": MediaType.PDF,
    "plain-text": MediaType.PLAIN_TEXT,
    "text": MediaType.PLAIN_TEXT,
    "text/plain": MediaType.PLAIN_TEXT,
}

_GENERIC_MEDIA_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def resolve_media_type(declared: Optional[str], filename: Optional[str] = None) -> MediaType:
    """Map a declared media type (or, failing that, a filename) to a MediaType.

    Raises:
        UnsupportedMediaType: if neither source names a PDF or plain text.
    """
    key = (declared or "").split(";", 1)[0].strip().lower()
    if key in _MEDIA_TYPE_ALIASES:
        return _MEDIA_TYPE_ALIASES[key]

    if key in _GENERIC_MEDIA_TYPES and filename:
        guessed, _ = mimetypes.guess_type(PurePath(filename).name)
        if guessed and guessed.lower() in _MEDIA_TYPE_ALIASES:
            return _MEDIA_TYPE_ALIASES[guessed.lower()]

    raise UnsupportedMediaType(declared, filename)


@dataclass(frozen=True, slots=True)
class RawDocument:
    """Uploaded bytes plus their declared media type. Consumed once."""

    data: bytes
    media_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class PageToken:
    content: str
    page_index: int  # 1-indexed
    x0: Optional[float] = None
    top: Optional[float] = None


class CandidateOrigin(str, Enum):
    """Where an extraction candidate came from, in preference order."""

    PRIMARY = "primary"
    ENCODING = "encoding"
    STRUCTURAL = "structural-heuristic"

    @property
    def preference(self) -> int:
        return _ORIGIN_PREFERENCE[self]


_ORIGIN_PREFERENCE = {
    CandidateOrigin.PRIMARY: 0,
    CandidateOrigin.ENCODING: 1,
    CandidateOrigin.STRUCTURAL: 2,
}


@dataclass(frozen=True, slots=True)
class ExtractionCandidate:
    """One proposed text recovery with its length-based score."""

    origin: CandidateOrigin
    text: str
    score: int
    encoding: Optional[str] = None

    @property
    def label(self) -> str:
        if self.origin is CandidateOrigin.ENCODING:
            return f"encoding:{self.encoding}"
        return self.origin.value

    @classmethod
    def from_text(
        cls, origin: CandidateOrigin, text: str, encoding: Optional[str] = None
    ) -> "ExtractionCandidate":
        return cls(origin=origin, text=text, score=len(text), encoding=encoding)


@dataclass(frozen=True, slots=True)
class ClassificationVerdict:
    is_binary_like: bool
    indicator_count: int
    binary_ratio: float  # 0-1
    matched_indicators: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_binary_like": self.is_binary_like,
            "indicator_count": self.indicator_count,
            "binary_ratio": self.binary_ratio,
            "matched_indicators": list(self.matched_indicators),
        }


class ExtractionSource(str, Enum):
    PRIMARY = "primary"
    FALLBACK_ENCODING = "fallback-encoding"
    PLAIN_TEXT = "plain-text"


class ExtractionState(str, Enum):
    NOT_STARTED = "not_started"
    PRIMARY_ATTEMPTED = "primary_attempted"
    FALLBACK_ATTEMPTED = "fallback_attempted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class ExtractionDiagnostics:
    """Debugging record that travels with the sanitized text."""

    source: ExtractionSource
    character_count: int
    classification: ClassificationVerdict
    candidate_label: Optional[str] = None
    elapsed_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source.value,
            "character_count": self.character_count,
            "classification": self.classification.to_dict(),
            "candidate_label": self.candidate_label,
            "elapsed_ms": round(self.elapsed_ms, 3),
        }


@dataclass(frozen=True, slots=True)
class ExtractionOutcome:
    text: str
    diagnostics: ExtractionDiagnostics
    states: Tuple[ExtractionState, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "diagnostics": self.diagnostics.to_dict(),
            "states": [state.value for state in self.states],
        }
