"""
docsift extraction components.

- ContentClassifier: prose vs. leaked PDF syntax / binary noise
- MultiEncodingDecoder: ranked text recovery from raw bytes
- PrimaryExtractor: drives a PageTextProvider page by page
- PdfPlumberPageProvider: lazily initialized pdfplumber provider
- sanitize: flattening, NFC normalization and control-character removal
"""

from .classifier import ContentClassifier
from .decoder import MultiEncodingDecoder, rank_candidates
from .models import (
    CandidateOrigin,
    ClassificationVerdict,
    ExtractionCandidate,
    ExtractionDiagnostics,
    ExtractionOutcome,
    ExtractionSource,
    ExtractionState,
    MediaType,
    PageToken,
    RawDocument,
    resolve_media_type,
)
from .pdfplumber_provider import PdfPlumberPageProvider
from .primary import PrimaryExtractor
from .protocols import PageTextProvider
from .sanitizer import sanitize

__all__ = [
    "CandidateOrigin",
    "ClassificationVerdict",
    "ContentClassifier",
    "ExtractionCandidate",
    "ExtractionDiagnostics",
    "ExtractionOutcome",
    "ExtractionSource",
    "ExtractionState",
    "MediaType",
    "MultiEncodingDecoder",
    "PageTextProvider",
    "PageToken",
    "PdfPlumberPageProvider",
    "PrimaryExtractor",
    "RawDocument",
    "rank_candidates",
    "resolve_media_type",
    "sanitize",
]
