"""
docsift - validated, sanitized text extraction for uploaded documents.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .errors import (
    DocsiftError,
    EmptyExtraction,
    ExtractionFailed,
    ProviderUnavailable,
    UnsupportedMediaType,
)
from .pipeline import ExtractionPipeline
from .service import DocumentTextService

__all__ = [
    "__version__",
    "Config",
    "DocsiftError",
    "DocumentTextService",
    "EmptyExtraction",
    "ExtractionFailed",
    "ExtractionPipeline",
    "ProviderUnavailable",
    "UnsupportedMediaType",
]
