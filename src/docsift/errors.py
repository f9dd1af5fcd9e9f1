"""
Typed errors raised by the docsift extraction pipeline.

Every failure reaches the caller as one of these so the calling layer can
tell "try a different file" apart from "try again later".
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FailureStage(str, Enum):
    """Pipeline stage that produced an ExtractionFailed."""

    PRIMARY = "primary"
    CLASSIFIER = "classifier"
    FALLBACK = "fallback"


class DocsiftError(Exception):
    """Base class for every error surfaced by docsift."""

    retryable: bool = False


class UnsupportedMediaType(DocsiftError, ValueError):
    """Input is neither a PDF nor plain text."""

    def __init__(self, media_type: Optional[str], filename: Optional[str] = None) -> None:
        self.media_type = media_type
        self.filename = filename
        super().__init__(f"Unsupported media type {media_type!r} (filename={filename!r})")


class ProviderUnavailable(DocsiftError):
    """The page text provider was not ready within the configured wait."""

    retryable = True


class EmptyExtraction(DocsiftError):
    """No text was found, typically an image-only or corrupted document."""


class DocumentLoadError(DocsiftError):
    """The page text provider could not open the document bytes."""


class UploadTooLarge(DocsiftError, ValueError):
    """Upload exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Upload of {size} bytes exceeds the {limit} byte limit")


class ExtractionFailed(DocsiftError):
    """All extraction strategies were exhausted or rejected."""

    def __init__(
        self,
        reason: str,
        *,
        stage: FailureStage,
        root_cause: Optional[BaseException] = None,
    ) -> None:
        self.reason = reason
        self.stage = stage
        self.root_cause = root_cause
        super().__init__(f"{stage.value}: {reason}")

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return isinstance(self.root_cause, ProviderUnavailable)
