"""
Calling layer: upload validation, sanitized-text caching and extraction.
"""

from __future__ import annotations

from typing import Dict, Optional

import structlog

from .cache import SanitizedTextCache
from .config.config import Config
from .extractor.models import ExtractionOutcome, RawDocument
from .extractor.protocols import PageTextProvider
from .intake import UploadValidator
from .pipeline import ExtractionPipeline

logger = structlog.get_logger(__name__)


class DocumentTextService:
    """
    Serves sanitized text for uploaded documents.

    Results are cached per document key until the caller replaces or removes
    the document. A document removed while its extraction is still running
    does not get its (now stale) result written back to the cache.
    """

    def __init__(
        self,
        pipeline: ExtractionPipeline,
        validator: Optional[UploadValidator] = None,
        cache: Optional[SanitizedTextCache] = None,
    ) -> None:
        self.pipeline = pipeline
        self.validator = validator or UploadValidator()
        self.cache = cache if cache is not None else SanitizedTextCache()
        # Both maps only hold keys with an extraction in flight.
        self._generations: Dict[str, int] = {}
        self._in_flight: Dict[str, int] = {}
        self.logger = logger.bind(component="DocumentTextService")

    @classmethod
    def from_config(cls, config: Config, provider: Optional[PageTextProvider] = None) -> "DocumentTextService":
        return cls(
            pipeline=ExtractionPipeline.from_config(config, provider),
            validator=UploadValidator(config.intake),
        )

    async def get_text(
        self,
        key: str,
        data: bytes,
        *,
        media_type: Optional[str],
        filename: Optional[str] = None,
    ) -> ExtractionOutcome:
        """Validate the upload, then return the cached outcome for `key` or extract it."""
        resolved = self.validator.validate(filename, media_type, len(data))

        cached = self.cache.get(key)
        if cached is not None:
            self.logger.debug("Using cached document text", key=key, length=len(cached.text))
            return cached

        generation = self._generations.get(key, 0)
        self._in_flight[key] = self._in_flight.get(key, 0) + 1
        try:
            with structlog.contextvars.bound_contextvars(document=filename or key):
                outcome = await self.pipeline.extract(
                    RawDocument(data=data, media_type=resolved.value, filename=filename)
                )
        finally:
            stale = self._generations.get(key, 0) != generation
            self._finish(key)

        if stale:
            self.logger.info("Document changed during extraction, result not cached", key=key)
        else:
            self.cache.put(key, outcome)
        return outcome

    def _finish(self, key: str) -> None:
        remaining = self._in_flight[key] - 1
        if remaining:
            self._in_flight[key] = remaining
        else:
            del self._in_flight[key]
            self._generations.pop(key, None)

    async def replace_document(
        self,
        key: str,
        data: bytes,
        *,
        media_type: Optional[str],
        filename: Optional[str] = None,
    ) -> ExtractionOutcome:
        """Invalidate whatever was cached for `key` and extract the new upload."""
        self.remove_document(key)
        return await self.get_text(key, data, media_type=media_type, filename=filename)

    def remove_document(self, key: str) -> None:
        """Drop the cached text for `key`; extractions still running for it will not be cached."""
        if key in self._in_flight:
            self._generations[key] = self._generations.get(key, 0) + 1
        if self.cache.invalidate(key):
            self.logger.debug("Cached document text invalidated", key=key)
