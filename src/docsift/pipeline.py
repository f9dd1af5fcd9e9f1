"""
Extraction pipeline: primary extraction with a classifier-gated fallback.

State machine per call::

    NOT_STARTED -> PRIMARY_ATTEMPTED -> ACCEPTED
                                     -> FALLBACK_ATTEMPTED -> ACCEPTED
                                                           -> REJECTED

Plain-text documents skip both extractors and are accepted verbatim.
Whatever is accepted goes through the sanitizer before it is returned.
"""

from __future__ import annotations

import asyncio
import time
from typing import List, Optional

import structlog

from .config.config import Config
from .errors import (
    DocsiftError,
    EmptyExtraction,
    ExtractionFailed,
    FailureStage,
)
from .extractor.classifier import ContentClassifier
from .extractor.decoder import MultiEncodingDecoder
from .extractor.models import (
    ClassificationVerdict,
    ExtractionDiagnostics,
    ExtractionOutcome,
    ExtractionSource,
    ExtractionState,
    MediaType,
    RawDocument,
    resolve_media_type,
)
from .extractor.pdfplumber_provider import PdfPlumberPageProvider
from .extractor.primary import PrimaryExtractor
from .extractor.protocols import PageTextProvider
from .extractor.sanitizer import sanitize
from .observability import increment, observe

logger = structlog.get_logger(__name__)


class _StateTrail:
    """Records the state transitions of one extraction call."""

    def __init__(self, log: structlog.stdlib.BoundLogger) -> None:
        self.states: List[ExtractionState] = [ExtractionState.NOT_STARTED]
        self._log = log

    @property
    def current(self) -> ExtractionState:
        return self.states[-1]

    def move(self, state: ExtractionState) -> None:
        self._log.debug("State transition", from_state=self.current.value, to_state=state.value)
        self.states.append(state)


class ExtractionPipeline:
    """
    Turns a RawDocument into sanitized text.

    Holds no per-document state; one instance can serve concurrent calls.
    """

    def __init__(
        self,
        primary: PrimaryExtractor,
        decoder: Optional[MultiEncodingDecoder] = None,
        classifier: Optional[ContentClassifier] = None,
    ) -> None:
        self.primary = primary
        self.decoder = decoder or MultiEncodingDecoder()
        self.classifier = classifier or ContentClassifier()
        self.logger = logger.bind(component="ExtractionPipeline")

    @classmethod
    def from_config(cls, config: Config, provider: Optional[PageTextProvider] = None) -> "ExtractionPipeline":
        """Build a pipeline; a pdfplumber provider is created when none is given."""
        return cls(
            primary=PrimaryExtractor(provider or PdfPlumberPageProvider(), config.provider),
            decoder=MultiEncodingDecoder(config.decoder),
            classifier=ContentClassifier(config.classifier),
        )

    async def extract(self, document: RawDocument) -> ExtractionOutcome:
        """
        Extract, validate and sanitize the text of a document.

        Raises:
            UnsupportedMediaType: neither PDF nor plain text
            ExtractionFailed: primary and fallback both failed or were rejected
            EmptyExtraction: accepted text sanitized to nothing
        """
        media_type = resolve_media_type(document.media_type, document.filename)
        log = self.logger.bind(document=document.filename, media_type=media_type.value, size=document.size)
        start = time.perf_counter()

        try:
            if media_type is MediaType.PLAIN_TEXT:
                return self._extract_plain_text(document, log, start)
            return await self._extract_pdf(document, log, start)
        except DocsiftError as e:
            increment("extractions_total", labels={"source": "none", "outcome": "rejected"})
            log.warning("Extraction rejected", error=str(e), error_type=type(e).__name__)
            raise

    def _extract_plain_text(
        self, document: RawDocument, log: structlog.stdlib.BoundLogger, start: float
    ) -> ExtractionOutcome:
        # Plain text is trusted verbatim; the verdict is only recorded.
        text = document.data.decode("utf-8", errors="replace")
        return self._accept(
            text,
            source=ExtractionSource.PLAIN_TEXT,
            verdict=self.classifier.classify(text),
            candidate_label=None,
            trail=_StateTrail(log),
            start=start,
            log=log,
        )

    async def _extract_pdf(
        self, document: RawDocument, log: structlog.stdlib.BoundLogger, start: float
    ) -> ExtractionOutcome:
        trail = _StateTrail(log)
        trail.move(ExtractionState.PRIMARY_ATTEMPTED)

        root_cause: Optional[BaseException] = None
        root_stage = FailureStage.PRIMARY
        try:
            text = await self.primary.extract(document)
        except DocsiftError as e:
            log.info("Primary extraction failed", error=str(e), error_type=type(e).__name__)
            root_cause = e
        else:
            verdict = self.classifier.classify(text)
            if not verdict.is_binary_like and text.strip():
                return self._accept(
                    text,
                    source=ExtractionSource.PRIMARY,
                    verdict=verdict,
                    candidate_label="primary",
                    trail=trail,
                    start=start,
                    log=log,
                )
            increment("classifier_rejections_total", labels={"stage": "primary"})
            log.info(
                "Primary output rejected by classifier",
                indicator_count=verdict.indicator_count,
                binary_ratio=round(verdict.binary_ratio, 4),
            )
            root_cause = ExtractionFailed(
                "Primary extraction returned raw document syntax instead of readable text",
                stage=FailureStage.CLASSIFIER,
            )
            root_stage = FailureStage.CLASSIFIER

        trail.move(ExtractionState.FALLBACK_ATTEMPTED)
        candidate = await asyncio.to_thread(self.decoder.decode, document.data)
        if candidate is None:
            trail.move(ExtractionState.REJECTED)
            raise ExtractionFailed(
                f"No readable text recovered ({root_stage.value} failure: {root_cause})",
                stage=FailureStage.FALLBACK,
                root_cause=root_cause,
            ) from root_cause

        verdict = self.classifier.classify(candidate.text)
        if verdict.is_binary_like:
            increment("classifier_rejections_total", labels={"stage": "fallback"})
            trail.move(ExtractionState.REJECTED)
            raise ExtractionFailed(
                f"Best fallback candidate ({candidate.label}) is still binary-like",
                stage=FailureStage.CLASSIFIER,
                root_cause=root_cause,
            ) from root_cause

        return self._accept(
            candidate.text,
            source=ExtractionSource.FALLBACK_ENCODING,
            verdict=verdict,
            candidate_label=candidate.label,
            trail=trail,
            start=start,
            log=log,
        )

    def _accept(
        self,
        text: str,
        *,
        source: ExtractionSource,
        verdict: ClassificationVerdict,
        candidate_label: Optional[str],
        trail: _StateTrail,
        start: float,
        log: structlog.stdlib.BoundLogger,
    ) -> ExtractionOutcome:
        sanitized = sanitize(text)
        if not sanitized:
            trail.move(ExtractionState.REJECTED)
            raise EmptyExtraction(f"Accepted {source.value} text is empty after sanitization")

        trail.move(ExtractionState.ACCEPTED)
        elapsed = time.perf_counter() - start
        diagnostics = ExtractionDiagnostics(
            source=source,
            character_count=len(sanitized),
            classification=verdict,
            candidate_label=candidate_label,
            elapsed_ms=elapsed * 1000,
        )

        increment("extractions_total", labels={"source": source.value, "outcome": "accepted"})
        observe("extraction_duration_seconds", elapsed, labels={"source": source.value})
        log.info(
            "Extraction accepted",
            source=source.value,
            character_count=len(sanitized),
            candidate=candidate_label,
            elapsed_ms=round(elapsed * 1000, 2),
        )
        return ExtractionOutcome(text=sanitized, diagnostics=diagnostics, states=tuple(trail.states))
