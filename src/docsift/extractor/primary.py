"""
Primary extractor: drives a PageTextProvider and assembles page text.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Sequence

import structlog

from ..config.config import ProviderSettings
from ..errors import DocumentLoadError, EmptyExtraction, ProviderUnavailable
from .models import PageToken, RawDocument
from .protocols import PageTextProvider

logger = structlog.get_logger(__name__)


def join_page_tokens(tokens: Sequence[PageToken]) -> str:
    """Space-join trimmed token contents, dropping empty ones."""
    contents = (token.content.strip() for token in tokens if isinstance(token.content, str))
    return " ".join(content for content in contents if content)


class PrimaryExtractor:
    """
    Orchestrates an external page text provider.

    Pages are visited strictly in ascending order; each page's tokens become
    one space-joined line terminated by a newline.
    """

    name = "primary"

    def __init__(self, provider: PageTextProvider, settings: Optional[ProviderSettings] = None) -> None:
        self.provider = provider
        self.settings = settings or ProviderSettings()
        self.logger = logger.bind(component="PrimaryExtractor", provider=getattr(provider, "name", "unknown"))

    async def _ensure_provider_ready(self) -> None:
        timeout = self.settings.ready_timeout_seconds
        try:
            await asyncio.wait_for(self.provider.wait_until_ready(), timeout=timeout)
        except asyncio.TimeoutError as e:
            self.logger.warning("Page provider not ready in time", timeout_seconds=timeout)
            raise ProviderUnavailable(f"Page text provider not ready within {timeout:g}s") from e
        except ProviderUnavailable:
            raise
        except Exception as e:
            self.logger.error(
                "Page provider failed to initialize",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ProviderUnavailable(f"Page text provider failed to initialize: {e}") from e

    async def _load(self, data: bytes) -> Any:
        try:
            return await self.provider.load(data)
        except Exception as e:
            self.logger.info("Document could not be loaded", error=str(e), error_type=type(e).__name__)
            raise DocumentLoadError(f"Document could not be loaded: {e}") from e

    async def _close(self, handle: Any) -> None:
        # A failing close must not replace the page result or the page error.
        try:
            await self.provider.close(handle)
        except Exception as e:
            self.logger.warning("Document handle could not be closed", error=str(e), error_type=type(e).__name__)

    async def extract(self, document: RawDocument) -> str:
        """Extract the document's text, pages joined by newlines.

        Raises:
            ProviderUnavailable: provider not ready within the timeout
            DocumentLoadError: provider rejected the bytes
            EmptyExtraction: no text on any page
        """
        await self._ensure_provider_ready()
        handle = await self._load(document.data)

        pages: List[str] = []
        try:
            page_count = await self.provider.page_count(handle)
            for page_index in range(1, page_count + 1):
                tokens = await self.provider.get_page_tokens(handle, page_index)
                pages.append(join_page_tokens(tokens) + "\n")
                self.logger.debug("Page processed", page=page_index, tokens=len(tokens))
        except Exception as e:
            self.logger.info(
                "Page text could not be read",
                pages_read=len(pages),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DocumentLoadError(f"Page text could not be read: {e}") from e
        finally:
            await self._close(handle)

        text = "".join(pages)
        if not text.strip():
            self.logger.info("No text content found", page_count=page_count)
            raise EmptyExtraction(
                "No text content found in document. It might be image-based or corrupted."
            )

        self.logger.debug("Primary extraction finished", page_count=page_count, length=len(text))
        return text
