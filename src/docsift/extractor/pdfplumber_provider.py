"""
pdfplumber-backed page text provider.
"""

from __future__ import annotations

import asyncio
import importlib
import io
from typing import Any, List, Optional

import structlog

from ..errors import ProviderUnavailable
from .models import PageToken
from .protocols import PageTextProvider

logger = structlog.get_logger(__name__)


class PdfPlumberPageProvider(PageTextProvider):
    """
    Page text provider using pdfplumber word extraction.

    The pdfplumber/pdfminer import is deferred to the first
    ``wait_until_ready()`` call and runs in a worker thread, so constructing
    the provider is free. One instance is meant to be created by the caller
    and passed to every PrimaryExtractor that needs it.
    """

    name = "pdfplumber"

    def __init__(self, *, keep_blank_chars: bool = False, use_text_flow: bool = False) -> None:
        self.word_options = {
            "keep_blank_chars": keep_blank_chars,
            "use_text_flow": use_text_flow,
        }
        self._module: Optional[Any] = None
        self._init_lock = asyncio.Lock()
        self.logger = logger.bind(component="PdfPlumberPageProvider")

    @property
    def is_ready(self) -> bool:
        return self._module is not None

    async def wait_until_ready(self) -> None:
        if self.is_ready:
            return
        async with self._init_lock:
            if self.is_ready:
                return
            try:
                self._module = await asyncio.to_thread(importlib.import_module, "pdfplumber")
            except ImportError as e:
                raise ProviderUnavailable("pdfplumber is required for PDF text extraction") from e
            self.logger.debug("pdfplumber loaded", version=getattr(self._module, "__version__", None))

    def _require_module(self) -> Any:
        if not self.is_ready:
            raise ProviderUnavailable("PdfPlumberPageProvider used before wait_until_ready()")
        return self._module

    async def load(self, data: bytes) -> Any:
        pdfplumber = self._require_module()
        return await asyncio.to_thread(pdfplumber.open, io.BytesIO(data))

    async def page_count(self, handle: Any) -> int:
        return await asyncio.to_thread(lambda: len(handle.pages))

    def _extract_tokens(self, handle: Any, page_index: int) -> List[PageToken]:
        page = handle.pages[page_index - 1]
        words = page.extract_words(**self.word_options)
        return [
            PageToken(
                content=word.get("text", ""),
                page_index=page_index,
                x0=word.get("x0"),
                top=word.get("top"),
            )
            for word in words
        ]

    async def get_page_tokens(self, handle: Any, page_index: int) -> List[PageToken]:
        return await asyncio.to_thread(self._extract_tokens, handle, page_index)

    async def close(self, handle: Any) -> None:
        await asyncio.to_thread(handle.close)
