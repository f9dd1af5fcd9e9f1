"""
Protocols for pluggable page text providers.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from .models import PageToken


@runtime_checkable
class PageTextProvider(Protocol):
    """Loads a document and yields text tokens page by page."""

    name: str

    async def wait_until_ready(self) -> None:
        """Finish any lazy initialization. May take arbitrarily long."""
        ...

    async def load(self, data: bytes) -> Any:
        """Open document bytes and return an opaque handle.

        Raises:
            Exception: if the bytes are not a valid document of this format
        """
        ...

    async def page_count(self, handle: Any) -> int:
        ...

    async def get_page_tokens(self, handle: Any, page_index: int) -> Sequence[PageToken]:
        """Return the text tokens of one page (1-indexed)."""
        ...

    async def close(self, handle: Any) -> None:
        ...
