"""
Unit tests for PrimaryExtractor.
"""

from __future__ import annotations

import pytest

from docsift.config.config import ProviderSettings
from docsift.errors import DocumentLoadError, EmptyExtraction, ProviderUnavailable
from docsift.extractor.models import PageToken, RawDocument
from docsift.extractor.primary import PrimaryExtractor, join_page_tokens
from docsift.extractor.protocols import PageTextProvider
from tests.helpers import FakePageProvider


def _document(data: bytes = b"%PDF-1.4 fake") -> RawDocument:
    return RawDocument(data=data, media_type="application/pdf", filename="resume.pdf")


@pytest.mark.unit
class TestJoinPageTokens:
    def test_trims_and_space_joins(self):
        tokens = [PageToken(" Jane ", 1), PageToken("Doe", 1)]

        assert join_page_tokens(tokens) == "Jane Doe"

    def test_drops_empty_tokens(self):
        tokens = [PageToken("", 1), PageToken("   ", 1), PageToken("x", 1)]

        assert join_page_tokens(tokens) == "x"

    def test_no_tokens(self):
        assert join_page_tokens([]) == ""


@pytest.mark.unit
class TestPrimaryExtractor:
    def test_fake_provider_satisfies_protocol(self, fake_provider):
        assert isinstance(fake_provider, PageTextProvider)

    @pytest.mark.asyncio
    async def test_pages_joined_in_order(self, fake_provider):
        extractor = PrimaryExtractor(fake_provider)

        text = await extractor.extract(_document())

        assert text == "Jane Doe\nEngineer\n"
        assert fake_provider.requested_pages == [1, 2]
        assert len(fake_provider.closed) == 1

    @pytest.mark.asyncio
    async def test_blank_page_keeps_its_line(self):
        provider = FakePageProvider([["first"], [], ["third"]])

        text = await PrimaryExtractor(provider).extract(_document())

        assert text == "first\n\nthird\n"

    @pytest.mark.asyncio
    async def test_provider_not_ready_in_time(self):
        provider = FakePageProvider([["never"]], ready_delay=1.0)
        extractor = PrimaryExtractor(provider, ProviderSettings(ready_timeout_seconds=0.05))

        with pytest.raises(ProviderUnavailable) as exc_info:
            await extractor.extract(_document())

        assert exc_info.value.retryable is True
        assert provider.loaded == []

    @pytest.mark.asyncio
    async def test_provider_initialization_error(self):
        provider = FakePageProvider(ready_error=RuntimeError("worker crashed"))

        with pytest.raises(ProviderUnavailable) as exc_info:
            await PrimaryExtractor(provider).extract(_document())

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_provider_unavailable_passes_through(self):
        original = ProviderUnavailable("not installed")
        provider = FakePageProvider(ready_error=original)

        with pytest.raises(ProviderUnavailable) as exc_info:
            await PrimaryExtractor(provider).extract(_document())

        assert exc_info.value is original

    @pytest.mark.asyncio
    async def test_load_error(self):
        provider = FakePageProvider(load_error=ValueError("Invalid PDF structure"))

        with pytest.raises(DocumentLoadError, match="Invalid PDF structure"):
            await PrimaryExtractor(provider).extract(_document())

        assert provider.closed == []

    @pytest.mark.asyncio
    async def test_page_error_closes_document(self):
        provider = FakePageProvider([["a"], ["b"]], page_error=OSError("truncated"))

        with pytest.raises(DocumentLoadError):
            await PrimaryExtractor(provider).extract(_document())

        assert len(provider.closed) == 1

    @pytest.mark.asyncio
    async def test_close_failure_keeps_extracted_text(self):
        provider = FakePageProvider([["Hello"], ["World"]], close_error=OSError("handle already gone"))

        text = await PrimaryExtractor(provider).extract(_document())

        assert text == "Hello\nWorld\n"
        assert len(provider.closed) == 1

    @pytest.mark.asyncio
    async def test_close_failure_does_not_mask_page_error(self):
        provider = FakePageProvider(
            [["a"]], page_error=ValueError("bad content stream"), close_error=OSError("handle already gone")
        )

        with pytest.raises(DocumentLoadError, match="bad content stream") as exc_info:
            await PrimaryExtractor(provider).extract(_document())

        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_document_without_pages_is_empty(self):
        provider = FakePageProvider([])

        with pytest.raises(EmptyExtraction):
            await PrimaryExtractor(provider).extract(_document())

        assert len(provider.closed) == 1

    @pytest.mark.asyncio
    async def test_whitespace_only_pages_are_empty(self):
        provider = FakePageProvider([["  "], [""]])

        with pytest.raises(EmptyExtraction, match="image-based or corrupted"):
            await PrimaryExtractor(provider).extract(_document())
