"""
End-to-end extraction through the real pdfplumber provider.

The PDFs are generated in-process so the suite carries no binary fixtures.
"""

from __future__ import annotations

from typing import List, Sequence

import pytest

from docsift.config import Config
from docsift.errors import ExtractionFailed, FailureStage
from docsift.extractor.models import ExtractionSource, ExtractionState, RawDocument
from docsift.extractor.pdfplumber_provider import PdfPlumberPageProvider
from docsift.extractor.primary import PrimaryExtractor
from docsift.pipeline import ExtractionPipeline
from docsift.service import DocumentTextService


def build_pdf(pages: Sequence[Sequence[str]]) -> bytes:
    """Minimal PDF 1.4 with one Helvetica text line per entry, correct xref offsets."""
    objects: List[bytes] = []
    page_count = len(pages)
    font_id = 3
    first_page_id = 4

    objects.append(b"<< /Type /Catalog /Pages 2 0 R >>")
    kids = " ".join(f"{first_page_id + 2 * i} 0 R" for i in range(page_count))
    objects.append(f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode("ascii"))
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    for index, lines in enumerate(pages):
        page_id = first_page_id + 2 * index
        content = "".join(
            f"BT /F1 14 Tf 72 {720 - 24 * row} Td ({line}) Tj ET\n" for row, line in enumerate(lines)
        ).encode("latin-1")
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 {font_id} 0 R >> >> /Contents {page_id + 1} 0 R >>"
            ).encode("ascii")
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(content) + content + b"endstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_at = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


@pytest.fixture
def pipeline():
    return ExtractionPipeline.from_config(Config(), PdfPlumberPageProvider())


@pytest.mark.integration
class TestPdfExtraction:
    @pytest.mark.asyncio
    async def test_two_page_pdf(self, pipeline):
        data = build_pdf([["Jane Doe", "Senior Engineer"], ["Experience with async Python"]])

        outcome = await pipeline.extract(RawDocument(data=data, media_type="application/pdf", filename="cv.pdf"))

        assert outcome.text == "Jane Doe Senior Engineer Experience with async Python"
        assert outcome.diagnostics.source is ExtractionSource.PRIMARY
        assert outcome.states[-1] is ExtractionState.ACCEPTED

    @pytest.mark.asyncio
    async def test_primary_keeps_page_lines(self):
        data = build_pdf([["first page"], ["second page"]])
        extractor = PrimaryExtractor(PdfPlumberPageProvider())

        text = await extractor.extract(RawDocument(data=data, media_type="application/pdf"))

        assert text == "first page\nsecond page\n"

    @pytest.mark.asyncio
    async def test_unparseable_bytes_recovered_by_fallback(self, pipeline):
        text = (
            "This upload claims to be a PDF but is really a plain export of the "
            "candidate summary, long enough for the fallback decoder to accept."
        )

        outcome = await pipeline.extract(
            RawDocument(data=text.encode("utf-8"), media_type="application/pdf", filename="summary.pdf")
        )

        assert outcome.text == text
        assert outcome.diagnostics.source is ExtractionSource.FALLBACK_ENCODING
        assert ExtractionState.FALLBACK_ATTEMPTED in outcome.states

    @pytest.mark.asyncio
    async def test_image_only_pdf_is_rejected(self, pipeline):
        data = build_pdf([[]])

        with pytest.raises(ExtractionFailed) as exc_info:
            await pipeline.extract(RawDocument(data=data, media_type="application/pdf"))

        # The raw bytes decode to PDF syntax, which the classifier refuses.
        assert exc_info.value.stage is FailureStage.CLASSIFIER

    @pytest.mark.asyncio
    async def test_service_caches_pdf_text(self):
        service = DocumentTextService.from_config(Config(), PdfPlumberPageProvider())
        data = build_pdf([["Cached resume"]])

        first = await service.get_text("resume-1", data, media_type="application/pdf", filename="cv.pdf")
        second = await service.get_text("resume-1", data, media_type="application/pdf", filename="cv.pdf")

        assert first.text == "Cached resume"
        assert second is first
