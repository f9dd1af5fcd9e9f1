"""
Shared test configuration for docsift.

Provides ready-made pipeline pieces around an in-memory page text provider so
unit tests never need a real PDF parser.
"""

# Third-party imports
import pytest

# Local imports
from docsift.config.config import ClassifierSettings, DecoderSettings, ProviderSettings
from docsift.extractor.classifier import ContentClassifier
from docsift.extractor.decoder import MultiEncodingDecoder
from docsift.extractor.primary import PrimaryExtractor
from docsift.pipeline import ExtractionPipeline
from tests.helpers import FakePageProvider

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Sample content
# ============================================================================

RAW_PDF_TEXT = (
    "%PDF-1.4\n"
    "1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    "4 0 obj\n<< /Length 44 >>\nstream\n"
    "BT /F1 12 Tf 72 712 Td (Hello) Tj ET\n"
    "endstream\nendobj\n"
    "xref\n0 5\n0000000000 65535 f \n"
    "trailer\n<< /Size 5 /Root 1 0 R >>\n"
    "startxref\n320\n%%EOF\n"
)

PROSE = (
    "The quarterly report shows steady growth across every region, "
    "with the strongest results in the northern division."
)


# ============================================================================
# Core Test Fixtures
# ============================================================================


@pytest.fixture
def raw_pdf_text() -> str:
    return RAW_PDF_TEXT


@pytest.fixture
def prose() -> str:
    return PROSE


@pytest.fixture
def fake_provider():
    """Two-page provider with ordinary prose."""
    return FakePageProvider([["Jane", " Doe "], ["Engineer"]])


@pytest.fixture
def classifier():
    return ContentClassifier(ClassifierSettings())


@pytest.fixture
def decoder():
    # Detection off keeps candidate lists deterministic.
    return MultiEncodingDecoder(DecoderSettings(detect_encoding=False))


@pytest.fixture
def make_pipeline(classifier, decoder):
    """Factory building a pipeline around a given provider."""

    def _make(provider, timeout: float = 10.0) -> ExtractionPipeline:
        primary = PrimaryExtractor(provider, ProviderSettings(ready_timeout_seconds=timeout))
        return ExtractionPipeline(primary, decoder=decoder, classifier=classifier)

    return _make
