import io
from collections.abc import Callable

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from idp.records.memory_store import InMemoryRecordStore
from idp.records.models import DocumentRecord


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with two known lines."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Invoice #1")
    c.drawString(72, 690, "Total $9.00")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
def make_record() -> Callable[..., DocumentRecord]:
    """Build a DocumentRecord at its initial state, with optional overrides."""

    def _make(document_id: str = "doc-1", **overrides: object) -> DocumentRecord:
        fields: dict[str, object] = {
            "document_id": document_id,
            "file_name": "invoice.pdf",
            "upload_time": "2026-01-01T00:00:00+00:00",
            "source_location": f"documents/{document_id}/invoice.pdf",
        }
        fields.update(overrides)
        return DocumentRecord(**fields)  # type: ignore[arg-type]

    return _make
