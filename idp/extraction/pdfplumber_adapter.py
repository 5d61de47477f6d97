import io

import pdfplumber

from idp.extraction.base import BaseTextExtractor, is_pdf
from idp.extraction.exceptions import TextExtractionError
from idp.extraction.models import TextLine


class PdfPlumberAdapter(BaseTextExtractor):
    """Reads the embedded text layer of digital PDFs using pdfplumber."""

    def detect_lines(self, content: bytes) -> list[TextLine]:
        if not is_pdf(content):
            raise TextExtractionError("pdfplumber only supports PDF documents")
        try:
            lines: list[TextLine] = []
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                for page in pdf.pages:
                    for line in page.extract_text_lines():
                        text = line["text"].strip()
                        if text:
                            lines.append(TextLine(text=text))
            return lines
        except Exception as exc:
            raise TextExtractionError(f"pdfplumber extraction failed: {exc}") from exc
