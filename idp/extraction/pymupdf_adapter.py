from typing import Any

import pymupdf

from idp.extraction.base import BaseTextExtractor, is_pdf
from idp.extraction.exceptions import TextExtractionError
from idp.extraction.models import TextLine


class PyMuPdfAdapter(BaseTextExtractor):
    """Reads the embedded text layer of digital PDFs using PyMuPDF."""

    def detect_lines(self, content: bytes) -> list[TextLine]:
        if not is_pdf(content):
            raise TextExtractionError("pymupdf adapter only supports PDF documents")
        try:
            lines: list[TextLine] = []
            with pymupdf.open(stream=content, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                for page in doc:
                    lines.extend(self._page_lines(page.get_text("dict")))
            return lines
        except Exception as exc:
            raise TextExtractionError(f"pymupdf extraction failed: {exc}") from exc

    @staticmethod
    def _page_lines(page_dict: dict[str, Any]) -> list[TextLine]:
        lines: list[TextLine] = []
        for block in page_dict.get("blocks", []):
            # type 1 blocks are images
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                text = "".join(span.get("text", "") for span in line.get("spans", []))
                if text.strip():
                    lines.append(TextLine(text=text.strip()))
        return lines
