"""OCR adapter for images and scanned PDFs.

PDF pages are rendered to bitmaps with pypdfium2, images are opened with
Pillow (every frame of multi-frame TIFFs), and each bitmap is run through
``pytesseract.image_to_data``. Words are grouped back into lines by
Tesseract's (block, paragraph, line) numbering; a line's confidence is the
mean of its word confidences, ignoring Tesseract's -1 "no score" marker.
"""

import io
from typing import Any

import pypdfium2 as pdfium
import pytesseract
from PIL import Image, ImageSequence

from idp.extraction.base import BaseTextExtractor, is_pdf
from idp.extraction.exceptions import TextExtractionError
from idp.extraction.models import TextLine

_WORD_LEVEL = 5


class TesseractAdapter(BaseTextExtractor):
    """Line-level OCR with per-line confidence using Tesseract."""

    def __init__(self, lang: str = "eng", render_scale: float = 2.0) -> None:
        self._lang = lang
        self._render_scale = render_scale

    def detect_lines(self, content: bytes) -> list[TextLine]:
        try:
            lines: list[TextLine] = []
            for image in self._images(content):
                data = pytesseract.image_to_data(
                    image,
                    lang=self._lang,
                    output_type=pytesseract.Output.DICT,
                )
                lines.extend(group_lines(data))
            return lines
        except TextExtractionError:
            raise
        except Exception as exc:
            raise TextExtractionError(f"tesseract extraction failed: {exc}") from exc

    def _images(self, content: bytes) -> list[Image.Image]:
        if is_pdf(content):
            pdf = pdfium.PdfDocument(content)
            try:
                return [
                    pdf[i].render(scale=self._render_scale).to_pil()
                    for i in range(len(pdf))
                ]
            finally:
                pdf.close()
        image = Image.open(io.BytesIO(content))
        return [frame.copy() for frame in ImageSequence.Iterator(image)]


def group_lines(data: dict[str, list[Any]]) -> list[TextLine]:
    """Collapse image_to_data word rows into ordered TextLines."""
    grouped: dict[tuple[int, int, int], tuple[list[str], list[float]]] = {}
    for i, word in enumerate(data.get("text", [])):
        if int(data["level"][i]) != _WORD_LEVEL or not str(word).strip():
            continue
        key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
        words, scores = grouped.setdefault(key, ([], []))
        words.append(str(word).strip())
        conf = float(data["conf"][i])
        if conf >= 0:
            scores.append(conf)

    lines: list[TextLine] = []
    for words, scores in grouped.values():
        confidence = sum(scores) / len(scores) if scores else None
        lines.append(TextLine(text=" ".join(words), confidence=confidence))
    return lines
