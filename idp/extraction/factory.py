from idp.config.settings import Settings
from idp.extraction.base import BaseTextExtractor
from idp.extraction.pdfplumber_adapter import PdfPlumberAdapter
from idp.extraction.pymupdf_adapter import PyMuPdfAdapter
from idp.extraction.tesseract_adapter import TesseractAdapter


class TextExtractorFactory:
    """Creates the text extraction adapter named by settings.extraction_engine."""

    ENGINES = ("pdfplumber", "pymupdf", "tesseract")

    @classmethod
    def create(cls, settings: Settings) -> BaseTextExtractor:
        engine = settings.extraction_engine.lower()
        if engine == "pdfplumber":
            return PdfPlumberAdapter()
        if engine == "pymupdf":
            return PyMuPdfAdapter()
        if engine == "tesseract":
            return TesseractAdapter(
                lang=settings.tesseract_lang,
                render_scale=settings.tesseract_render_scale,
            )
        raise ValueError(
            f"Unknown extraction engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )
