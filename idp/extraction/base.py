from abc import ABC, abstractmethod

from idp.extraction.models import TextLine

PDF_MAGIC = b"%PDF"


def is_pdf(content: bytes) -> bool:
    return content.lstrip()[:4] == PDF_MAGIC


class BaseTextExtractor(ABC):
    """Contract for all line-level text extraction adapters."""

    @abstractmethod
    def detect_lines(self, content: bytes) -> list[TextLine]:
        """Detect text lines in a document.

        Args:
            content: Raw document bytes (PDF or image).

        Returns:
            Lines in reading order. confidence is 0-100, or None when the
            engine does not score lines.

        Raises:
            TextExtractionError: if extraction fails for any reason.
        """
