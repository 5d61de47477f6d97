from dataclasses import dataclass


@dataclass(frozen=True)
class TextLine:
    """One line of detected text, in reading order."""

    text: str
    confidence: float | None = None
