class TextExtractionError(Exception):
    """Raised when an extraction adapter cannot read text from a document."""
