class ReadingError(Exception):
    """Raised when the reading core is driven with invalid arguments."""


class ExtractionError(ReadingError):
    """Raised when text runs cannot be extracted from a document."""
