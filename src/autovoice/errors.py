"""Exception hierarchy shared across autovoice modules."""


class AutovoiceError(Exception):
    """Base exception for autovoice errors."""


class ConfigurationError(AutovoiceError):
    """Raised when required configuration is missing or invalid."""


class FetchError(AutovoiceError):
    """Raised when an upstream feed or article source cannot be fetched."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(AutovoiceError):
    """Raised when feed or content text is not well-formed."""


class SynthesisError(AutovoiceError):
    """Raised when the TTS provider fails for a single piece of text."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error
