"""Custom exception classes for the application."""


class GoldPricesException(Exception):
    """Base exception for all gold price scraper errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class FetchError(GoldPricesException):
    """Raised when a vendor page cannot be fetched after all retries."""

    def __init__(self, vendor: str, url: str, attempts: int, message: str):
        self.vendor = vendor
        self.url = url
        self.attempts = attempts
        super().__init__(
            f"Failed to fetch {vendor} after {attempts} attempts: {message}"
        )


class ExtractionError(GoldPricesException):
    """Raised when a vendor extractor fails unexpectedly."""

    def __init__(self, vendor: str, message: str):
        self.vendor = vendor
        super().__init__(f"Extraction error for {vendor}: {message}")


class UnknownRunnerError(GoldPricesException):
    """Raised when a vendor run fails outside its own error handling."""

    def __init__(self, message: str):
        super().__init__(f"Unexpected runner failure: {message}")


class VendorNotFoundError(GoldPricesException):
    """Raised when a requested vendor is not configured."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Vendor with identifier '{identifier}' not found")
