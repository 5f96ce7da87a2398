"""Custom exception classes for the scraper."""

from typing import Optional


class SupplementScraperError(Exception):
    """Base exception for all scraper errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class FetchError(SupplementScraperError):
    """Raised when a page cannot be fetched (network error or non-2xx)."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class FetchTimeoutError(FetchError):
    """Raised when a fetch exceeds its timeout."""

    def __init__(self, url: str, timeout: float):
        super().__init__(url, f"timeout after {timeout:g}s for {url}")


class PriceParseError(SupplementScraperError, ValueError):
    """Raised when a price string does not match the accepted format."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"price parse fail: {raw}")


class CardError(SupplementScraperError):
    """Raised when one listing card cannot become a product; the run continues."""


class InterstitialError(SupplementScraperError):
    """Raised when an anti-bot interstitial page is still showing."""

    def __init__(self, url: str, title: str = ""):
        self.url = url
        self.title = title
        super().__init__(f"anti-bot interstitial at {url} (title={title!r})")


class ExtractorNotFoundError(SupplementScraperError):
    """Raised when no extractor is registered for a retailer key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown scraper: {key}")


class SinkError(SupplementScraperError):
    """Raised when the persistence sink fails to record a batch."""

    def __init__(self, retailer: str, message: str):
        super().__init__(f"Sink error for {retailer}: {message}")
