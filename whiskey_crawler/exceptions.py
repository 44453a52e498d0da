"""Custom exceptions for the whiskey product crawler."""


class CrawlerError(Exception):
    """Base exception for the crawler."""

    pass


class UnsupportedURLError(CrawlerError):
    """Raised when a URL does not belong to a supported page family."""

    pass


class FetchError(CrawlerError):
    """Raised when a product page cannot be retrieved."""

    pass
