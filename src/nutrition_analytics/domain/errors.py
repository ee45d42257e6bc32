"""Analytics error types."""


class AnalyticsError(Exception):
    """Base error for the analytics pipeline."""


class InvalidDateRangeError(AnalyticsError):
    """Raised when a requested date range cannot be parsed."""


class DataFetchError(AnalyticsError):
    """Raised when upstream daily data could not be fetched."""
