"""Domain errors raised across service boundaries."""


class MarketDataError(Exception):
    """The single upstream listing fetch failed; the whole run is aborted."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigValueError(ValueError):
    """A configuration write carried a value the key does not accept."""
