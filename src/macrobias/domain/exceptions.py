"""Error taxonomy.

Missing or stale data is never an exception; it is carried in return values.
"""


class MacroBiasError(Exception):
    """Base class for all package errors."""


class InvalidConfigurationError(MacroBiasError):
    """Weight table, universe or settings failed validation at load time."""


class DataSourceError(MacroBiasError):
    """A collaborator (HTTP source, store) failed after retries."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class ComputeError(MacroBiasError):
    """Unexpected failure while computing outputs for one asset."""

    def __init__(self, symbol: str, message: str) -> None:
        super().__init__(f"{symbol}: {message}")
        self.symbol = symbol
