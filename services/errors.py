class ChartError(Exception):
    """Base exception for chart computation."""
    pass


class InvalidPeriod(ChartError, ValueError):
    """Raised when a requested calendar period is malformed or out of range."""
    pass


class StoreUnavailable(ChartError):
    """Raised when the reading store cannot be read from or written to."""
    pass
