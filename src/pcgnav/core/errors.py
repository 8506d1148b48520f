"""
Error taxonomy.

- NotFound: an artifact or archive entry is absent. Recovered at the call
  site (empty list / None) and never allowed to reach the render layer.
- DataSourceUnavailable: every data source in the fallback chain failed.
  The only error that changes top-level state.
- PopupBlocked: the host refused to open a secondary window.
- MalformedArchiveEntry: a restored archive could not be decoded; treated
  as absent and evicted.
- InvalidAddress: a program-point address violates its invariants.
- LayoutUnavailable: Graphviz could not place the CFG; the view is shown
  without coordinates.
"""


class PcgNavError(Exception):
    """
    Base class for all pcgnav errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(PcgNavError):
    """
    Raised when an artifact path does not resolve.

    Attributes:
        path: The artifact path that was requested.
    """

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Not found: {path} ({reason})" if reason else f"Not found: {path}")


class DataSourceUnavailable(PcgNavError):
    """Raised when the live endpoint, remote archive and cached archive all fail."""

    def __init__(self, attempts: list[str] | None = None):
        self.attempts = attempts or []
        detail = "; ".join(self.attempts)
        super().__init__(
            f"No data source available: {detail}" if detail else "No data source available"
        )


class PopupBlocked(PcgNavError):
    """Raised when a secondary window could not be opened."""


class MalformedArchiveEntry(PcgNavError):
    """Raised when a stored archive fails to decode or decompress."""


class InvalidAddress(PcgNavError):
    """Raised when an address does not resolve to a statement, terminator or edge."""


class LayoutUnavailable(PcgNavError):
    """Raised when Graphviz cannot lay out the CFG (missing `dot` or a failed run)."""
