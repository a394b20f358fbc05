from __future__ import annotations


class ForecastError(RuntimeError):
    """Base class for failures that abort a route forecast request.

    Args:
        message: High-level human-readable message, safe to show to callers.
        technical_detail: Optional technical detail for logs.
    """

    def __init__(self, message: str, *, technical_detail: str | None = None) -> None:
        super().__init__(message)
        self.technical_detail = technical_detail


class LocationNotFound(ForecastError):
    """Raised when the origin or destination text could not be geocoded."""

    def __init__(self, query: str, *, technical_detail: str | None = None) -> None:
        super().__init__(
            f"Location not found: {query!r}", technical_detail=technical_detail
        )
        self.query = query


class RouteUnavailable(ForecastError):
    """Raised when every configured routing provider failed.

    Attributes:
        failures: ``(provider_name, reason)`` pairs in the order they were tried.
    """

    def __init__(self, failures: list[tuple[str, str]] | None = None) -> None:
        self.failures = list(failures or [])
        detail = "; ".join(f"{name}: {reason}" for name, reason in self.failures)
        super().__init__(
            "No routing provider could resolve the route",
            technical_detail=detail or None,
        )
