"""Typed exception hierarchy for upstream quote and exchange-rate providers.

Every client raises a :class:`ProviderError` subclass, so the price
resolver and the rate refresh only ever catch one type. Each subclass
names its failure ``kind`` and says whether it is ``retriable``. The
resolver records both in its error list, which lets a caller tell a
rate-limited feed from a revoked API key.
"""


class ProviderError(Exception):
    """Base exception for all provider-related errors.

    Args:
        message: What went wrong.
        provider_name: Provider that failed, e.g. ``"binance"``.
    """

    kind = "provider"
    retriable = False

    def __init__(self, message: str, provider_name: str = ""):
        self.provider_name = provider_name
        super().__init__(message)

    def describe(self) -> str:
        """Short label for error lists, e.g. ``"connection error, transient: timed out"``."""
        label = f"{self.kind} error"
        if self.retriable:
            label += ", transient"
        return f"{label}: {self}"


class ProviderAuthError(ProviderError):
    """API key missing, expired, or rejected (HTTP 401/403). Never retried."""

    kind = "auth"


class ProviderConnectionError(ProviderError):
    """Timeouts, DNS failures and refused connections. Retriable by default."""

    kind = "connection"

    def __init__(self, message: str, provider_name: str = "", retriable: bool = True):
        self.retriable = retriable
        super().__init__(message, provider_name)


class ProviderAPIError(ProviderError):
    """An HTTP error status, or an error payload inside a 200 response."""

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        status_code: int | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, provider_name)

    @property
    def kind(self) -> str:
        return f"HTTP {self.status_code}" if self.status_code is not None else "api"

    @property
    def retriable(self) -> bool:
        """Rate limits (429) and server errors (5xx) may clear on their own."""
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class ProviderDataError(ProviderError):
    """The provider answered, but the payload could not be parsed into prices or rates."""

    kind = "data"
