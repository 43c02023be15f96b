"""
Typed failures raised by the response parsers.

Vendor errors are reduced to a small set of kinds so callers can decide on
retries without knowing any provider's error vocabulary.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final, Optional

__all__: tuple[str, ...] = (
    "LLMNormalizerError",
    "MalformedResponseError",
    "ProviderError",
    "ProviderErrorKind",
    "classify_status",
)


class LLMNormalizerError(Exception):
    """Root of every exception raised by this package."""


class MalformedResponseError(LLMNormalizerError, ValueError):
    """Raised when a success response lacks a structurally required field.

    Attributes:
        field: Dotted path of the offending field, e.g. ``"content.2.text"``.
    """

    field: Optional[str]

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ProviderErrorKind(StrEnum):
    AUTHENTICATION = "authentication"
    RATE_LIMITED = "rate_limited"
    INVALID_REQUEST = "invalid_request"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    UNKNOWN = "unknown"


_RETRYABLE_KINDS: Final[frozenset[ProviderErrorKind]] = frozenset(
    {ProviderErrorKind.RATE_LIMITED, ProviderErrorKind.PROVIDER_UNAVAILABLE}
)

_KIND_LABELS: Final[dict[ProviderErrorKind, str]] = {
    ProviderErrorKind.AUTHENTICATION: "Authentication error",
    ProviderErrorKind.RATE_LIMITED: "Rate limit error",
    ProviderErrorKind.INVALID_REQUEST: "Invalid request",
    ProviderErrorKind.PROVIDER_UNAVAILABLE: "Provider unavailable",
    ProviderErrorKind.UNKNOWN: "API error",
}


class ProviderError(LLMNormalizerError):
    """A classified vendor‑side failure.

    Attributes:
        kind: Normalized error category.
        status_code: HTTP status of the failed call, 0 when there was none.
        message: Human readable description, from the vendor when available.
        error_type: Vendor error type string (e.g. ``"overloaded_error"``), if any.
        body: The raw response body, if any.
    """

    def __init__(
        self,
        kind: ProviderErrorKind,
        status_code: int,
        message: str,
        *,
        error_type: Optional[str] = None,
        body: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.message = message
        self.error_type = error_type
        self.body = body
        super().__init__(f"{_KIND_LABELS[kind]} ({status_code}): {message}")

    @property
    def retryable(self) -> bool:
        """Whether a later identical request could succeed. No retry happens here."""
        return self.kind in _RETRYABLE_KINDS

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={self.kind.value!r}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )


def classify_status(status_code: int) -> ProviderErrorKind:
    """Map an HTTP status code to an error kind.

    Returns ``UNKNOWN`` for codes that are not 4xx/5xx, so callers can fall
    back to the vendor error type.
    """
    if status_code in (401, 403):
        return ProviderErrorKind.AUTHENTICATION
    if status_code == 429:
        return ProviderErrorKind.RATE_LIMITED
    if 500 <= status_code <= 599:
        return ProviderErrorKind.PROVIDER_UNAVAILABLE
    if 400 <= status_code <= 499:
        return ProviderErrorKind.INVALID_REQUEST
    return ProviderErrorKind.UNKNOWN
