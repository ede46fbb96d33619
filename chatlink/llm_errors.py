"""Completion backend error taxonomy.

Completion clients translate transport and HTTP failures into these types so
the resolver and the CLI can report "rate limit" or "auth failure" without
knowing which backend produced them.

Clients use ``raise X(...) from native_error`` so the original exception is
available via ``__cause__``. Nothing in this package retries on these errors.
"""

from __future__ import annotations


class LLMError(Exception):
    """Base for all completion backend errors.

    Attributes:
        provider: Name of the endpoint that raised the error.
        status_code: HTTP status code from the endpoint, if available.
        retryable: Whether a caller could reasonably retry the request.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.retryable = retryable

    def __repr__(self) -> str:
        parts = [repr(str(self))]
        if self.provider is not None:
            parts.append(f"provider={self.provider!r}")
        if self.status_code is not None:
            parts.append(f"status_code={self.status_code!r}")
        if self.retryable:
            parts.append("retryable=True")
        return f"{type(self).__name__}({', '.join(parts)})"


class RateLimitError(LLMError):
    """Endpoint rate limit exceeded (HTTP 429).

    Attributes:
        retry_after: Seconds to wait, parsed from ``Retry-After`` when present.
    """

    def __init__(
        self,
        message: str,
        *,
        retry_after: float | None = None,
        provider: str | None = None,
        status_code: int | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message,
            provider=provider,
            status_code=status_code,
            retryable=retryable,
        )
        self.retry_after = retry_after


class AuthenticationError(LLMError):
    """Invalid or missing API credentials (HTTP 401/403)."""


class ContextLengthError(LLMError):
    """Request exceeds the model's context window (HTTP 413)."""


class InvalidRequestError(LLMError):
    """Malformed request rejected by the endpoint (HTTP 400/404/422)."""


class InvalidResponseError(LLMError):
    """Endpoint answered 2xx but the body had no usable choice."""


class ProviderUnavailableError(LLMError):
    """Endpoint unreachable or failing (HTTP 5xx, network error)."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message,
            provider=provider,
            status_code=status_code,
            retryable=retryable,
        )


class LLMTimeoutError(LLMError):
    """Request timed out before the endpoint responded."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message,
            provider=provider,
            status_code=status_code,
            retryable=retryable,
        )
