"""
Error taxonomy for provider calls and caller-facing failures.

Only CallerInputError leaves the public operations. Everything deriving
from ProviderError is caught by the fallback driver and reported.
"""

from typing import Optional

import httpx


class ProviderError(Exception):
    """Base for failures attributable to a single provider attempt."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider}: {reason}")


class ProviderHTTPError(ProviderError):
    """Non-2xx response or network-level failure."""

    def __init__(self, provider: str, reason: str, status: Optional[int] = None):
        self.status = status
        super().__init__(provider, reason)


class ProviderPayloadError(ProviderError):
    """Response body did not match the provider's expected shape."""


class RateLimited(ProviderError):
    """Admission denied by the rate limiter. Reported, never raised to callers."""

    def __init__(self, provider: str, endpoint_key: str):
        self.endpoint_key = endpoint_key
        super().__init__(provider, f"rate limit reached for '{endpoint_key}'")


class CallerInputError(Exception):
    """Invalid input detected before any provider is attempted."""


STATUS_MESSAGES = {
    401: "Authentication failed. Please check your API keys.",
    403: "Access forbidden. You may have exceeded rate limits.",
    404: "Resource not found.",
    429: "Rate limit exceeded. Please try again later.",
    500: "Server error. Please try again later.",
}

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


def handle_api_error(error: BaseException) -> str:
    """
    Map an error to a human-readable message for display.

    Args:
        error: Any exception raised at or above the provider boundary

    Returns:
        Message suitable for a toast or CLI error line
    """
    status: Optional[int] = None
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
    elif isinstance(error, ProviderHTTPError):
        status = error.status

    if status is not None:
        return STATUS_MESSAGES.get(status, str(error) or UNEXPECTED_ERROR_MESSAGE)

    if isinstance(error, httpx.RequestError):
        return NETWORK_ERROR_MESSAGE
    if isinstance(error, ProviderHTTPError):
        # No status means the request never got a response
        return NETWORK_ERROR_MESSAGE

    return str(error) or UNEXPECTED_ERROR_MESSAGE
