"""
Shared service state and the provider HTTP boundary.

One ServiceContext is built per aggregator and injected into every domain
service, so tests can swap credentials, the rate limiter, the random source
or the HTTP transport without touching process-wide state.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import httpx

from cafe_intel.credentials import CredentialRegistry
from cafe_intel.errors import ProviderError, ProviderHTTPError, ProviderPayloadError
from cafe_intel.ratelimit import RateLimiter


USER_AGENT = "cafe-intel/0.1 (Threat Intelligence Aggregator)"


@dataclass
class ProviderEvent:
    """A provider attempt that did not produce a result."""
    operation: str
    provider: str
    error: ProviderError


ErrorReporter = Callable[[ProviderEvent], None]


@dataclass
class ServiceContext:
    credentials: CredentialRegistry
    rate_limiter: RateLimiter = field(default_factory=RateLimiter)
    rng: random.Random = field(default_factory=random.Random)
    timeout: int = 10000  # milliseconds
    transport: Optional[httpx.AsyncBaseTransport] = None
    reporter: Optional[ErrorReporter] = None

    def http_client(self, **kwargs: Any) -> httpx.AsyncClient:
        """New AsyncClient with the context's timeout and transport."""
        headers = {"User-Agent": USER_AGENT}
        headers.update(kwargs.pop("headers", {}))
        return httpx.AsyncClient(
            timeout=self.timeout / 1000,
            transport=self.transport,
            headers=headers,
            **kwargs,
        )


async def request_json(
    client: httpx.AsyncClient,
    provider: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> Any:
    """
    Issue one provider request and decode its JSON body.

    Args:
        client: Open AsyncClient
        provider: Provider name for error attribution
        method: HTTP method
        url: Absolute URL

    Returns:
        Decoded JSON payload

    Raises:
        ProviderHTTPError: On timeout, network failure or non-2xx status
        ProviderPayloadError: If the body is not JSON
    """
    try:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.TimeoutException:
        raise ProviderHTTPError(provider, "request timed out")
    except httpx.HTTPStatusError as e:
        raise ProviderHTTPError(
            provider, f"HTTP {e.response.status_code}", status=e.response.status_code
        )
    except httpx.RequestError as e:
        raise ProviderHTTPError(provider, str(e) or type(e).__name__)

    try:
        return response.json()
    except ValueError:
        raise ProviderPayloadError(provider, "response body is not JSON")
