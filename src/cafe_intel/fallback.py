"""
Generic "attempt providers in order, fall back to synthetic" driver.

Every public operation describes its providers as an ordered list of
ProviderAttempt descriptors and hands them to attempt_in_order().
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from cafe_intel.context import ProviderEvent, ServiceContext
from cafe_intel.credentials import Provider
from cafe_intel.errors import ProviderError, ProviderHTTPError, RateLimited
from cafe_intel.logger import get_logger
from cafe_intel.ratelimit import RateLimit


T = TypeVar("T")

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderAttempt(Generic[T]):
    """
    One live provider in a fallback chain.

    Attributes:
        name: Provider name used in logs and reports
        invoke: Coroutine factory performing the call and normalization
        provider: Credential required before the call is attempted (None = always available)
        rate_limit: Admission budget checked before the call (None = unlimited)
    """
    name: str
    invoke: Callable[[], Awaitable[T]]
    provider: Optional[Provider] = None
    rate_limit: Optional[RateLimit] = None


def _report(context: ServiceContext, operation: str, name: str, error: ProviderError) -> None:
    if isinstance(error, RateLimited):
        logger.info(
            "provider_rate_limited",
            operation=operation,
            provider=name,
            endpoint_key=error.endpoint_key,
        )
    else:
        logger.warning(
            "provider_failed",
            operation=operation,
            provider=name,
            error_type=type(error).__name__,
            status=error.status if isinstance(error, ProviderHTTPError) else None,
            reason=error.reason,
        )

    if context.reporter is not None:
        context.reporter(ProviderEvent(operation=operation, provider=name, error=error))


async def attempt_in_order(
    operation: str,
    attempts: Sequence[ProviderAttempt[T]],
    synthetic: Callable[[], T],
    *,
    context: ServiceContext,
    mock_mode: bool,
) -> T:
    """
    Run provider attempts sequentially until one succeeds.

    Attempts without a credential are skipped silently, attempts denied by
    the rate limiter are reported and skipped, and attempts raising a
    ProviderError are reported and skipped. The same provider is never
    retried within one call. When nothing succeeds, or the domain is in
    mock mode, the synthetic generator answers.

    Args:
        operation: Public operation name, for logs
        attempts: Providers in priority order
        synthetic: Pure generator producing the same result shape
        context: Shared service state
        mock_mode: True to skip every live attempt

    Returns:
        The first live result, or the synthetic result
    """
    if mock_mode:
        logger.debug("mock_mode", operation=operation)
        return synthetic()

    for attempt in attempts:
        if attempt.provider is not None and not context.credentials.has_credential(attempt.provider):
            continue

        if attempt.rate_limit is not None and not context.rate_limiter.admit(attempt.rate_limit):
            _report(context, operation, attempt.name, RateLimited(attempt.name, attempt.rate_limit.key))
            continue

        try:
            result = await attempt.invoke()
        except ProviderError as e:
            _report(context, operation, attempt.name, e)
            continue

        logger.debug("provider_succeeded", operation=operation, provider=attempt.name)
        return result

    logger.debug("synthetic_fallback", operation=operation)
    return synthetic()
