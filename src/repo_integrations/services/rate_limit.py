"""Rate-limit tracker that paces every remote call against the current budget.

The tracker never fires two calls back to back: with budget to spare it
waits a short courtesy delay, and once the remaining budget falls to the
threshold (15 % by default) it waits for the window to reset.  Either way it
returns a *fresh* snapshot fetched after the pause.

One tracker belongs to one connected client.  Distinct clients can carry
distinct credentials, hence distinct budgets, so nothing here is global.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

from repo_integrations.domain.entities import RateLimitSnapshot
from repo_integrations.domain.exceptions import RateLimitCheckError, UpstreamError
from repo_integrations.domain.ports.github_api import GitHubApi

logger = logging.getLogger(__name__)

DEFAULT_COURTESY_DELAY = 1.0
DEFAULT_THRESHOLD = 0.15

Sleeper = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class RateLimitTracker:
    """Decides how long to pause before the next call against *client*.

    Parameters
    ----------
    client:
        The remote API whose budget is being tracked.
    courtesy_delay:
        Seconds to wait between calls while the budget is healthy.
    threshold:
        Fraction of the budget at or below which the tracker waits for the
        window to reset.
    sleep, clock:
        Injection points for the suspension primitive and the epoch clock.
    """

    def __init__(
        self,
        client: GitHubApi,
        *,
        courtesy_delay: float = DEFAULT_COURTESY_DELAY,
        threshold: float = DEFAULT_THRESHOLD,
        sleep: Sleeper = asyncio.sleep,
        clock: Clock = time.time,
    ) -> None:
        self._client = client
        self._courtesy_delay = courtesy_delay
        self._threshold = threshold
        self._sleep = sleep
        self._clock = clock

    async def fetch_current(self) -> RateLimitSnapshot:
        """Ask the remote service for its current budget.

        Failures are not swallowed; the caller decides the fallback.
        """
        snapshot = await self._client.get_rate_limit_status()
        logger.debug(
            "Rate limit: %s/%s remaining, resets at %s",
            snapshot.remaining,
            snapshot.limit,
            snapshot.reset_at,
        )
        return snapshot

    def is_low(self, snapshot: RateLimitSnapshot) -> bool:
        """Whether *snapshot* is at or below the reset-wait threshold.

        The empty snapshot carries no information and is never "low"; a
        zero or missing limit on a populated snapshot always is.
        """
        if snapshot.is_empty:
            return False
        return snapshot.percent_remaining <= self._threshold

    def delay_for(self, snapshot: RateLimitSnapshot) -> float:
        """Seconds to pause before the next call, given *snapshot*."""
        if not self.is_low(snapshot):
            return self._courtesy_delay
        if snapshot.reset_at is None:
            return 0.0
        return max(0.0, snapshot.reset_at - self._clock())

    async def throttle(self, snapshot: RateLimitSnapshot) -> RateLimitSnapshot:
        """Pause as *snapshot* demands, then return a fresh snapshot."""
        delay = self.delay_for(snapshot)
        if self.is_low(snapshot):
            logger.warning(
                "Rate limit nearly exhausted (%s/%s remaining). Waiting %.1fs for reset",
                snapshot.remaining,
                snapshot.limit,
                delay,
            )
        else:
            logger.debug("Courtesy delay of %.1fs", delay)
        await self._sleep(delay)
        return await self.fetch_current()

    async def pace(self, snapshot: RateLimitSnapshot) -> RateLimitSnapshot:
        """Like :meth:`throttle`, but a failed refresh keeps *snapshot*.

        The pause still happens; only the budget lookup afterwards may fail,
        and that never stops the call it is pacing.
        """
        try:
            return await self.throttle(snapshot)
        except UpstreamError as exc:
            logger.warning("Rate-limit refresh failed (%s); keeping last snapshot", exc)
            return snapshot

    async def preflight(self) -> RateLimitSnapshot:
        """Best-effort budget check before an aggregation starts.

        Raises :class:`RateLimitCheckError` when the lookup fails, so callers
        can tell an advisory failure apart from a real fetch failure.
        """
        try:
            return await self.throttle(await self.fetch_current())
        except UpstreamError as exc:
            raise RateLimitCheckError(f"Rate-limit pre-check failed: {exc}") from exc
