"""Single-timer refresh scheduler for the Daikin One bridge.

The scheduler has two modes.

Immediate: refresh as soon as neither the floor set by an earlier passive
call nor the foreground interval forbids it. Used when someone is looking at
a device right now.

Passive: after a read or a write, set a floor under which no refresh may
happen and schedule the next background refresh. A scheduled refresh is never
moved earlier by a passive call.

Only one timer is ever outstanding; arming always cancels the previous one.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import TYPE_CHECKING

from .const import (
    BACKGROUND_REFRESH_INTERVAL,
    FOREGROUND_REFRESH_INTERVAL,
    WRITE_SETTLE_DELAY,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_LOGGER = logging.getLogger(__name__)


class RefreshScheduler:
    """Decide when the next full poll of all devices happens."""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[None]],
        *,
        foreground_interval: float = FOREGROUND_REFRESH_INTERVAL,
        background_interval: float = BACKGROUND_REFRESH_INTERVAL,
        write_settle_delay: float = WRITE_SETTLE_DELAY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the scheduler.

        Args:
            refresh: Coroutine function performing one full read.
            foreground_interval: Minimum spacing between polls, in seconds.
            background_interval: Spacing between unattended polls.
            write_settle_delay: How long the API serves stale data after a write.
            clock: Monotonic clock in seconds.

        """
        self._refresh = refresh
        self.foreground_interval = foreground_interval
        self.background_interval = background_interval
        self.write_settle_delay = write_settle_delay
        self._clock = clock

        self._last_update_time: float | None = None
        self._next_update_time: float | None = None
        self._no_update_before = -math.inf
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def last_update_time(self) -> float | None:
        """Clock time the last scheduled refresh started."""
        return self._last_update_time

    @property
    def next_update_time(self) -> float | None:
        """Clock time of the armed refresh, None when nothing is scheduled."""
        return self._next_update_time

    @property
    def no_update_before(self) -> float:
        """Clock time before which no refresh may run."""
        return self._no_update_before

    @property
    def is_scheduled(self) -> bool:
        """Return True while a timer is armed."""
        return self._timer is not None

    def request_immediate(self) -> None:
        """Refresh as soon as the floor and the foreground interval allow."""
        now = self._clock()
        min_until_next = self._no_update_before - now
        since_last = (
            math.inf
            if self._last_update_time is None
            else now - self._last_update_time
        )

        if since_last > self.foreground_interval:
            if min_until_next <= 0:
                _LOGGER.debug("Instant refresh now")
                self._arm(0)
            else:
                _LOGGER.debug(
                    "Instant refresh when update is allowed in %.1f s",
                    min_until_next,
                )
                self._arm(min_until_next)
        else:
            update_in = self.foreground_interval - since_last
            _LOGGER.debug("Next allowed poll in %.1f s", update_in)
            self._arm(max(min_until_next, update_in))

    def schedule_passive(self, block_for: float | None = None) -> None:
        """Schedule the next refresh after a read or a write completed.

        Args:
            block_for: Seconds during which no refresh may happen. None after
                a read; the write-settle delay after a write.

        """
        if block_for is None:
            block_for = self.foreground_interval
            next_update_in = self.background_interval
        elif block_for < self.foreground_interval:
            _LOGGER.warning(
                "Refresh block of %.1f s is less than %.1f s, using the latter",
                block_for,
                self.foreground_interval,
            )
            block_for = self.foreground_interval
            next_update_in = self.foreground_interval
        else:
            next_update_in = block_for

        now = self._clock()
        self._no_update_before = max(self._no_update_before, now + block_for)
        block_remaining = self._no_update_before - now

        if (
            self._next_update_time is None
            or block_remaining > self._next_update_time - now
        ):
            self._arm(max(block_remaining, next_update_in))
        else:
            _LOGGER.debug(
                "Not rescheduling next update because %.1f s is after %.1f s",
                self._next_update_time - now,
                block_remaining,
            )

    def clear_next_update(self) -> None:
        """Forget the fired schedule once a refresh has finished."""
        if self._timer is None:
            self._next_update_time = None

    def cancel(self) -> None:
        """Cancel the armed timer, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._next_update_time = None

    def _arm(self, delay: float) -> None:
        if self._timer is not None:
            self._timer.cancel()
        delay = max(delay, 0)
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._fire)
        self._next_update_time = self._clock() + delay
        _LOGGER.debug("Scheduled update in %.1f s", delay)

    def _fire(self) -> None:
        self._timer = None
        self._last_update_time = self._clock()
        self._task = asyncio.create_task(self._async_run())

    async def _async_run(self) -> None:
        try:
            await self._refresh()
        except Exception:
            _LOGGER.exception("Error in scheduled update")
            if self._timer is None:
                self.clear_next_update()
                self.schedule_passive()
