"""Day-boundary monitor that triggers re-evaluation once per calendar day."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta
from typing import Callable, Optional

__all__ = ["DayChangeMonitor", "seconds_until_midnight"]

logger = logging.getLogger(__name__)

# Fire slightly after midnight so the new date is observed.
MIDNIGHT_BUFFER_SECONDS = 0.1


def seconds_until_midnight(now: datetime) -> float:
    tomorrow = datetime.combine(now.date() + timedelta(days=1), datetime.min.time(), tzinfo=now.tzinfo)
    return (tomorrow - now).total_seconds()


class DayChangeMonitor:
    """Calls ``on_day_change(new_day)`` when the local calendar day changes.

    A timer is armed for the next midnight, and a fallback poll catches days
    missed while the process was suspended. ``stop`` cancels both.
    """

    def __init__(
        self,
        on_day_change: Callable[[date], None],
        poll_interval: float = 60.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.on_day_change = on_day_change
        self.poll_interval = poll_interval
        self.clock = clock
        self.current_day: date = clock().date()
        self._lock = threading.Lock()
        self._midnight_timer: Optional[threading.Timer] = None
        self._poll_timer: Optional[threading.Timer] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def check(self, now: Optional[datetime] = None) -> bool:
        """Fire the callback if the day has changed; returns whether it fired."""

        today = (now or self.clock()).date()
        with self._lock:
            if today == self.current_day:
                return False
            self.current_day = today
        logger.info("Calendar day changed to %s", today.isoformat())
        self.on_day_change(today)
        return True

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._arm_midnight()
        self._arm_poll()

    def stop(self) -> None:
        self._running = False
        for timer in (self._midnight_timer, self._poll_timer):
            if timer is not None:
                timer.cancel()
        self._midnight_timer = None
        self._poll_timer = None

    def _arm_midnight(self) -> None:
        delay = seconds_until_midnight(self.clock()) + MIDNIGHT_BUFFER_SECONDS
        self._midnight_timer = self._timer(delay, self._on_midnight)

    def _arm_poll(self) -> None:
        self._poll_timer = self._timer(self.poll_interval, self._on_poll)

    def _timer(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer

    def _on_midnight(self) -> None:
        if not self._running:
            return
        self.check()
        self._arm_midnight()

    def _on_poll(self) -> None:
        if not self._running:
            return
        self.check()
        self._arm_poll()
