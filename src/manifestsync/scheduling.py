"""Periodic trigger for discovery passes."""

from __future__ import annotations

import threading
import time
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

    from manifestsync.domain.discovery import DiscoveryResult

log = getLogger(__name__)

DEFAULT_TASK_ID: Final[str] = "bitbucket-manifest-discover"

type DiscoveryTask = Callable[[datetime], DiscoveryResult]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DiscoveryScheduler:
    """Fire a discovery task at a fixed frequency, never two at a time.

    Each invocation receives a deadline ``now + timeout``. A pass still running
    when the next one is due causes that invocation to be skipped. Failed passes
    are logged and retried only at the next tick.
    """

    def __init__(
        self,
        task: DiscoveryTask,
        *,
        frequency: timedelta,
        timeout: timedelta,
        task_id: str = DEFAULT_TASK_ID,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._task = task
        self.frequency = frequency
        self.timeout = timeout
        self.task_id = task_id
        self._clock = clock
        self._in_flight = threading.Lock()
        self.runs = 0
        self.skipped = 0
        self.failures = 0

    @property
    def is_running(self) -> bool:
        return self._in_flight.locked()

    def run_once(self) -> DiscoveryResult | None:
        """Run a pass now unless one is in flight. Errors propagate to the caller."""

        if not self._in_flight.acquire(blocking=False):
            self.skipped += 1
            log.warning("Skipping %s: previous pass has not completed", self.task_id)
            return None
        try:
            self.runs += 1
            deadline = self._clock() + self.timeout
            return self._task(deadline)
        finally:
            self._in_flight.release()

    def run_forever(self, stop_event: threading.Event) -> None:
        log.info(
            "Scheduling %s every %s (timeout %s)",
            self.task_id,
            self.frequency,
            self.timeout,
        )
        interval = self.frequency.total_seconds()
        while not stop_event.is_set():
            started = time.monotonic()
            try:
                self.run_once()
            except Exception:
                self.failures += 1
                log.exception("Discovery pass %s failed", self.task_id)
            elapsed = time.monotonic() - started
            stop_event.wait(max(0.0, interval - elapsed))
        log.info("Stopped %s scheduler", self.task_id)
