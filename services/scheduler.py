from __future__ import annotations

import logging
import random
import threading
from typing import Callable, List, Optional

import schedule

from models.reply import ScanResult
from services.policies import Decision, HaltOnErrorPolicy, ScanPolicy

LOGGER = logging.getLogger(__name__)

PRODUCTION_RANGE = (45, 120)
DEV_RANGE = (10, 15)


def random_interval(min_seconds: int, max_seconds: int, rng: random.Random | None = None) -> int:
    """Uniform whole number of seconds in ``[min_seconds, max_seconds]``."""

    if min_seconds > max_seconds:
        raise ValueError(f"min_seconds ({min_seconds}) is greater than max_seconds ({max_seconds})")
    return (rng or random).randint(min_seconds, max_seconds)


class PollingScheduler:
    """Run scans back to back with a random pause in between.

    A single ``every(min).to(max).seconds`` job on a private
    :class:`schedule.Scheduler` draws a fresh pause after every scan. The job
    cancels itself when the policy says HALT or after ``max_scans`` scans;
    :meth:`stop` interrupts the wait between scans.
    """

    def __init__(
        self,
        scan: Callable[[], ScanResult],
        min_interval: int = PRODUCTION_RANGE[0],
        max_interval: int = PRODUCTION_RANGE[1],
        policy: ScanPolicy | None = None,
        wait: Callable[[float], bool] | None = None,
        max_scans: int | None = None,
    ):
        if min_interval > max_interval:
            raise ValueError(f"Invalid polling range {min_interval}-{max_interval}")
        self._scan = scan
        self._min_interval = min_interval
        self._max_interval = max_interval
        self._policy = policy or HaltOnErrorPolicy()
        self._jobs = schedule.Scheduler()
        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._max_scans = max_scans
        self.scans_run = 0
        self.last: Optional[ScanResult] = None

    @property
    def jobs(self) -> List[schedule.Job]:
        return self._jobs.jobs

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def _tick(self):
        self.last = self._scan()
        self.scans_run += 1

        if self._policy.decide(self.last) is Decision.HALT:
            return schedule.CancelJob
        if self._max_scans is not None and self.scans_run >= self._max_scans:
            return schedule.CancelJob
        return None

    def run(self) -> Optional[ScanResult]:
        self._jobs.every(self._min_interval).to(self._max_interval).seconds.do(self._tick)
        # first scan happens right away; run_all reschedules the job afterwards
        self._jobs.run_all()

        while self._jobs.jobs and not self.stopped:
            idle = max(self._jobs.idle_seconds or 0.0, 0.0)
            LOGGER.info("Waiting for %s seconds...", round(idle))
            if self._wait(idle):
                break
            self._jobs.run_pending()

        self._jobs.clear()
        if self.stopped:
            LOGGER.info("Scheduler stopped.")
        return self.last
