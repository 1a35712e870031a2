from __future__ import annotations

import datetime
import random
from collections import Counter

import httplib2
import pytest

from models.reply import ScanResult
from services.auto_reply_service import AutoReplyService
from services.gmail_service import GmailService
from services.label_service import LabelService
from services.policies import ContinueOnErrorPolicy, Decision, HaltOnErrorPolicy, policy_for
from services.reply_service import ReplyService
from services.scheduler import PollingScheduler, random_interval
from services.thread_scanner import ThreadScanner
from utils.errors import RemoteAPIError

from conftest import FakeResource


def _ok() -> ScanResult:
    return ScanResult(sender_filter="anyone")


def _failed() -> ScanResult:
    return ScanResult(sender_filter="anyone", error=RemoteAPIError("list threads", "boom", status=500))


def test_random_interval_is_inclusive_and_roughly_uniform():
    rng = random.Random(1234)
    draws = [random_interval(45, 50, rng) for _ in range(6000)]

    assert all(isinstance(value, int) for value in draws)
    assert min(draws) == 45
    assert max(draws) == 50
    counts = Counter(draws)
    assert set(counts) == set(range(45, 51))
    # each of the six values expects 1000 hits
    assert all(800 < count < 1200 for count in counts.values())


def test_random_interval_with_equal_bounds():
    assert random_interval(10, 10) == 10


def test_random_interval_rejects_inverted_range():
    with pytest.raises(ValueError):
        random_interval(5, 1)


class ClockJump:
    """Wait stand-in that records each pause and makes the pending job due at once."""

    def __init__(self) -> None:
        self.waits: list[float] = []
        self.scheduler: PollingScheduler | None = None

    def __call__(self, seconds: float) -> bool:
        self.waits.append(seconds)
        for job in self.scheduler.jobs:
            job.next_run = datetime.datetime.now()
        return False


def _scheduler(scan, low, high, **kwargs):
    jump = ClockJump()
    scheduler = PollingScheduler(scan, low, high, wait=jump, **kwargs)
    jump.scheduler = scheduler
    return scheduler, jump


def test_scheduler_waits_random_interval_between_scans():
    scans = []

    def scan():
        scans.append(1)
        return _ok()

    scheduler, jump = _scheduler(scan, 10, 15, max_scans=4)
    scheduler.run()

    assert len(scans) == 4
    assert len(jump.waits) == 3
    assert all(9 < seconds <= 15 for seconds in jump.waits)
    assert scheduler.jobs == []


def test_job_draws_pause_from_configured_range():
    seen = []

    def scan():
        seen.extend((job.interval, job.latest, job.unit) for job in scheduler.jobs)
        scheduler.stop()
        return _ok()

    scheduler = PollingScheduler(scan, 45, 120)
    scheduler.run()

    assert seen == [(45, 120, "seconds")]


def test_halt_policy_stops_after_failed_scan():
    results = iter([_ok(), _failed(), _ok()])
    scheduler, jump = _scheduler(lambda: next(results), 1, 2, policy=HaltOnErrorPolicy())

    last = scheduler.run()

    assert scheduler.scans_run == 2
    assert last is not None and not last.ok
    assert len(jump.waits) == 1
    assert scheduler.jobs == []


def test_continue_policy_keeps_polling_after_failure():
    results = iter([_failed(), _failed(), _ok()])
    scheduler, _ = _scheduler(lambda: next(results), 1, 2, policy=ContinueOnErrorPolicy(), max_scans=3)

    last = scheduler.run()

    assert scheduler.scans_run == 3
    assert last is not None and last.ok


def test_continue_policy_survives_unreachable_gmail_host():
    gmail = GmailService(FakeResource({"users.threads.list": httplib2.ServerNotFoundError("dns")}))
    service = AutoReplyService(ThreadScanner(gmail), LabelService(gmail), ReplyService(gmail, "Away."))
    scheduler, jump = _scheduler(
        lambda: service.run_scan("anyone"), 1, 2, policy=ContinueOnErrorPolicy(), max_scans=2
    )

    last = scheduler.run()

    assert scheduler.scans_run == 2
    assert isinstance(last.error, RemoteAPIError)
    assert last.error.action == "list threads"
    assert len(jump.waits) == 1


def test_empty_scan_still_schedules_next_scan():
    scheduler, jump = _scheduler(_ok, 1, 1, max_scans=2)
    scheduler.run()

    assert len(jump.waits) == 1
    assert 0 < jump.waits[0] <= 1
    assert scheduler.scans_run == 2


def test_stop_interrupts_the_wait():
    def scan_then_stop():
        scheduler.stop()
        return _ok()

    scheduler = PollingScheduler(scan_then_stop, 60, 60)
    scheduler.run()

    assert scheduler.scans_run == 1
    assert scheduler.stopped


def test_stop_from_wait_ends_the_loop():
    scheduler = PollingScheduler(_ok, 60, 60, wait=lambda seconds: scheduler.stop() or True)
    scheduler.run()

    assert scheduler.scans_run == 1
    assert scheduler.jobs == []


def test_policy_decisions():
    assert HaltOnErrorPolicy().decide(_ok()) is Decision.CONTINUE
    assert HaltOnErrorPolicy().decide(_failed()) is Decision.HALT
    assert ContinueOnErrorPolicy().decide(_failed()) is Decision.CONTINUE
    assert isinstance(policy_for("halt"), HaltOnErrorPolicy)
    assert isinstance(policy_for("Continue"), ContinueOnErrorPolicy)
    with pytest.raises(ValueError):
        policy_for("retry")
