"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from datetime import timedelta

import pytest

from noc_watch.monitor.models import Snapshot
from noc_watch.probes.base import ProbeExecutor
from noc_watch.sinks.base import SnapshotSink


class FakeProbeExecutor(ProbeExecutor):
    """Scripted executor: fixed answers, optional errors, call counting."""

    def __init__(
        self,
        renew: tuple[timedelta, bool] = (timedelta(seconds=2.5), True),
        ipv4: bool = True,
        ipv6: bool = True,
        latency: timedelta = timedelta(milliseconds=15),
        on_call: Callable[[], None] | None = None,
    ) -> None:
        self.renew = renew
        self.ipv4 = ipv4
        self.ipv6 = ipv6
        self.latency = latency
        self.on_call = on_call
        self.errors: dict[str, Exception] = {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def _called(self, name: str) -> None:
        with self._lock:
            self.calls.append(name)
        if name in self.errors:
            raise self.errors[name]
        if self.on_call:
            self.on_call()

    def run_lease_renewal(self) -> tuple[timedelta, bool]:
        self._called("run_lease_renewal")
        return self.renew

    def check_ipv4(self) -> bool:
        self._called("check_ipv4")
        return self.ipv4

    def check_ipv6(self) -> bool:
        self._called("check_ipv6")
        return self.ipv6

    def measure_latency(self) -> timedelta:
        self._called("measure_latency")
        return self.latency


class FakeClock:
    """Monotonic clock whose sleep jumps straight to the wake-up time."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


class RecordingSink(SnapshotSink):
    def __init__(self, name: str = "recorder") -> None:
        self.name = name
        self.snapshots: list[Snapshot] = []

    def accept(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)


class BrokenSink(SnapshotSink):
    name = "broken"

    def accept(self, snapshot: Snapshot) -> None:
        raise OSError("disk full")


@pytest.fixture
def executor() -> FakeProbeExecutor:
    return FakeProbeExecutor()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_executor() -> type[FakeProbeExecutor]:
    return FakeProbeExecutor


@pytest.fixture
def make_sink() -> type[RecordingSink]:
    return RecordingSink


@pytest.fixture
def broken_sink() -> BrokenSink:
    return BrokenSink()
