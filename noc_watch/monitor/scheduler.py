"""Probe scheduler — one serialized loop driving every cadence.

Three kinds of trigger share a single asyncio loop:

- ``lease``: full probe with lease renewal (default every 5 minutes)
- ``connectivity``: reachability + latency only (default every minute)
- ``emit``: snapshot pushed to the attached sinks (1s on the dashboard,
  1 minute unattended); sinks may also get an emit trigger of their own

The loop waits for the earliest due trigger, runs its action to
completion and reschedules it ``interval`` seconds after the action
finished. Probes run on a single worker thread and are awaited inline,
so a probe is never re-entered and a slow probe delays every other
trigger until it returns. All Aggregator writes happen on the loop.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .aggregator import Aggregator
from .probes import run_connectivity_probe, run_lease_probe

if TYPE_CHECKING:
    from noc_watch.probes.base import ProbeExecutor
    from noc_watch.sinks.base import SnapshotSink

logger = logging.getLogger(__name__)

LEASE = "lease"
CONNECTIVITY = "connectivity"
EMIT = "emit"

DEFAULT_LEASE_INTERVAL = 300.0
DEFAULT_CONNECTIVITY_INTERVAL = 60.0
DEFAULT_EMIT_INTERVAL = 1.0


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class Trigger:
    """A named periodic cadence and the action it drives."""

    name: str
    interval: float
    action: Callable[[], Awaitable[None]]
    due: float = 0.0
    fires: int = 0


class ProbeScheduler:
    """Runs lease, connectivity and emit triggers against one Aggregator.

    Lifecycle:
        scheduler = ProbeScheduler(executor)
        scheduler.add_sink(dashboard)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        executor: ProbeExecutor,
        aggregator: Aggregator | None = None,
        *,
        lease_interval: float = DEFAULT_LEASE_INTERVAL,
        connectivity_interval: float = DEFAULT_CONNECTIVITY_INTERVAL,
        emit_interval: float = DEFAULT_EMIT_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.executor = executor
        self.aggregator = aggregator or Aggregator()
        self.state = SchedulerState.IDLE
        self._clock = clock
        self._sleep = sleep
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="noc-probe")
        self._task: asyncio.Task[None] | None = None
        self._closed = False
        self._sinks: dict[str, list[SnapshotSink]] = {EMIT: []}
        self._triggers: list[Trigger] = [
            Trigger(LEASE, lease_interval, self._run_lease),
            Trigger(CONNECTIVITY, connectivity_interval, self._run_connectivity),
            Trigger(EMIT, emit_interval, self._emit_action(EMIT)),
        ]

    @property
    def triggers(self) -> tuple[Trigger, ...]:
        return tuple(self._triggers)

    def add_sink(self, sink: SnapshotSink, interval: float | None = None) -> None:
        """Attach a sink to the shared emit trigger, or to its own cadence."""
        if self.state is not SchedulerState.IDLE:
            raise RuntimeError("Sinks must be attached before the scheduler starts")
        if interval is None:
            self._sinks[EMIT].append(sink)
            return

        name = f"{EMIT}:{sink.name}"
        if name in self._sinks:
            name = f"{name}-{len(self._triggers)}"
        self._sinks[name] = [sink]
        self._triggers.append(Trigger(name, interval, self._emit_action(name)))

    # -- lifecycle -------------------------------------------------------------

    def arm(self, *, emit_on_start: bool = False, probe_on_start: bool = False) -> None:
        """Move to Running and set every trigger's first due time."""
        if self.state is SchedulerState.STOPPED:
            raise RuntimeError("Scheduler already stopped")
        if self.state is SchedulerState.RUNNING:
            return

        now = self._clock()
        for trigger in self._triggers:
            immediate = probe_on_start and trigger.name in (LEASE, CONNECTIVITY)
            trigger.due = now if immediate else now + trigger.interval
        self.state = SchedulerState.RUNNING

        logger.info(
            "Probe scheduler started: %s",
            ", ".join(f"{t.name}={t.interval:g}s" for t in self._triggers),
        )
        if emit_on_start:
            self.emit(EMIT)

    async def start(self, *, emit_on_start: bool = False, probe_on_start: bool = False) -> None:
        """Arm the triggers and run the loop as a background task."""
        if self.state is SchedulerState.RUNNING:
            return
        self.arm(emit_on_start=emit_on_start, probe_on_start=probe_on_start)
        self._task = asyncio.create_task(self._run_loop(), name="noc-watch-scheduler")

    async def run(self, *, emit_on_start: bool = False, probe_on_start: bool = False) -> None:
        """Arm the triggers and run the loop in the caller until stopped."""
        self.arm(emit_on_start=emit_on_start, probe_on_start=probe_on_start)
        self._task = asyncio.current_task()
        try:
            await self._run_loop()
        finally:
            self._task = None
            self._shutdown()

    async def stop(self) -> None:
        """Stop the loop. A probe already running on the worker is abandoned."""
        self.state = SchedulerState.STOPPED
        task, self._task = self._task, None
        if task and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._shutdown()

    # -- loop ------------------------------------------------------------------

    def next_trigger(self) -> Trigger:
        """Earliest due trigger; ties go to the first registered."""
        return min(self._triggers, key=lambda t: t.due)

    async def step(self) -> Trigger:
        """Wait for the next due trigger, fire it once and reschedule it.

        A trigger whose wait ends after ``stop()`` is returned unfired.
        """
        trigger = self.next_trigger()
        delay = trigger.due - self._clock()
        if delay > 0:
            await self._sleep(delay)
        if self.state is not SchedulerState.RUNNING:
            return trigger

        try:
            await trigger.action()
        except Exception:
            logger.exception("Trigger %s failed", trigger.name)

        trigger.fires += 1
        trigger.due = self._clock() + trigger.interval
        return trigger

    async def _run_loop(self) -> None:
        while self.state is SchedulerState.RUNNING:
            await self.step()

    def _shutdown(self) -> None:
        self.state = SchedulerState.STOPPED
        if self._closed:
            return
        self._closed = True
        self._pool.shutdown(wait=False)
        logger.info("Probe scheduler stopped")

    # -- actions ---------------------------------------------------------------

    async def _run_lease(self) -> None:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(self._pool, run_lease_probe, self.executor)
        self.aggregator.record_lease_renewal(result)
        logger.debug(
            "Lease probe: success=%s renew=%s ipv4=%s ipv6=%s latency=%s",
            result.success, result.lease_renew_duration,
            result.ipv4_reachable, result.ipv6_reachable, result.latency,
        )

    async def _run_connectivity(self) -> None:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(self._pool, run_connectivity_probe, self.executor)
        self.aggregator.record_connectivity(result)
        logger.debug(
            "Connectivity probe: success=%s ipv4=%s ipv6=%s latency=%s",
            result.success, result.ipv4_reachable, result.ipv6_reachable, result.latency,
        )

    def _emit_action(self, name: str) -> Callable[[], Awaitable[None]]:
        async def action() -> None:
            self.emit(name)

        return action

    def emit(self, name: str = EMIT) -> None:
        """Push one fresh snapshot to every sink attached to ``name``."""
        sinks = self._sinks.get(name, [])
        if not sinks:
            return
        snapshot = self.aggregator.snapshot()
        for sink in sinks:
            try:
                sink.accept(snapshot)
            except Exception as e:
                logger.error("Snapshot sink %s failed: %s", sink.name, e)
                logger.debug("Snapshot sink %s traceback", sink.name, exc_info=True)

    def status(self) -> dict[str, Any]:
        now = self._clock()
        return {
            "state": self.state.value,
            "triggers": [
                {
                    "name": t.name,
                    "interval": t.interval,
                    "fires": t.fires,
                    "due_in": round(max(0.0, t.due - now), 1) if self.state is SchedulerState.RUNNING else None,
                    "sinks": [s.name for s in self._sinks.get(t.name, [])],
                }
                for t in self._triggers
            ],
        }
