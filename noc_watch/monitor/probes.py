"""Compose executor checks into lease-renewal and connectivity probes.

Executor errors never escape: a check that raises is logged and counted
as failed, so a bad probe becomes a failure entry in history instead of
breaking the schedule.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TypeVar

from noc_watch.probes.base import ProbeExecutor

from .models import ZERO, ProbeResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _guarded(check: Callable[[], T], default: T, name: str) -> T:
    try:
        return check()
    except Exception as e:
        logger.warning("Probe check %s failed: %s: %s", name, type(e).__name__, e)
        logger.debug("Probe check %s traceback", name, exc_info=True)
        return default


def _reachability(executor: ProbeExecutor) -> tuple[bool, bool, timedelta]:
    ipv4 = _guarded(executor.check_ipv4, False, "ipv4")
    ipv6 = _guarded(executor.check_ipv6, False, "ipv6")
    latency = _guarded(executor.measure_latency, ZERO, "latency")
    return ipv4, ipv6, latency


def run_lease_probe(executor: ProbeExecutor) -> ProbeResult:
    """Full probe: lease renewal, then reachability and latency."""
    started = datetime.now().astimezone()
    duration, renewed = _guarded(executor.run_lease_renewal, (ZERO, False), "lease_renewal")
    ipv4, ipv6, latency = _reachability(executor)
    return ProbeResult.lease_renewal(
        renew_duration=duration if renewed else ZERO,
        renew_succeeded=renewed,
        ipv4_reachable=ipv4,
        ipv6_reachable=ipv6,
        latency=latency,
        timestamp=started,
    )


def run_connectivity_probe(executor: ProbeExecutor) -> ProbeResult:
    """Reachability and latency only, no lease renewal."""
    started = datetime.now().astimezone()
    ipv4, ipv6, latency = _reachability(executor)
    return ProbeResult.connectivity(
        ipv4_reachable=ipv4,
        ipv6_reachable=ipv6,
        latency=latency,
        timestamp=started,
    )
