"""Append-only text log of emitted snapshots.

One block per emission::

    === WiFi Quality Test Results - 2026-10-18 12:00:00 ===
    DHCP Test: Success=true, Time=2.5s
    Ping Test: Success=true, IPv4=true, IPv6=true, Latency=15ms
    Total Tests: 2, Success: 2, Success Rate: 100.00%
    DHCP Success Rate: 100.00%
    Ping Success Rate: 100.00%
    ==========================================

The DHCP / Ping lines describe the newest result of each class and are
left out until that class has one.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

from noc_watch.monitor.models import Snapshot

from .base import SnapshotSink

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DELIMITER = "=" * 42


def _fmt_bool(value: bool) -> str:
    return "true" if value else "false"


def _trim(number: str) -> str:
    return number.rstrip("0").rstrip(".") if "." in number else number


def format_duration(d: timedelta | None) -> str:
    """Compact duration text: ``0s``, ``850µs``, ``15ms``, ``2.5s``, ``1m30s``."""
    if d is None:
        return "0s"
    us = round(d.total_seconds() * 1_000_000)
    if us == 0:
        return "0s"
    sign = "-" if us < 0 else ""
    us = abs(us)

    if us < 1_000:
        return f"{sign}{us}µs"
    if us < 1_000_000:
        return f"{sign}{_trim(f'{us / 1_000:.3f}')}ms"

    hours, rem = divmod(us, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return out + f"{_trim(f'{rem / 1_000_000:.6f}')}s"


def format_log_record(snapshot: Snapshot) -> str:
    lines = [
        "",
        f"=== WiFi Quality Test Results - {snapshot.taken_at.strftime(TIME_FORMAT)} ===",
    ]

    lease = snapshot.latest_lease
    if lease is not None:
        lines.append(
            f"DHCP Test: Success={_fmt_bool(lease.success)}, "
            f"Time={format_duration(lease.lease_renew_duration)}"
        )

    ping = snapshot.latest_connectivity
    if ping is not None:
        lines.append(
            f"Ping Test: Success={_fmt_bool(ping.success)}, "
            f"IPv4={_fmt_bool(ping.ipv4_reachable)}, "
            f"IPv6={_fmt_bool(ping.ipv6_reachable)}, "
            f"Latency={format_duration(ping.latency)}"
        )

    lines += [
        f"Total Tests: {snapshot.total_count}, Success: {snapshot.success_count}, "
        f"Success Rate: {snapshot.success_rate:.2f}%",
        f"DHCP Success Rate: {snapshot.lease_success_rate:.2f}%",
        f"Ping Success Rate: {snapshot.connectivity_success_rate:.2f}%",
        DELIMITER,
    ]
    return "\n".join(lines) + "\n"


class LogFileSink(SnapshotSink):
    """Appends one record per snapshot; the file is reopened on every write."""

    name = "logfile"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def accept(self, snapshot: Snapshot) -> None:
        record = format_log_record(snapshot)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(record)
        logger.debug("Appended snapshot to %s", self.path)
