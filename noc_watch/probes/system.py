"""Probe executor backed by system networking commands.

Lease renewal drives ``dhclient``; reachability and latency use ``ping``
and ``ping6`` bound to the monitored interface. Every command runs with a
timeout, and a timeout or a missing binary counts as a failed check.
"""

from __future__ import annotations

import logging
import re
import subprocess
import time
from datetime import timedelta
from pathlib import Path

from noc_watch.config import Settings, settings

from .base import ProbeExecutor

logger = logging.getLogger(__name__)

# Linux iputils: "rtt min/avg/max/mdev = 14.1/15.2/16.3/0.5 ms"
# BSD/macOS:     "round-trip min/avg/max/stddev = 14.1/15.2/16.3/0.5 ms"
_RTT_SUMMARY = re.compile(r"min/avg/max\S*\s*=\s*[\d.]+/([\d.]+)/")


def parse_average_rtt(output: str) -> timedelta | None:
    """Extract the average round-trip time from ping's summary line."""
    match = _RTT_SUMMARY.search(output)
    if not match:
        return None
    try:
        return timedelta(milliseconds=float(match.group(1)))
    except ValueError:
        return None


class SystemProbeExecutor(ProbeExecutor):
    """Runs dhclient / ping against a single interface."""

    def __init__(self, interface: str | None = None, config: Settings | None = None) -> None:
        self.config = config or settings
        self.interface = interface or self.config.wifi_interface

    # -- ProbeExecutor ---------------------------------------------------------

    def run_lease_renewal(self) -> tuple[timedelta, bool]:
        # Release result is ignored: there may be no lease to drop
        self._run(self._privileged(["dhclient", "-r", self.interface]))

        time.sleep(self.config.dhcp_settle_seconds)

        t0 = time.perf_counter()
        renew = self._run(self._privileged(["dhclient", self.interface]))
        if renew is None or renew.returncode != 0:
            return timedelta(0), False

        if not self._has_nameserver():
            logger.warning("Lease renewed on %s but no nameserver configured", self.interface)
            return timedelta(0), False

        return timedelta(seconds=time.perf_counter() - t0), True

    def check_ipv4(self) -> bool:
        return self._ping("ping", self.config.ipv4_target, count=1)

    def check_ipv6(self) -> bool:
        return self._ping("ping6", self.config.ipv6_target, count=1)

    def measure_latency(self) -> timedelta:
        t0 = time.perf_counter()
        proc = self._run(self._ping_cmd("ping", self.config.ipv4_target, self.config.latency_ping_count))
        if proc is None or proc.returncode != 0:
            return timedelta(0)

        avg = parse_average_rtt(proc.stdout)
        if avg is None:
            logger.debug("No rtt summary in ping output, using elapsed time")
            return timedelta(seconds=time.perf_counter() - t0)
        return avg

    # -- internals -------------------------------------------------------------

    def _privileged(self, cmd: list[str]) -> list[str]:
        return ["sudo", *cmd] if self.config.use_sudo else cmd

    def _ping_cmd(self, binary: str, target: str, count: int) -> list[str]:
        return [
            binary, "-I", self.interface,
            "-c", str(count),
            "-W", str(self.config.ping_timeout),
            target,
        ]

    def _ping(self, binary: str, target: str, count: int) -> bool:
        proc = self._run(self._ping_cmd(binary, target, count))
        return proc is not None and proc.returncode == 0

    def _has_nameserver(self) -> bool:
        try:
            content = Path(self.config.resolv_conf).read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot read %s: %s", self.config.resolv_conf, e)
            return False
        return "nameserver" in content

    def _run(self, cmd: list[str]) -> subprocess.CompletedProcess[str] | None:
        """Run a command; None when it could not run to completion."""
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.command_timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Command timed out after %ss: %s", self.config.command_timeout, " ".join(cmd))
        except FileNotFoundError:
            logger.warning("Command not found: %s", cmd[0])
        return None
