"""Probe result and snapshot value types.

Both are frozen: a ProbeResult's ``success`` flag is derived once when it
is created, and a Snapshot is built fresh on every emission and shared
read-only with every sink.
"""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from datetime import datetime, timedelta
from enum import Enum

ZERO = timedelta(0)


def _now() -> datetime:
    return datetime.now().astimezone()


def success_rate(successes: int, total: int) -> float:
    """Percentage of successes, 0.0 when nothing has been recorded."""
    if total <= 0:
        return 0.0
    return successes / total * 100


# ── Probe results ────────────────────────────────────────────────────────────


class ProbeKind(str, Enum):
    LEASE_RENEWAL = "lease_renewal"
    CONNECTIVITY = "connectivity"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe execution.

    ``success`` is derived from the measurements when the result is
    created and cannot be passed in. Lease-renewal results take the
    renewal outcome as ``lease_renew_succeeded``.
    """

    kind: ProbeKind
    ipv4_reachable: bool
    ipv6_reachable: bool
    latency: timedelta
    lease_renew_duration: timedelta | None = None
    timestamp: datetime = field(default_factory=_now)
    lease_renew_succeeded: InitVar[bool] = False
    success: bool = field(init=False)

    def __post_init__(self, lease_renew_succeeded: bool) -> None:
        ok = self.ipv4_reachable and self.latency > ZERO
        if self.kind is ProbeKind.LEASE_RENEWAL:
            ok = ok and lease_renew_succeeded
        object.__setattr__(self, "success", ok)

    @classmethod
    def lease_renewal(
        cls,
        *,
        renew_duration: timedelta,
        renew_succeeded: bool,
        ipv4_reachable: bool,
        ipv6_reachable: bool,
        latency: timedelta,
        timestamp: datetime | None = None,
    ) -> ProbeResult:
        return cls(
            kind=ProbeKind.LEASE_RENEWAL,
            lease_renew_duration=renew_duration,
            ipv4_reachable=ipv4_reachable,
            ipv6_reachable=ipv6_reachable,
            latency=latency,
            lease_renew_succeeded=renew_succeeded,
            timestamp=timestamp or _now(),
        )

    @classmethod
    def connectivity(
        cls,
        *,
        ipv4_reachable: bool,
        ipv6_reachable: bool,
        latency: timedelta,
        timestamp: datetime | None = None,
    ) -> ProbeResult:
        return cls(
            kind=ProbeKind.CONNECTIVITY,
            ipv4_reachable=ipv4_reachable,
            ipv6_reachable=ipv6_reachable,
            latency=latency,
            timestamp=timestamp or _now(),
        )

    @classmethod
    def failed(cls, kind: ProbeKind, timestamp: datetime | None = None) -> ProbeResult:
        """A failure marker with every measurement zeroed."""
        return cls(
            kind=kind,
            lease_renew_duration=ZERO if kind is ProbeKind.LEASE_RENEWAL else None,
            ipv4_reachable=False,
            ipv6_reachable=False,
            latency=ZERO,
            timestamp=timestamp or _now(),
        )


# ── Snapshot ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time summary of all aggregated state.

    ``recent_leases`` and ``recent_connectivity`` hold the most recent
    window of each class, oldest first.
    """

    taken_at: datetime
    total_count: int
    success_count: int
    lease_count: int
    lease_success_count: int
    connectivity_count: int
    connectivity_success_count: int
    recent_leases: tuple[ProbeResult, ...] = ()
    recent_connectivity: tuple[ProbeResult, ...] = ()

    @property
    def failure_count(self) -> int:
        return self.total_count - self.success_count

    @property
    def success_rate(self) -> float:
        return success_rate(self.success_count, self.total_count)

    @property
    def lease_success_rate(self) -> float:
        return success_rate(self.lease_success_count, self.lease_count)

    @property
    def connectivity_success_rate(self) -> float:
        return success_rate(self.connectivity_success_count, self.connectivity_count)

    @property
    def latest_lease(self) -> ProbeResult | None:
        return self.recent_leases[-1] if self.recent_leases else None

    @property
    def latest_connectivity(self) -> ProbeResult | None:
        return self.recent_connectivity[-1] if self.recent_connectivity else None
