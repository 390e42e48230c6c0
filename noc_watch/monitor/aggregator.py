"""Aggregator — owns probe history and running totals.

The scheduler is the only writer. Every record and every snapshot runs
under one lock, so a snapshot is taken either fully before or fully after
any recording, whichever thread it is called from.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime

from .history import HistoryStore
from .models import ProbeResult, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 10


class Aggregator:
    """Lease-renewal and connectivity histories plus global counters."""

    def __init__(self, window: int = DEFAULT_WINDOW) -> None:
        self.window = window
        self._leases = HistoryStore()
        self._connectivity = HistoryStore()
        self._total_count: int = 0
        self._success_count: int = 0
        self._lock = threading.Lock()

    def record_lease_renewal(self, result: ProbeResult) -> None:
        self._record(self._leases, result)

    def record_connectivity(self, result: ProbeResult) -> None:
        self._record(self._connectivity, result)

    def snapshot(self) -> Snapshot:
        """Copy out an immutable view of the current state."""
        with self._lock:
            return Snapshot(
                taken_at=datetime.now().astimezone(),
                total_count=self._total_count,
                success_count=self._success_count,
                lease_count=len(self._leases),
                lease_success_count=self._leases.success_count,
                connectivity_count=len(self._connectivity),
                connectivity_success_count=self._connectivity.success_count,
                recent_leases=self._leases.latest(self.window),
                recent_connectivity=self._connectivity.latest(self.window),
            )

    # -- internals -------------------------------------------------------------

    def _record(self, store: HistoryStore, result: ProbeResult) -> None:
        with self._lock:
            store.append(result)
            self._total_count += 1
            if result.success:
                self._success_count += 1
            total = self._total_count
        logger.debug(
            "Recorded %s result: success=%s (total=%d)",
            result.kind.value, result.success, total,
        )
