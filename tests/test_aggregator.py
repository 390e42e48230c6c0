"""Tests for the Aggregator — counters, snapshots and read consistency."""

from __future__ import annotations

import threading
from datetime import timedelta

from noc_watch.monitor.aggregator import Aggregator
from noc_watch.monitor.models import ProbeKind, ProbeResult, Snapshot


def _lease(ok: bool = True) -> ProbeResult:
    return ProbeResult.lease_renewal(
        renew_duration=timedelta(seconds=2.5), renew_succeeded=ok,
        ipv4_reachable=True, ipv6_reachable=True, latency=timedelta(milliseconds=15),
    )


def _ping(ok: bool = True) -> ProbeResult:
    return ProbeResult.connectivity(
        ipv4_reachable=ok, ipv6_reachable=True, latency=timedelta(milliseconds=15),
    )


def _consistent(snap: Snapshot) -> bool:
    return (
        snap.total_count == snap.lease_count + snap.connectivity_count
        and snap.success_count == snap.lease_success_count + snap.connectivity_success_count
    )


class TestScenarios:
    def test_lease_then_connectivity_success(self) -> None:
        agg = Aggregator()
        agg.record_lease_renewal(_lease())
        agg.record_connectivity(_ping())

        snap = agg.snapshot()
        assert snap.total_count == 2
        assert snap.success_count == 2
        assert snap.lease_success_rate == 100.0
        assert snap.connectivity_success_rate == 100.0
        assert snap.success_rate == 100.0

    def test_single_failing_connectivity(self) -> None:
        agg = Aggregator()
        agg.record_connectivity(_ping(ok=False))

        snap = agg.snapshot()
        assert snap.total_count == 1
        assert snap.success_count == 0
        assert snap.success_rate == 0.0
        assert snap.lease_success_rate == 0.0

    def test_empty_snapshot_repeatedly(self) -> None:
        agg = Aggregator()
        for _ in range(3):
            snap = agg.snapshot()
            assert snap.total_count == 0
            assert snap.success_rate == 0.0
            assert snap.lease_success_rate == 0.0
            assert snap.connectivity_success_rate == 0.0
            assert snap.recent_leases == ()
            assert snap.recent_connectivity == ()

    def test_mixed_rates(self) -> None:
        agg = Aggregator()
        agg.record_lease_renewal(_lease(ok=True))
        agg.record_lease_renewal(_lease(ok=False))
        for ok in (True, True, True, False):
            agg.record_connectivity(_ping(ok))

        snap = agg.snapshot()
        assert snap.total_count == 6
        assert snap.success_count == 4
        assert snap.lease_success_rate == 50.0
        assert snap.connectivity_success_rate == 75.0
        assert round(snap.success_rate, 2) == 66.67


class TestSnapshotWindow:
    def test_window_bounds_recent_entries(self) -> None:
        agg = Aggregator()
        for _ in range(15):
            agg.record_connectivity(_ping())
        snap = agg.snapshot()
        assert len(snap.recent_connectivity) == 10
        assert snap.connectivity_count == 15

    def test_custom_window(self) -> None:
        agg = Aggregator(window=3)
        for _ in range(5):
            agg.record_lease_renewal(_lease())
        assert len(agg.snapshot().recent_leases) == 3

    def test_snapshot_is_detached_from_live_state(self) -> None:
        agg = Aggregator()
        agg.record_connectivity(_ping())
        snap = agg.snapshot()
        agg.record_connectivity(_ping(ok=False))
        assert snap.total_count == 1
        assert len(snap.recent_connectivity) == 1

    def test_class_stores_are_separate(self) -> None:
        agg = Aggregator()
        agg.record_lease_renewal(_lease())
        agg.record_connectivity(ProbeResult.failed(ProbeKind.CONNECTIVITY))
        snap = agg.snapshot()
        assert snap.lease_count == 1
        assert snap.connectivity_count == 1
        assert snap.lease_success_count == 1
        assert snap.connectivity_success_count == 0
        assert snap.success_count == 1


class TestConsistency:
    def test_counters_match_histories(self) -> None:
        agg = Aggregator()
        for i in range(50):
            if i % 5 == 0:
                agg.record_lease_renewal(_lease(ok=i % 2 == 0))
            else:
                agg.record_connectivity(_ping(ok=i % 3 != 0))
            assert _consistent(agg.snapshot())

    def test_concurrent_snapshots_never_torn(self) -> None:
        agg = Aggregator()
        done = threading.Event()
        torn: list[Snapshot] = []

        def reader() -> None:
            while not done.is_set():
                snap = agg.snapshot()
                if not _consistent(snap):
                    torn.append(snap)

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in readers:
            t.start()

        for i in range(2000):
            if i % 5 == 0:
                agg.record_lease_renewal(_lease(ok=i % 2 == 0))
            else:
                agg.record_connectivity(_ping(ok=i % 3 != 0))

        done.set()
        for t in readers:
            t.join()

        assert torn == []
        final = agg.snapshot()
        assert final.total_count == 2000
        assert _consistent(final)
