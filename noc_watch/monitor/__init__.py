"""Monitor core — probe results, history, aggregation and scheduling."""

from .aggregator import Aggregator
from .history import HistoryStore
from .models import ProbeKind, ProbeResult, Snapshot
from .probes import run_connectivity_probe, run_lease_probe
from .scheduler import ProbeScheduler, SchedulerState, Trigger
