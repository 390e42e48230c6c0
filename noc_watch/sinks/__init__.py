"""Snapshot sinks — dashboard and append-only log file."""

from .base import SnapshotSink
from .dashboard import DashboardSink, render_snapshot
from .logfile import LogFileSink, format_duration, format_log_record
