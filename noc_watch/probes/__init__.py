"""Probe executors — the physical network checks behind each probe."""

from .base import ProbeExecutor
from .system import SystemProbeExecutor, parse_average_rtt
