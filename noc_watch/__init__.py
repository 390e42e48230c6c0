"""noc-watch — periodic network interface health monitor."""

__version__ = "0.1.0"
