from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta


class ProbeExecutor(ABC):
    """Performs the physical network checks for one interface.

    Implementations bound their own blocking time; the scheduler never
    cancels a running check.
    """

    @abstractmethod
    def run_lease_renewal(self) -> tuple[timedelta, bool]:
        """Release and renew the address lease; return (duration, succeeded)."""
        raise NotImplementedError

    @abstractmethod
    def check_ipv4(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def check_ipv6(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def measure_latency(self) -> timedelta:
        """Round-trip latency; ``timedelta(0)`` means unmeasured."""
        raise NotImplementedError
