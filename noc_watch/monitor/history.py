"""Append-only probe history for one probe class."""

from __future__ import annotations

from .models import ProbeResult, success_rate


class HistoryStore:
    """Chronological record of every result of one probe class.

    Full history is kept for the process lifetime; readers only ever ask
    for a bounded window through :meth:`latest`.
    """

    def __init__(self) -> None:
        self._results: list[ProbeResult] = []
        self._successes: int = 0

    def __len__(self) -> int:
        return len(self._results)

    @property
    def success_count(self) -> int:
        return self._successes

    def append(self, result: ProbeResult) -> None:
        self._results.append(result)
        if result.success:
            self._successes += 1

    def latest(self, n: int) -> tuple[ProbeResult, ...]:
        """Up to ``n`` most recent results, oldest of the window first."""
        if n <= 0:
            return ()
        return tuple(self._results[-n:])

    def success_rate(self) -> float:
        return success_rate(self._successes, len(self._results))
