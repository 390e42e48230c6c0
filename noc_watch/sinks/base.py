from __future__ import annotations

from abc import ABC, abstractmethod

from noc_watch.monitor.models import Snapshot


class SnapshotSink(ABC):
    """Consumer of emitted snapshots.

    ``accept`` runs on the scheduler loop: implementations must return
    promptly (store or enqueue the snapshot, do slow work elsewhere).
    Exceptions are reported by the scheduler and never stop it.
    """

    name: str = "sink"

    @abstractmethod
    def accept(self, snapshot: Snapshot) -> None:
        raise NotImplementedError
