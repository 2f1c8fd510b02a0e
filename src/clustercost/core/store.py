# src/clustercost/core/store.py
"""
Single-slot holder for the most recent successful snapshot.
"""

import threading
from typing import Optional, Tuple

from ..models.snapshot import Snapshot


class SnapshotStore:
    """
    Keeps only the latest snapshot. Guarded by a threading lock so synchronous
    consumers running outside the event loop can read it safely.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[Snapshot] = None

    def update(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def latest(self) -> Tuple[Optional[Snapshot], bool]:
        """Returns the held snapshot and whether one has ever been stored."""
        with self._lock:
            snapshot = self._snapshot
        return snapshot, snapshot is not None
