# src/clustercost/api/dependencies.py
"""
FastAPI dependency injection functions.

Route handlers receive the snapshot store and cluster identity through
Depends(), so tests can override them without a running agent.
"""

from dataclasses import dataclass

from fastapi import HTTPException, Request

from clustercost.core.store import SnapshotStore
from clustercost.models.snapshot import Snapshot


@dataclass(frozen=True)
class ClusterIdentity:
    cluster_id: str
    cluster_name: str = ""
    cluster_region: str = ""


def get_store(request: Request) -> SnapshotStore:
    """Provides the SnapshotStore attached to the application."""
    return request.app.state.store


def get_cluster_identity(request: Request) -> ClusterIdentity:
    """Provides the identity of the observed cluster."""
    return request.app.state.identity


def require_snapshot(request: Request) -> Snapshot:
    """Provides the latest snapshot or answers 503 while none has been built yet."""
    snapshot, found = get_store(request).latest()
    if not found:
        raise HTTPException(status_code=503, detail="snapshot not ready")
    return snapshot
