# src/clustercost/api/routers/health.py
"""
API routes for health and version information.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from clustercost import __version__
from clustercost.api.dependencies import ClusterIdentity, get_cluster_identity, get_store
from clustercost.api.schemas import HealthResponse, VersionResponse
from clustercost.core.store import SnapshotStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    store: SnapshotStore = Depends(get_store),
    identity: ClusterIdentity = Depends(get_cluster_identity),
):
    """Health check; always 200, reports 'initializing' until the first snapshot."""
    snapshot, found = store.latest()
    return HealthResponse(
        status="ok" if found else "initializing",
        cluster_id=identity.cluster_id,
        cluster_name=identity.cluster_name,
        cluster_region=identity.cluster_region,
        version=__version__,
        timestamp=snapshot.timestamp if found else datetime.now(timezone.utc),
    )


@router.get("/version", response_model=VersionResponse)
async def version():
    """Return the current agent version."""
    return VersionResponse(version=__version__)
