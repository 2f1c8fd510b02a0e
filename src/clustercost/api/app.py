# src/clustercost/api/app.py
"""
FastAPI application factory for the agent API.

The app only reads from the SnapshotStore; the snapshot loop that fills the
store runs alongside it in the same event loop.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from clustercost import __version__
from clustercost.api.dependencies import ClusterIdentity
from clustercost.api.routers import health, snapshot
from clustercost.core.store import SnapshotStore

logger = logging.getLogger(__name__)

API_PREFIX = "/agent/v1"


def create_app(store: SnapshotStore, identity: Optional[ClusterIdentity] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: The store the snapshot loop publishes into.
        identity: Cluster identity reported by the health endpoint.

    Returns:
        A configured FastAPI application instance.
    """
    app = FastAPI(
        title="ClusterCost Agent API",
        description="Latest cost and utilization snapshot of the cluster.",
        version=__version__,
        docs_url=f"{API_PREFIX}/docs",
        openapi_url=f"{API_PREFIX}/openapi.json",
    )
    app.state.store = store
    app.state.identity = identity or ClusterIdentity(cluster_id="")

    app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
    app.include_router(snapshot.router, prefix=API_PREFIX, tags=["Snapshot"])

    return app
