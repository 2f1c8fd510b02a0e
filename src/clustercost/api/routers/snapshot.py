# src/clustercost/api/routers/snapshot.py
"""
API routes serving the latest snapshot.
"""

import logging

from fastapi import APIRouter, Depends

from clustercost.api.dependencies import require_snapshot
from clustercost.api.schemas import NamespacesResponse, NodesResponse, ResourcesResponse
from clustercost.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/namespaces", response_model=NamespacesResponse)
async def list_namespaces(snapshot: Snapshot = Depends(require_snapshot)):
    """Namespace cost records, sorted by name."""
    return NamespacesResponse(items=snapshot.namespaces, timestamp=snapshot.timestamp)


@router.get("/nodes", response_model=NodesResponse)
async def list_nodes(snapshot: Snapshot = Depends(require_snapshot)):
    """Node cost and utilization records, sorted by name."""
    return NodesResponse(items=snapshot.nodes, timestamp=snapshot.timestamp)


@router.get("/resources", response_model=ResourcesResponse)
async def get_resources(snapshot: Snapshot = Depends(require_snapshot)):
    """Cluster-wide resource and cost totals."""
    return ResourcesResponse(snapshot=snapshot.resources, timestamp=snapshot.timestamp)
