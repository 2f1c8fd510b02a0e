# src/clustercost/api/schemas.py
"""
Pydantic response schemas for the agent API.
Keeps API-specific response shapes separate from the snapshot models.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clustercost.models.snapshot import NamespaceCostRecord, NodeCostRecord, ResourceSnapshot


class _Response(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(_Response):
    """Response schema for the health check endpoint."""

    status: str = Field(..., description="'ok' once a snapshot exists, otherwise 'initializing'.")
    cluster_id: str = Field(..., description="Logical cluster identifier.")
    cluster_name: str = Field("", description="Cluster display name.")
    cluster_region: str = Field("", description="Detected or configured cloud region.")
    version: str = Field(..., description="Current agent version.")
    timestamp: datetime = Field(..., description="Snapshot time, or the current time while initializing.")


class VersionResponse(_Response):
    """Response schema for the version endpoint."""

    version: str = Field(..., description="Current agent version.")


class NamespacesResponse(_Response):
    items: List[NamespaceCostRecord]
    timestamp: datetime


class NodesResponse(_Response):
    items: List[NodeCostRecord]
    timestamp: datetime


class ResourcesResponse(_Response):
    snapshot: ResourceSnapshot
    timestamp: datetime
