# src/clustercost/models/snapshot.py
"""
Pydantic models for the snapshot produced on every build cycle.

Records are frozen: a build creates them once and the next build replaces
them wholesale. JSON output uses the camelCase field names expected by the
backend (``clusterId``, ``hourlyCost``, ...).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Environment(str, Enum):
    """Environment assigned to a namespace by the classifier."""

    PRODUCTION = "production"
    NONPROD = "nonprod"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class NodeStatus(str, Enum):
    READY = "Ready"
    NOT_READY = "NotReady"
    UNKNOWN = "Unknown"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class NamespaceCostRecord(_Record):
    """Cost and resource totals for one namespace."""

    cluster_id: str = Field(..., description="Logical cluster identifier.")
    namespace: str = Field(..., description="Namespace name.")
    hourly_cost: float = Field(0.0, description="Share of node hourly cost attributed to the namespace.")
    pod_count: int = Field(0, ge=0, description="Number of running pods.")
    cpu_request_milli: int = Field(0, description="Summed CPU requests in millicores.")
    memory_request_bytes: int = Field(0, description="Summed memory requests in bytes.")
    cpu_usage_milli: int = Field(0, description="Summed CPU usage in millicores.")
    memory_usage_bytes: int = Field(0, description="Summed memory usage in bytes.")
    labels: Dict[str, str] = Field(default_factory=dict, description="Namespace labels.")
    environment: Environment = Field(Environment.NONPROD, description="Classified environment.")


class NodeCostRecord(_Record):
    """Pricing and utilization for one node."""

    cluster_id: str
    node_name: str
    hourly_cost: float = 0.0
    cpu_usage_percent: float = Field(0.0, ge=0.0, le=100.0)
    memory_usage_percent: float = Field(0.0, ge=0.0, le=100.0)
    cpu_allocatable_milli: int = 0
    memory_allocatable_bytes: int = 0
    pod_count: int = Field(0, ge=0)
    status: NodeStatus = NodeStatus.UNKNOWN
    is_under_pressure: bool = False
    instance_type: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    taints: List[str] = Field(default_factory=list)


class ResourceSnapshot(_Record):
    """Cluster-wide totals."""

    cluster_id: str
    cpu_usage_milli_total: int = 0
    cpu_request_milli_total: int = 0
    memory_usage_bytes_total: int = 0
    memory_request_bytes_total: int = 0
    total_node_hourly_cost: float = 0.0


class Snapshot(_Record):
    """
    The unit exchanged between the builder, the store and every consumer.

    ``network`` is an opaque summary supplied by an external collector and
    passed through unchanged.
    """

    timestamp: datetime
    namespaces: List[NamespaceCostRecord] = Field(default_factory=list)
    nodes: List[NodeCostRecord] = Field(default_factory=list)
    resources: ResourceSnapshot
    network: Optional[Dict[str, Any]] = None
