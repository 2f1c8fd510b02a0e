# src/clustercost/core/builder.py
"""
Turns the cached cluster objects and the latest usage sample into a Snapshot.

The builder is pure: it reads the Kubernetes objects it is given, never
mutates them, and returns freshly created records on every call.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..models.metrics import PodUsage, pod_key
from ..models.snapshot import (
    Environment,
    NamespaceCostRecord,
    NodeCostRecord,
    NodeStatus,
    ResourceSnapshot,
    Snapshot,
)
from ..utils.k8s_utils import resource_milli, resource_value
from .classifier import EnvironmentClassifier
from .pricing import NodePriceLookup, lookup_price

logger = logging.getLogger(__name__)

INSTANCE_TYPE_LABELS = (
    "node.kubernetes.io/instance-type",
    "beta.kubernetes.io/instance-type",
    "node.k8s.amazonaws.com/instance-type",
)
PRESSURE_CONDITIONS = frozenset({"DiskPressure", "MemoryPressure", "PIDPressure"})
TERMINAL_POD_PHASES = frozenset({"Succeeded", "Failed"})


@dataclass
class _NamespaceTotals:
    name: str
    labels: Dict[str, str]
    environment: Environment
    hourly_cost: float = 0.0
    pod_count: int = 0
    cpu_request_milli: int = 0
    memory_request_bytes: int = 0
    cpu_usage_milli: int = 0
    memory_usage_bytes: int = 0


@dataclass
class _NodeTotals:
    name: str
    hourly_cost: float
    cpu_allocatable_milli: int
    memory_allocatable_bytes: int
    status: NodeStatus
    is_under_pressure: bool
    instance_type: str
    labels: Dict[str, str]
    taints: List[str] = field(default_factory=list)
    pod_count: int = 0
    cpu_usage_milli: int = 0
    memory_usage_bytes: int = 0


class SnapshotBuilder:
    """Converts watch-cache state into the public snapshot model."""

    def __init__(
        self,
        cluster_id: str,
        classifier: Optional[EnvironmentClassifier] = None,
        prices: Optional[NodePriceLookup] = None,
    ):
        self.cluster_id = cluster_id
        self.classifier = classifier or EnvironmentClassifier()
        self.prices = prices

    def build(
        self,
        nodes: Iterable[Any],
        namespaces: Iterable[Any],
        pods: Iterable[Any],
        usage: Optional[Mapping[str, PodUsage]],
        generated_at: datetime,
        network: Optional[Dict[str, Any]] = None,
    ) -> Snapshot:
        """
        Assembles a snapshot.

        Args:
            nodes: V1Node objects.
            namespaces: V1Namespace objects.
            pods: V1Pod objects, possibly referencing nodes or namespaces missing
                from the other two lists.
            usage: "<namespace>/<pod>" -> PodUsage; may be empty or None.
            generated_at: Timestamp stamped on the snapshot.
            network: Opaque network summary passed through unchanged.
        """
        usage = usage or {}

        ns_totals: Dict[str, _NamespaceTotals] = {}
        for ns in namespaces:
            name = ns.metadata.name
            labels = dict(ns.metadata.labels or {})
            ns_totals[name] = _NamespaceTotals(
                name=name,
                labels=labels,
                environment=self.classifier.classify(name, labels),
            )

        node_totals: Dict[str, _NodeTotals] = {}
        total_node_cost = 0.0
        for node in nodes:
            totals = self._seed_node(node)
            total_node_cost += totals.hourly_cost
            node_totals[totals.name] = totals

        cluster_cpu_req = cluster_cpu_usage = 0
        cluster_mem_req = cluster_mem_usage = 0

        for pod in pods:
            if skip_pod(pod):
                continue
            namespace = pod.metadata.namespace
            ns = ns_totals.get(namespace)
            if ns is None:
                # The pod's namespace is not in the namespace listing yet.
                ns = _NamespaceTotals(
                    name=namespace,
                    labels={},
                    environment=self.classifier.classify(namespace, None),
                )
                ns_totals[namespace] = ns
            ns.pod_count += 1

            cpu_req, mem_req = sum_pod_requests(pod)
            ns.cpu_request_milli += cpu_req
            ns.memory_request_bytes += mem_req
            cluster_cpu_req += cpu_req
            cluster_mem_req += mem_req

            sample = usage.get(pod_key(namespace, pod.metadata.name))
            cpu_usage = sample.cpu_usage_milli if sample else 0
            mem_usage = sample.memory_usage_bytes if sample else 0
            # No live sample: assume the pod uses at least what it reserved.
            if cpu_usage == 0:
                cpu_usage = cpu_req
            if mem_usage == 0:
                mem_usage = mem_req

            ns.cpu_usage_milli += cpu_usage
            ns.memory_usage_bytes += mem_usage
            cluster_cpu_usage += cpu_usage
            cluster_mem_usage += mem_usage

            node = node_totals.get(pod.spec.node_name)
            if node is None:
                continue
            node.pod_count += 1
            node.cpu_usage_milli += cpu_usage
            node.memory_usage_bytes += mem_usage

            if node.cpu_allocatable_milli > 0 and node.hourly_cost > 0 and cpu_req > 0:
                share = min(1.0, cpu_req / node.cpu_allocatable_milli)
                ns.hourly_cost += share * node.hourly_cost

        namespaces_out = [self._namespace_record(ns) for ns in sorted(ns_totals.values(), key=lambda n: n.name)]
        nodes_out = [self._node_record(node) for node in sorted(node_totals.values(), key=lambda n: n.name)]

        logger.debug(
            "Built snapshot with %d namespaces, %d nodes (cpu req=%dm, usage=%dm)",
            len(namespaces_out),
            len(nodes_out),
            cluster_cpu_req,
            cluster_cpu_usage,
        )

        return Snapshot(
            timestamp=generated_at,
            namespaces=namespaces_out,
            nodes=nodes_out,
            resources=ResourceSnapshot(
                cluster_id=self.cluster_id,
                cpu_usage_milli_total=cluster_cpu_usage,
                cpu_request_milli_total=cluster_cpu_req,
                memory_usage_bytes_total=cluster_mem_usage,
                memory_request_bytes_total=cluster_mem_req,
                total_node_hourly_cost=total_node_cost,
            ),
            network=network,
        )

    def _seed_node(self, node) -> _NodeTotals:
        labels = dict(node.metadata.labels or {})
        status = node.status
        allocatable = status.allocatable if status else None
        conditions = (status.conditions if status else None) or []
        taints = (node.spec.taints if node.spec else None) or []
        instance_type = detect_instance_type(labels)
        return _NodeTotals(
            name=node.metadata.name,
            hourly_cost=lookup_price(self.prices, instance_type),
            cpu_allocatable_milli=resource_milli(allocatable, "cpu"),
            memory_allocatable_bytes=resource_value(allocatable, "memory"),
            status=node_status(conditions),
            is_under_pressure=node_under_pressure(conditions),
            instance_type=instance_type,
            labels=labels,
            taints=format_taints(taints),
        )

    def _namespace_record(self, ns: _NamespaceTotals) -> NamespaceCostRecord:
        return NamespaceCostRecord(
            cluster_id=self.cluster_id,
            namespace=ns.name,
            hourly_cost=ns.hourly_cost,
            pod_count=ns.pod_count,
            cpu_request_milli=ns.cpu_request_milli,
            memory_request_bytes=ns.memory_request_bytes,
            cpu_usage_milli=ns.cpu_usage_milli,
            memory_usage_bytes=ns.memory_usage_bytes,
            labels=ns.labels,
            environment=ns.environment,
        )

    def _node_record(self, node: _NodeTotals) -> NodeCostRecord:
        cpu_percent = mem_percent = 0.0
        if node.cpu_allocatable_milli > 0:
            cpu_percent = clamp_percent(node.cpu_usage_milli / node.cpu_allocatable_milli * 100)
        if node.memory_allocatable_bytes > 0:
            mem_percent = clamp_percent(node.memory_usage_bytes / node.memory_allocatable_bytes * 100)
        return NodeCostRecord(
            cluster_id=self.cluster_id,
            node_name=node.name,
            hourly_cost=node.hourly_cost,
            cpu_usage_percent=cpu_percent,
            memory_usage_percent=mem_percent,
            cpu_allocatable_milli=node.cpu_allocatable_milli,
            memory_allocatable_bytes=node.memory_allocatable_bytes,
            pod_count=node.pod_count,
            status=node.status,
            is_under_pressure=node.is_under_pressure,
            instance_type=node.instance_type,
            labels=node.labels,
            taints=node.taints,
        )


def skip_pod(pod) -> bool:
    """True for pods that must not count: unbound, terminating, or finished."""
    if pod is None or pod.metadata is None or pod.spec is None:
        return True
    if not pod.spec.node_name:
        return True
    if pod.metadata.deletion_timestamp is not None:
        return True
    phase = pod.status.phase if pod.status else None
    return phase in TERMINAL_POD_PHASES


def sum_pod_requests(pod) -> Tuple[int, int]:
    """CPU millicores and memory bytes requested across regular, init and ephemeral containers."""
    cpu_milli = 0
    memory_bytes = 0
    spec = pod.spec
    for containers in (spec.containers, spec.init_containers, spec.ephemeral_containers):
        for container in containers or []:
            requests = container.resources.requests if container.resources else None
            cpu_milli += resource_milli(requests, "cpu")
            memory_bytes += resource_value(requests, "memory")
    return cpu_milli, memory_bytes


def detect_instance_type(labels: Optional[Mapping[str, str]]) -> str:
    if not labels:
        return ""
    for key in INSTANCE_TYPE_LABELS:
        value = labels.get(key)
        if value:
            return value
    return ""


def format_taints(taints) -> List[str]:
    out = []
    for taint in taints:
        if taint.value:
            out.append(f"{taint.key}={taint.value}:{taint.effect}")
        else:
            out.append(f"{taint.key}:{taint.effect}")
    return sorted(out)


def node_status(conditions) -> NodeStatus:
    for condition in conditions:
        if condition.type == "Ready":
            return NodeStatus.READY if condition.status == "True" else NodeStatus.NOT_READY
    return NodeStatus.UNKNOWN


def node_under_pressure(conditions) -> bool:
    return any(c.type in PRESSURE_CONDITIONS and c.status == "True" for c in conditions)


def clamp_percent(value: float) -> float:
    if value < 0:
        return 0.0
    if value > 100:
        return 100.0
    return value
