# src/clustercost/collectors/metrics_collector.py
"""
Collects live per-pod CPU and memory usage from the metrics.k8s.io API.

The collector remembers its last successful reading. When a refresh fails it
raises MetricsCollectionError carrying that reading, so the snapshot loop can
keep building on slightly stale usage while still logging the failure.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from kubernetes_asyncio import client

from ..core.exceptions import MetricsCollectionError, MetricsNotConfiguredError
from ..models.metrics import PodUsage, pod_key
from ..utils.k8s_utils import resource_milli, resource_value

logger = logging.getLogger(__name__)

METRICS_GROUP = "metrics.k8s.io"
METRICS_VERSION = "v1beta1"
METRICS_PLURAL = "pods"


class PodMetricsSource(ABC):
    """A source of metrics.k8s.io PodMetrics items."""

    @abstractmethod
    async def list_pod_metrics(self) -> List[Dict[str, Any]]:
        """Returns raw PodMetrics objects for every namespace."""
        pass

    async def close(self):
        pass


class MetricsServerSource(PodMetricsSource):
    """Reads PodMetrics through the aggregated metrics-server API."""

    def __init__(self, api_client: client.ApiClient):
        self._api = client.CustomObjectsApi(api_client)

    async def list_pod_metrics(self) -> List[Dict[str, Any]]:
        result = await self._api.list_cluster_custom_object(METRICS_GROUP, METRICS_VERSION, METRICS_PLURAL)
        return result.get("items", []) if result else []


class MetricsCollector:
    """
    Returns usage keyed by "<namespace>/<pod>", falling back to the previous
    successful reading when the source fails.
    """

    def __init__(self, source: Optional[PodMetricsSource] = None):
        self.source = source
        self._lock = asyncio.Lock()
        self._last: Optional[Dict[str, PodUsage]] = None
        if source is None:
            logger.warning("No pod metrics source configured; usage will fall back to requests.")

    async def collect_pod_metrics(self, timeout: Optional[float] = None) -> Dict[str, PodUsage]:
        """
        Queries the source once.

        Raises:
            MetricsNotConfiguredError: if no source is configured.
            MetricsCollectionError: if the query failed or timed out; ``usage``
                holds the last good reading, or None if there never was one.
        """
        if self.source is None:
            raise MetricsNotConfiguredError("metrics client not configured")

        try:
            items = await asyncio.wait_for(self.source.list_pod_metrics(), timeout)
        except asyncio.TimeoutError:
            raise MetricsCollectionError(
                f"list pod metrics: timed out after {timeout}s", usage=await self.last()
            ) from None
        except Exception as e:
            raise MetricsCollectionError(f"list pod metrics: {e}", usage=await self.last()) from e

        result = aggregate_pod_usage(items)
        async with self._lock:
            self._last = result
        logger.debug("Collected usage for %d pods.", len(result))
        return result

    async def last(self) -> Optional[Dict[str, PodUsage]]:
        """The last successful reading, or None."""
        async with self._lock:
            return self._last

    async def close(self):
        if self.source is not None:
            await self.source.close()


def aggregate_pod_usage(items: List[Dict[str, Any]]) -> Dict[str, PodUsage]:
    """Sums container usage per pod."""
    result = {}
    for item in items or []:
        metadata = item.get("metadata") or {}
        cpu_milli = 0
        memory_bytes = 0
        for container in item.get("containers") or []:
            usage = container.get("usage") or {}
            cpu_milli += resource_milli(usage, "cpu")
            memory_bytes += resource_value(usage, "memory")
        key = pod_key(metadata.get("namespace", ""), metadata.get("name", ""))
        result[key] = PodUsage(cpu_usage_milli=cpu_milli, memory_usage_bytes=memory_bytes)
    return result
