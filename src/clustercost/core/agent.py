# src/clustercost/core/agent.py
"""
One iteration of the snapshot loop: read the cache, collect usage, build,
publish. The Scheduler drives it on an interval.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..collectors.cluster_cache import ClusterCache
from ..collectors.metrics_collector import MetricsCollector
from ..models.snapshot import Snapshot
from .builder import SnapshotBuilder
from .exceptions import MetricsCollectionError, SnapshotBuildError
from .scheduler import Scheduler
from .store import SnapshotStore

logger = logging.getLogger(__name__)

DEFAULT_METRICS_TIMEOUT_SECONDS = 15.0


class SnapshotAgent:
    """Builds and publishes a fresh snapshot on every call to ``build_once``."""

    def __init__(
        self,
        cache: ClusterCache,
        metrics_collector: MetricsCollector,
        builder: SnapshotBuilder,
        store: SnapshotStore,
        metrics_timeout: float = DEFAULT_METRICS_TIMEOUT_SECONDS,
        network_provider: Optional[Callable[[], Optional[Dict[str, Any]]]] = None,
    ):
        self.cache = cache
        self.metrics_collector = metrics_collector
        self.builder = builder
        self.store = store
        self.metrics_timeout = metrics_timeout
        self.network_provider = network_provider

    async def build_once(self) -> Snapshot:
        """
        Runs one iteration and publishes the result.

        Raises:
            SnapshotBuildError: if any cache listing failed; nothing is published
                and the store keeps serving the previous snapshot.
        """
        try:
            nodes = self.cache.nodes.list()
            namespaces = self.cache.namespaces.list()
            pods = self.cache.pods.list()
        except Exception as e:
            raise SnapshotBuildError(f"list cluster objects: {e}") from e

        try:
            usage = await self.metrics_collector.collect_pod_metrics(timeout=self.metrics_timeout)
        except MetricsCollectionError as e:
            logger.warning("Using cached pod metrics: %s", e)
            usage = e.usage or {}

        network = self.network_provider() if self.network_provider else None
        # Runs in a worker thread; the builder only reads its inputs.
        snapshot = await asyncio.to_thread(
            self.builder.build, nodes, namespaces, pods, usage, datetime.now(timezone.utc), network=network
        )
        self.store.update(snapshot)
        logger.info(
            "Snapshot refreshed: %d namespaces, %d nodes.",
            len(snapshot.namespaces),
            len(snapshot.nodes),
        )
        return snapshot

    async def refresh(self) -> None:
        """Scheduler job: failures are logged and retried on the next tick."""
        try:
            await self.build_once()
        except SnapshotBuildError as e:
            logger.warning("Snapshot refresh failed: %s", e)

    def schedule(self, scheduler: Scheduler, interval_seconds: float):
        """Registers the refresh loop; the first build runs immediately."""
        return scheduler.add_job(self.refresh, interval_seconds)
