# src/clustercost/cli/utils.py
"""
Shared wiring for CLI commands: connects to the cluster, syncs the cache
and assembles the snapshot pipeline.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from kubernetes_asyncio import client

from ..collectors.cluster_cache import ClusterCache
from ..collectors.metrics_collector import MetricsCollector, MetricsServerSource
from ..core.agent import SnapshotAgent
from ..core.builder import SnapshotBuilder
from ..core.classifier import ClassifierConfig, EnvironmentClassifier
from ..core.config import Config, resolve_cluster_identity
from ..core.exceptions import ConfigurationError
from ..core.k8s_client import get_api_client
from ..core.pricing import NodePriceLookup
from ..core.store import SnapshotStore
from ..utils.k8s_utils import detect_cluster_name, detect_cluster_region

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Everything a command needs once the cluster cache has synced."""

    api_client: client.ApiClient
    cache: ClusterCache
    agent: SnapshotAgent
    store: SnapshotStore
    cluster_id: str
    cluster_name: str
    cluster_region: str

    async def close(self):
        await self.cache.stop()
        await self.agent.metrics_collector.close()
        await self.api_client.close()
        logger.debug("Runtime closed.")


def build_agent(
    settings: Config,
    cache: ClusterCache,
    metrics_collector: MetricsCollector,
    cluster_id: Optional[str] = None,
) -> SnapshotAgent:
    """Assembles classifier, pricing, builder and store around a synced cache."""
    classifier = EnvironmentClassifier(ClassifierConfig.from_settings(settings))
    prices = NodePriceLookup(settings.INSTANCE_PRICES, settings.DEFAULT_NODE_PRICE)
    logger.info("Loaded %d instance prices (default %.4f/h).", len(prices), settings.DEFAULT_NODE_PRICE)
    builder = SnapshotBuilder(cluster_id or settings.CLUSTER_ID, classifier, prices)
    return SnapshotAgent(
        cache=cache,
        metrics_collector=metrics_collector,
        builder=builder,
        store=SnapshotStore(),
        metrics_timeout=settings.METRICS_TIMEOUT,
    )


async def create_runtime(settings: Config, api_client: Optional[client.ApiClient] = None) -> Runtime:
    """
    Connects to the cluster and waits for the initial cache sync.

    Raises:
        ConfigurationError: if no Kubernetes configuration could be loaded.
        CacheSyncError: if the cache did not sync within CACHE_SYNC_TIMEOUT.
    """
    settings.validate_instance()
    api_client = api_client or await get_api_client(settings.KUBECONFIG)
    if api_client is None:
        raise ConfigurationError("no Kubernetes configuration could be loaded")

    cache = ClusterCache(client.CoreV1Api(api_client))
    try:
        await cache.start(timeout=settings.CACHE_SYNC_TIMEOUT)
    except BaseException:
        await api_client.close()
        raise

    nodes = cache.nodes.list()
    cluster_name, cluster_id = resolve_cluster_identity(
        settings.CLUSTER_NAME, settings.CLUSTER_ID, detect_cluster_name(nodes)
    )
    logger.info("Observing cluster '%s' (id %s).", cluster_name, cluster_id)

    region = detect_cluster_region(nodes)
    if region:
        logger.info("Detected cluster region: %s", region)
    else:
        region = settings.REGION
        logger.warning("Could not detect cluster region; using configured region %s.", region)

    metrics_collector = MetricsCollector(MetricsServerSource(api_client))
    agent = build_agent(settings, cache, metrics_collector, cluster_id)
    return Runtime(
        api_client=api_client,
        cache=cache,
        agent=agent,
        store=agent.store,
        cluster_id=cluster_id,
        cluster_name=cluster_name,
        cluster_region=region,
    )
