from .cluster_cache import ClusterCache, ObjectStore
from .metrics_collector import MetricsCollector, MetricsServerSource, PodMetricsSource

__all__ = [
    "ClusterCache",
    "ObjectStore",
    "MetricsCollector",
    "MetricsServerSource",
    "PodMetricsSource",
]
