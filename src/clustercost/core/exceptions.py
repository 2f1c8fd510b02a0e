from typing import Dict, Optional


class ClusterCostError(Exception):
    """Base exception for ClusterCost."""

    pass


class ConfigurationError(ClusterCostError):
    """Raised when a configuration value is invalid."""

    pass


class CacheError(ClusterCostError):
    """Base exception for cluster object cache errors."""

    pass


class CacheSyncError(CacheError):
    """Raised when the cluster cache cannot complete its initial sync."""

    pass


class CacheNotSyncedError(CacheError):
    """Raised when the cluster cache is read before it has synced."""

    pass


class MetricsCollectionError(ClusterCostError):
    """
    Raised when pod usage metrics could not be refreshed.

    ``usage`` holds the last successful reading when one exists, so callers
    can keep working on stale data while still reporting the failure.
    """

    def __init__(self, message: str, usage: Optional[Dict] = None):
        super().__init__(message)
        self.usage = usage


class MetricsNotConfiguredError(MetricsCollectionError):
    """Raised when no usage metrics source is configured."""

    pass


class SnapshotBuildError(ClusterCostError):
    """Raised when a snapshot iteration has to be abandoned."""

    pass
