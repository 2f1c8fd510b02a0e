# src/clustercost/collectors/cluster_cache.py
"""
Watch-based, in-memory mirror of the cluster's nodes, namespaces and pods.

Each resource kind is followed by its own background task: it lists the
objects once, marks its store as synced, then applies watch events from the
list's resourceVersion. Expired watches are relisted transparently, so the
stores are eventually consistent with the API server but never block readers.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from kubernetes_asyncio import watch
from kubernetes_asyncio.client.rest import ApiException

from ..core.exceptions import CacheNotSyncedError, CacheSyncError

logger = logging.getLogger(__name__)

DEFAULT_WATCH_TIMEOUT_SECONDS = 300
DEFAULT_RETRY_DELAY_SECONDS = 5.0
HTTP_GONE = 410


def name_key(obj) -> str:
    return obj.metadata.name


def namespaced_key(obj) -> str:
    return f"{obj.metadata.namespace}/{obj.metadata.name}"


class ObjectStore:
    """
    Read-only view over one resource kind, updated by its ResourceWatcher.

    Listing before the initial sync raises CacheNotSyncedError so a caller
    never mistakes an empty, unsynced store for an empty cluster.
    """

    def __init__(self, kind: str, key_func: Callable[[Any], str]):
        self.kind = kind
        self._key_func = key_func
        self._items: Dict[str, Any] = {}
        self._synced = False

    @property
    def synced(self) -> bool:
        return self._synced

    def list(self, predicate: Optional[Callable[[Any], bool]] = None) -> List[Any]:
        """Returns a point-in-time copy of the cached objects matching ``predicate``."""
        if not self._synced:
            raise CacheNotSyncedError(f"{self.kind} cache has not synced")
        items = list(self._items.values())
        if predicate is None:
            return items
        return [item for item in items if predicate(item)]

    def get(self, key: str) -> Optional[Any]:
        """Looks up one object by name (or "<namespace>/<name>" for pods)."""
        if not self._synced:
            raise CacheNotSyncedError(f"{self.kind} cache has not synced")
        return self._items.get(key)

    def __len__(self) -> int:
        return len(self._items)

    def replace(self, items: List[Any]) -> None:
        self._items = {self._key_func(item): item for item in items}
        self._synced = True

    def upsert(self, obj) -> None:
        self._items[self._key_func(obj)] = obj

    def delete(self, obj) -> None:
        self._items.pop(self._key_func(obj), None)

    def reset(self) -> None:
        self._items = {}
        self._synced = False


class ResourceExpiredError(Exception):
    """The watch resourceVersion is too old; a fresh list is required."""


class ResourceWatcher:
    """Keeps one ObjectStore in sync with the API server through list + watch."""

    def __init__(
        self,
        store: ObjectStore,
        list_func: Callable,
        watch_timeout_seconds: int = DEFAULT_WATCH_TIMEOUT_SECONDS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
    ):
        self.store = store
        self.list_func = list_func
        self.watch_timeout_seconds = watch_timeout_seconds
        self.retry_delay = retry_delay
        self.synced = asyncio.Event()

    @property
    def kind(self) -> str:
        return self.store.kind

    async def run(self):
        """Lists then watches forever; only cancellation stops it."""
        resource_version = None
        while True:
            try:
                if resource_version is None:
                    resource_version = await self._list()
                resource_version = await self._watch(resource_version)
            except asyncio.CancelledError:
                raise
            except ResourceExpiredError:
                logger.info("Watch on %s expired; relisting.", self.kind)
                resource_version = None
            except Exception as e:
                logger.warning("Watch on %s failed: %s. Retrying in %ss.", self.kind, e, self.retry_delay)
                resource_version = None
                await asyncio.sleep(self.retry_delay)

    async def _list(self) -> Optional[str]:
        result = await self.list_func()
        self.store.replace(result.items or [])
        if not self.synced.is_set():
            logger.info("Initial %s list received (%d objects).", self.kind, len(self.store))
            self.synced.set()
        return result.metadata.resource_version if result.metadata else None

    async def _watch(self, resource_version: Optional[str]) -> Optional[str]:
        """Applies watch events; returns the last seen resourceVersion when the server closes the stream."""
        try:
            async with watch.Watch().stream(
                self.list_func,
                resource_version=resource_version,
                timeout_seconds=self.watch_timeout_seconds,
            ) as stream:
                async for event in stream:
                    resource_version = self._apply(event) or resource_version
        except ApiException as e:
            if e.status == HTTP_GONE:
                raise ResourceExpiredError() from e
            raise
        return resource_version

    def _apply(self, event: Dict[str, Any]) -> Optional[str]:
        event_type = event.get("type")
        obj = event.get("object")
        if event_type == "ERROR":
            raw = event.get("raw_object") or {}
            if raw.get("code") == HTTP_GONE:
                raise ResourceExpiredError()
            raise RuntimeError(f"watch error event: {raw.get('message', raw)}")

        if event_type in ("ADDED", "MODIFIED"):
            self.store.upsert(obj)
        elif event_type == "DELETED":
            self.store.delete(obj)
        logger.debug("%s %s event", self.kind, event_type)

        metadata = getattr(obj, "metadata", None)
        return metadata.resource_version if metadata is not None else None


class ClusterCache:
    """
    Mirrors nodes, namespaces and pods for the snapshot loop.

    ``start()`` must succeed once before the ``nodes``, ``namespaces`` and
    ``pods`` views can be listed.
    """

    def __init__(
        self,
        core_api,
        watch_timeout_seconds: int = DEFAULT_WATCH_TIMEOUT_SECONDS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
    ):
        self._nodes = ObjectStore("nodes", name_key)
        self._namespaces = ObjectStore("namespaces", name_key)
        self._pods = ObjectStore("pods", namespaced_key)
        self._watchers = [
            ResourceWatcher(self._nodes, core_api.list_node, watch_timeout_seconds, retry_delay),
            ResourceWatcher(self._namespaces, core_api.list_namespace, watch_timeout_seconds, retry_delay),
            ResourceWatcher(self._pods, core_api.list_pod_for_all_namespaces, watch_timeout_seconds, retry_delay),
        ]
        self._tasks: List[asyncio.Task] = []
        self._stopped = False

    @property
    def nodes(self) -> ObjectStore:
        return self._nodes

    @property
    def namespaces(self) -> ObjectStore:
        return self._namespaces

    @property
    def pods(self) -> ObjectStore:
        return self._pods

    async def start(self, timeout: Optional[float] = None) -> None:
        """
        Starts the watches and waits until every kind has received its initial list.

        Raises:
            CacheSyncError: if the cache was stopped, already started, the timeout
                is not positive, or the initial sync did not finish in time.
        """
        if self._stopped:
            raise CacheSyncError("cache was stopped before start")
        if self._tasks:
            raise CacheSyncError("cache already started")
        if timeout is not None and timeout <= 0:
            raise CacheSyncError("timed out waiting for cache sync")

        logger.info("Starting cluster cache watches...")
        self._tasks = [asyncio.create_task(w.run(), name=f"watch-{w.kind}") for w in self._watchers]

        try:
            await asyncio.wait_for(asyncio.gather(*(w.synced.wait() for w in self._watchers)), timeout)
        except asyncio.TimeoutError:
            pending = [w.kind for w in self._watchers if not w.synced.is_set()]
            await self.stop()
            raise CacheSyncError(f"timed out waiting for cache sync ({', '.join(pending)})") from None
        except asyncio.CancelledError:
            await self.stop()
            raise

        logger.info(
            "Cluster cache synced: %d nodes, %d namespaces, %d pods.",
            len(self._nodes),
            len(self._namespaces),
            len(self._pods),
        )

    async def stop(self) -> None:
        """Cancels the watches; the views become unreadable again."""
        self._stopped = True
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for store in (self._nodes, self._namespaces, self._pods):
            store.reset()
        logger.debug("Cluster cache stopped.")
