# tests/core/test_store.py

from clustercost.core.store import SnapshotStore
from clustercost.models.snapshot import ResourceSnapshot, Snapshot


def _snapshot(now, cluster_id="c"):
    return Snapshot(timestamp=now, namespaces=[], nodes=[], resources=ResourceSnapshot(cluster_id=cluster_id))


def test_empty_store_reports_not_found():
    snapshot, found = SnapshotStore().latest()

    assert snapshot is None
    assert found is False


def test_latest_returns_last_update(now):
    store = SnapshotStore()
    first, second = _snapshot(now, "a"), _snapshot(now, "b")

    store.update(first)
    store.update(second)

    snapshot, found = store.latest()
    assert found is True
    assert snapshot is second
