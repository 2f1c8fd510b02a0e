# tests/api/conftest.py
"""
Shared fixtures for API tests.
Uses FastAPI's TestClient against an app wired to an in-memory SnapshotStore.
"""

import pytest
from fastapi.testclient import TestClient

from clustercost.api.app import create_app
from clustercost.api.dependencies import ClusterIdentity
from clustercost.core.store import SnapshotStore
from tests.k8s_factories import create_namespace, create_node, create_pod


@pytest.fixture
def store():
    return SnapshotStore()


@pytest.fixture
def identity():
    return ClusterIdentity(cluster_id="test-cluster", cluster_name="Test", cluster_region="eu-west-1")


@pytest.fixture
def client(store, identity):
    """Creates a TestClient for an app serving the given store."""
    app = create_app(store, identity)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sample_snapshot(builder, now):
    """A snapshot with two namespaces on a single priced node."""
    nodes = [create_node("node-1", labels={"node.kubernetes.io/instance-type": "m5.large"})]
    namespaces = [
        create_namespace("payments", labels={"clustercost.io/environment": "production"}),
        create_namespace("kube-system"),
    ]
    pods = [
        create_pod("pay-1", "payments", cpu="500m", memory="1Gi"),
        create_pod("coredns", "kube-system", cpu="100m", memory="70Mi"),
    ]
    return builder.build(nodes, namespaces, pods, {}, now)
