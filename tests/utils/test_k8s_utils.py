# tests/utils/test_k8s_utils.py

from decimal import Decimal

import pytest

from clustercost.utils.k8s_utils import (
    detect_cluster_name,
    detect_cluster_region,
    int_value,
    milli_value,
    parse_quantity,
    region_from_node,
    region_from_provider_id,
    region_from_zone,
    resource_milli,
    resource_value,
)
from tests.k8s_factories import create_node


@pytest.mark.parametrize(
    "quantity,expected",
    [
        ("500m", Decimal("0.5")),
        ("2", Decimal(2)),
        ("1.5", Decimal("1.5")),
        ("4Gi", Decimal(4 * 1024**3)),
        ("128Mi", Decimal(128 * 1024**2)),
        ("1k", Decimal(1000)),
        ("1M", Decimal(1000**2)),
        ("250000000n", Decimal("0.25")),
        ("1e3", Decimal(1000)),
        (3, Decimal(3)),
        ("", Decimal(0)),
        (None, Decimal(0)),
        ("garbage", Decimal(0)),
    ],
)
def test_parse_quantity(quantity, expected):
    assert parse_quantity(quantity) == expected


def test_values_round_up():
    assert milli_value("1n") == 1
    assert milli_value("0.0001") == 1
    assert milli_value("2") == 2000
    assert int_value("1.2") == 2
    assert int_value("1Ki") == 1024


def test_resource_lookups_default_to_zero():
    assert resource_milli(None, "cpu") == 0
    assert resource_milli({"memory": "1Gi"}, "cpu") == 0
    assert resource_value({}, "memory") == 0
    assert resource_value({"memory": "1Mi"}, "memory") == 1024 * 1024


@pytest.mark.parametrize(
    "zone,expected",
    [("us-east-1a", "us-east-1"), ("europe-west1-b", "europe-west1"), ("eastus2", ""), ("", "")],
)
def test_region_from_zone(zone, expected):
    assert region_from_zone(zone) == expected


@pytest.mark.parametrize(
    "provider_id,expected",
    [
        ("aws:///us-east-1a/i-0abc", "us-east-1"),
        ("gce://project/europe-west1-b/instance-1", "europe-west1"),
        ("azure:///subscriptions/x", ""),
        ("aws://", ""),
        (None, ""),
    ],
)
def test_region_from_provider_id(provider_id, expected):
    assert region_from_provider_id(provider_id) == expected


def test_region_label_wins_over_zone():
    labels = {
        "topology.kubernetes.io/region": "eu-west-1",
        "topology.kubernetes.io/zone": "us-east-1a",
    }
    assert region_from_node(labels) == "eu-west-1"


def test_region_from_beta_zone_label():
    assert region_from_node({"failure-domain.beta.kubernetes.io/zone": "ap-south-1b"}) == "ap-south-1"


def test_detect_cluster_region_uses_first_resolvable_node():
    nodes = [
        create_node("bare"),
        create_node("aws", provider_id="aws:///eu-central-1c/i-123"),
        create_node("labeled", labels={"topology.kubernetes.io/region": "us-west-2"}),
    ]

    assert detect_cluster_region(nodes) == "eu-central-1"


def test_detect_cluster_region_unknown():
    assert detect_cluster_region([create_node("bare")]) == ""
    assert detect_cluster_region([]) == ""


def test_detect_cluster_name_from_node_labels():
    nodes = [
        create_node("bare"),
        create_node("capi", labels={"cluster.x-k8s.io/cluster-name": "workload-1"}),
    ]

    assert detect_cluster_name(nodes) == "workload-1"
    assert detect_cluster_name([create_node("eks", labels={"alpha.eksctl.io/cluster-name": "shop"})]) == "shop"
    assert detect_cluster_name([create_node("bare")]) == ""
