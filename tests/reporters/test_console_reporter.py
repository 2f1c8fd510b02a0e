# tests/reporters/test_console_reporter.py
"""
Unit tests for the ConsoleReporter and JsonReporter classes.
"""

import io
import json

import pytest
from rich.console import Console

from clustercost.reporters.console_reporter import ConsoleReporter, JsonReporter
from tests.k8s_factories import create_namespace, create_node, create_pod


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def snapshot(builder, now):
    nodes = [
        create_node("node-1", labels={"node.kubernetes.io/instance-type": "m5.large"}),
        create_node("node-2", ready="False"),
    ]
    namespaces = [create_namespace("cheap"), create_namespace("expensive")]
    pods = [
        create_pod("a", "cheap", cpu="100m"),
        create_pod("b", "expensive", cpu="1500m"),
    ]
    return builder.build(nodes, namespaces, pods, {}, now)


def test_console_reporter_prints_three_tables(mocker, snapshot):
    mock_console = mocker.MagicMock()
    reporter = ConsoleReporter(console=mock_console)

    reporter.report(snapshot)

    titles = [c.args[0].title for c in mock_console.print.call_args_list]
    assert titles == ["Namespaces", "Nodes", "Cluster test-cluster"]


def test_console_reporter_orders_namespaces_by_cost(console, snapshot):
    ConsoleReporter(console=console).report(snapshot)

    output = console.file.getvalue()
    assert output.index("expensive") < output.index("cheap")
    assert "0.0750" in output
    assert "m5.large" in output
    assert "NotReady" in output


def test_console_reporter_no_data(console, builder, now):
    ConsoleReporter(console=console).report(builder.build([], [], [], {}, now))

    assert "No data to report." in console.file.getvalue()


def test_json_reporter_prints_camel_case(console, snapshot):
    JsonReporter(console=console).report(snapshot)

    data = json.loads(console.file.getvalue())
    assert data["resources"]["clusterId"] == "test-cluster"
    assert [ns["namespace"] for ns in data["namespaces"]] == ["cheap", "expensive"]
    assert data["nodes"][1]["status"] == "NotReady"
