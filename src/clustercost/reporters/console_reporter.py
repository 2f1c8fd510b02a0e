# src/clustercost/reporters/console_reporter.py
"""
Reporters that display a snapshot in the console.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.table import Table

from ..models.snapshot import Snapshot
from .base_reporter import BaseReporter

logger = logging.getLogger(__name__)

MIB = 1024 * 1024


class ConsoleReporter(BaseReporter):
    """
    Renders a snapshot as namespace, node and cluster tables using 'rich'.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def report(self, snapshot: Snapshot):
        if not snapshot.namespaces and not snapshot.nodes:
            self.console.print("No data to report.", style="yellow")
            return

        self.console.print(self._namespace_table(snapshot))
        self.console.print(self._node_table(snapshot))
        self.console.print(self._totals_table(snapshot))

    def _namespace_table(self, snapshot: Snapshot) -> Table:
        table = Table(title="Namespaces", header_style="bold magenta", show_lines=True)
        table.add_column("Namespace", style="cyan")
        table.add_column("Environment", style="magenta")
        table.add_column("Pods", justify="right")
        table.add_column("Hourly Cost ($)", style="green", justify="right")
        table.add_column("CPU Req (m)", style="blue", justify="right")
        table.add_column("CPU Used (m)", style="blue", justify="right")
        table.add_column("Mem Req (Mi)", style="blue", justify="right")
        table.add_column("Mem Used (Mi)", style="blue", justify="right")

        # Most expensive first for reading; the snapshot itself stays name-sorted.
        for ns in sorted(snapshot.namespaces, key=lambda n: n.hourly_cost, reverse=True):
            table.add_row(
                ns.namespace,
                ns.environment.value,
                str(ns.pod_count),
                f"{ns.hourly_cost:.4f}",
                str(ns.cpu_request_milli),
                str(ns.cpu_usage_milli),
                f"{ns.memory_request_bytes / MIB:.1f}",
                f"{ns.memory_usage_bytes / MIB:.1f}",
            )
        return table

    def _node_table(self, snapshot: Snapshot) -> Table:
        table = Table(title="Nodes", header_style="bold magenta", show_lines=True)
        table.add_column("Node", style="cyan")
        table.add_column("Instance Type")
        table.add_column("Status")
        table.add_column("Pods", justify="right")
        table.add_column("Hourly Cost ($)", style="green", justify="right")
        table.add_column("CPU %", style="blue", justify="right")
        table.add_column("Mem %", style="blue", justify="right")

        for node in snapshot.nodes:
            status = node.status.value
            if node.is_under_pressure:
                status += " (pressure)"
            table.add_row(
                node.node_name,
                node.instance_type or "-",
                status,
                str(node.pod_count),
                f"{node.hourly_cost:.4f}",
                f"{node.cpu_usage_percent:.1f}",
                f"{node.memory_usage_percent:.1f}",
            )
        return table

    def _totals_table(self, snapshot: Snapshot) -> Table:
        resources = snapshot.resources
        table = Table(title=f"Cluster {resources.cluster_id}", header_style="bold magenta")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Total node cost ($/h)", f"{resources.total_node_hourly_cost:.4f}")
        table.add_row("CPU requested (m)", str(resources.cpu_request_milli_total))
        table.add_row("CPU used (m)", str(resources.cpu_usage_milli_total))
        table.add_row("Memory requested (Mi)", f"{resources.memory_request_bytes_total / MIB:.1f}")
        table.add_row("Memory used (Mi)", f"{resources.memory_usage_bytes_total / MIB:.1f}")
        return table


class JsonReporter(BaseReporter):
    """Prints the snapshot as camelCase JSON, as served by the API."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def report(self, snapshot: Snapshot):
        self.console.print_json(snapshot.model_dump_json(by_alias=True))
