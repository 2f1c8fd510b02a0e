"""ClusterCost agent: Kubernetes cost and utilization snapshots."""

__version__ = "0.1.0"
