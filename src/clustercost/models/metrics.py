# src/clustercost/models/metrics.py
"""
Usage data points collected from the metrics.k8s.io API.
"""

from pydantic import BaseModel, ConfigDict, Field


class PodUsage(BaseModel):
    """
    Live resource consumption of a single pod, summed over its containers.
    Keyed by "<namespace>/<pod>" in the collector's result map.
    """

    model_config = ConfigDict(frozen=True)

    cpu_usage_milli: int = Field(0, description="CPU usage in millicores.")
    memory_usage_bytes: int = Field(0, description="Memory usage in bytes.")


def pod_key(namespace: str, name: str) -> str:
    """Returns the "<namespace>/<pod>" key used to join usage with pods."""
    return f"{namespace}/{name}"
