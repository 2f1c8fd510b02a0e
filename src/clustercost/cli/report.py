# src/clustercost/cli/report.py
"""
One-shot report: sync the cache, build a single snapshot and print it.
"""

import asyncio
import logging
from enum import Enum

import typer
from typing_extensions import Annotated

from ..core.config import Config
from ..core.exceptions import ClusterCostError
from ..models.snapshot import Snapshot
from ..reporters.console_reporter import ConsoleReporter, JsonReporter
from .utils import create_runtime

logger = logging.getLogger(__name__)


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


async def _build_snapshot(settings: Config) -> Snapshot:
    runtime = await create_runtime(settings)
    try:
        return await runtime.agent.build_once()
    finally:
        await runtime.close()


def report(
    output: Annotated[
        OutputFormat,
        typer.Option("--output", "-o", help="Output format."),
    ] = OutputFormat.TABLE,
) -> None:
    """
    Build one snapshot of the cluster and print it.
    """
    settings = Config()
    try:
        snapshot = asyncio.run(_build_snapshot(settings))
    except ClusterCostError as e:
        logger.error(f"Report failed: {e}")
        raise typer.Exit(code=1)

    reporter = JsonReporter() if output == OutputFormat.JSON else ConsoleReporter()
    reporter.report(snapshot)
