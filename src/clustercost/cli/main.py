# src/clustercost/cli/main.py
"""
Typer application exposing the start, report and version commands.
"""

import logging

import typer

from .. import __version__
from ..core.config import config
from . import report, start

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)

app = typer.Typer(
    name="clustercost",
    help="Observe a Kubernetes cluster and serve cost and utilization snapshots.",
    add_completion=False,
)


def _print_version():
    typer.echo(f"ClusterCost agent version: {__version__}")


def _version_option(value: bool):
    if value:
        _print_version()
        raise typer.Exit()


@app.callback()
def main(
    show_version: bool = typer.Option(
        None,
        "--version",
        callback=_version_option,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """Kubernetes cost and utilization agent."""


app.command(name="start")(start.start)
app.command(name="report")(report.report)
app.command(name="version", help="Show the version of the agent.")(_print_version)
