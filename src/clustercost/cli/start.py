# src/clustercost/cli/start.py
"""
Start command for the ClusterCost CLI.

Syncs the cluster cache, schedules the snapshot loop and serves the API
until the process receives SIGINT or SIGTERM.
"""

import asyncio
import logging
import traceback
from typing import Optional

import typer
import uvicorn
from typing_extensions import Annotated

from ..api.app import create_app
from ..api.dependencies import ClusterIdentity
from ..core.config import MIN_SCRAPE_INTERVAL_SECONDS, Config
from ..core.exceptions import ClusterCostError
from ..core.scheduler import Scheduler, parse_interval
from .utils import create_runtime

logger = logging.getLogger(__name__)

STOP_GRACE_PERIOD_SECONDS = 20.0


def resolve_interval(settings: Config, interval: Optional[str]) -> int:
    """Seconds between snapshots: the --interval flag wins over configuration."""
    if not interval:
        return settings.SCRAPE_INTERVAL_SECONDS
    seconds = parse_interval(interval)
    if seconds < MIN_SCRAPE_INTERVAL_SECONDS:
        logger.warning("Interval %s is below the minimum; using %ss.", interval, MIN_SCRAPE_INTERVAL_SECONDS)
        return MIN_SCRAPE_INTERVAL_SECONDS
    return seconds


async def _async_start(settings: Config, interval_seconds: int, host: str, port: int) -> None:
    runtime = await create_runtime(settings)
    scheduler = Scheduler()
    try:
        runtime.agent.schedule(scheduler, interval_seconds)

        app = create_app(
            runtime.store,
            ClusterIdentity(
                cluster_id=runtime.cluster_id,
                cluster_name=runtime.cluster_name,
                cluster_region=runtime.cluster_region,
            ),
        )
        server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level=settings.LOG_LEVEL.lower()))
        logger.info("Serving snapshots on %s:%s", host, port)
        # uvicorn installs the SIGINT/SIGTERM handlers and returns on shutdown.
        await server.serve()
    finally:
        logger.info("Shutting down ClusterCost agent...")
        await scheduler.stop(grace_period=STOP_GRACE_PERIOD_SECONDS)
        await runtime.close()


def start(
    interval: Annotated[
        Optional[str],
        typer.Option("--interval", help="Time between snapshots (e.g. '30s', '1m'). Minimum 5s."),
    ] = None,
    host: Annotated[Optional[str], typer.Option("--host", help="API listen host.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", help="API listen port.")] = None,
) -> None:
    """
    Sync the cluster cache, start the snapshot loop and serve the API.
    """
    settings = Config()
    logger.info("Initializing ClusterCost agent for cluster '%s'...", settings.CLUSTER_ID)
    try:
        interval_seconds = resolve_interval(settings, interval)
        asyncio.run(
            _async_start(
                settings,
                interval_seconds,
                host or settings.API_HOST,
                port or settings.API_PORT,
            )
        )
    except KeyboardInterrupt:
        logger.info("Shutting down ClusterCost agent.")
        raise typer.Exit()
    except (ClusterCostError, ValueError) as e:
        logger.error(f"Startup failed: {e}")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"An unexpected error occurred: {e}")
        logger.error("Startup failed: %s", traceback.format_exc())
        raise typer.Exit(code=1)
