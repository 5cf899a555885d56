# src/atlascarbon/cli/projects.py
"""
Implements the `projects` command: lists the Atlas projects visible with the
configured API key.
"""

import asyncio
import logging
from typing import List

import typer

from ..core.exceptions import AtlasCarbonError
from ..core.factory import get_collector
from ..models.atlas import Project
from ..reporters.console_reporter import ConsoleReporter

logger = logging.getLogger(__name__)

app = typer.Typer(help="List the Atlas projects available to the API key.", add_completion=False)


async def fetch_projects() -> List[Project]:
    async with get_collector() as collector:
        return await collector.list_projects()


@app.callback(invoke_without_command=True)
def projects():
    """
    List the Atlas projects available to the configured API key.
    """
    try:
        found = asyncio.run(fetch_projects())
    except AtlasCarbonError as e:
        logger.error("Failed to list projects: %s", e)
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    ConsoleReporter().report_projects(found)
