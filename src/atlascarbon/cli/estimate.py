# src/atlascarbon/cli/estimate.py
"""
Implements the `estimate` command for the atlascarbon CLI.
"""

import asyncio
import logging
from typing import Optional

import typer
from typing_extensions import Annotated

from ..core.exceptions import AtlasCarbonError
from ..core.factory import get_collector, get_processor
from ..models.metrics import FleetEstimate
from ..reporters.console_reporter import ConsoleReporter
from ..reporters.json_reporter import JSONReporter
from .utils import enable_verbose_logging, select_project

logger = logging.getLogger(__name__)

app = typer.Typer(help="Estimate the carbon footprint of an Atlas project.", add_completion=False)


async def run_estimate(project_ref: Optional[str] = None) -> FleetEstimate:
    """Selects the project and runs the estimation pipeline against Atlas."""
    async with get_collector() as collector:
        projects = await collector.list_projects()
        project = select_project(projects, project_ref)
        processor = get_processor(collector)
        return await processor.run(project)


@app.callback(invoke_without_command=True)
def estimate(
    project: Annotated[
        Optional[str],
        typer.Option("--project", "-p", help="Project name or ID. Prompts when several projects exist."),
    ] = None,
    output_format: Annotated[
        Optional[str],
        typer.Option(
            "--output",
            help="Output format. Only 'json' is supported; prints the estimate as JSON instead of tables.",
            case_sensitive=False,
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Estimate the carbon emitted by every process of an Atlas project over the
    configured window, and its monthly equivalents.
    """
    if verbose:
        enable_verbose_logging()

    if output_format and output_format.lower() != "json":
        raise typer.BadParameter(f"Invalid output format '{output_format}'. Use 'json'.", param_hint="--output")

    try:
        result = asyncio.run(run_estimate(project))
    except AtlasCarbonError as e:
        logger.error("Carbon estimate failed: %s", e)
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    reporter = JSONReporter() if output_format else ConsoleReporter()
    reporter.report(result)
