# src/atlascarbon/cli/main.py
"""
Entry point of the `atlascarbon` console script.

Logging is configured here once, from LOG_LEVEL; the `estimate` and
`projects` sub-apps only add their own loggers.
"""

import logging
from typing import Optional

import typer
from typing_extensions import Annotated

from .. import __version__
from ..core.config import config
from . import estimate, projects

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)

app = typer.Typer(
    name="atlascarbon",
    help="Estimate the carbon footprint of your MongoDB Atlas database fleet.",
    add_completion=False,
)
app.add_typer(estimate.app, name="estimate")
app.add_typer(projects.app, name="projects")


def _echo_version(value: bool = True):
    if value:
        typer.echo(f"atlascarbon version: {__version__}")
        raise typer.Exit()


@app.command()
def version():
    """Show the version of atlascarbon."""
    _echo_version()


@app.callback()
def main(
    show_version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=_echo_version, is_eager=True, help="Show the version and exit."),
    ] = None,
):
    """Carbon estimates for the processes of a MongoDB Atlas project."""
