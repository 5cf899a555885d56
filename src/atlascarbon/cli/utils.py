# src/atlascarbon/cli/utils.py
import logging
from typing import List, Optional

import typer

from ..core.exceptions import AtlasCarbonError
from ..models.atlas import Project
from ..reporters.console_reporter import ConsoleReporter

logger = logging.getLogger(__name__)


def find_project(projects: List[Project], ref: str) -> Project:
    """Finds a project by exact ID, then by case-insensitive name."""
    for project in projects:
        if project.id == ref:
            return project
    for project in projects:
        if project.name.lower() == ref.lower():
            return project
    raise AtlasCarbonError(f"Project '{ref}' not found. Available: {', '.join(p.name for p in projects)}")


def prompt_for_project(projects: List[Project]) -> Project:
    """Lists the projects and asks the user to pick one by number."""
    ConsoleReporter().report_projects(projects)
    while True:
        choice = typer.prompt("Which project do you want to use?", type=int)
        if 1 <= choice <= len(projects):
            return projects[choice - 1]
        typer.secho(f"Please enter a number between 1 and {len(projects)}.", fg=typer.colors.YELLOW, err=True)


def select_project(projects: List[Project], ref: Optional[str] = None) -> Project:
    """
    Resolves the project to estimate: the one named by `ref`, the only one
    available, or the one the user picks interactively.
    """
    if not projects:
        raise AtlasCarbonError("No Atlas project is visible with the configured API key.")
    if ref:
        return find_project(projects, ref)
    if len(projects) == 1:
        logger.info("Using the only available project '%s'", projects[0].name)
        return projects[0]
    return prompt_for_project(projects)


def enable_verbose_logging():
    logging.getLogger().setLevel(logging.DEBUG)
    logger.debug("Verbose logging enabled")
