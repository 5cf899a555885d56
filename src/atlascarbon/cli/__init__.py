# src/atlascarbon/cli/__init__.py
"""
atlascarbon CLI Package

This package exposes the top-level Typer `app` used by the console
entrypoint and the tests.
"""

import logging

from ..reporters.console_reporter import ConsoleReporter
from .main import app

logger = logging.getLogger(__name__)

__all__ = ["app", "ConsoleReporter"]
