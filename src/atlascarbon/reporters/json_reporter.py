# src/atlascarbon/reporters/json_reporter.py
import sys
from typing import TextIO

from ..models.metrics import FleetEstimate
from .base_reporter import BaseReporter


class JSONReporter(BaseReporter):
    """Writes the fleet estimate as a JSON document."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdout

    def report(self, estimate: FleetEstimate):
        self.stream.write(estimate.model_dump_json(indent=2))
        self.stream.write("\n")
