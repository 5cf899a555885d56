# src/atlascarbon/reporters/console_reporter.py
"""
A reporter that displays the fleet estimate in formatted tables in the console.
"""

import logging
from typing import List

from rich.console import Console
from rich.table import Table

from ..models.atlas import Project
from ..models.metrics import FleetEstimate
from .base_reporter import BaseReporter

logger = logging.getLogger(__name__)


class ConsoleReporter(BaseReporter):
    """
    Renders the estimate to the console using the 'rich' library.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def report(self, estimate: FleetEstimate):
        """
        Displays the per-process figures, then the window total and its
        monthly equivalents.
        """
        if estimate.skipped_clusters:
            for cluster in estimate.skipped_clusters:
                self.console.print(
                    f"Cluster {cluster.cluster_name} ({cluster.instance_size_name}) skipped: {cluster.reason}.",
                    style="yellow",
                )

        if not estimate.processes:
            self.console.print("No data to report.", style="yellow")
        else:
            table = Table(
                title=f"Carbon estimate for project {estimate.project_name}",
                header_style="bold magenta",
                show_lines=True,
            )
            table.add_column("Cluster", style="cyan")
            table.add_column("Process", style="cyan")
            table.add_column("Provider / Region", style="cyan")
            table.add_column("Size", style="blue")
            table.add_column("vCPU", style="blue", justify="right")
            table.add_column("Memory (GB)", style="blue", justify="right")
            table.add_column("CPU Util", style="yellow", justify="right")
            table.add_column("Mem Avail (GB)", style="yellow", justify="right")
            table.add_column("PUE", style="dim", justify="right")
            table.add_column("Grid Intensity (g/kWh)", style="dim", justify="right")
            table.add_column("CO2e (g)", style="red", justify="right")

            # Sort by CO2e descending
            sorted_data = sorted(estimate.processes, key=lambda item: item.co2e_grams, reverse=True)

            for item in sorted_data:
                table.add_row(
                    item.cluster_name,
                    item.process_id,
                    f"{item.provider_name} / {item.region_name}",
                    item.instance_size_name,
                    f"{item.cpu_core_count}",
                    f"{item.memory_capacity_gb:.1f}",
                    f"{item.normalized_cpu_utilization:.3f}",
                    f"{item.memory_used_gb:.1f}",
                    f"{item.effective_pue:.3f}",
                    f"{item.effective_carbon_intensity:.2f}",
                    f"{item.co2e_grams:.2f}",
                )

            self.console.print(table)

        if estimate.failed_processes:
            self.console.print("Some processes could not be estimated:", style="bold red")
            for failure in estimate.failed_processes:
                self.console.print(f"  {failure.cluster_name} / {failure.process_id}: {failure.reason}", style="red")

        self.report_summary(estimate)

    def report_summary(self, estimate: FleetEstimate):
        """
        Prints the total for the window and the monthly equivalents.
        """
        eq = estimate.equivalences
        hours = f"{estimate.running_time_hours:g}"
        self.console.print(
            f"\n🏭  Total grams of carbon emitted in the last {hours} hours: {estimate.total_co2e_grams:.2f}",
            style="bold",
        )
        self.console.print("🗓️  Assuming this has been the average over the last 30 days.")
        self.console.print("That is a monthly equivalent to:")
        self.console.print(f" 🏭  {eq.monthly_kg_co2e:.2f} kg of CO2 equivalent")
        self.console.print(f" 🚗  {eq.car_km:.2f} km driven in a car")
        self.console.print(f" 🛩️   {eq.flights_jfk_sfo:.2f} trip from JFK -> SFO")
        self.console.print(f" 🌳  {eq.trees_to_offset:.2f} trees would need to be planted every month to offset")

    def report_projects(self, projects: List[Project]):
        """
        Displays the projects available to the configured API key.
        """
        if not projects:
            self.console.print("No projects found.", style="yellow")
            return

        table = Table(title="Atlas projects", header_style="bold magenta")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("ID", style="white")
        for index, project in enumerate(projects, start=1):
            table.add_row(str(index), project.name, project.id)
        self.console.print(table)
