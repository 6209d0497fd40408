"""Console script for transport_groups."""

from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from transport_groups.exceptions import TransportOptimizationError
from transport_groups.export import ResultExportManager
from transport_groups.logging import setup_logger_from_config
from transport_groups.models import OptimizationResult
from transport_groups.optimisation.config import OptimizationConfigManager
from transport_groups.optimisation.preprocessing import parse_datetime
from transport_groups.optimisation.runners import TransportGroupOptimizer

app = typer.Typer(help="Group event attendees into vehicles.")
console = Console()


@app.callback()
def main():
    """Transport group optimization tools."""


def load_input(path: Path) -> dict:
    """Read a YAML or JSON document with ``passengers`` and ``vehicles`` lists."""
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Input must be a mapping with 'passengers' and 'vehicles', got {type(data).__name__}")
    for key in ("passengers", "vehicles"):
        if not isinstance(data.get(key, []), list):
            raise ValueError(f"'{key}' must be a list")
    return data


def print_result(result: OptimizationResult):
    table = Table(title="Transport groups")
    table.add_column("Group")
    table.add_column("Vehicle")
    table.add_column("Passengers", justify="right")
    table.add_column("Utilization", justify="right")
    table.add_column("Duration (min)", justify="right")
    table.add_column("Cost", justify="right")
    for group in result.groups:
        table.add_row(
            group.id,
            group.vehicle_name,
            f"{group.occupancy}/{group.capacity}",
            f"{group.capacity_utilization:.0f}%",
            f"{group.estimated_duration:.0f}",
            f"{group.estimated_cost:.2f}",
        )
    console.print(table)

    m = result.metrics
    console.print(
        f"📊 Score [bold]{m.optimization_score:.1f}[/bold] | "
        f"utilization {m.average_capacity_utilization:.1f}% | "
        f"coverage {m.special_requirements_coverage:.1f}% | "
        f"satisfaction {m.satisfaction_score:.1f}% | "
        f"unassigned {m.unassigned_count}"
    )
    for warning in result.warnings:
        console.print(f"[yellow]⚠️  {escape(warning)}[/yellow]")
    for recommendation in result.recommendations:
        console.print(f"💡 {recommendation}")


@app.command()
def optimize(
    input_path: Path = typer.Argument(..., help="YAML/JSON file with 'passengers' and 'vehicles'"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Optimization config YAML"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the result as JSON"),
    csv_path: Path | None = typer.Option(None, "--csv", help="Write per-passenger assignments as CSV"),
    now: str | None = typer.Option(None, "--now", help="Reference time (ISO-8601) for vehicle availability"),
):
    """Optimize transport groups for one event."""
    try:
        config_manager = (
            OptimizationConfigManager(config_path=str(config))
            if config is not None
            else OptimizationConfigManager.from_defaults()
        )
        setup_logger_from_config(config_manager.get_logging_config())

        data = load_input(input_path)
        reference_time = parse_datetime(now, "now") if now else None

        optimizer = TransportGroupOptimizer(config_manager)
        result = optimizer.optimize(
            data.get("passengers", []),
            data.get("vehicles", []),
            options=data.get("options"),
            now=reference_time,
        )
    except (TransportOptimizationError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    print_result(result)

    exporter = ResultExportManager(result)
    if output is not None:
        path = exporter.export_json(str(output))
        console.print(f"✅ Result written to {path}")
    if csv_path is not None:
        path = exporter.export_assignments_csv(str(csv_path))
        console.print(f"✅ Assignments written to {path}")


@app.command("show-config")
def show_config(config: Path | None = typer.Argument(None, help="Optimization config YAML")):
    """Print the resolved configuration, including defaults."""
    try:
        config_manager = (
            OptimizationConfigManager(config_path=str(config))
            if config is not None
            else OptimizationConfigManager.from_defaults()
        )
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    console.print(yaml.safe_dump(config_manager.to_dict(), sort_keys=False), markup=False, highlight=False)


if __name__ == "__main__":
    app()
