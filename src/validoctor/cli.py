"""CLI interface for validoctor using Typer framework."""

import importlib
import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from validoctor import __description__, __version__
from validoctor.composite import CHECK_TYPES
from validoctor.config import LogLevel, load_config
from validoctor.doctor import Validoctor
from validoctor.exceptions import ConfigurationError, DiagnosisError
from validoctor.models import Diagnosis, Severity

app = typer.Typer(
    name="validoctor",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

_LOG_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"validoctor version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """validoctor - rule-driven validation of nested data objects."""


def load_checks(reference: str) -> list[Any]:
    """Import checks named as ``module:attribute``.

    The attribute may be a single check or a list/tuple of checks.

    Raises:
        typer.BadParameter: If the reference is malformed or does not name checks
    """
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise typer.BadParameter(f"Expected module:attribute, got '{reference}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import '{module_name}': {e}") from e

    try:
        target = getattr(module, attribute)
    except AttributeError as e:
        raise typer.BadParameter(f"'{module_name}' has no attribute '{attribute}'") from e

    checks = list(target) if isinstance(target, (list, tuple)) else [target]
    for check in checks:
        if not isinstance(check, CHECK_TYPES):
            raise typer.BadParameter(f"'{reference}' contains a {type(check).__name__}, not a check")
    return checks


def render_table(diagnosis: Diagnosis) -> None:
    status_color = "green" if diagnosis.valid else "red"
    status = "VALID" if diagnosis.valid else "INVALID"
    console.print(f"[{status_color}]Diagnosis: {status}[/{status_color}]")

    if not diagnosis.ailments:
        console.print("\n[green]No ailments found![/green]")
        return

    table = Table()
    table.add_column("Ailment", style="cyan")
    table.add_column("Severity", style="white")
    table.add_column("Field", style="dim")
    table.add_column("Value", style="white")
    table.add_column("Params", style="dim")

    for ailment in diagnosis.ailments:
        severity_color = "red" if ailment.severity == Severity.ERROR else "yellow"
        table.add_row(
            ailment.name,
            f"[{severity_color}]{ailment.severity.value.upper()}[/{severity_color}]",
            ailment.field or "",
            repr(ailment.invalid_value),
            jsonlib.dumps(ailment.to_dict()["params"]) if ailment.params else "",
        )

    console.print(table)


@app.command()
def examine(
    payload: Annotated[
        Path,
        typer.Argument(help="JSON file holding the patient to examine")
    ],
    rules: Annotated[
        list[str],
        typer.Option("--rules", "-r", help="Checks to run as module:attribute (repeatable)")
    ],
    pedantic: Annotated[
        bool | None,
        typer.Option("--pedantic/--no-pedantic", help="Collect every ailment (default from config: on)")
    ] = None,
    exceptional: Annotated[
        bool | None,
        typer.Option("--exceptional/--no-exceptional", help="Treat an invalid diagnosis as an error")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .validoctor.json)")
    ] = None,
) -> None:
    """Examine a JSON payload against checks importable from Python."""
    valid_formats = ["table", "json"]
    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)

    try:
        settings = load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    logging.basicConfig(level=_LOG_LEVELS[LogLevel(settings.logging.level)])

    try:
        with open(payload, encoding="utf-8") as f:
            patient = jsonlib.load(f)
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] Payload not found: {payload}")
        raise typer.Exit(1)
    except jsonlib.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Invalid JSON in {payload}: {e}")
        raise typer.Exit(1)

    checks = [check for reference in rules for check in load_checks(reference)]

    builder = Validoctor.builder().max_depth(settings.traversal.max_depth)
    builder.pedantic(settings.traits.pedantic if pedantic is None else pedantic)
    builder.exceptional(settings.traits.exceptional if exceptional is None else exceptional)
    doctor = builder.build()

    try:
        diagnosis = doctor.examine(patient, *checks)
    except DiagnosisError as e:
        if format == "table":
            console.print(f"[red]Error:[/red] {e}")
        diagnosis = e.diagnosis
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)

    if format == "json":
        typer.echo(jsonlib.dumps(diagnosis.to_dict(), indent=2))
    else:
        render_table(diagnosis)

    raise typer.Exit(0 if diagnosis.valid else 1)
