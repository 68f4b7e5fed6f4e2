"""
Stencil CLI - run provisioning templates against a driver.
"""

import importlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import typer
from rich.console import Console
from rich.panel import Panel

from .driver import Driver
from .errors import ConfigurationError, StencilError, UnresolvedReferenceError
from .formatters import ReportFormatter
from .models import RunReport
from .settings import get_settings
from .template import Template

# Setup
app = typer.Typer(
    name="stencil",
    help="Run infrastructure provisioning templates",
    add_completion=False,
)
console = Console()


def configure_logging():
    """Configure logging based on settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Configure logging on module import
configure_logging()


def load_driver(spec: str) -> Driver:
    """Import a driver from a 'module:attribute' path.

    The attribute may be a Driver instance or a zero-argument factory
    (such as a Driver subclass) returning one.

    Raises:
        ConfigurationError: If the path cannot be imported or is not a driver
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"Driver must be given as 'module:attribute', got '{spec}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import driver module '{module_name}': {e}") from e

    target = getattr(module, attr, None)
    if target is None:
        raise ConfigurationError(f"Module '{module_name}' has no attribute '{attr}'")

    driver = target
    if not isinstance(target, Driver) and callable(target):
        try:
            driver = target()
        except TypeError as e:
            raise ConfigurationError(f"Cannot build driver from '{spec}': {e}") from e
    if not isinstance(driver, Driver):
        raise ConfigurationError(f"'{spec}' is not a Driver")
    return driver


def parse_value(raw: str) -> Any:
    """Use JSON values when the text is valid JSON, the raw string otherwise."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def parse_assignments(items: List[str], option: str) -> Dict[str, Any]:
    """Parse repeated ``key=value`` options."""
    values: Dict[str, Any] = {}
    for item in items or []:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got '{item}'", param_hint=option)
        values[key] = parse_value(raw)
    return values


def _load_template(path: Path) -> Template:
    try:
        return Template.load(path)
    except StencilError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        raise typer.Exit(code=1)


def _write_report(report: RunReport, path: Path) -> None:
    path.write_text(report.to_json(), encoding="utf-8")
    console.print(f"[dim]Report written to {path}[/dim]")


@app.command()
def show(
    template_file: Path = typer.Argument(..., help="Template JSON file"),
):
    """Show a template's statements, holes and aliases."""
    template = _load_template(template_file)
    console.print(ReportFormatter(console).format_template(template))


@app.command()
def run(
    template_file: Path = typer.Argument(..., help="Template JSON file"),
    driver: str = typer.Option(
        None, "--driver", help="Driver as 'module:attribute' (overrides .env)"
    ),
    fill: List[str] = typer.Option(
        None, "--fill", help="Hole value as hole=value (repeatable)"
    ),
    override: List[str] = typer.Option(
        None, "--set", help="Parameter override as entity.param=value (repeatable)"
    ),
    alias: List[str] = typer.Option(
        None, "--alias", help="Alias value as alias=value (repeatable)"
    ),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Prompt for holes without a --fill value"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Ask the driver not to perform real changes"
    ),
    report_file: Path = typer.Option(
        None, "--report", help="Write the run report as JSON to this file"
    ),
):
    """Run a template against a driver."""
    settings = get_settings()
    template = _load_template(template_file)

    fills = parse_assignments(fill, "--fill")
    overrides = parse_assignments(override, "--set")
    aliases = parse_assignments(alias, "--alias")

    driver_spec = driver or settings.driver
    if not driver_spec:
        console.print("[bold red]✗ Error:[/bold red] No driver configured")
        console.print("[dim]Hint: pass --driver module:attribute or set STENCIL_DRIVER[/dim]")
        raise typer.Exit(code=1)

    try:
        backend = load_driver(driver_spec)
    except ConfigurationError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    backend.set_dry_run(dry_run or settings.dry_run)
    backend.set_logger(logging.getLogger("stencil.driver"))

    template.merge_params(overrides)
    if aliases:
        template.resolve_aliases(aliases)
    missing = template.resolve_template(fills)
    if missing and interactive:
        template.interactive_resolve_template(lambda hole: parse_value(typer.prompt(hole)))
    elif missing:
        names = ", ".join(sorted({m.hole for m in missing}))
        console.print(f"[bold red]✗ Error:[/bold red] Missing values for holes: {names}")
        console.print("[dim]Hint: pass --fill hole=value or use --interactive[/dim]")
        raise typer.Exit(code=1)

    console.print(
        Panel.fit(
            f"[bold blue]Stencil Run[/bold blue]\n"
            f"Template: {template_file.name}\n"
            f"Driver: {driver_spec}" + (" (dry run)" if backend.dry_run else ""),
            border_style="blue",
        )
    )

    formatter = ReportFormatter(console)
    try:
        report = template.run(backend)
    except UnresolvedReferenceError as e:
        console.print(formatter.format_report(e.report))
        if report_file:
            _write_report(e.report, report_file)
        raise typer.Exit(code=1)

    console.print(formatter.format_report(report))
    if report_file:
        _write_report(report, report_file)
    if report.has_errors():
        raise typer.Exit(code=1)


@app.command()
def version():
    """Show Stencil version."""
    from . import __version__

    console.print(f"Stencil version: [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
