"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters import create_schedule_store
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import RequestValidationError, UpstreamFailure
from ..domain.models import AvailabilityResult
from ..domain.slot_calculator import SlotCalculator
from ..domain.validation import RequestValidator
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="providerslots",
    help="Check which appointment slots of a provider are free on a given day",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_BAD_REQUEST = 2

CLIENT_ERROR_MESSAGES = {
    "missing_required_field": "Provider ID and date are required.",
    "invalid_provider_id": "The provider ID is not a valid UUID.",
    "invalid_listing_id": "The listing ID is not a valid UUID.",
    "invalid_date": "The date could not be read. Use YYYY-MM-DD.",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """
    Load the configuration file.

    An explicitly passed file must exist; without one, the default location
    is tried and built-in defaults are used when nothing is found there.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    config_path = get_default_config_path()
    if config_path.exists():
        return AppConfig.load_from_yaml(config_path)

    logger.debug("No config file at %s, using defaults", config_path)
    return AppConfig()


def build_service(config: AppConfig) -> AvailabilityService:
    """Wire stores, calculator and validator from the configuration."""
    store = create_schedule_store(config.storage, config.busy_statuses)
    calculator = SlotCalculator(
        step_minutes=config.slot_step_minutes,
        default_duration_minutes=config.defaults.duration_minutes,
        default_window=config.defaults.get_working_window(),
    )
    validator = RequestValidator(
        past_days=config.booking_window.past_days,
        future_days=config.booking_window.future_days,
    )
    return AvailabilityService(
        booking_store=store,
        listing_store=store,
        slot_calculator=calculator,
        validator=validator,
    )


def _render_result(result: AvailabilityResult, cache_max_age: int) -> None:
    """Print availability as a summary panel and slot table."""
    busy = ", ".join(f"{b.start}-{b.end}" for b in result.busy_slots) or "none"

    console.print(Panel.fit(
        f"[bold]Provider:[/bold] {result.provider_id}\n"
        f"[bold]Date:[/bold] {result.date}\n"
        f"[bold]Working hours:[/bold] {result.work_hours_start} - {result.work_hours_end}\n"
        f"[bold]Service duration:[/bold] {result.current_listing_duration} min\n"
        f"[bold]Busy:[/bold] {busy}",
        title="Schedule"
    ))

    if not result.all_slots:
        console.print("[yellow]No slots: working hours are empty.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Start", style="bold")
    table.add_column("Status")

    blocked = set(result.unavailable_slots)
    for slot in result.all_slots:
        status = "[red]unavailable[/red]" if slot in blocked else "[green]free[/green]"
        table.add_row(slot, status)

    console.print(table)
    console.print(
        f"{len(result.available_slots)} of {len(result.all_slots)} slots free "
        f"[dim](valid for {cache_max_age}s)[/dim]"
    )


@app.command()
def check(
    provider_id: Annotated[str, typer.Argument(help="Provider ID (UUID)")],
    date: Annotated[str, typer.Argument(help="Date to check (YYYY-MM-DD)")],
    listing: Annotated[Optional[str], typer.Option("--listing", "-l", help="Listing ID (UUID) whose duration and working hours apply")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    data_file: Annotated[Optional[Path], typer.Option("--data", help="Read bookings and listings from this JSON file")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw availability payload as JSON")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """
    Show free and unavailable start slots of a provider on a day.

    Examples:

        providerslots check a2b4c6d8-1e3f-4a5b-9c7d-0e1f2a3b4c5d 2026-11-02

        providerslots check a2b4c6d8-1e3f-4a5b-9c7d-0e1f2a3b4c5d 2026-11-02 \\
            --listing 7d8e9f00-1a2b-4c3d-8e4f-5a6b7c8d9e02 --json
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        if data_file is not None:
            config.storage.backend = "json"
            config.storage.data_file = data_file

        service = build_service(config)
        result = asyncio.run(
            service.get_availability(provider_id=provider_id, date=date, listing_id=listing)
        )

    except RequestValidationError as e:
        message = CLIENT_ERROR_MESSAGES.get(e.code, str(e))
        console.print(f"[bold red]Error:[/bold red] {message} [dim]({e.code})[/dim]")
        raise typer.Exit(EXIT_BAD_REQUEST)

    except UpstreamFailure as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(EXIT_FAILURE)

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(EXIT_FAILURE)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_result(result, config.cache_max_age_seconds)


@app.command()
def show_config(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    Show the effective configuration.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(EXIT_FAILURE)

    table = Table(
        title="Configuration",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Setting", style="bold yellow")
    table.add_column("Value")

    table.add_row("Default duration", f"{config.defaults.duration_minutes} min")
    table.add_row("Default working hours", f"{config.defaults.work_hours_start} - {config.defaults.work_hours_end}")
    table.add_row("Slot step", f"{config.slot_step_minutes} min")
    table.add_row(
        "Bookable window",
        f"-{config.booking_window.past_days} / +{config.booking_window.future_days} days"
    )
    table.add_row("Busy statuses", ", ".join(config.busy_statuses))
    table.add_row("Cache max age", f"{config.cache_max_age_seconds} s")
    table.add_row("Storage backend", config.storage.backend)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]providerslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
