"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.yaml_roster_source import YamlRosterSource
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SlotResolverError
from ..domain.models import AvailabilitySlot
from ..services.attendance import AttendanceService

app = typer.Typer(
    name="slotresolver",
    help="Resolve daily availability slots from roster data",
    add_completion=False
)

console = Console()

STATUS_STYLES = {
    "full": "green",
    "arrival": "cyan",
    "departure": "yellow",
    "home": "red",
    "unavailable": "magenta",
}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Resolve who is present, arriving, departing or away."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load_service(config_file: Optional[Path]) -> tuple[AppConfig, AttendanceService]:
    config = AppConfig.load_from_yaml(get_default_config_path(config_file))
    source = YamlRosterSource(config.data_file)
    return config, AttendanceService(roster_source=source)


def _parse_date(value: Optional[str], config: AppConfig) -> pendulum.Date:
    if not value:
        return config.today()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except ValueError as exc:
        console.print(f"[red]Error parsing date {value!r}: {exc}[/red]")
        raise typer.Exit(1)


def _format_slot_row(date_key: str, slot: AvailabilitySlot) -> list[str]:
    style = STATUS_STYLES.get(slot.status, "white")
    blocks = ", ".join(
        f"{block.start}-{block.end} {block.reason or ''}".strip()
        for block in slot.unavailable_blocks
    )
    return [
        date_key,
        f"[{style}]{slot.status}[/{style}]",
        "✓" if slot.is_available else "✗",
        f"{slot.start_hour}-{slot.end_hour}",
        slot.source,
        slot.home_status_type or "",
        blocks,
    ]


@app.command()
def resolve(
    person_id: Annotated[str, typer.Argument(help="Id of the person to resolve.")],
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--date", "-d", help="First date (YYYY-MM-DD). Defaults to today.")] = None,
    days: Annotated[Optional[int], typer.Option("--days", "-n", help="Number of days to resolve.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print slots as JSON.")] = False,
):
    """
    Resolve the availability slot of one person for a run of days.

    Examples:

        slotresolver resolve p1
        slotresolver resolve p1 --date 2024-01-08 --days 14
        slotresolver resolve p1 --json
    """
    try:
        config, service = _load_service(config_file)
        start_date = _parse_date(start, config)
        span = days if days is not None else config.defaults.days

        slots = service.resolve_person(person_id, start_date, span)

        if as_json:
            payload = {date_key: slot.to_dict() for date_key, slot in slots.items()}
            console.print_json(json.dumps(payload, ensure_ascii=False))
            return

        person = service.find_person(person_id)
        table = Table(
            title=f"Availability - {person.name or person.id}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Date", style="bold", no_wrap=True)
        for column in ("Status", "Available", "Hours", "Source", "Home type", "Blocks"):
            table.add_column(column)

        for date_key, slot in slots.items():
            table.add_row(*_format_slot_row(date_key, slot))

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, SlotResolverError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def headcount(
    config_file: ConfigOption = None,
    target: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    at_time: Annotated[Optional[str], typer.Option("--at", help="Time of day (HH:MM).")] = None,
):
    """
    Count who is present at a given date and time.
    """
    try:
        config, service = _load_service(config_file)
        target_date = _parse_date(target, config)
        at = at_time or config.defaults.headcount_time

        result = service.headcount(target_date, at)

        console.print(
            f"\n[bold cyan]{result.date_key} {result.at_time}[/bold cyan]: "
            f"[green]{len(result.present)} present[/green], "
            f"[red]{len(result.absent)} away[/red] (of {result.total})\n"
        )
        if result.present:
            console.print(f"  Present: {', '.join(result.present)}")
        if result.absent:
            console.print(f"  Away:    {', '.join(result.absent)}")
        console.print()

    except (FileNotFoundError, ValueError, SlotResolverError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def list_people(config_file: ConfigOption = None):
    """
    List all people in the roster.
    """
    try:
        config = AppConfig.load_from_yaml(get_default_config_path(config_file))
        people = YamlRosterSource(config.data_file).get_people()

        if not people:
            console.print("[yellow]No people found in the roster data.[/yellow]")
            return

        table = Table(
            title="Roster",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Id", style="bold yellow")
        table.add_column("Name")
        table.add_column("Team", style="dim")
        table.add_column("Entries", justify="right")

        for person in people:
            table.add_row(
                person.id,
                person.name,
                person.team_id or "",
                str(len(person.daily_availability))
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, SlotResolverError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotresolver[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
