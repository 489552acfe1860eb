"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Annotated, Dict, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.json_source import JsonAppointmentSource
from ..config import AppConfig, get_default_config_path
from ..domain.current_time import scroll_offset
from ..domain.exceptions import TimelineError
from ..domain.models import TimelineLayout
from ..domain.parsing import parse_instant
from ..domain.timeline_engine import TimelineEngine
from ..services.timeline_service import CurrentTimeTicker, TimelineService, system_clock

app = typer.Typer(
    name="apptimeline",
    help="Lay out a day of appointments as a timeline",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """
    Load the config file. Without ``--config`` a missing default file falls
    back to built-in defaults.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()


def _parse_day(value: Optional[str], tz: str):
    if not value:
        return pendulum.now(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        raise ValueError(f"Ungültiges Datum '{value}', erwartet YYYY-MM-DD ({e})") from e


def _build_service(config: AppConfig, data_file: Path, now_option: Optional[str]) -> TimelineService:
    engine = TimelineEngine(config.layout_options())
    clock = system_clock(config.timezone)
    if now_option:
        fixed_now = parse_instant(now_option, config.timezone)
        clock = lambda: fixed_now  # noqa: E731

    return TimelineService(
        appointment_source=JsonAppointmentSource(data_file),
        engine=engine,
        working_hours=config.to_working_hours(),
        visible_statuses=config.visible_statuses,
        clock=clock,
    )


def _appointments_by_hour(layout: TimelineLayout, tz: str) -> Dict[int, List[str]]:
    entries: Dict[int, List[str]] = defaultdict(list)
    for group in layout.groups:
        for member in group.members:
            appointment = member.appointment
            start = appointment.local_start(tz)
            entries[start.hour].append(
                f"{start.format('HH:mm')}–{appointment.end.in_timezone(tz).format('HH:mm')} "
                f"{appointment.id} [{member.column + 1}/{member.column_count}]"
            )
    return entries


def _render_marker(layout: TimelineLayout) -> str:
    marker = layout.current_time_marker
    if not marker.visible:
        return "[dim]Jetzt-Markierung ausgeblendet[/dim]"
    return (
        f"[bold red]● Jetzt[/bold red] bei {marker.offset_from_range_start:.1f} px "
        f"(Scroll-Position {scroll_offset(marker):.1f} px)"
    )


def _render_layout(layout: TimelineLayout, tz: str) -> None:
    visible_range = layout.visible_range
    table = Table(
        title=(
            f"Zeitleiste {layout.selected_date.format('DD.MM.YYYY')} "
            f"({visible_range.start_hour}:00 - {visible_range.end_hour}:00)"
        ),
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Zeit", style="bold yellow")
    table.add_column("Arbeitszeit")
    table.add_column("Termine")

    entries = _appointments_by_hour(layout, tz)
    for slot in layout.time_slots:
        if slot.break_label:
            shading = f"[magenta]{slot.break_label}[/magenta]"
        elif slot.is_within_working_hours:
            shading = "[green]✓[/green]"
        else:
            shading = "[dim]–[/dim]"

        label = f"▶ {slot.label}" if slot.is_current_hour else slot.label
        table.add_row(label, shading, "\n".join(entries.get(slot.hour, [])))

    console.print()
    console.print(table)
    console.print(_render_marker(layout))

    if layout.skipped_appointment_ids:
        console.print(
            f"[yellow]⚠ {len(layout.skipped_appointment_ids)} ungültige(r) Termin(e) übersprungen: "
            f"{', '.join(layout.skipped_appointment_ids)}[/yellow]"
        )
    console.print()


@app.command()
def show(
    day: Annotated[Optional[str], typer.Argument(help="Datum (YYYY-MM-DD). Standard: heute.")] = None,
    data_file: Annotated[Path, typer.Option("--data", "-d", help="JSON file with appointments and working hours")] = Path("appointments.json"),
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Fixed current time (ISO-8601) instead of the system clock")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Layout als JSON ausgeben.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug-Logging aktivieren.")] = False,
):
    """
    Show the timeline layout of one day.

    Examples:

        apptimeline show 2024-11-25 --data appointments.json

        apptimeline show --json --now 2024-11-25T10:30:00+01:00
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = config.timezone
        selected_date = _parse_day(day, tz)
        service = _build_service(config, data_file, now)

        layout = asyncio.run(service.build_day(selected_date=selected_date))

        if as_json:
            typer.echo(json.dumps(layout.to_dict(), indent=2, ensure_ascii=False))
        else:
            _render_layout(layout, tz)

    except (FileNotFoundError, ValueError, TimelineError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def watch(
    day: Annotated[Optional[str], typer.Argument(help="Datum (YYYY-MM-DD). Standard: heute.")] = None,
    data_file: Annotated[Path, typer.Option("--data", "-d", help="JSON file with appointments and working hours")] = Path("appointments.json"),
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    ticks: Annotated[Optional[int], typer.Option("--ticks", help="Nach N Aktualisierungen beenden.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug-Logging aktivieren.")] = False,
):
    """
    Follow the current-time marker, refreshed on every tick.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = config.timezone
        selected_date = _parse_day(day, tz)
        service = _build_service(config, data_file, None)
        ticker = CurrentTimeTicker(service.engine, interval_seconds=config.layout.tick_seconds)

        layout = asyncio.run(service.build_day(selected_date=selected_date))
        _render_layout(layout, tz)

        def _print_tick(refreshed: TimelineLayout) -> None:
            console.print(_render_marker(refreshed))

        asyncio.run(ticker.run(lambda: layout, _print_tick, max_ticks=ticks))

    except KeyboardInterrupt:
        console.print("\n[dim]Beendet.[/dim]")

    except (FileNotFoundError, ValueError, TimelineError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]apptimeline[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
