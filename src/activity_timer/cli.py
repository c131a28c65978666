"""Command-line interface for the activity timer."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterator, NoReturn, Optional

import typer

from .config import ConfigurationStore, TimerSettings
from .db import database_connection
from .errors import PersistenceError, TimerError
from .export import default_export_filename, export_activities
from .models import ActivityType
from .paths import get_config_path, get_db_path
from .prompts import (
    prompt_activity_type,
    prompt_clock,
    prompt_day,
    prompt_description,
    prompt_end_timestamp,
    prompt_positive_int,
    prompt_timestamp,
)
from .reporting import ActivityPrinter
from .repository import SqliteActivityRepository
from .service import ActivityService
from .timeutil import CLOCK_FMT, at_time, parse_clock, parse_day, truncate_to_minute

logger = logging.getLogger(__name__)

app = typer.Typer(help="Track the time spent on activities.")
activity_app = typer.Typer(help="Activity management commands.", no_args_is_help=True)
config_app = typer.Typer(help="Show or change settings.", no_args_is_help=True)
app.add_typer(activity_app, name="activity")
app.add_typer(config_app, name="config")


@dataclass(slots=True)
class AppState:
    """Per-invocation locations and lazily opened collaborators."""

    db_path: Path
    config_path: Path
    clock: Callable[[], datetime] = datetime.now
    _config: Optional[ConfigurationStore] = field(default=None, repr=False)

    @property
    def config(self) -> ConfigurationStore:
        if self._config is None:
            self._config = ConfigurationStore(self.config_path)
        return self._config

    @contextmanager
    def service(self) -> Iterator[ActivityService]:
        with database_connection(self.db_path) as conn:
            yield ActivityService(SqliteActivityRepository(conn), self.config, clock=self.clock)


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Enable verbose logs (repeat for debug)."
    ),
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        envvar="TIMER_DB",
        path_type=Path,
        help="Location of the activity SQLite database.",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        envvar="TIMER_CONFIG",
        path_type=Path,
        help="Location of the JSON settings file.",
    ),
) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    ctx.obj = AppState(
        db_path=db_path or get_db_path(),
        config_path=config_path or get_config_path(),
    )


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except PersistenceError as exc:
        logger.debug("Persistence failure in %s", exc.operation, exc_info=True)
        _fail(str(exc))
    except TimerError as exc:
        _fail(str(exc))


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _require_positive_id(activity_id: int) -> None:
    if activity_id <= 0:
        _fail("Activity ID must be greater than 0.")


@app.command()
def start(
    ctx: typer.Context,
    activity_type: Optional[str] = typer.Option(
        None,
        "--type",
        "-t",
        help="Activity type (" + ", ".join(t.name for t in ActivityType) + ").",
    ),
    description: Optional[str] = typer.Option(
        None, "--description", "-d", help="Activity description."
    ),
    start_time: Optional[str] = typer.Option(
        None, "--start-time", "-s", help="Start time in HH:MM format."
    ),
    connect: bool = typer.Option(
        False,
        "--connect",
        "-c",
        help="Start one minute after today's latest activity ended.",
    ),
) -> None:
    """Start a new activity, completing any running one."""
    if start_time and connect:
        _fail("--start-time and --connect cannot be used together.")
    state: AppState = ctx.obj
    with _handle_errors():
        kind = ActivityType.parse(activity_type) if activity_type else None
        begin_clock = parse_clock(start_time) if start_time else None
        config = state.config
        with state.service() as service:
            if kind is None:
                kind = prompt_activity_type(config.default_activity_type)
            text = description if description and description.strip() else prompt_description()
            now = state.clock()
            if connect:
                begin = service.connect_start_time(now)
                if begin is None:
                    typer.echo("No activities found for today.")
                    fallback = parse_clock(config.default_start_time)
                    begin = at_time(
                        now, prompt_clock("start time", fallback, hint=config.default_start_time)
                    )
            elif begin_clock is not None:
                begin = at_time(now, begin_clock)
            else:
                current = truncate_to_minute(now)
                begin = at_time(
                    now,
                    prompt_clock(
                        "start time",
                        current.time(),
                        hint=f"current time: {current.strftime(CLOCK_FMT)}",
                    ),
                )
            activity = service.start_activity(kind, text, begin)
    ActivityPrinter().print_details("Activity started:", activity)


@app.command()
def stop(ctx: typer.Context) -> None:
    """Stop the running activity and mark it as completed."""
    state: AppState = ctx.obj
    with _handle_errors(), state.service() as service:
        stopped = service.stop_activity()
    if stopped is None:
        typer.echo("No active activity found.")
        return
    ActivityPrinter().print_details("Activity stopped:", stopped, stopped=True)


@app.command()
def status(ctx: typer.Context) -> None:
    """List running activities."""
    state: AppState = ctx.obj
    with _handle_errors(), state.service() as service:
        running = service.active_activities()
    ActivityPrinter(now=state.clock()).print_active(running)


app.command("ls", hidden=True)(status)


@app.command()
def restart(
    ctx: typer.Context,
    activity_id: int = typer.Argument(..., help="Activity ID to restart."),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Stop the running activity without asking."
    ),
) -> None:
    """Start a new activity with the type and description of an existing one."""
    _require_positive_id(activity_id)
    state: AppState = ctx.obj
    with _handle_errors(), state.service() as service:
        if service.get_activity(activity_id) is None:
            typer.echo(f"Activity with ID {activity_id} not found.")
            return
        running = service.active_activities()
        if running:
            current = running[0]
            question = (
                f"Activity {current.id} - {current.activity_type.name} - "
                f"{current.description} is currently active. Stop it?"
            )
            if not yes and not typer.confirm(question):
                typer.echo("Restart cancelled")
                return
            stopped = service.stop_activity()
            if stopped is not None:
                typer.echo(
                    f"{stopped.id} - {stopped.description} has been completed after "
                    f"being worked on for {stopped.duration_minutes()} minutes"
                )
        restarted = service.restart_activity(activity_id)
    if restarted is not None:
        typer.echo(f"New activity {restarted.id} - {restarted.description} has started")


@activity_app.command("list")
def list_activities(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(None, "--date", help="Single day (yyyyMMdd)."),
    from_date: Optional[str] = typer.Option(
        None, "--from", help="From this day (yyyyMMdd) until today."
    ),
    show_all: bool = typer.Option(False, "--all", help="Every activity, oldest first."),
    yesterday: bool = typer.Option(False, "--yesterday", "-y", help="Yesterday's activities."),
) -> None:
    """List activities; defaults to today."""
    if sum(bool(option) for option in (date, from_date, show_all, yesterday)) > 1:
        _fail("Use only one of --date, --from, --all and --yesterday.")
    state: AppState = ctx.obj
    now = state.clock()
    with _handle_errors():
        with state.service() as service:
            if show_all:
                activities = service.all_activities()
            elif from_date:
                activities = service.activities_between(parse_day(from_date), now)
            else:
                if yesterday:
                    day = now.date() - timedelta(days=1)
                elif date:
                    day = parse_day(date)
                else:
                    day = now.date()
                activities = service.activities_for_day(day)
    ActivityPrinter(now=now).print_table(activities)


@activity_app.command("add")
def add_activity(ctx: typer.Context) -> None:
    """Add a completed activity manually."""
    state: AppState = ctx.obj
    with _handle_errors():
        config = state.config
        kind = prompt_activity_type(config.default_activity_type)
        text = prompt_description()
        day = prompt_day("start", state.clock().date())
        begin = at_time(day, prompt_clock("start time"))
        default_end = begin + timedelta(minutes=config.default_duration_minutes)
        while True:
            end_clock = prompt_clock(
                "end time", default_end.time(), hint=default_end.strftime(CLOCK_FMT)
            )
            # The suggested end may fall on the next day.
            end = default_end if end_clock == default_end.time() else at_time(day, end_clock)
            if end > begin:
                break
            typer.echo(
                f"End time must be after start time ({begin.strftime(CLOCK_FMT)}). Please try again."
            )
        with state.service() as service:
            saved = service.add_activity(kind, text, begin, end)
    typer.echo(
        f"Activity {saved.id} added: {saved.description} "
        f"({saved.start_time:%Y-%m-%d %H:%M} to {saved.end_time:%Y-%m-%d %H:%M})"
    )


@activity_app.command("edit")
def edit_activity(
    ctx: typer.Context,
    activity_id: int = typer.Argument(..., help="Activity ID."),
    use_duration: bool = typer.Option(
        False, "--duration", help="Edit the duration in minutes instead of the end time."
    ),
) -> None:
    """Edit a stopped activity."""
    state: AppState = ctx.obj
    with _handle_errors(), state.service() as service:
        current = service.get_activity(activity_id)
        if current is None:
            typer.echo(f"Activity with ID {activity_id} not found.")
            return
        if current.is_active:
            _fail("Cannot edit an active activity. Please stop the activity first using 'timer stop'.")
        text = prompt_description(current.description)
        begin = prompt_timestamp("start", current.start_time)
        if use_duration:
            minutes = prompt_positive_int("Enter duration in minutes", current.duration_minutes())
            end = begin + timedelta(minutes=minutes)
        else:
            end = prompt_end_timestamp(current.end_time or begin, begin)
        kind = prompt_activity_type(current.activity_type, "current")
        updated = service.edit_activity(
            activity_id,
            activity_type=kind,
            description=text,
            start_time=begin,
            end_time=end,
        )
    if updated is not None:
        ActivityPrinter().print_details("\nActivity updated:", updated)


@activity_app.command("copy")
def copy_activity(
    ctx: typer.Context,
    activity_id: int = typer.Argument(..., help="Activity ID to copy."),
) -> None:
    """Copy an activity with edited values as a new completed activity."""
    _require_positive_id(activity_id)
    state: AppState = ctx.obj
    with _handle_errors(), state.service() as service:
        source = service.get_activity(activity_id)
        if source is None:
            typer.echo(f"Activity with ID {activity_id} not found.")
            return
        kind = prompt_activity_type(source.activity_type, "current")
        text = prompt_description(source.description)
        begin = prompt_timestamp("start", source.start_time)
        end = prompt_end_timestamp(source.end_time or truncate_to_minute(state.clock()), begin)
        copied = service.copy_activity(
            activity_id,
            activity_type=kind,
            description=text,
            start_time=begin,
            end_time=end,
        )
    if copied is not None:
        ActivityPrinter().print_details("\nActivity copied:", copied)
        typer.echo(f"  Original ID: {activity_id}")


@activity_app.command("delete")
def delete_activity(
    ctx: typer.Context,
    activity_id: int = typer.Argument(..., help="Activity ID."),
) -> None:
    """Delete an activity permanently."""
    _require_positive_id(activity_id)
    state: AppState = ctx.obj
    with _handle_errors(), state.service() as service:
        deleted = service.delete_activity(activity_id)
    if deleted is None:
        typer.echo(f"Activity with ID {activity_id} not found.")
        return
    typer.echo(f"Activity {activity_id} has been deleted.")


@activity_app.command("export")
def export(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(None, "--date", help="Single day (yyyyMMdd)."),
    from_date: Optional[str] = typer.Option(None, "--from", help="First day (yyyyMMdd)."),
    to_date: Optional[str] = typer.Option(
        None, "--to", help="Last day (yyyyMMdd); requires --from, defaults to today."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", path_type=Path, help="Destination CSV file."
    ),
) -> None:
    """Export activities to CSV; defaults to today."""
    if date and (from_date or to_date):
        _fail("--date cannot be combined with --from or --to.")
    if to_date and not from_date:
        _fail("--to requires --from.")
    state: AppState = ctx.obj
    now = state.clock()
    with _handle_errors():
        with state.service() as service:
            if date:
                activities = service.activities_for_day(parse_day(date))
            elif from_date:
                first = parse_day(from_date)
                last = parse_day(to_date) if to_date else now.date()
                if last < first:
                    _fail(
                        f"--to date ({to_date}) cannot be before --from date ({from_date})"
                    )
                activities = service.activities_between(first, last)
            else:
                activities = service.activities_for_day(now)
        if not activities:
            typer.echo("No activities found for the specified date range.")
            return
        dest = output or Path(default_export_filename(now))
        export_activities(activities, dest, state.config.csv_delimiter)
    typer.echo(f"Data has been exported to file {dest}")


@config_app.command("show")
def show_config(ctx: typer.Context) -> None:
    """Print the current settings."""
    state: AppState = ctx.obj
    with _handle_errors():
        settings = state.config.settings
    for key, value in settings.model_dump(mode="json").items():
        typer.echo(f"{key} = {value}")


_SETTINGS_HELP = "\n\n".join(
    f"{name}: {field.description}" for name, field in TimerSettings.model_fields.items()
)


@config_app.command("set", epilog=_SETTINGS_HELP)
def set_config(
    ctx: typer.Context,
    key: str = typer.Argument(
        ..., help="Setting name (" + ", ".join(TimerSettings.model_fields) + ")."
    ),
    value: str = typer.Argument(..., help="New value."),
) -> None:
    """Validate and store a setting."""
    state: AppState = ctx.obj
    name = key.strip().lower().replace("-", "_").replace(".", "_")
    with _handle_errors():
        state.config.set(name, value)
    typer.echo(f"{name} = {getattr(state.config.settings, name)}")
