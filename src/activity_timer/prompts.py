"""Interactive prompts used by the CLI commands."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

import typer

from .errors import InvalidArgumentError
from .models import ActivityType
from .timeutil import CLOCK_FMT, DAY_FMT, parse_clock, parse_day


def parse_activity_type(value: str, default: ActivityType) -> Optional[ActivityType]:
    """Resolve a menu answer: blank, list number, first letter or full name.

    Returns ``None`` for unrecognized input. A first letter picks the first
    type in menu order that starts with it.
    """
    text = value.strip()
    if not text:
        return default
    types = list(ActivityType)
    if text.isdigit():
        choice = int(text)
        if 1 <= choice <= len(types):
            return types[choice - 1]
        return None
    if len(text) == 1:
        letter = text.upper()
        for activity_type in types:
            if activity_type.name.startswith(letter):
                return activity_type
        return None
    try:
        return ActivityType.parse(text)
    except InvalidArgumentError:
        return None


def prompt_activity_type(default: ActivityType, label: str = "default") -> ActivityType:
    types = list(ActivityType)
    typer.echo("\nSelect activity type:")
    for index, activity_type in enumerate(types, start=1):
        marker = f" ({label})" if activity_type is default else ""
        typer.echo(f"{index}. {typer.style(activity_type.name[0], fg='red', bold=True)}{activity_type.name[1:]}{marker}")
    while True:
        answer = typer.prompt(
            f"Enter choice (1-{len(types)}, first letter, or name)",
            default=default.name,
            show_default=True,
        )
        selected = parse_activity_type(answer, default)
        if selected is not None:
            return selected
        typer.echo("Invalid input. Please try again.")


def prompt_description(current: Optional[str] = None) -> str:
    while True:
        if current is None:
            answer = typer.prompt("Enter activity description", default="", show_default=False)
        else:
            answer = typer.prompt(f"Enter description [current: {current}]", default="", show_default=False)
            if not answer:
                return current
        if answer.strip():
            return answer.strip()
        typer.echo("Description cannot be blank. Please try again.")


def prompt_day(label: str, default: date) -> date:
    while True:
        answer = typer.prompt(
            f"Enter {label} date (yyyyMMdd)", default=default.strftime(DAY_FMT)
        )
        try:
            return parse_day(answer)
        except InvalidArgumentError as exc:
            typer.echo(str(exc))


def prompt_clock(label: str, default: Optional[time] = None, hint: str = "") -> time:
    """Ask for an ``HH:MM`` time; a blank answer takes ``default`` when given."""
    suffix = f" [{hint}]" if hint else ""
    while True:
        answer = typer.prompt(
            f"Enter {label} (hh:mm){suffix}",
            default="" if default is not None else None,
            show_default=False,
        )
        if not answer.strip():
            if default is not None:
                return default
            typer.echo("A time is required. Please try again.")
            continue
        try:
            return parse_clock(answer)
        except InvalidArgumentError as exc:
            typer.echo(str(exc))


def prompt_timestamp(label: str, current: datetime) -> datetime:
    """Ask for date then time, defaulting each part to ``current``."""
    day = prompt_day(label, current.date())
    clock = prompt_clock(
        f"{label} time", default=current.time(), hint=f"current: {current.strftime(CLOCK_FMT)}"
    )
    return datetime.combine(day, clock)


def prompt_end_timestamp(current: datetime, start: datetime) -> datetime:
    while True:
        end = prompt_timestamp("end", current)
        if end > start:
            return end
        typer.echo(
            f"End time must be after start time ({start:%Y-%m-%d %H:%M}). Please try again."
        )


def prompt_positive_int(label: str, current: int) -> int:
    while True:
        value = typer.prompt(f"{label} [current: {current}]", default=current, type=int, show_default=False)
        if value > 0:
            return value
        typer.echo("Value must be greater than 0. Please try again.")
