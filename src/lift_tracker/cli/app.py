"""Shared Typer app object, shared option types, and store utility."""

from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.dates import parse_date
from ..core.models import ExerciseMaster, WorkoutLog
from ..io.log_store import LogStore, get_default_data_dir
from ..io.serializers import ValidationError
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Data directory (default: ~/.lift-tracker)"),
]

# Shared --json option type used by analysis commands
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

# Shared --date option for commands that analyse "as of" a day
ReferenceDateOption = Annotated[
    Optional[str],
    typer.Option("--date", "-d", help="Reference date (YYYY-MM-DD, default: today)"),
]

app = typer.Typer(
    name="lift-tracker",
    help="Workout log with progress, volume, stagnation and deload analytics.",
    no_args_is_help=True,
)


def get_store(data_dir: Path | None) -> LogStore:
    """Get log store from path or default location."""
    return LogStore(data_dir if data_dir is not None else get_default_data_dir())


def open_store(data_dir: Path | None) -> LogStore:
    """Get an initialized store, or print an error and exit."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"Data directory not initialized: {store.data_dir}")
        views.print_info("Run 'init' first to create the log and exercise list.")
        raise typer.Exit(1)
    return store


def reference_date(value: str | None) -> date | None:
    """Parse a --date value, or print the error and exit."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def load_all(store: LogStore) -> tuple[list[WorkoutLog], list[ExerciseMaster]]:
    """(logs, masters), or print the error and exit."""
    try:
        return store.load_logs(), store.load_masters()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
