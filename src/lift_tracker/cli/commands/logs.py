"""Workout log commands: log, history, show-log, delete-log, memo."""

import json
from typing import Annotated, Optional

import typer

from ...core.dates import today_str
from ...core.metrics import exercise_kind, find_master, is_bodyweight_exercise, is_cardio_exercise
from ...core.models import ExerciseEntry, ExerciseMaster, WorkoutLog
from ...core.progress import ProgressComparison, calculate_progress, find_previous_sets
from ...io.serializers import ValidationError, parse_sets_string, validate_date, workout_log_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, load_all, open_store

DateOption = Annotated[
    Optional[str],
    typer.Option("--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
]

LogIdArgument = Annotated[int, typer.Argument(help="Log ID (see 'history')")]


def compare_with_previous(
    log: WorkoutLog, logs: list[WorkoutLog], masters: list[ExerciseMaster]
) -> dict[str, ProgressComparison]:
    """Comparison to the previous occurrence for each exercise in ``log``."""
    comparisons: dict[str, ProgressComparison] = {}
    for ex in log.exercises:
        if ex.name in comparisons:
            continue
        previous = find_previous_sets(logs, ex.name, log.date)
        if previous is None:
            continue
        comparisons[ex.name] = calculate_progress(
            ex.sets,
            previous,
            is_bodyweight_exercise(ex.name, masters),
            is_cardio_exercise(ex.name, masters),
        )
    return comparisons


@app.command()
def log(
    exercise: Annotated[str, typer.Option("--exercise", "-e", help="Exercise name")],
    sets: Annotated[
        str,
        typer.Option(
            "--sets",
            "-s",
            help=(
                "Sets. weighted: '60x10, 70x8' or '3x10@60'; "
                "bodyweight: '10, 12, 8' or '3x10'; cardio: '30min/5.2km'"
            ),
        ),
    ],
    data_dir: DataDirOption = None,
    date: DateOption = None,
    memo: Annotated[
        Optional[str],
        typer.Option("--memo", "-m", help="Memo for the day (replaces the existing memo)"),
    ] = None,
) -> None:
    """
    Log an exercise.  Adds to the day's existing workout if there is one.
    """
    store = open_store(data_dir)
    logs, masters = load_all(store)

    date = date or today_str()
    name = exercise.strip()

    if find_master(name, masters) is None:
        views.print_warning(f"'{name}' is not a registered exercise; logging it as weighted.")

    try:
        validate_date(date)
        parsed = parse_sets_string(sets, exercise_kind(name, masters))
        stored = store.add_exercise_to_date(date, ExerciseEntry(name=name, sets=parsed), memo)
    except (ValueError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Logged {name} ({len(parsed)} sets) on {date} (#{stored.id})")

    previous = find_previous_sets(logs, name, date)
    if previous is not None:
        comparison = calculate_progress(
            parsed,
            previous,
            is_bodyweight_exercise(name, masters),
            is_cardio_exercise(name, masters),
        )
        views.console.print("vs previous: " + views.format_comparison(comparison))


@app.command()
def history(
    data_dir: DataDirOption = None,
    from_date: Annotated[
        Optional[str], typer.Option("--from", help="Show logs on or after this date")
    ] = None,
    to_date: Annotated[
        Optional[str], typer.Option("--to", help="Show logs on or before this date")
    ] = None,
    limit: Annotated[
        Optional[int], typer.Option("--limit", "-n", help="Show only the most recent N logs")
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show workout history.
    """
    store = open_store(data_dir)
    logs, _ = load_all(store)

    try:
        if from_date:
            validate_date(from_date)
            logs = [l for l in logs if l.date >= from_date]
        if to_date:
            validate_date(to_date)
            logs = [l for l in logs if l.date <= to_date]
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if limit is not None:
        logs = logs[-limit:] if limit > 0 else []

    if json_out:
        print(json.dumps([workout_log_to_dict(l) for l in logs], ensure_ascii=False, indent=2))
        return

    views.print_history(logs)


@app.command("show-log")
def show_log(
    log_id: LogIdArgument,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show one workout with the comparison to the previous time.
    """
    store = open_store(data_dir)
    logs, masters = load_all(store)

    target = next((l for l in logs if l.id == log_id), None)
    if target is None:
        views.print_error(f"Workout log not found: {log_id}")
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(workout_log_to_dict(target), ensure_ascii=False, indent=2))
        return

    views.print_log_detail(target, compare_with_previous(target, logs, masters))


@app.command("delete-log")
def delete_log(
    log_id: LogIdArgument,
    data_dir: DataDirOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """
    Delete a workout log.
    """
    store = open_store(data_dir)

    target = store.get_log(log_id)
    if target is None:
        views.print_error(f"Workout log not found: {log_id}")
        raise typer.Exit(1)

    if not yes and not views.confirm_action(f"Delete workout #{log_id} ({target.date})?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_log(log_id)
    views.print_success(f"Deleted workout #{log_id} ({target.date})")


@app.command()
def memo(
    log_id: LogIdArgument,
    text: Annotated[str, typer.Argument(help="Memo text ('' to clear)")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Set or clear the memo of a workout.
    """
    store = open_store(data_dir)
    try:
        stored = store.set_memo(log_id, text.strip() or None)
    except KeyError:
        views.print_error(f"Workout log not found: {log_id}")
        raise typer.Exit(1)

    if stored.memo:
        views.print_success(f"Memo saved on #{log_id}")
    else:
        views.print_success(f"Memo cleared on #{log_id}")
