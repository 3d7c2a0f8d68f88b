"""Analysis commands: progress, chart, volume, stagnation, deload."""

import json
from dataclasses import asdict
from typing import Annotated, Optional

import typer
from rich.table import Table

from ...core.ascii_plot import CHART_METRICS, default_metric, metric_value
from ...core.dates import format_week_range, to_date_str
from ...core.history import build_exercise_chart_data
from ...core.metrics import is_bodyweight_exercise, is_cardio_exercise
from ...core.periodization import (
    calculate_consecutive_training_weeks,
    detect_performance_decline,
    generate_deload_suggestion,
)
from ...core.progress import calculate_progress
from ...core.stagnation import detect_stagnation
from ...core.volume import calculate_weekly_volume, get_volume_status
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    ReferenceDateOption,
    app,
    load_all,
    open_store,
    reference_date,
)


@app.command()
def progress(
    exercise: Annotated[str, typer.Argument(help="Exercise name")],
    data_dir: DataDirOption = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Compare the last session on or before this date"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Compare the latest session of an exercise with the one before it.
    """
    store = open_store(data_dir)
    logs, masters = load_all(store)

    ref = reference_date(date)
    occurrences = [
        l for l in logs
        if l.find_exercise(exercise) is not None and (ref is None or l.date <= to_date_str(ref))
    ]
    if not occurrences:
        views.print_error(f"No records for {exercise}")
        raise typer.Exit(1)

    current = occurrences[-1]
    earlier = [l for l in occurrences if l.date < current.date]
    if not earlier:
        views.print_info(f"Only one day recorded for {exercise} ({current.date}); nothing to compare.")
        return
    previous = earlier[-1]

    comparison = calculate_progress(
        current.find_exercise(exercise).sets,  # type: ignore[union-attr]
        previous.find_exercise(exercise).sets,  # type: ignore[union-attr]
        is_bodyweight_exercise(exercise, masters),
        is_cardio_exercise(exercise, masters),
    )

    if json_out:
        print(json.dumps({
            "exercise": exercise,
            "date": current.date,
            "previous_date": previous.date,
            "metrics": {k: asdict(v) for k, v in comparison.items()},
        }, ensure_ascii=False, indent=2))
        return

    views.print_progress(exercise, current.date, previous.date, comparison)


@app.command()
def chart(
    exercise: Annotated[
        Optional[str], typer.Argument(help="Exercise name (omit to list charted exercises)")
    ] = None,
    data_dir: DataDirOption = None,
    metric: Annotated[
        Optional[str],
        typer.Option("--metric", "-m", help=f"One of: {', '.join(CHART_METRICS)}"),
    ] = None,
    from_date: Annotated[
        Optional[str], typer.Option("--from", help="Only points on or after this date")
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show an ASCII progress chart for an exercise.
    """
    store = open_store(data_dir)
    logs, masters = load_all(store)

    if metric is not None and metric not in CHART_METRICS:
        views.print_error(f"Unknown metric: {metric}. Choose from: {', '.join(CHART_METRICS)}")
        raise typer.Exit(1)

    try:
        all_series = build_exercise_chart_data(logs, masters, from_date)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if exercise is None:
        if json_out:
            print(json.dumps([asdict(s) for s in all_series], ensure_ascii=False, indent=2))
            return
        table = Table(title="Charted exercises")
        table.add_column("Exercise", style="cyan")
        table.add_column("Last trained")
        table.add_column("Days", justify="right")
        for s in all_series:
            table.add_row(s.name, s.last_date, str(len(s.points)))
        views.console.print(table)
        return

    series = next((s for s in all_series if s.name == exercise), None)
    if series is None:
        views.print_error(f"No records for {exercise}")
        raise typer.Exit(1)

    if json_out:
        key = metric or default_metric(series)
        print(json.dumps({
            "exercise": series.name,
            "metric": key,
            "points": [{"date": p.date, "value": metric_value(p.stats, key)} for p in series.points],
        }, ensure_ascii=False, indent=2))
        return

    views.print_chart(series, metric)


@app.command()
def volume(
    data_dir: DataDirOption = None,
    date: ReferenceDateOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show weekly sets per muscle group (Monday to Sunday).
    """
    store = open_store(data_dir)
    logs, masters = load_all(store)

    ref = reference_date(date)
    data = calculate_weekly_volume(logs, masters, ref)

    if json_out:
        print(json.dumps([
            {**asdict(d), "status": get_volume_status(d.total_sets)} for d in data
        ], ensure_ascii=False, indent=2))
        return

    views.print_volume(data, format_week_range(ref))


@app.command()
def stagnation(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List exercises whose weekly best has stalled.
    """
    store = open_store(data_dir)
    logs, masters = load_all(store)

    infos = detect_stagnation(logs, masters)

    if json_out:
        print(json.dumps([asdict(i) for i in infos], ensure_ascii=False, indent=2))
        return

    views.print_stagnation(infos)


@app.command()
def deload(
    data_dir: DataDirOption = None,
    date: ReferenceDateOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Check whether a deload (recovery) week is recommended.
    """
    store = open_store(data_dir)
    logs, masters = load_all(store)

    today = reference_date(date)
    weeks = calculate_consecutive_training_weeks(logs, today)
    suggestion = generate_deload_suggestion(logs, masters, today)

    if json_out:
        print(json.dumps({
            "weeks_training": weeks,
            "performance_decline": [
                asdict(d) for d in detect_performance_decline(logs, masters, today)
            ],
            "suggestion": asdict(suggestion) if suggestion else None,
        }, ensure_ascii=False, indent=2))
        return

    views.print_deload(suggestion, weeks)
