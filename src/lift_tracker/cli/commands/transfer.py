"""Markdown export and import commands."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ...io.markdown import apply_import, export_markdown, parse_export_markdown
from ...io.serializers import ValidationError, validate_date
from .. import views
from ..app import DataDirOption, app, load_all, open_store


@app.command()
def export(
    data_dir: DataDirOption = None,
    from_date: Annotated[
        Optional[str], typer.Option("--from", help="First date to export (default: oldest log)")
    ] = None,
    to_date: Annotated[
        Optional[str], typer.Option("--to", help="Last date to export (default: newest log)")
    ] = None,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write to this file instead of stdout")
    ] = None,
) -> None:
    """
    Export workouts as Markdown, newest day first.
    """
    store = open_store(data_dir)
    logs, _ = load_all(store)

    try:
        if from_date:
            validate_date(from_date)
        if to_date:
            validate_date(to_date)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    selected = [
        l for l in logs
        if (not from_date or l.date >= from_date) and (not to_date or l.date <= to_date)
    ]
    if not selected:
        views.print_warning("No workouts in the selected range.")
        return

    start = from_date or selected[0].date
    end = to_date or selected[-1].date
    text = export_markdown(selected, start, end)

    if output is None:
        print(text)
        return

    output.write_text(text + "\n", encoding="utf-8")
    views.print_success(f"Exported {len(selected)} workouts to {output}")


@app.command("import")
def import_(
    file: Annotated[Path, typer.Argument(help="Markdown file written by 'export'")],
    data_dir: DataDirOption = None,
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", help="Replace workouts on dates that already have one"),
    ] = False,
) -> None:
    """
    Import workouts from exported Markdown.
    """
    store = open_store(data_dir)

    try:
        text = file.read_text(encoding="utf-8")
    except OSError as e:
        views.print_error(f"Cannot read {file}: {e}")
        raise typer.Exit(1)

    try:
        result = parse_export_markdown(text)
    except ValueError as e:
        views.print_error(f"Invalid export file: {e}")
        raise typer.Exit(1)

    if not result.logs:
        views.print_error(f"No workouts found in {file}")
        raise typer.Exit(1)

    try:
        summary = apply_import(store, result, overwrite=overwrite)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Imported {summary.imported} workouts")
    if summary.new_exercises:
        views.print_info(f"Registered new exercises: {', '.join(summary.new_exercises)}")
    if summary.skipped_dates:
        views.print_warning(
            f"Skipped dates that already have workouts: {', '.join(summary.skipped_dates)} "
            "(use --overwrite to replace them)"
        )
    if summary.replaced_dates:
        views.print_info(f"Replaced workouts on: {', '.join(summary.replaced_dates)}")
