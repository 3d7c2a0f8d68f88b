"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workout data.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.ascii_plot import create_metric_plot, create_simple_bar_chart
from ..core.config import MUSCLE_GROUP_LABELS, RECOMMENDED_SETS_MAX, RECOMMENDED_SETS_MIN
from ..core.metrics import format_number
from ..core.models import (
    DeloadSuggestion,
    ExerciseChartSeries,
    ExerciseMaster,
    StagnationInfo,
    WeeklyVolumeData,
    WorkoutLog,
)
from ..core.progress import ProgressComparison, format_diff, progress_icon
from ..core.volume import generate_volume_advice, get_volume_status
from ..io.serializers import format_set

console = Console()

# metric key -> (label, unit)
PROGRESS_LABELS: dict[str, tuple[str, str]] = {
    "max_weight": ("Max weight", "kg"),
    "total_volume": ("Total volume", "kg"),
    "estimated_1rm": ("Estimated 1RM", "kg"),
    "max_reps": ("Max reps", "回"),
    "total_reps": ("Total reps", "回"),
    "total_duration": ("Duration", "分"),
    "total_distance": ("Distance", "km"),
}

_STATUS_STYLE = {"up": "green", "same": "yellow", "down": "red"}

_VOLUME_STYLE = {
    "none": "dim",
    "insufficient": "yellow",
    "optimal": "green",
    "excessive": "red",
}


def _sets_summary(log: WorkoutLog) -> str:
    return ", ".join(f"{ex.name} ×{len(ex.sets)}" for ex in log.exercises)


def format_log_table(logs: list[WorkoutLog]) -> Table:
    """
    Create a Rich table listing workout logs.

    Args:
        logs: Logs to display, in display order

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")

    table.add_column("ID", justify="right", style="dim", width=4)
    table.add_column("Date", style="cyan")
    table.add_column("Exercises")
    table.add_column("Sets", justify="right", style="bold")
    table.add_column("Memo", style="dim", max_width=24, overflow="ellipsis")
    table.add_column("AI", justify="center")

    for log in logs:
        table.add_row(
            str(log.id),
            log.date,
            _sets_summary(log),
            str(log.total_sets),
            (log.memo or "").replace("\n", " "),
            "✓" if log.evaluation else "",
        )

    return table


def print_history(logs: list[WorkoutLog]) -> None:
    """Print the log list, newest first."""
    if not logs:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return
    console.print(format_log_table(list(reversed(logs))))


def print_log_detail(log: WorkoutLog, comparisons: dict[str, ProgressComparison]) -> None:
    """
    Print one workout with every set and the comparison to the previous time.

    Args:
        log: Log to show
        comparisons: Exercise name -> comparison; exercises without a
            previous occurrence are absent
    """
    console.print()
    console.print(f"[bold cyan]{log.date}[/bold cyan]  [dim]#{log.id}[/dim]")

    for ex in log.exercises:
        console.print()
        console.print(f"[bold]{ex.name}[/bold]")
        for i, s in enumerate(ex.sets, 1):
            console.print(f"  {i}. {format_set(s)}")
        comparison = comparisons.get(ex.name)
        if comparison:
            console.print("  " + format_comparison(comparison))

    if log.memo:
        console.print()
        console.print("[bold]Memo[/bold]")
        console.print(log.memo, markup=False)

    if log.evaluation:
        console.print()
        console.print("[bold magenta]AI evaluation[/bold magenta]")
        console.print(log.evaluation, markup=False)

    console.print()


def format_comparison(comparison: ProgressComparison) -> str:
    """One line of rich markup, e.g. ``↑ Estimated 1RM +2.5kg (+3.1%)``."""
    parts = []
    for key, metric in comparison.items():
        label, unit = PROGRESS_LABELS[key]
        style = _STATUS_STYLE[metric.status]
        parts.append(
            f"[{style}]{progress_icon(metric.status)} {label} "
            f"{format_diff(metric.diff, unit)} ({format_diff(metric.diff_percent, '%')})[/{style}]"
        )
    return "  ".join(parts)


def print_progress(name: str, date: str, previous_date: str, comparison: ProgressComparison) -> None:
    """Print a progress table for one exercise."""
    table = Table(title=f"{name}: {date} vs {previous_date}")
    table.add_column("Metric")
    table.add_column("Current", justify="right", style="bold")
    table.add_column("Previous", justify="right")
    table.add_column("Diff", justify="right")
    table.add_column("Diff %", justify="right")
    table.add_column("", justify="center")

    for key, metric in comparison.items():
        label, unit = PROGRESS_LABELS[key]
        style = _STATUS_STYLE[metric.status]
        table.add_row(
            label,
            f"{format_number(metric.current)}{unit}",
            f"{format_number(metric.previous)}{unit}",
            format_diff(metric.diff, unit),
            format_diff(metric.diff_percent, "%"),
            f"[{style}]{progress_icon(metric.status)}[/{style}]",
        )

    console.print(table)


def print_exercises(masters: list[ExerciseMaster]) -> None:
    """Print the registered exercise list."""
    if not masters:
        console.print("[yellow]No exercises registered.[/yellow]")
        return

    table = Table(title="Exercises")
    table.add_column("ID", justify="right", style="dim", width=4)
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Main")
    table.add_column("Sub", style="dim")

    for m in masters:
        main = " ".join(MUSCLE_GROUP_LABELS[t.muscle] for t in m.target_muscles if t.is_main)
        sub = " ".join(MUSCLE_GROUP_LABELS[t.muscle] for t in m.target_muscles if not t.is_main)
        table.add_row(str(m.id), m.name, m.kind, main, sub)

    console.print(table)


def print_volume(data: list[WeeklyVolumeData], week_label: str) -> None:
    """Print weekly sets per muscle group with status and advice."""
    table = Table(
        title=f"Weekly volume {week_label} "
        f"(recommended {RECOMMENDED_SETS_MIN}-{RECOMMENDED_SETS_MAX} sets)"
    )
    table.add_column("Muscle", style="cyan")
    table.add_column("Main", justify="right")
    table.add_column("Sub", justify="right", style="dim")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Status")

    for d in data:
        status = get_volume_status(d.total_sets)
        style = _VOLUME_STYLE[status]
        table.add_row(
            d.label,
            str(d.main_sets),
            str(d.sub_sets),
            f"{d.total_sets:.1f}",
            f"[{style}]{status}[/{style}]",
        )

    console.print(table)
    console.print()
    console.print(
        create_simple_bar_chart(
            [d.label for d in data],
            [d.total_sets for d in data],
            markers=(RECOMMENDED_SETS_MIN, RECOMMENDED_SETS_MAX),
        )
    )

    advice = generate_volume_advice(data)
    if advice:
        console.print()
        for line in advice:
            console.print(f"[yellow]• {line}[/yellow]")


def print_stagnation(infos: list[StagnationInfo]) -> None:
    if not infos:
        console.print("[green]No stagnating exercises.[/green]")
        return

    table = Table(title="Stagnating exercises")
    table.add_column("Exercise", style="cyan")
    table.add_column("Metric")
    table.add_column("Value", justify="right", style="bold")
    table.add_column("Weeks", justify="right", style="red")

    for i in infos:
        table.add_row(i.exercise_name, i.metric, f"{format_number(i.value)}{i.unit}", str(i.weeks))

    console.print(table)


def print_deload(suggestion: DeloadSuggestion | None, weeks_training: int) -> None:
    console.print(f"Consecutive training weeks: [bold]{weeks_training}[/bold]")
    if suggestion is None:
        console.print("[green]No deload needed right now.[/green]")
        return

    console.print(f"[bold yellow]{suggestion.message}[/bold yellow]")
    for d in suggestion.performance_decline or []:
        console.print(f"  [red]{d.exercise_name}: {format_number(d.decline_percent)}%[/red]")


def print_chart(series: ExerciseChartSeries, metric: str | None = None) -> None:
    """Print an ASCII progress chart for one exercise."""
    console.print(create_metric_plot(series, metric), markup=False, highlight=False)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {escape(message)}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
