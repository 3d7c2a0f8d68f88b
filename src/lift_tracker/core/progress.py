"""
Session-to-session progress comparison.

Compares the sets of one exercise on two occasions and classifies each metric
as improved, maintained or declined using a symmetric ±5% dead-band.
"""

from typing import Sequence

from .config import SAME_THRESHOLD_PERCENT
from .metrics import (
    format_number,
    max_estimated_1rm,
    max_reps,
    max_weight,
    round1,
    total_distance,
    total_duration,
    total_reps,
    total_volume,
)
from .models import ProgressMetric, ProgressStatus, SetEntry, WorkoutLog

ProgressComparison = dict[str, ProgressMetric]


def get_progress_status(current: float, previous: float) -> ProgressStatus:
    """
    Classify a change.

    previous == 0: up if current > 0, else same
    otherwise:     up if Δ% > +5, down if Δ% < -5, else same

    Both band edges are inclusive in "same" (exactly +5% is maintained).
    """
    if previous == 0:
        return "up" if current > 0 else "same"

    diff_percent = (current - previous) / previous * 100

    if diff_percent > SAME_THRESHOLD_PERCENT:
        return "up"
    if diff_percent < -SAME_THRESHOLD_PERCENT:
        return "down"
    return "same"


def create_progress_metric(current: float, previous: float) -> ProgressMetric:
    """Build a comparison record with rounded diff and percent."""
    diff = current - previous
    if previous != 0:
        diff_percent = round1(diff / previous * 100)
    else:
        diff_percent = 100.0 if current > 0 else 0.0

    return ProgressMetric(
        current=current,
        previous=previous,
        diff=round1(diff),
        diff_percent=diff_percent,
        status=get_progress_status(current, previous),
    )


def calculate_weight_progress(
    current_sets: Sequence[SetEntry],
    previous_sets: Sequence[SetEntry],
) -> ProgressComparison:
    return {
        "max_weight": create_progress_metric(max_weight(current_sets), max_weight(previous_sets)),
        "total_volume": create_progress_metric(
            total_volume(current_sets), total_volume(previous_sets)
        ),
        "estimated_1rm": create_progress_metric(
            max_estimated_1rm(current_sets), max_estimated_1rm(previous_sets)
        ),
    }


def calculate_bodyweight_progress(
    current_sets: Sequence[SetEntry],
    previous_sets: Sequence[SetEntry],
) -> ProgressComparison:
    return {
        "max_reps": create_progress_metric(max_reps(current_sets), max_reps(previous_sets)),
        "total_reps": create_progress_metric(total_reps(current_sets), total_reps(previous_sets)),
    }


def calculate_cardio_progress(
    current_sets: Sequence[SetEntry],
    previous_sets: Sequence[SetEntry],
) -> ProgressComparison:
    return {
        "total_duration": create_progress_metric(
            total_duration(current_sets), total_duration(previous_sets)
        ),
        "total_distance": create_progress_metric(
            total_distance(current_sets), total_distance(previous_sets)
        ),
    }


def calculate_progress(
    current_sets: Sequence[SetEntry],
    previous_sets: Sequence[SetEntry],
    is_bodyweight: bool,
    is_cardio: bool,
) -> ProgressComparison:
    """
    Compare two occasions of one exercise with the metrics for its type.

    Cardio takes priority over bodyweight, which takes priority over weighted.

    Args:
        current_sets: Sets from the newer occasion
        previous_sets: Sets from the older occasion
        is_bodyweight: Exercise is tracked by reps
        is_cardio: Exercise is tracked by duration/distance

    Returns:
        Dict of metric name -> ProgressMetric
    """
    if is_cardio:
        return calculate_cardio_progress(current_sets, previous_sets)
    if is_bodyweight:
        return calculate_bodyweight_progress(current_sets, previous_sets)
    return calculate_weight_progress(current_sets, previous_sets)


def find_previous_sets(
    logs: Sequence[WorkoutLog],
    exercise_name: str,
    before_date: str,
) -> list[SetEntry] | None:
    """
    Sets from the most recent log strictly before ``before_date`` that
    contains the exercise, or None if there is none.
    """
    candidates = [
        log for log in logs
        if log.date < before_date and log.find_exercise(exercise_name) is not None
    ]
    if not candidates:
        return None
    latest = max(candidates, key=lambda log: log.date)
    entry = latest.find_exercise(exercise_name)
    return list(entry.sets) if entry is not None else None


def progress_icon(status: ProgressStatus) -> str:
    return {"up": "↑", "down": "↓", "same": "→"}[status]


def format_diff(diff: float, unit: str) -> str:
    """Signed diff for display, e.g. ``+2.5kg`` or ``-1回``."""
    sign = "+" if diff > 0 else ""
    return f"{sign}{format_number(diff)}{unit}"
