"""
Per-exercise history series for charts.

Folds the full log history into one date-ascending series of ExerciseStats per
exercise name.
"""

from typing import Sequence

from .dates import parse_date
from .metrics import (
    calculate_exercise_stats,
    is_bodyweight_exercise,
    is_cardio_exercise,
    merge_exercise_stats,
)
from .models import ChartPoint, ExerciseChartSeries, ExerciseMaster, ExerciseStats, WorkoutLog


def build_exercise_chart_data(
    logs: Sequence[WorkoutLog],
    masters: Sequence[ExerciseMaster],
    filter_from_date: str | None = None,
) -> list[ExerciseChartSeries]:
    """
    Build chart series for every exercise in the history.

    Entries of the same exercise on the same date (duplicate-date logs, or the
    exercise logged twice in one log) are merged before the date filter is
    applied.  Exercises with no points left after filtering are dropped.

    Args:
        logs: Workout history in any order
        masters: Registered exercises (for bodyweight/cardio classification)
        filter_from_date: Inclusive YYYY-MM-DD lower bound, or None

    Returns:
        Series ordered by most recently trained exercise first

    Raises:
        ValueError: If filter_from_date is not a YYYY-MM-DD date
    """
    if filter_from_date is not None:
        parse_date(filter_from_date)

    # Insertion-ordered: first appearance of each name, then of each date
    by_exercise: dict[str, dict[str, ExerciseStats]] = {}

    for log in logs:
        for ex in log.exercises:
            date_map = by_exercise.setdefault(ex.name, {})
            stats = calculate_exercise_stats(ex.sets)
            existing = date_map.get(log.date)
            date_map[log.date] = (
                merge_exercise_stats(existing, stats) if existing is not None else stats
            )

    result: list[ExerciseChartSeries] = []

    for name, date_map in by_exercise.items():
        points = [ChartPoint(date=d, stats=s) for d, s in sorted(date_map.items())]
        if filter_from_date is not None:
            points = [p for p in points if p.date >= filter_from_date]
        if not points:
            continue

        result.append(
            ExerciseChartSeries(
                name=name,
                last_date=points[-1].date,
                points=points,
                is_bodyweight=is_bodyweight_exercise(name, masters),
                is_cardio=is_cardio_exercise(name, masters),
            )
        )

    # Stable: ties keep first-appearance order
    result.sort(key=lambda s: s.last_date, reverse=True)
    return result
