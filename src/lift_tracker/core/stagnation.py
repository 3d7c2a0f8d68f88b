"""
Stagnation detection.

An exercise is stagnant when its weekly best has stayed within ±5% of the
latest week's value for at least two consecutive weeks, counting back from
the latest week.  The baseline is always the newest week, not a moving
comparison.
"""

from typing import Sequence

from .config import MIN_WEEKS_FOR_STAGNATION, STAGNATION_THRESHOLD_PERCENT
from .dates import week_start_key
from .metrics import exercise_kind, format_number, primary_metric, round1
from .models import ExerciseKind, ExerciseMaster, StagnationInfo, WorkoutLog

# (metric label, unit) per exercise kind
_METRIC_LABELS: dict[str, tuple[str, str]] = {
    "cardio": ("時間", "分"),
    "bodyweight": ("最大回数", "回"),
    "weighted": ("推定1RM", "kg"),
}


def weekly_best_metrics(
    logs: Sequence[WorkoutLog],
    exercise_name: str,
    kind: ExerciseKind,
) -> list[tuple[str, float]]:
    """
    Weekly best of the exercise's primary metric.

    Args:
        logs: Workout history
        exercise_name: Exercise to track
        kind: Exercise kind, selects the metric

    Returns:
        (week_start YYYY-MM-DD, best value) pairs, oldest week first
    """
    weekly: dict[str, float] = {}

    for log in logs:
        exercise = log.find_exercise(exercise_name)
        if exercise is None:
            continue
        week = week_start_key(log.date)
        value = primary_metric(exercise.sets, kind)
        weekly[week] = max(weekly.get(week, 0), value)

    return sorted(weekly.items())


def _is_within_threshold(value: float, baseline: float, threshold_percent: float) -> bool:
    if baseline == 0:
        return value == 0
    return abs((value - baseline) / baseline) * 100 <= threshold_percent


def calculate_stagnation_weeks(weekly_metrics: Sequence[tuple[str, float]]) -> int:
    """
    Count trailing weeks within the band around the latest week's value.

    Returns 0 when there are fewer than 2 weeks, the latest value is 0, or the
    streak (latest week included) is shorter than 2.
    """
    if len(weekly_metrics) < MIN_WEEKS_FOR_STAGNATION:
        return 0

    baseline = weekly_metrics[-1][1]
    if baseline == 0:
        return 0

    weeks = 1  # latest week
    for _, value in reversed(weekly_metrics[:-1]):
        if not _is_within_threshold(value, baseline, STAGNATION_THRESHOLD_PERCENT):
            break
        weeks += 1

    return weeks if weeks >= MIN_WEEKS_FOR_STAGNATION else 0


def detect_stagnation(
    logs: Sequence[WorkoutLog],
    masters: Sequence[ExerciseMaster],
) -> list[StagnationInfo]:
    """
    Find every stagnant exercise in the history.

    Returns:
        StagnationInfo list, longest stagnation first
    """
    names: dict[str, None] = {}
    for log in logs:
        for ex in log.exercises:
            names.setdefault(ex.name, None)

    infos: list[StagnationInfo] = []

    for name in names:
        kind = exercise_kind(name, masters)
        series = weekly_best_metrics(logs, name, kind)
        weeks = calculate_stagnation_weeks(series)
        if weeks < MIN_WEEKS_FOR_STAGNATION:
            continue

        metric, unit = _METRIC_LABELS[kind]
        infos.append(
            StagnationInfo(
                exercise_name=name,
                metric=metric,
                value=round1(series[-1][1]),
                unit=unit,
                weeks=weeks,
            )
        )

    infos.sort(key=lambda i: i.weeks, reverse=True)
    return infos


def format_stagnation_for_prompt(infos: Sequence[StagnationInfo]) -> str:
    """Render stagnant exercises as a plan-prompt section ('' when none)."""
    if not infos:
        return ""

    lines = [
        f"- {i.exercise_name}: {i.metric} {format_number(i.value)}{i.unit} で {i.weeks}週間停滞"
        for i in infos
    ]
    return "## 停滞中の種目（対策を考慮してください）\n" + "\n".join(lines)
