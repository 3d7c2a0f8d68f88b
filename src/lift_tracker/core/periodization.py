"""
Periodization and deload recommendations.

Two signals feed the deload decision:
- how many consecutive calendar weeks (Monday start) contain training, and
- how many exercises got weaker in the last 2 weeks versus the 2 weeks before.

Two or more declining exercises outrank a long streak.  A single declining
exercise is treated as noise.
"""

from datetime import date, timedelta
from typing import Sequence

from .config import (
    CONSECUTIVE_WEEKS_THRESHOLD,
    MAX_DECLINES_IN_MESSAGE,
    MIN_DECLINES_FOR_DELOAD,
    PERFORMANCE_CHECK_WEEKS,
    PERFORMANCE_DECLINE_THRESHOLD,
)
from .dates import get_week_start_date, to_date_str, week_start_key, weeks_between
from .metrics import exercise_kind, format_number, primary_metric, round1
from .models import (
    DeloadSuggestion,
    ExerciseKind,
    ExerciseMaster,
    PerformanceDecline,
    WorkoutLog,
)


def calculate_consecutive_training_weeks(
    logs: Sequence[WorkoutLog],
    today: date | None = None,
) -> int:
    """
    Count the current streak of consecutive training weeks.

    A week counts if it holds at least one log.  The streak is 0 when the most
    recent training week is more than one week behind the current week.

    Args:
        logs: Workout history
        today: Reference date (default: today)

    Returns:
        Number of consecutive weeks ending at the latest training week
    """
    if not logs:
        return 0

    weeks = sorted({week_start_key(log.date) for log in logs}, reverse=True)

    current_week = to_date_str(get_week_start_date(today or date.today()))
    if weeks_between(current_week, weeks[0]) > 1:
        return 0

    streak = 1
    for newer, older in zip(weeks, weeks[1:]):
        if weeks_between(newer, older) != 1:
            break
        streak += 1

    return streak


def _best_value(
    logs: Sequence[WorkoutLog],
    exercise_name: str,
    kind: ExerciseKind,
) -> float | None:
    best: float | None = None
    for log in logs:
        exercise = log.find_exercise(exercise_name)
        if exercise is None:
            continue
        value = primary_metric(exercise.sets, kind)
        if best is None or value > best:
            best = value
    return best


def calculate_exercise_performance_change(
    logs: Sequence[WorkoutLog],
    exercise_name: str,
    kind: ExerciseKind,
    today: date | None = None,
) -> float | None:
    """
    Percent change of the best value in the last 2 weeks vs the 2 weeks before.

    recent:   today-14d <  date
    previous: today-28d <  date <= today-14d

    change = (recent_max - previous_max) / previous_max * 100

    Returns:
        Percent change, or None when fewer than 2 logs contain the exercise,
        either window is empty, or the previous best is 0
    """
    with_exercise = [log for log in logs if log.find_exercise(exercise_name) is not None]
    if len(with_exercise) < 2:
        return None

    today = today or date.today()
    two_weeks_ago = to_date_str(today - timedelta(weeks=PERFORMANCE_CHECK_WEEKS))
    four_weeks_ago = to_date_str(today - timedelta(weeks=PERFORMANCE_CHECK_WEEKS * 2))

    recent = [log for log in with_exercise if log.date > two_weeks_ago]
    previous = [log for log in with_exercise if four_weeks_ago < log.date <= two_weeks_ago]

    recent_max = _best_value(recent, exercise_name, kind)
    previous_max = _best_value(previous, exercise_name, kind)

    if recent_max is None or previous_max is None or previous_max == 0:
        return None

    return (recent_max - previous_max) / previous_max * 100


def detect_performance_decline(
    logs: Sequence[WorkoutLog],
    masters: Sequence[ExerciseMaster],
    today: date | None = None,
) -> list[PerformanceDecline]:
    """
    Exercises whose 2-week best dropped by 5% or more.

    Returns:
        Declines sorted most severe first, percent rounded to 0.1
    """
    names: dict[str, None] = {}
    for log in logs:
        for ex in log.exercises:
            names.setdefault(ex.name, None)

    declines: list[PerformanceDecline] = []
    for name in names:
        change = calculate_exercise_performance_change(
            logs, name, exercise_kind(name, masters), today
        )
        if change is not None and change <= PERFORMANCE_DECLINE_THRESHOLD:
            declines.append(PerformanceDecline(exercise_name=name, decline_percent=round1(change)))

    declines.sort(key=lambda d: d.decline_percent)
    return declines


def generate_deload_suggestion(
    logs: Sequence[WorkoutLog],
    masters: Sequence[ExerciseMaster],
    today: date | None = None,
) -> DeloadSuggestion | None:
    """
    Decide whether a deload week is due.

    Priority:
    1. >= 2 declining exercises → performance_decline
    2. streak >= 4 weeks        → consecutive_weeks
    3. otherwise                → None
    """
    weeks = calculate_consecutive_training_weeks(logs, today)
    declines = detect_performance_decline(logs, masters, today)

    if len(declines) >= MIN_DECLINES_FOR_DELOAD:
        names = "、".join(d.exercise_name for d in declines[:MAX_DECLINES_IN_MESSAGE])
        return DeloadSuggestion(
            reason="performance_decline",
            message=f"{names}などでパフォーマンスが低下しています。ディロード週（回復週）を検討してください。",
            weeks_training=weeks,
            performance_decline=declines,
        )

    if weeks >= CONSECUTIVE_WEEKS_THRESHOLD:
        return DeloadSuggestion(
            reason="consecutive_weeks",
            message=f"{weeks}週連続でトレーニングを継続しています。ディロード週（回復週）を検討してください。",
            weeks_training=weeks,
        )

    return None


def format_deload_for_prompt(suggestion: DeloadSuggestion) -> str:
    """Render a deload suggestion plus deload-week instructions for the plan prompt."""
    lines = ["## ディロード推奨"]

    if suggestion.reason == "consecutive_weeks":
        lines.append(f"- 理由: {suggestion.weeks_training}週連続のトレーニング継続")
    else:
        lines.append("- 理由: パフォーマンス低下を検出")
        for d in suggestion.performance_decline or []:
            lines.append(f"  - {d.exercise_name}: {format_number(d.decline_percent)}%")

    lines.append("")
    lines.append("【ディロード時のプラン指示】")
    lines.append("- ボリュームを通常の50-60%に抑える")
    lines.append("- 重量は維持または少し軽く")
    lines.append("- セット数を減らす（3セット→2セット）")
    lines.append("- 種目数も減らす")

    return "\n".join(lines)
