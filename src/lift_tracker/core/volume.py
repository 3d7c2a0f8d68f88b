"""
Weekly training volume per muscle group.

Each logged set counts toward every muscle its exercise targets: a full set
for main (primary) muscles, half a set for secondary muscles.  Weeks run
Monday through Sunday.
"""

from datetime import date
from typing import Sequence

from .config import (
    ALL_MUSCLE_GROUPS,
    MUSCLE_GROUP_LABELS,
    RECOMMENDED_SETS_MAX,
    RECOMMENDED_SETS_MIN,
    SUB_SET_WEIGHT,
)
from .dates import get_week_end_date, get_week_start_date, parse_date
from .metrics import target_muscles_for
from .models import ExerciseMaster, VolumeStatus, WeeklyVolumeData, WorkoutLog


def calculate_weekly_volume(
    logs: Sequence[WorkoutLog],
    masters: Sequence[ExerciseMaster],
    target_date: date | None = None,
) -> list[WeeklyVolumeData]:
    """
    Count weekly sets per muscle group for the week containing target_date.

    Exercises without a master record, or whose master has no target muscles,
    contribute nothing.

    Args:
        logs: Workout history (only logs inside the week are counted)
        masters: Registered exercises with target muscles
        target_date: Any day of the week to report (default: today)

    Returns:
        One record per muscle group, in fixed order, zeros included
    """
    week_start = get_week_start_date(target_date)
    week_end = get_week_end_date(target_date)

    main: dict[str, int] = {m: 0 for m in ALL_MUSCLE_GROUPS}
    sub: dict[str, int] = {m: 0 for m in ALL_MUSCLE_GROUPS}

    for log in logs:
        if not week_start <= parse_date(log.date) <= week_end:
            continue
        for exercise in log.exercises:
            set_count = len(exercise.sets)
            for target in target_muscles_for(exercise.name, masters):
                if target.is_main:
                    main[target.muscle] += set_count
                else:
                    sub[target.muscle] += set_count

    return [
        WeeklyVolumeData(
            muscle=muscle,  # type: ignore[arg-type]
            label=MUSCLE_GROUP_LABELS[muscle],
            main_sets=main[muscle],
            sub_sets=sub[muscle],
            total_sets=main[muscle] + sub[muscle] * SUB_SET_WEIGHT,
            recommended=(RECOMMENDED_SETS_MIN, RECOMMENDED_SETS_MAX),
        )
        for muscle in ALL_MUSCLE_GROUPS
    ]


def get_volume_status(total_sets: float) -> VolumeStatus:
    """
    Classify weekly sets against the recommended band.

    0 → none, <10 → insufficient, 10..20 → optimal, >20 → excessive
    """
    if total_sets == 0:
        return "none"
    if total_sets < RECOMMENDED_SETS_MIN:
        return "insufficient"
    if total_sets <= RECOMMENDED_SETS_MAX:
        return "optimal"
    return "excessive"


def generate_volume_advice(data: Sequence[WeeklyVolumeData]) -> list[str]:
    """One advice sentence per muscle group outside the recommended band."""
    advice: list[str] = []

    for d in data:
        status = get_volume_status(d.total_sets)
        if status == "excessive":
            advice.append(
                f"{d.label}が{d.total_sets:.1f}セットで過多です。"
                "回復のためセット数を減らすことを検討してください"
            )
        elif status == "insufficient":
            advice.append(
                f"{d.label}が{d.total_sets:.1f}セットで不足です。種目の追加を検討してください"
            )

    return advice


def format_volume_for_prompt(data: Sequence[WeeklyVolumeData]) -> str | None:
    """
    Render out-of-band muscle groups as a section for the plan prompt.

    Returns None when every group is optimal or untrained.
    """
    insufficient = [d for d in data if get_volume_status(d.total_sets) == "insufficient"]
    excessive = [d for d in data if get_volume_status(d.total_sets) == "excessive"]

    if not insufficient and not excessive:
        return None

    parts: list[str] = []
    if insufficient:
        parts.append("不足: " + ", ".join(f"{d.label}({d.total_sets:.1f}セット)" for d in insufficient))
    if excessive:
        parts.append("過多: " + ", ".join(f"{d.label}({d.total_sets:.1f}セット)" for d in excessive))

    header = f"週間ボリューム状況（推奨: 各部位{RECOMMENDED_SETS_MIN}-{RECOMMENDED_SETS_MAX}セット/週）"
    return header + "\n" + "\n".join(parts)
