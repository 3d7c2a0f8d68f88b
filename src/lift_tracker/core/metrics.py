"""
Pure metric computation functions.

All functions are pure, total over their input, and return 0 (or False / an
empty list) for empty or degenerate data rather than raising.
"""

import math
from typing import Sequence

from .config import EPLEY_REPS_DIVISOR
from .models import ExerciseKind, ExerciseMaster, ExerciseStats, SetEntry, TargetMuscle


def round1(value: float) -> float:
    """
    Round to one decimal place with halves rounded up (0.25 -> 0.3).

    Python's round() rounds halves to even.
    """
    return math.floor(value * 10 + 0.5) / 10


def format_number(value: float) -> str:
    """Drop a trailing ``.0`` from whole numbers (``100.0`` -> ``100``)."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# SET-LEVEL PRIMITIVES
# =============================================================================


def calculate_1rm(weight_kg: float, reps: int) -> float:
    """
    Estimate 1RM using the Epley formula.

    1RM = weight * (1 + reps/30), rounded to 0.1 kg

    Args:
        weight_kg: Load lifted
        reps: Reps performed

    Returns:
        Estimated 1RM in kg, or 0 if reps is 0
    """
    if reps == 0:
        return 0.0
    return round1(weight_kg * (1 + reps / EPLEY_REPS_DIVISOR))


def max_weight(sets: Sequence[SetEntry]) -> float:
    """Heaviest load across sets; 0 for no sets."""
    if not sets:
        return 0.0
    return max(s.weight_kg for s in sets)


def total_volume(sets: Sequence[SetEntry]) -> float:
    """
    Total tonnage.

    volume = Σ(weight × reps)

    Bodyweight and cardio sets contribute 0.
    """
    return sum(s.weight_kg * s.reps for s in sets)


def max_estimated_1rm(sets: Sequence[SetEntry]) -> float:
    """Best Epley estimate across sets; 0 for no sets."""
    if not sets:
        return 0.0
    return max(calculate_1rm(s.weight_kg, s.reps) for s in sets)


def max_reps(sets: Sequence[SetEntry]) -> int:
    if not sets:
        return 0
    return max(s.reps for s in sets)


def total_reps(sets: Sequence[SetEntry]) -> int:
    return sum(s.reps for s in sets)


def total_duration(sets: Sequence[SetEntry]) -> float:
    """Total cardio minutes; sets without a duration count as 0."""
    return sum(s.duration_min or 0 for s in sets)


def total_distance(sets: Sequence[SetEntry]) -> float:
    """Total cardio distance in km, rounded to 0.1 km."""
    return round1(sum(s.distance_km or 0 for s in sets))


# =============================================================================
# EXERCISE MASTER LOOKUP
# =============================================================================


def find_master(exercise_name: str, masters: Sequence[ExerciseMaster]) -> ExerciseMaster | None:
    """
    Look up the master record for a logged exercise.

    Names are matched exactly.  This is the only place the name join happens.
    """
    for m in masters:
        if m.name == exercise_name:
            return m
    return None


def is_bodyweight_exercise(exercise_name: str, masters: Sequence[ExerciseMaster]) -> bool:
    master = find_master(exercise_name, masters)
    return master.is_bodyweight if master is not None else False


def is_cardio_exercise(exercise_name: str, masters: Sequence[ExerciseMaster]) -> bool:
    master = find_master(exercise_name, masters)
    return master.is_cardio if master is not None else False


def exercise_kind(exercise_name: str, masters: Sequence[ExerciseMaster]) -> ExerciseKind:
    """Kind of a logged exercise; unregistered names count as weighted."""
    master = find_master(exercise_name, masters)
    return master.kind if master is not None else "weighted"


def target_muscles_for(exercise_name: str, masters: Sequence[ExerciseMaster]) -> list[TargetMuscle]:
    master = find_master(exercise_name, masters)
    return list(master.target_muscles) if master is not None else []


def primary_metric(sets: Sequence[SetEntry], kind: ExerciseKind) -> float:
    """
    The single number used to track an exercise over time.

    cardio     → total duration (minutes)
    bodyweight → max reps
    weighted   → max estimated 1RM (kg)
    """
    if kind == "cardio":
        return total_duration(sets)
    if kind == "bodyweight":
        return max_reps(sets)
    return max_estimated_1rm(sets)


# =============================================================================
# PER-DAY STATS
# =============================================================================


def calculate_exercise_stats(sets: Sequence[SetEntry]) -> ExerciseStats:
    """Compute every chart statistic for one exercise on one day."""
    return ExerciseStats(
        max_weight=max_weight(sets),
        total_volume=total_volume(sets),
        estimated_1rm=max_estimated_1rm(sets),
        max_reps=max_reps(sets),
        total_reps=total_reps(sets),
        total_duration=total_duration(sets),
        total_distance=total_distance(sets),
    )


def merge_exercise_stats(existing: ExerciseStats, new: ExerciseStats) -> ExerciseStats:
    """
    Combine two entries of the same exercise on the same date.

    Peak values take the max; accumulated values are summed.
    """
    return ExerciseStats(
        max_weight=max(existing.max_weight, new.max_weight),
        total_volume=existing.total_volume + new.total_volume,
        estimated_1rm=max(existing.estimated_1rm, new.estimated_1rm),
        max_reps=max(existing.max_reps, new.max_reps),
        total_reps=existing.total_reps + new.total_reps,
        total_duration=existing.total_duration + new.total_duration,
        total_distance=round1(existing.total_distance + new.total_distance),
    )
