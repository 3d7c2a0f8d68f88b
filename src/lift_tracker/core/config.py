"""
Configuration constants for the training-analytics engine.

All adjustable thresholds are centralized here for easy tuning.
"""

from typing import Final

# =============================================================================
# MUSCLE GROUPS
# =============================================================================

ALL_MUSCLE_GROUPS: Final[tuple[str, ...]] = (
    "chest",
    "back",
    "shoulder",
    "biceps",
    "triceps",
    "quadriceps",
    "hamstrings",
    "glutes",
    "abs",
)

MUSCLE_GROUP_LABELS: Final[dict[str, str]] = {
    "chest": "胸",
    "back": "背中",
    "shoulder": "肩",
    "biceps": "二頭",
    "triceps": "三頭",
    "quadriceps": "四頭",
    "hamstrings": "ハム",
    "glutes": "臀部",
    "abs": "腹筋",
}

# =============================================================================
# STRENGTH ESTIMATION
# =============================================================================

EPLEY_REPS_DIVISOR: Final[float] = 30.0  # 1RM = w * (1 + reps / 30)

# =============================================================================
# PROGRESS COMPARISON
# =============================================================================

SAME_THRESHOLD_PERCENT: Final[float] = 5.0  # ±5% dead-band = "maintained"

# =============================================================================
# WEEKLY VOLUME
# =============================================================================

RECOMMENDED_SETS_MIN: Final[int] = 10  # Hard sets per muscle group per week
RECOMMENDED_SETS_MAX: Final[int] = 20
SUB_SET_WEIGHT: Final[float] = 0.5  # Secondary muscle counts at half a set

# =============================================================================
# STAGNATION
# =============================================================================

STAGNATION_THRESHOLD_PERCENT: Final[float] = 5.0  # Band around latest week
MIN_WEEKS_FOR_STAGNATION: Final[int] = 2

# =============================================================================
# PERIODIZATION / DELOAD
# =============================================================================

CONSECUTIVE_WEEKS_THRESHOLD: Final[int] = 4  # Streak that triggers a deload
PERFORMANCE_DECLINE_THRESHOLD: Final[float] = -5.0  # Percent, inclusive
PERFORMANCE_CHECK_WEEKS: Final[int] = 2  # Width of each comparison window
MIN_DECLINES_FOR_DELOAD: Final[int] = 2
MAX_DECLINES_IN_MESSAGE: Final[int] = 3
