"""
Data models for lift-tracker.

Persisted records (WorkoutLog, ExerciseMaster and their parts) and the derived
analytics records the core returns.  Exercise names are the join key between
logged exercises and the master list.
"""

import uuid
from dataclasses import dataclass, field
from typing import ClassVar, Literal, Union

from .config import ALL_MUSCLE_GROUPS, RECOMMENDED_SETS_MAX, RECOMMENDED_SETS_MIN
from .dates import parse_date

MuscleGroup = Literal[
    "chest", "back", "shoulder", "biceps", "triceps",
    "quadriceps", "hamstrings", "glutes", "abs",
]
ExerciseKind = Literal["weighted", "bodyweight", "cardio"]
ProgressStatus = Literal["up", "same", "down"]
VolumeStatus = Literal["none", "insufficient", "optimal", "excessive"]
DeloadReason = Literal["consecutive_weeks", "performance_decline"]


def new_entry_id() -> str:
    """Opaque unique token for a logged exercise."""
    return uuid.uuid4().hex


# =============================================================================
# SETS
# =============================================================================


@dataclass(frozen=True)
class WeightedSet:
    """A set performed with external load.  ``weight_kg == 0`` means unset."""

    weight_kg: float
    reps: int

    kind: ClassVar[str] = "weighted"

    def __post_init__(self) -> None:
        if self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")

    @property
    def duration_min(self) -> float:
        return 0.0

    @property
    def distance_km(self) -> float | None:
        return None


@dataclass(frozen=True)
class BodyweightSet:
    """A set counted in reps only."""

    reps: int

    kind: ClassVar[str] = "bodyweight"

    def __post_init__(self) -> None:
        if self.reps < 0:
            raise ValueError("reps must be non-negative")

    @property
    def weight_kg(self) -> float:
        return 0.0

    @property
    def duration_min(self) -> float:
        return 0.0

    @property
    def distance_km(self) -> float | None:
        return None


@dataclass(frozen=True)
class CardioSet:
    """A cardio bout.  Duration is authoritative; distance is optional."""

    duration_min: float
    distance_km: float | None = None

    kind: ClassVar[str] = "cardio"

    def __post_init__(self) -> None:
        if self.duration_min < 0:
            raise ValueError("duration_min must be non-negative")
        if self.distance_km is not None and self.distance_km < 0:
            raise ValueError("distance_km must be non-negative")

    @property
    def weight_kg(self) -> float:
        return 0.0

    @property
    def reps(self) -> int:
        return 0


SetEntry = Union[WeightedSet, BodyweightSet, CardioSet]


# =============================================================================
# PERSISTED RECORDS
# =============================================================================


@dataclass(frozen=True)
class TargetMuscle:
    """A muscle group an exercise trains, as primary (main) or secondary."""

    muscle: MuscleGroup
    is_main: bool = True

    def __post_init__(self) -> None:
        if self.muscle not in ALL_MUSCLE_GROUPS:
            raise ValueError(f"Invalid muscle group: {self.muscle}")


@dataclass
class ExerciseEntry:
    """
    One exercise as logged on a given day.

    Set order is the order the sets were performed; it matters for display
    only.
    """

    name: str
    sets: list[SetEntry] = field(default_factory=list)
    id: str = field(default_factory=new_entry_id)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Exercise name must be non-empty")


@dataclass
class WorkoutLog:
    """
    A training day.

    One log per date is the convention but not enforced; the aggregators merge
    duplicate dates when they read.
    """

    date: str  # ISO format: YYYY-MM-DD
    exercises: list[ExerciseEntry] = field(default_factory=list)
    memo: str | None = None
    evaluation: str | None = None  # AI evaluation text
    evaluation_generated_at: int | None = None  # epoch millis
    created_at: int = 0  # epoch millis
    updated_at: int = 0  # epoch millis, bumped on every mutation
    id: int | None = None  # assigned by the store

    def __post_init__(self) -> None:
        """Validate log data."""
        parse_date(self.date)
        if self.created_at < 0 or self.updated_at < 0:
            raise ValueError("timestamps must be non-negative")

    def find_exercise(self, name: str) -> ExerciseEntry | None:
        """First exercise in this log with the given name, or None."""
        for ex in self.exercises:
            if ex.name == name:
                return ex
        return None

    @property
    def total_sets(self) -> int:
        return sum(len(ex.sets) for ex in self.exercises)


@dataclass
class ExerciseMaster:
    """
    A registered exercise definition.

    ``name`` is unique and is matched exactly (case and whitespace included)
    against logged exercise names.
    """

    name: str
    is_bodyweight: bool = False
    is_cardio: bool = False
    target_muscles: list[TargetMuscle] = field(default_factory=list)
    created_at: int = 0
    id: int | None = None

    def __post_init__(self) -> None:
        """Validate master data."""
        if not self.name or not self.name.strip():
            raise ValueError("Exercise name must be non-empty")
        if self.is_bodyweight and self.is_cardio:
            raise ValueError(f"{self.name}: bodyweight and cardio are mutually exclusive")
        if self.is_cardio and self.target_muscles:
            raise ValueError(f"{self.name}: cardio exercises have no target muscles")
        seen: set[str] = set()
        for t in self.target_muscles:
            if t.muscle in seen:
                raise ValueError(f"{self.name}: duplicate target muscle {t.muscle}")
            seen.add(t.muscle)

    @property
    def kind(self) -> ExerciseKind:
        if self.is_cardio:
            return "cardio"
        if self.is_bodyweight:
            return "bodyweight"
        return "weighted"


# =============================================================================
# DERIVED (never persisted)
# =============================================================================


@dataclass(frozen=True)
class ExerciseStats:
    """Per-day statistics for one exercise."""

    max_weight: float = 0.0
    total_volume: float = 0.0
    estimated_1rm: float = 0.0
    max_reps: int = 0
    total_reps: int = 0
    total_duration: float = 0.0  # minutes
    total_distance: float = 0.0  # km


@dataclass(frozen=True)
class ChartPoint:
    date: str
    stats: ExerciseStats


@dataclass
class ExerciseChartSeries:
    """Date-ascending statistics for one exercise."""

    name: str
    last_date: str
    points: list[ChartPoint]
    is_bodyweight: bool
    is_cardio: bool


@dataclass(frozen=True)
class ProgressMetric:
    current: float
    previous: float
    diff: float
    diff_percent: float
    status: ProgressStatus


@dataclass(frozen=True)
class WeeklyVolumeData:
    """
    Weekly set count for one muscle group.

    total_sets = main_sets + sub_sets * 0.5
    """

    muscle: MuscleGroup
    label: str
    main_sets: int
    sub_sets: int
    total_sets: float
    recommended: tuple[int, int] = (RECOMMENDED_SETS_MIN, RECOMMENDED_SETS_MAX)


@dataclass(frozen=True)
class StagnationInfo:
    exercise_name: str
    metric: str  # "推定1RM" | "最大回数" | "時間"
    value: float
    unit: str  # "kg" | "回" | "分"
    weeks: int


@dataclass(frozen=True)
class PerformanceDecline:
    exercise_name: str
    decline_percent: float


@dataclass(frozen=True)
class DeloadSuggestion:
    """
    A recommendation to take a recovery week.

    ``performance_decline`` is only set when ``reason`` is
    ``"performance_decline"``.
    """

    reason: DeloadReason
    message: str
    weeks_training: int
    performance_decline: list[PerformanceDecline] | None = None
