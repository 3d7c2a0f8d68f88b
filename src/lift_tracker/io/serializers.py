"""
JSON serialization for workout data models.

Handles conversion between dataclasses and JSON-compatible dicts, plus the
set-entry parser used by the CLI.
"""

import json
import re
from typing import Any

from ..core.dates import parse_date
from ..core.metrics import format_number
from ..core.models import (
    BodyweightSet,
    CardioSet,
    ExerciseEntry,
    ExerciseKind,
    ExerciseMaster,
    SetEntry,
    TargetMuscle,
    WeightedSet,
    WorkoutLog,
    new_entry_id,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate a date string.

    Args:
        date_str: Date string to validate

    Returns:
        The same YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    try:
        parse_date(date_str)
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e
    return date_str


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is not a number or is negative
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


# =============================================================================
# SETS
# =============================================================================


def set_to_dict(s: SetEntry) -> dict[str, Any]:
    """Convert a set to a dict tagged with ``"type"``."""
    if isinstance(s, WeightedSet):
        return {"type": "weighted", "weight_kg": s.weight_kg, "reps": s.reps}
    if isinstance(s, BodyweightSet):
        return {"type": "bodyweight", "reps": s.reps}
    d: dict[str, Any] = {"type": "cardio", "duration_min": s.duration_min}
    if s.distance_km is not None:
        d["distance_km"] = s.distance_km
    return d


def dict_to_set(data: dict[str, Any]) -> SetEntry:
    """
    Convert a tagged dict to a set.

    Raises:
        ValidationError: If the tag is unknown or a field is missing/negative
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Set must be an object, got {data!r}")
    set_type = data.get("type")
    try:
        if set_type == "weighted":
            return WeightedSet(
                weight_kg=float(validate_non_negative(data["weight_kg"], "weight_kg")),
                reps=int(validate_non_negative(data["reps"], "reps")),
            )
        if set_type == "bodyweight":
            return BodyweightSet(reps=int(validate_non_negative(data["reps"], "reps")))
        if set_type == "cardio":
            distance = data.get("distance_km")
            if distance is not None:
                validate_non_negative(distance, "distance_km")
            return CardioSet(
                duration_min=float(validate_non_negative(data["duration_min"], "duration_min")),
                distance_km=float(distance) if distance is not None else None,
            )
    except KeyError as e:
        raise ValidationError(f"Missing field in {set_type} set: {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {set_type} set {data!r}: {e}") from e

    raise ValidationError(f"Invalid set type: {set_type!r}")


# =============================================================================
# LOGS
# =============================================================================


def exercise_entry_to_dict(entry: ExerciseEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "name": entry.name,
        "sets": [set_to_dict(s) for s in entry.sets],
    }


def dict_to_exercise_entry(data: dict[str, Any]) -> ExerciseEntry:
    if not isinstance(data, dict):
        raise ValidationError(f"Exercise entry must be an object, got {data!r}")
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"Invalid exercise name: {name!r}")
    return ExerciseEntry(
        name=name,
        sets=[dict_to_set(s) for s in data.get("sets", [])],
        id=str(data.get("id") or new_entry_id()),
    )


def workout_log_to_dict(log: WorkoutLog) -> dict[str, Any]:
    """
    Convert WorkoutLog to JSON-compatible dict.

    Optional fields are omitted when unset.
    """
    d: dict[str, Any] = {}
    if log.id is not None:
        d["id"] = log.id
    d["date"] = log.date
    d["exercises"] = [exercise_entry_to_dict(e) for e in log.exercises]
    if log.memo:
        d["memo"] = log.memo
    if log.evaluation:
        d["evaluation"] = log.evaluation
    if log.evaluation_generated_at is not None:
        d["evaluation_generated_at"] = log.evaluation_generated_at
    d["created_at"] = log.created_at
    d["updated_at"] = log.updated_at
    return d


def dict_to_workout_log(data: dict[str, Any]) -> WorkoutLog:
    """
    Convert dict to WorkoutLog.

    Raises:
        ValidationError: If data is invalid
    """
    if "date" not in data:
        raise ValidationError("Workout log is missing 'date'")
    date = validate_date(data["date"])

    return WorkoutLog(
        date=date,
        exercises=[dict_to_exercise_entry(e) for e in data.get("exercises", [])],
        memo=data.get("memo") or None,
        evaluation=data.get("evaluation") or None,
        evaluation_generated_at=data.get("evaluation_generated_at"),
        created_at=int(validate_non_negative(data.get("created_at", 0), "created_at")),
        updated_at=int(validate_non_negative(data.get("updated_at", 0), "updated_at")),
        id=int(data["id"]) if data.get("id") is not None else None,
    )


def log_to_json_line(log: WorkoutLog) -> str:
    """Serialize a log as one compact JSONL line."""
    return json.dumps(workout_log_to_dict(log), ensure_ascii=False, separators=(",", ":"))


def json_line_to_log(line: str) -> WorkoutLog:
    """
    Parse one JSONL line into a WorkoutLog.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Workout log line must be a JSON object")
    return dict_to_workout_log(data)


# =============================================================================
# EXERCISE MASTERS
# =============================================================================


def target_muscle_to_dict(t: TargetMuscle) -> dict[str, Any]:
    return {"muscle": t.muscle, "is_main": t.is_main}


def dict_to_target_muscle(data: dict[str, Any]) -> TargetMuscle:
    if not isinstance(data, dict):
        raise ValidationError(f"Target muscle must be an object, got {data!r}")
    try:
        return TargetMuscle(muscle=data["muscle"], is_main=bool(data.get("is_main", True)))
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Invalid target muscle {data!r}: {e}") from e


def exercise_master_to_dict(master: ExerciseMaster) -> dict[str, Any]:
    d: dict[str, Any] = {}
    if master.id is not None:
        d["id"] = master.id
    d["name"] = master.name
    d["is_bodyweight"] = master.is_bodyweight
    d["is_cardio"] = master.is_cardio
    d["target_muscles"] = [target_muscle_to_dict(t) for t in master.target_muscles]
    d["created_at"] = master.created_at
    return d


def dict_to_exercise_master(data: dict[str, Any]) -> ExerciseMaster:
    """
    Convert dict to ExerciseMaster.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Exercise master must be an object, got {data!r}")
    try:
        return ExerciseMaster(
            name=data["name"],
            is_bodyweight=bool(data.get("is_bodyweight", False)),
            is_cardio=bool(data.get("is_cardio", False)),
            target_muscles=[dict_to_target_muscle(t) for t in data.get("target_muscles", [])],
            created_at=int(data.get("created_at", 0)),
            id=int(data["id"]) if data.get("id") is not None else None,
        )
    except KeyError as e:
        raise ValidationError(f"Exercise master is missing {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


# =============================================================================
# SET ENTRY PARSING (CLI)
# =============================================================================

_NUM = r"(\d+(?:\.\d+)?)"

_WEIGHTED_SETS_AT_RE = re.compile(rf"^(\d+)\s*[xX×]\s*(\d+)\s*@\s*{_NUM}\s*(?:kg)?$", re.IGNORECASE)
_WEIGHTED_RE = re.compile(rf"^{_NUM}\s*(?:kg)?\s*[xX×]\s*(\d+)$", re.IGNORECASE)
_BW_SETS_RE = re.compile(r"^(\d+)\s*[xX×]\s*(\d+)$")
_BW_RE = re.compile(r"^(\d+)$")
_CARDIO_RE = re.compile(
    rf"^{_NUM}\s*(?:min|分)?\s*(?:/\s*{_NUM}\s*(?:km)?)?$", re.IGNORECASE
)


def _parse_weighted(part: str) -> list[SetEntry]:
    m = _WEIGHTED_SETS_AT_RE.match(part)
    if m:
        n_sets, reps, weight = int(m.group(1)), int(m.group(2)), float(m.group(3))
        if n_sets < 1:
            raise ValidationError(f"Set count must be at least 1: '{part}'")
        return [WeightedSet(weight_kg=weight, reps=reps) for _ in range(n_sets)]
    m = _WEIGHTED_RE.match(part)
    if m:
        return [WeightedSet(weight_kg=float(m.group(1)), reps=int(m.group(2)))]
    raise ValidationError(
        f"Invalid set format: '{part}'.\n"
        f"Use: weight x reps (e.g. 60x10, 60kg x 10) or sets x reps @ weight (e.g. 3x10@60)."
    )


def _parse_bodyweight(part: str) -> list[SetEntry]:
    m = _BW_SETS_RE.match(part)
    if m:
        n_sets, reps = int(m.group(1)), int(m.group(2))
        if n_sets < 1:
            raise ValidationError(f"Set count must be at least 1: '{part}'")
        return [BodyweightSet(reps=reps) for _ in range(n_sets)]
    m = _BW_RE.match(part)
    if m:
        return [BodyweightSet(reps=int(m.group(1)))]
    raise ValidationError(
        f"Invalid set format: '{part}'.\nUse: reps (e.g. 10, 12, 8) or sets x reps (e.g. 3x10)."
    )


def _parse_cardio(part: str) -> list[SetEntry]:
    m = _CARDIO_RE.match(part)
    if m:
        distance = float(m.group(2)) if m.group(2) is not None else None
        return [CardioSet(duration_min=float(m.group(1)), distance_km=distance)]
    raise ValidationError(
        f"Invalid set format: '{part}'.\nUse: minutes[/km] (e.g. 30min, 30min/5.2km, 30/5.2)."
    )


def parse_sets_string(sets_str: str, kind: ExerciseKind = "weighted") -> list[SetEntry]:
    """
    Parse a comma-separated sets string for an exercise of the given kind.

    weighted:   "60x10, 70x8"   "60kg x 10"   "3x10@60"  (sets x reps @ kg)
    bodyweight: "10, 12, 8"     "3x10"                   (sets x reps)
    cardio:     "30min"         "30min/5.2km" "30/5.2"

    Args:
        sets_str: Sets string to parse
        kind: Exercise kind, selects the grammar

    Returns:
        Parsed sets in entry order

    Raises:
        ValidationError: If format is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    parser = {
        "weighted": _parse_weighted,
        "bodyweight": _parse_bodyweight,
        "cardio": _parse_cardio,
    }[kind]

    sets: list[SetEntry] = []
    for part in (p.strip() for p in sets_str.split(",")):
        if part:
            sets.extend(parser(part))

    if not sets:
        raise ValidationError("No valid sets found in sets string")

    return sets


def format_set(s: SetEntry) -> str:
    """Compact display form, e.g. ``60kg×10``, ``12回``, ``30分/5.2km``."""
    if isinstance(s, WeightedSet):
        return f"{format_number(s.weight_kg)}kg×{s.reps}"
    if isinstance(s, BodyweightSet):
        return f"{s.reps}回"
    text = f"{format_number(s.duration_min)}分"
    if s.distance_km is not None:
        text += f"/{format_number(s.distance_km)}km"
    return text
