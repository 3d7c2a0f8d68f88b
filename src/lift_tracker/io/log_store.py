"""
File-based storage for workout logs and exercise masters.

Handles reading, writing, and managing the data directory.
"""

import json
import time
from dataclasses import replace
from pathlib import Path

from ..core.models import ExerciseEntry, ExerciseMaster, WorkoutLog
from .config_loader import get_user_config_dir, load_preset_exercises
from .serializers import (
    ValidationError,
    dict_to_exercise_master,
    exercise_master_to_dict,
    json_line_to_log,
    log_to_json_line,
    validate_date,
)


def now_millis() -> int:
    return int(time.time() * 1000)


class LogStore:
    """
    Manages workout data stored in a directory.

    - logs.jsonl:     one WorkoutLog per line
    - exercises.json: list of exercise masters

    Ids are assigned by the store: the next integer after the largest id in
    use.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding logs.jsonl and exercises.json
        """
        self.data_dir = Path(data_dir)
        self.logs_path = self.data_dir / "logs.jsonl"
        self.exercises_path = self.data_dir / "exercises.json"

    def exists(self) -> bool:
        """Check if the store has been initialized."""
        return self.logs_path.exists() and self.exercises_path.exists()

    def init(self, seed_presets: bool = True) -> int:
        """
        Create the data files if they don't exist.

        Seeds preset exercise masters when the master list is empty.  An
        exercises.yaml in the data directory extends the bundled presets.

        Returns:
            Number of preset masters seeded
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if not self.logs_path.exists():
            self.logs_path.touch()
        if not self.exercises_path.exists():
            self._write_masters([])

        if not seed_presets or self.load_masters():
            return 0

        now = now_millis()
        presets = [
            replace(m, id=i, created_at=now)
            for i, m in enumerate(load_preset_exercises(self.data_dir), start=1)
        ]
        self._write_masters(presets)
        return len(presets)

    def _require_init(self) -> None:
        if not self.exists():
            raise FileNotFoundError(
                f"Data directory not initialized: {self.data_dir}. Run 'init' first."
            )

    # =========================================================================
    # WORKOUT LOGS
    # =========================================================================

    def load_logs(self) -> list[WorkoutLog]:
        """
        Load all workout logs.

        Returns:
            Logs sorted by date, then id

        Raises:
            FileNotFoundError: If the store is not initialized
            ValidationError: If a line cannot be parsed
        """
        self._require_init()

        logs: list[WorkoutLog] = []

        with open(self.logs_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    logs.append(json_line_to_log(line))
                except (ValidationError, TypeError, ValueError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.logs_path}: {e}"
                    ) from e

        logs.sort(key=lambda log: (log.date, log.id or 0))
        return logs

    def _write_logs(self, logs: list[WorkoutLog]) -> None:
        with open(self.logs_path, "w", encoding="utf-8") as f:
            for log in logs:
                f.write(log_to_json_line(log) + "\n")

    def get_log(self, log_id: int) -> WorkoutLog | None:
        for log in self.load_logs():
            if log.id == log_id:
                return log
        return None

    def get_logs_by_date(self, date: str) -> list[WorkoutLog]:
        validate_date(date)
        return [log for log in self.load_logs() if log.date == date]

    def get_logs_between(self, start: str, end: str) -> list[WorkoutLog]:
        """Logs with start <= date <= end."""
        validate_date(start)
        validate_date(end)
        return [log for log in self.load_logs() if start <= log.date <= end]

    def add_log(self, log: WorkoutLog) -> WorkoutLog:
        """
        Append a new log.

        Assigns the next id and sets both timestamps.

        Returns:
            The stored log
        """
        logs = self.load_logs()
        now = now_millis()
        next_id = max((l.id or 0 for l in logs), default=0) + 1
        stored = replace(log, id=next_id, created_at=now, updated_at=now)
        logs.append(stored)
        self._write_logs(logs)
        return stored

    def add_logs(self, new_logs: list[WorkoutLog]) -> list[WorkoutLog]:
        """Append several logs in one write.  Ids are assigned in list order."""
        logs = self.load_logs()
        now = now_millis()
        next_id = max((l.id or 0 for l in logs), default=0) + 1
        stored = [
            replace(log, id=next_id + i, created_at=now, updated_at=now)
            for i, log in enumerate(new_logs)
        ]
        self._write_logs(logs + stored)
        return stored

    def update_log(self, log: WorkoutLog) -> WorkoutLog:
        """
        Replace the stored log with the same id, bumping updated_at.

        Raises:
            KeyError: If no log has that id
        """
        logs = self.load_logs()
        for i, existing in enumerate(logs):
            if existing.id == log.id:
                stored = replace(log, updated_at=max(now_millis(), existing.updated_at + 1))
                logs[i] = stored
                self._write_logs(logs)
                return stored
        raise KeyError(f"Workout log not found: {log.id}")

    def delete_log(self, log_id: int) -> None:
        """
        Delete the log with the given id.

        Raises:
            KeyError: If no log has that id
        """
        logs = self.load_logs()
        remaining = [log for log in logs if log.id != log_id]
        if len(remaining) == len(logs):
            raise KeyError(f"Workout log not found: {log_id}")
        self._write_logs(remaining)

    def add_exercise_to_date(
        self,
        date: str,
        entry: ExerciseEntry,
        memo: str | None = None,
    ) -> WorkoutLog:
        """
        Record an exercise on a date.

        Appends to the first existing log for that date, or creates one.  A
        memo, when given, replaces the log's memo.

        Returns:
            The stored log
        """
        validate_date(date)
        existing = self.get_logs_by_date(date)
        if existing:
            log = existing[0]
            log.exercises.append(entry)
            if memo is not None:
                log.memo = memo
            return self.update_log(log)
        return self.add_log(WorkoutLog(date=date, exercises=[entry], memo=memo))

    def set_memo(self, log_id: int, memo: str | None) -> WorkoutLog:
        log = self.get_log(log_id)
        if log is None:
            raise KeyError(f"Workout log not found: {log_id}")
        log.memo = memo or None
        return self.update_log(log)

    def set_evaluation(self, log_id: int, text: str) -> WorkoutLog:
        """Store an AI evaluation on a log, stamping its generation time."""
        log = self.get_log(log_id)
        if log is None:
            raise KeyError(f"Workout log not found: {log_id}")
        log.evaluation = text
        log.evaluation_generated_at = now_millis()
        return self.update_log(log)

    # =========================================================================
    # EXERCISE MASTERS
    # =========================================================================

    def load_masters(self) -> list[ExerciseMaster]:
        """
        Load exercise masters in id order.

        Raises:
            FileNotFoundError: If exercises.json does not exist
            ValidationError: If the file is malformed
        """
        if not self.exercises_path.exists():
            raise FileNotFoundError(
                f"Exercise list not found: {self.exercises_path}. Run 'init' first."
            )

        try:
            with open(self.exercises_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.exercises_path}: {e}") from e

        if not isinstance(data, list):
            raise ValidationError(f"{self.exercises_path} must contain a JSON list")

        masters: list[ExerciseMaster] = []
        for index, item in enumerate(data, 1):
            try:
                masters.append(dict_to_exercise_master(item))
            except ValidationError as e:
                raise ValidationError(
                    f"Error parsing entry {index} in {self.exercises_path}: {e}"
                ) from e
        masters.sort(key=lambda m: m.id or 0)
        return masters

    def _write_masters(self, masters: list[ExerciseMaster]) -> None:
        with open(self.exercises_path, "w", encoding="utf-8") as f:
            json.dump(
                [exercise_master_to_dict(m) for m in masters], f, ensure_ascii=False, indent=2
            )

    def get_master(self, name: str) -> ExerciseMaster | None:
        for m in self.load_masters():
            if m.name == name:
                return m
        return None

    def add_master(self, master: ExerciseMaster) -> ExerciseMaster:
        """
        Register a new exercise.

        Raises:
            ValidationError: If an exercise with the same name exists
        """
        masters = self.load_masters()
        if any(m.name == master.name for m in masters):
            raise ValidationError(f"Exercise already exists: {master.name}")
        next_id = max((m.id or 0 for m in masters), default=0) + 1
        stored = replace(master, id=next_id, created_at=master.created_at or now_millis())
        masters.append(stored)
        self._write_masters(masters)
        return stored

    def update_master(self, master: ExerciseMaster) -> ExerciseMaster:
        """
        Replace the master with the same id.

        Raises:
            KeyError: If no master has that id
            ValidationError: If the new name collides with another exercise
        """
        masters = self.load_masters()
        if any(m.name == master.name and m.id != master.id for m in masters):
            raise ValidationError(f"Exercise already exists: {master.name}")
        for i, existing in enumerate(masters):
            if existing.id == master.id:
                masters[i] = master
                self._write_masters(masters)
                return master
        raise KeyError(f"Exercise not found: id {master.id}")

    def delete_master(self, name: str) -> None:
        """
        Delete an exercise by name.  Logged entries are left untouched.

        Raises:
            KeyError: If no exercise has that name
        """
        masters = self.load_masters()
        remaining = [m for m in masters if m.name != name]
        if len(remaining) == len(masters):
            raise KeyError(f"Exercise not found: {name}")
        self._write_masters(remaining)


def get_default_data_dir() -> Path:
    """Default data directory: ~/.lift-tracker."""
    return get_user_config_dir()
