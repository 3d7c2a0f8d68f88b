"""
Markdown export and import of workout logs.

Export layout:

    # トレーニング記録 2024-03-01 〜 2024-03-31

    ## 2024-03-04

    ### ベンチプレス
    - 1セット目: 60kg × 10回
    - 2セット目: 60kg × 8回

    ### ランニング
    - 30分 / 5.2km

    #### メモ
    調子が良かった

    ---

Days are written newest first.  The importer reads the same layout back and
apply_import writes the result into a LogStore.
"""

import re
from dataclasses import dataclass, field

from ..core.metrics import format_number
from ..core.models import (
    BodyweightSet,
    CardioSet,
    ExerciseEntry,
    ExerciseKind,
    ExerciseMaster,
    SetEntry,
    WeightedSet,
    WorkoutLog,
)
from .config_loader import load_preset_exercises
from .log_store import LogStore

_DATE_HEADER_RE = re.compile(r"^## (\d{4}-\d{2}-\d{2})")
_EXERCISE_HEADER_RE = re.compile(r"^### (.+)")
_MEMO_HEADER_RE = re.compile(r"^#### メモ")
_WEIGHTED_SET_RE = re.compile(r"^- \d+セット目: ([\d.]+)kg × (\d+)回")
_BODYWEIGHT_SET_RE = re.compile(r"^- \d+セット目: (\d+)回")
_CARDIO_DISTANCE_RE = re.compile(r"^- ([\d.]+)分 / ([\d.]+)km")
_CARDIO_RE = re.compile(r"^- ([\d.]+)分$")


@dataclass
class ParsedExercise:
    name: str
    is_bodyweight: bool
    is_cardio: bool


@dataclass
class ParseResult:
    logs: list[WorkoutLog] = field(default_factory=list)
    exercises: list[ParsedExercise] = field(default_factory=list)


def _format_set_line(index: int, s: SetEntry) -> str:
    if isinstance(s, CardioSet):
        line = f"- {format_number(s.duration_min)}分"
        if s.distance_km is not None:
            line += f" / {format_number(s.distance_km)}km"
        return line
    if isinstance(s, BodyweightSet):
        return f"- {index}セット目: {s.reps}回"
    return f"- {index}セット目: {format_number(s.weight_kg)}kg × {s.reps}回"


def export_markdown(logs: list[WorkoutLog], start_date: str, end_date: str) -> str:
    """
    Render logs as Markdown.

    Args:
        logs: Logs to export (any order)
        start_date: Range start shown in the title
        end_date: Range end shown in the title

    Returns:
        Markdown text, or "" when there are no logs
    """
    if not logs:
        return ""

    lines = [f"# トレーニング記録 {start_date} 〜 {end_date}", ""]

    ordered = sorted(logs, key=lambda log: log.date, reverse=True)

    for i, log in enumerate(ordered):
        lines.append(f"## {log.date}")
        lines.append("")

        for ex in log.exercises:
            lines.append(f"### {ex.name}")
            for n, s in enumerate(ex.sets, start=1):
                lines.append(_format_set_line(n, s))
            lines.append("")

        if log.memo:
            lines.append("#### メモ")
            lines.append(log.memo)
            lines.append("")

        if i < len(ordered) - 1:
            lines.append("---")
            lines.append("")

    return "\n".join(lines)


def _parse_set_line(line: str) -> tuple[SetEntry, ExerciseKind] | None:
    m = _WEIGHTED_SET_RE.match(line)
    if m:
        return WeightedSet(weight_kg=float(m.group(1)), reps=int(m.group(2))), "weighted"

    m = _CARDIO_DISTANCE_RE.match(line)
    if m:
        return CardioSet(duration_min=float(m.group(1)), distance_km=float(m.group(2))), "cardio"

    m = _CARDIO_RE.match(line)
    if m:
        return CardioSet(duration_min=float(m.group(1))), "cardio"

    m = _BODYWEIGHT_SET_RE.match(line)
    if m:
        return BodyweightSet(reps=int(m.group(1))), "bodyweight"

    return None


class _Parser:
    """Line-by-line state machine over exported Markdown."""

    def __init__(self) -> None:
        self.result = ParseResult()
        self.seen: dict[str, ParsedExercise] = {}
        self.date: str | None = None
        self.exercises: list[ExerciseEntry] = []
        self.exercise: ExerciseEntry | None = None
        self.memo: list[str] = []
        self.in_memo = False

    def finish_exercise(self) -> None:
        if self.exercise is not None and self.exercise.sets:
            self.exercises.append(self.exercise)
        self.exercise = None

    def finish_day(self) -> None:
        self.finish_exercise()
        if self.date is not None and self.exercises:
            self.result.logs.append(
                WorkoutLog(
                    date=self.date,
                    exercises=self.exercises,
                    memo="\n".join(self.memo) if self.memo else None,
                )
            )
        self.date = None
        self.exercises = []
        self.memo = []
        self.in_memo = False

    def feed(self, raw: str) -> None:
        line = raw.strip()

        m = _DATE_HEADER_RE.match(line)
        if m:
            self.finish_day()
            self.date = m.group(1)
            return

        m = _EXERCISE_HEADER_RE.match(line)
        if m:
            self.finish_exercise()
            self.in_memo = False
            self.exercise = ExerciseEntry(name=m.group(1).strip())
            return

        if _MEMO_HEADER_RE.match(line):
            self.finish_exercise()
            self.in_memo = True
            return

        if line == "---":
            return

        if self.in_memo and self.date is not None:
            if line:
                self.memo.append(line)
            return

        if self.exercise is None:
            return

        parsed = _parse_set_line(line)
        if parsed is None:
            return
        s, kind = parsed
        self.exercise.sets.append(s)
        if self.exercise.name not in self.seen:
            info = ParsedExercise(
                name=self.exercise.name,
                is_bodyweight=kind == "bodyweight",
                is_cardio=kind == "cardio",
            )
            self.seen[info.name] = info
            self.result.exercises.append(info)


def parse_export_markdown(text: str) -> ParseResult:
    """
    Parse Markdown written by export_markdown.

    Each exercise's kind is taken from its first recognised set line.
    Exercises without sets and days without exercises are dropped; invalid
    dates raise ValueError.

    Returns:
        Parsed logs in document order plus one record per distinct exercise
    """
    parser = _Parser()
    for line in text.split("\n"):
        parser.feed(line)
    parser.finish_day()
    return parser.result


@dataclass
class ImportSummary:
    imported: int
    skipped_dates: list[str]
    replaced_dates: list[str]
    new_exercises: list[str]


def apply_import(store: LogStore, result: ParseResult, overwrite: bool = False) -> ImportSummary:
    """
    Write parsed logs into the store.

    Unknown exercise names are registered first, taking target muscles from
    the presets when the name is a preset.  Dates that already have logs are
    skipped, or with ``overwrite`` their existing logs are deleted and
    replaced.

    Returns:
        What was imported, skipped, replaced and registered
    """
    known = {m.name for m in store.load_masters()}
    presets = {m.name: m for m in load_preset_exercises(store.data_dir)}

    new_exercises: list[str] = []
    for info in result.exercises:
        if info.name in known:
            continue
        preset = presets.get(info.name)
        store.add_master(
            ExerciseMaster(
                name=info.name,
                is_bodyweight=info.is_bodyweight,
                is_cardio=info.is_cardio,
                target_muscles=list(preset.target_muscles) if preset and not info.is_cardio else [],
            )
        )
        known.add(info.name)
        new_exercises.append(info.name)

    existing = store.load_logs()
    existing_dates = {log.date for log in existing}
    duplicates = sorted({log.date for log in result.logs} & existing_dates)

    to_import = result.logs
    if duplicates and overwrite:
        for log in existing:
            if log.date in duplicates and log.id is not None:
                store.delete_log(log.id)
    elif duplicates:
        to_import = [log for log in result.logs if log.date not in duplicates]

    store.add_logs(to_import)

    return ImportSummary(
        imported=len(to_import),
        skipped_dates=[] if overwrite else duplicates,
        replaced_dates=duplicates if overwrite else [],
        new_exercises=new_exercises,
    )
