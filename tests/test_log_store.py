"""Tests for the file-backed log store."""

import pytest

from lift_tracker.core.models import (
    BodyweightSet,
    ExerciseEntry,
    ExerciseMaster,
    TargetMuscle,
    WeightedSet,
    WorkoutLog,
)
from lift_tracker.io.log_store import LogStore
from lift_tracker.io.serializers import ValidationError


@pytest.fixture
def store(tmp_path):
    s = LogStore(tmp_path / "data")
    s.init(seed_presets=False)
    return s


def _entry(name: str = "ベンチプレス", weight: float = 60, reps: int = 10) -> ExerciseEntry:
    return ExerciseEntry(name=name, sets=[WeightedSet(weight_kg=weight, reps=reps)])


class TestInit:
    def test_init_creates_files_and_seeds_presets(self, tmp_path):
        s = LogStore(tmp_path / "data")
        assert not s.exists()

        seeded = s.init()

        assert s.exists()
        assert seeded > 0
        masters = s.load_masters()
        assert len(masters) == seeded
        assert [m.id for m in masters] == list(range(1, seeded + 1))
        bench = s.get_master("ベンチプレス")
        assert bench is not None
        assert TargetMuscle(muscle="chest", is_main=True) in bench.target_muscles
        assert s.get_master("ランニング").is_cardio

    def test_second_init_does_not_reseed(self, tmp_path):
        s = LogStore(tmp_path / "data")
        s.init()
        assert s.init() == 0

    def test_init_without_presets(self, store):
        assert store.load_masters() == []
        assert store.load_logs() == []

    def test_user_presets_extend_bundled(self, tmp_path):
        data = tmp_path / "data"
        data.mkdir()
        (data / "exercises.yaml").write_text(
            "exercises:\n  - {name: ケトルベルスイング, main: [glutes], sub: [hamstrings]}\n",
            encoding="utf-8",
        )
        s = LogStore(data)
        s.init()
        assert s.get_master("ケトルベルスイング") is not None

    def test_uninitialized_store_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="init"):
            LogStore(tmp_path / "missing").load_logs()


class TestLogs:
    def test_add_assigns_ids_and_timestamps(self, store):
        first = store.add_log(WorkoutLog(date="2024-03-04", exercises=[_entry()]))
        second = store.add_log(WorkoutLog(date="2024-03-01", exercises=[_entry()]))

        assert (first.id, second.id) == (1, 2)
        assert first.created_at > 0
        assert first.updated_at == first.created_at

    def test_load_sorted_by_date(self, store):
        store.add_log(WorkoutLog(date="2024-03-04", exercises=[_entry()]))
        store.add_log(WorkoutLog(date="2024-03-01", exercises=[_entry()]))
        assert [l.date for l in store.load_logs()] == ["2024-03-01", "2024-03-04"]

    def test_add_exercise_to_existing_date(self, store):
        store.add_exercise_to_date("2024-03-04", _entry("ベンチプレス"))
        stored = store.add_exercise_to_date("2024-03-04", _entry("スクワット", 80, 5), memo="脚の日")

        logs = store.load_logs()
        assert len(logs) == 1
        assert [e.name for e in logs[0].exercises] == ["ベンチプレス", "スクワット"]
        assert logs[0].memo == "脚の日"
        assert stored.id == logs[0].id

    def test_update_bumps_updated_at(self, store):
        stored = store.add_log(WorkoutLog(date="2024-03-04", exercises=[_entry()]))
        stored.memo = "変更"
        updated = store.update_log(stored)
        assert updated.updated_at > stored.updated_at
        assert store.get_log(stored.id).memo == "変更"

    def test_delete(self, store):
        stored = store.add_log(WorkoutLog(date="2024-03-04", exercises=[_entry()]))
        store.delete_log(stored.id)
        assert store.load_logs() == []
        with pytest.raises(KeyError):
            store.delete_log(stored.id)

    def test_memo_and_evaluation(self, store):
        stored = store.add_log(WorkoutLog(date="2024-03-04", exercises=[_entry()]))

        assert store.set_memo(stored.id, "いい感じ").memo == "いい感じ"
        assert store.set_memo(stored.id, "").memo is None

        evaluated = store.set_evaluation(stored.id, "よく頑張りました")
        assert evaluated.evaluation == "よく頑張りました"
        assert evaluated.evaluation_generated_at is not None

        with pytest.raises(KeyError):
            store.set_memo(99, "x")

    def test_range_queries(self, store):
        for d in ("2024-03-01", "2024-03-04", "2024-03-08"):
            store.add_log(WorkoutLog(date=d, exercises=[_entry()]))
        assert [l.date for l in store.get_logs_between("2024-03-02", "2024-03-08")] == [
            "2024-03-04", "2024-03-08",
        ]
        assert len(store.get_logs_by_date("2024-03-01")) == 1

    def test_corrupt_line_reports_line_number(self, store):
        store.add_log(WorkoutLog(date="2024-03-04", exercises=[_entry()]))
        with open(store.logs_path, "a", encoding="utf-8") as f:
            f.write("{broken\n")
        with pytest.raises(ValidationError, match="line 2"):
            store.load_logs()

    def test_wrong_value_type_reports_line_number(self, store):
        store.add_log(WorkoutLog(date="2024-03-04", exercises=[_entry()]))
        with open(store.logs_path, "a", encoding="utf-8") as f:
            f.write(
                '{"date":"2024-03-05","exercises":[{"name":"ベンチプレス",'
                '"sets":[{"type":"weighted","weight_kg":"60","reps":10}]}]}\n'
            )
        with pytest.raises(ValidationError, match="line 2"):
            store.load_logs()

    def test_non_list_exercises_rejected(self, store):
        with open(store.logs_path, "w", encoding="utf-8") as f:
            f.write('{"date":"2024-03-05","exercises":"ベンチプレス"}\n')
        with pytest.raises(ValidationError, match="line 1"):
            store.load_logs()

    def test_mixed_kinds_survive_reload(self, store):
        store.add_log(WorkoutLog(
            date="2024-03-04",
            exercises=[ExerciseEntry(name="懸垂", sets=[BodyweightSet(reps=8)])],
        ))
        assert store.load_logs()[0].exercises[0].sets == [BodyweightSet(reps=8)]


class TestMasters:
    def test_add_and_delete(self, store):
        added = store.add_master(ExerciseMaster(name="懸垂", is_bodyweight=True))
        assert added.id == 1
        assert store.get_master("懸垂").is_bodyweight

        store.delete_master("懸垂")
        assert store.get_master("懸垂") is None
        with pytest.raises(KeyError):
            store.delete_master("懸垂")

    def test_duplicate_name_rejected(self, store):
        store.add_master(ExerciseMaster(name="懸垂"))
        with pytest.raises(ValidationError, match="already exists"):
            store.add_master(ExerciseMaster(name="懸垂"))

    def test_update(self, store):
        added = store.add_master(ExerciseMaster(name="懸垂"))
        added.is_bodyweight = True
        store.update_master(added)
        assert store.get_master("懸垂").is_bodyweight

    def test_deleting_master_keeps_logs(self, store):
        store.add_master(ExerciseMaster(name="ベンチプレス"))
        store.add_log(WorkoutLog(date="2024-03-04", exercises=[_entry()]))
        store.delete_master("ベンチプレス")
        assert len(store.load_logs()) == 1

    def test_non_object_master_reports_entry(self, store):
        store.exercises_path.write_text('["ベンチプレス"]', encoding="utf-8")
        with pytest.raises(ValidationError, match="entry 1"):
            store.load_masters()
