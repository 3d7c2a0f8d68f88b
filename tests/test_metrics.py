"""
Formula-focused unit tests for set-level metrics and progress comparison.

Values are hand-computed so the tests double as worked examples.
"""

import pytest

from lift_tracker.core.metrics import (
    calculate_1rm,
    calculate_exercise_stats,
    exercise_kind,
    find_master,
    format_number,
    max_estimated_1rm,
    max_reps,
    max_weight,
    merge_exercise_stats,
    primary_metric,
    round1,
    total_distance,
    total_duration,
    total_reps,
    total_volume,
)
from lift_tracker.core.models import (
    BodyweightSet,
    CardioSet,
    ExerciseEntry,
    ExerciseMaster,
    TargetMuscle,
    WeightedSet,
    WorkoutLog,
)
from lift_tracker.core.progress import (
    calculate_progress,
    create_progress_metric,
    find_previous_sets,
    format_diff,
    get_progress_status,
    progress_icon,
)


def _w(weight: float, reps: int) -> WeightedSet:
    return WeightedSet(weight_kg=weight, reps=reps)


def _log(date: str, name: str, *sets, log_id: int | None = None) -> WorkoutLog:
    return WorkoutLog(date=date, exercises=[ExerciseEntry(name=name, sets=list(sets))], id=log_id)


# ---------------------------------------------------------------------------
# Rounding and display
# ---------------------------------------------------------------------------

class TestRounding:
    def test_round1_rounds_half_up(self):
        assert round1(0.25) == 0.3
        assert round1(116.666) == 116.7
        assert round1(-3.34) == -3.3

    def test_format_number_drops_trailing_zero(self):
        assert format_number(100.0) == "100"
        assert format_number(62.5) == "62.5"
        assert format_number(0) == "0"


# ---------------------------------------------------------------------------
# Epley 1RM
# ---------------------------------------------------------------------------

class TestEpley:
    def test_ten_reps(self):
        """60 × (1 + 10/30) = 80."""
        assert calculate_1rm(60, 10) == 80.0

    def test_rounded_to_tenth(self):
        """100 × (1 + 5/30) = 116.666… → 116.7."""
        assert calculate_1rm(100, 5) == 116.7

    def test_single_rep_is_not_identity(self):
        """Epley gives w × 31/30 even for one rep."""
        assert calculate_1rm(100, 1) == 103.3

    def test_zero_reps_is_zero(self):
        assert calculate_1rm(100, 0) == 0.0


# ---------------------------------------------------------------------------
# Set aggregates
# ---------------------------------------------------------------------------

class TestAggregates:
    def test_weighted_aggregates(self):
        sets = [_w(60, 10), _w(70, 8), _w(70, 6)]
        assert max_weight(sets) == 70
        assert total_volume(sets) == 60 * 10 + 70 * 8 + 70 * 6
        # 70 × (1 + 8/30) = 88.666… → 88.7 beats 60 × 4/3 = 80
        assert max_estimated_1rm(sets) == 88.7
        assert max_reps(sets) == 10
        assert total_reps(sets) == 24

    def test_empty_sets_are_zero(self):
        assert max_weight([]) == 0
        assert total_volume([]) == 0
        assert max_estimated_1rm([]) == 0
        assert max_reps([]) == 0
        assert total_duration([]) == 0
        assert total_distance([]) == 0

    def test_bodyweight_sets_have_no_tonnage(self):
        sets = [BodyweightSet(reps=12), BodyweightSet(reps=10)]
        assert total_volume(sets) == 0
        assert max_reps(sets) == 12
        assert total_reps(sets) == 22

    def test_cardio_distance_rounded(self):
        sets = [CardioSet(duration_min=20, distance_km=3.33), CardioSet(duration_min=10, distance_km=1.71)]
        assert total_duration(sets) == 30
        assert total_distance(sets) == 5.0

    def test_cardio_without_distance(self):
        sets = [CardioSet(duration_min=30)]
        assert total_distance(sets) == 0

    def test_primary_metric_per_kind(self):
        assert primary_metric([_w(60, 10)], "weighted") == 80.0
        assert primary_metric([BodyweightSet(reps=15)], "bodyweight") == 15
        assert primary_metric([CardioSet(duration_min=25)], "cardio") == 25

    def test_merge_stats_peaks_max_and_totals_sum(self):
        a = calculate_exercise_stats([_w(60, 10)])
        b = calculate_exercise_stats([_w(70, 5)])
        merged = merge_exercise_stats(a, b)
        assert merged.max_weight == 70
        assert merged.total_volume == 950
        assert merged.estimated_1rm == 81.7
        assert merged.total_reps == 15

    def test_merge_with_itself_doubles_totals_only(self):
        stats = calculate_exercise_stats([_w(60, 10), _w(70, 8)])
        merged = merge_exercise_stats(stats, stats)
        assert merged.max_weight == 70
        assert merged.estimated_1rm == 88.7
        assert merged.max_reps == 10
        assert merged.total_volume == 2320
        assert merged.total_reps == 36

    def test_merge_with_itself_rerounds_distance(self):
        stats = calculate_exercise_stats([CardioSet(duration_min=20, distance_km=3.35)])
        merged = merge_exercise_stats(stats, stats)
        assert merged.total_duration == 40
        assert merged.total_distance == round1(stats.total_distance * 2)
        assert merged.max_weight == 0


class TestMasterLookup:
    def test_exact_name_match(self):
        masters = [
            ExerciseMaster(name="ベンチプレス", target_muscles=[TargetMuscle(muscle="chest")]),
        ]
        assert find_master("ベンチプレス", masters) is masters[0]
        assert find_master("ベンチプレス ", masters) is None

    def test_unregistered_is_weighted(self):
        assert exercise_kind("unknown", []) == "weighted"

    def test_kind_from_master(self):
        masters = [
            ExerciseMaster(name="懸垂", is_bodyweight=True),
            ExerciseMaster(name="ランニング", is_cardio=True),
        ]
        assert exercise_kind("懸垂", masters) == "bodyweight"
        assert exercise_kind("ランニング", masters) == "cardio"


# ---------------------------------------------------------------------------
# Progress status and comparison
# ---------------------------------------------------------------------------

class TestProgressStatus:
    @pytest.mark.parametrize(
        "current,previous,expected",
        [
            (105, 100, "same"),  # exactly +5% is inside the band
            (95, 100, "same"),  # exactly -5% is inside the band
            (105.1, 100, "up"),
            (94.9, 100, "down"),
            (5, 0, "up"),
            (0, 0, "same"),
        ],
    )
    def test_dead_band(self, current, previous, expected):
        assert get_progress_status(current, previous) == expected

    def test_metric_from_zero_previous(self):
        m = create_progress_metric(5, 0)
        assert m.diff == 5
        assert m.diff_percent == 100.0
        assert m.status == "up"

    def test_metric_both_zero(self):
        m = create_progress_metric(0, 0)
        assert m.diff_percent == 0.0
        assert m.status == "same"


class TestCalculateProgress:
    def test_weighted_comparison(self):
        """
        Current 60×10, 60×8 vs previous 57.5×10.

        max weight: 60 vs 57.5 → +2.5kg, +4.3% (same)
        volume:     1080 vs 575 → up
        1RM:        80 vs 76.7  → +3.3kg, +4.3% (same)
        """
        result = calculate_progress([_w(60, 10), _w(60, 8)], [_w(57.5, 10)], False, False)

        assert set(result) == {"max_weight", "total_volume", "estimated_1rm"}
        assert result["max_weight"].diff == 2.5
        assert result["max_weight"].diff_percent == 4.3
        assert result["max_weight"].status == "same"
        assert result["total_volume"].status == "up"
        assert result["estimated_1rm"].previous == 76.7
        assert result["estimated_1rm"].diff == 3.3
        assert result["estimated_1rm"].status == "same"

    def test_bodyweight_comparison(self):
        result = calculate_progress(
            [BodyweightSet(reps=12), BodyweightSet(reps=10)],
            [BodyweightSet(reps=10), BodyweightSet(reps=10)],
            True,
            False,
        )
        assert set(result) == {"max_reps", "total_reps"}
        assert result["max_reps"].diff_percent == 20.0
        assert result["max_reps"].status == "up"
        assert result["total_reps"].status == "up"

    def test_cardio_takes_priority_over_bodyweight(self):
        result = calculate_progress(
            [CardioSet(duration_min=30, distance_km=5.2)],
            [CardioSet(duration_min=30, distance_km=5.0)],
            True,
            True,
        )
        assert set(result) == {"total_duration", "total_distance"}
        assert result["total_duration"].status == "same"
        assert result["total_distance"].diff == 0.2
        assert result["total_distance"].status == "same"


class TestFindPreviousSets:
    def test_most_recent_strictly_before(self):
        logs = [
            _log("2024-03-01", "ベンチプレス", _w(60, 10)),
            _log("2024-03-05", "スクワット", _w(80, 5)),
            _log("2024-03-08", "ベンチプレス", _w(65, 8)),
        ]
        assert find_previous_sets(logs, "ベンチプレス", "2024-03-08") == [_w(60, 10)]
        assert find_previous_sets(logs, "ベンチプレス", "2024-03-09") == [_w(65, 8)]

    def test_none_when_no_earlier_occurrence(self):
        logs = [_log("2024-03-01", "ベンチプレス", _w(60, 10))]
        assert find_previous_sets(logs, "ベンチプレス", "2024-03-01") is None
        assert find_previous_sets(logs, "スクワット", "2024-04-01") is None


class TestDisplayHelpers:
    def test_format_diff_signs(self):
        assert format_diff(2.5, "kg") == "+2.5kg"
        assert format_diff(-1, "回") == "-1回"
        assert format_diff(0, "kg") == "0kg"

    def test_icons(self):
        assert progress_icon("up") == "↑"
        assert progress_icon("same") == "→"
        assert progress_icon("down") == "↓"
