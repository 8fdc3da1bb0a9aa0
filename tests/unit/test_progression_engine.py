"""
Unit tests for backend/core/progression_engine.py

Part of IRL-6: Next-session weight/reps suggestions
"""

from datetime import date

import pytest

from backend.core.progression_engine import (
    PROGRESSION_PROFILES,
    ExerciseTarget,
    calc_next,
    get_progression_profile,
    initial_weight_for_exercise,
    parse_rep_range,
    round_to_increment,
    rpe_to_rir,
)
from domain.models import CatalogExercise, CustomExercise, Decision, HistoryPoint
from tests.fakes import make_session, make_set

TODAY = date(2024, 1, 11)

RANGE_6_8 = {"mode": "reps", "targetRepsRange": "6-8"}


def point(day: str, avg_rir: float, compliance: float, e1rm: float = 120.0) -> HistoryPoint:
    return HistoryPoint(
        date=day,
        avg_rir=avg_rir,
        sets_completed=3,
        compliance=compliance,
        top_reps=8,
        top_weight_kg=100,
        top_e1rm=e1rm,
    )


@pytest.mark.unit
class TestParsing:
    @pytest.mark.parametrize(
        "text,target_reps,expected",
        [
            ("8-12", None, (8, 12)),
            ("6 - 8 reps", None, (6, 8)),
            ("10", None, (10, 10)),
            ("", 5, (5, 5)),
            (None, None, (0, 0)),
            ("AMRAP", 12, (12, 12)),
        ],
    )
    def test_parse_rep_range(self, text, target_reps, expected):
        assert parse_rep_range(text, target_reps) == expected

    @pytest.mark.parametrize(
        "rpe,rir",
        [(10, 0), (9.5, 0), (9, 1), (8.5, 1), (8, 2), (7.5, 3), (7, 3), (6, 4), (None, None)],
    )
    def test_rpe_to_rir(self, rpe, rir):
        assert rpe_to_rir(rpe) == rir

    def test_profiles(self):
        assert PROGRESSION_PROFILES["strength"].load_step_kg == 2.5
        assert PROGRESSION_PROFILES["recomposition"].rep_step == 2
        assert get_progression_profile("unknown") == PROGRESSION_PROFILES["hypertrophy"]
        assert get_progression_profile(None) == PROGRESSION_PROFILES["hypertrophy"]

    def test_exercise_target_from_catalog_and_custom(self):
        catalog = CatalogExercise(id="bench", name="Bench", target_reps_range="6-8")
        custom = CustomExercise.model_validate(
            {"id": "custom/x", "name": "X", "fixed": {"targetRepsRange": "10-15"}}
        )

        assert ExerciseTarget.from_exercise(catalog).target_reps_range == "6-8"
        assert ExerciseTarget.from_exercise(custom).target_reps_range == "10-15"
        assert ExerciseTarget.from_exercise({"mode": "time"}).is_time_based
        assert ExerciseTarget.from_exercise(None) == ExerciseTarget()


@pytest.mark.unit
class TestDecisionLadder:
    """One test per rung, in ladder order."""

    def test_deload_on_fatigue_and_low_compliance(self):
        last = {"weightKg": 100, "reps": 8, "rir": 0, "dateISO": "2024-01-10"}
        history = [point("2024-01-08", 0.5, 0.6), point("2024-01-10", 0.5, 0.6)]

        result = calc_next(last, RANGE_6_8, profile_type="strength", history=history, today=TODAY)

        assert result.decision == Decision.DELOAD
        assert result.weight_kg == 90.0
        assert result.reps == 7
        assert "fatigue" in result.explanation

    def test_load_increase_at_top_of_range(self):
        last = {"weightKg": 100, "reps": 8, "rir": 0, "dateISO": "2024-01-10"}
        history = [point("2024-01-08", 2.5, 1.0), point("2024-01-10", 2.5, 1.0)]

        result = calc_next(last, RANGE_6_8, profile_type="strength", history=history, today=TODAY)

        assert result.decision == Decision.LOAD_INCREASE
        assert result.weight_kg == 102.5
        assert result.reps == 8

    def test_pause_backoff_ignores_history(self):
        last = {"weightKg": 100, "reps": 8, "rir": 2, "dateISO": "2023-12-22"}
        history = [point("2023-12-20", 2.5, 1.0), point("2023-12-22", 2.5, 1.0)]

        result = calc_next(last, RANGE_6_8, profile_type="strength", history=history, today=TODAY)

        assert result.decision == Decision.PAUSE_BACKOFF
        assert result.weight_kg == 92.0
        assert result.reps == 8
        assert "20 days" in result.explanation

    def test_pause_backoff_respects_min_weight(self):
        last = {"weightKg": 20, "reps": 8, "dateISO": "2023-12-01"}

        result = calc_next(last, RANGE_6_8, profile={"minWeightKg": 20}, today=TODAY)

        assert result.weight_kg == 20.0

    def test_deload_respects_min_weight_and_min_reps(self):
        last = {"weightKg": 21, "reps": 6, "rir": 0, "dateISO": "2024-01-10"}
        history = [point("2024-01-10", 0, 0.3)]

        result = calc_next(last, RANGE_6_8, profile={"minWeightKg": 20}, history=history, today=TODAY)

        assert result.decision == Decision.DELOAD
        assert result.weight_kg == 20.0
        assert result.reps == 6

    def test_plateau_adds_reps(self):
        last = {"weightKg": 100, "reps": 10, "rir": 1, "dateISO": "2024-01-10"}
        history = [
            point("2024-01-03", 1.0, 0.9, e1rm=130),
            point("2024-01-06", 1.0, 0.9, e1rm=128),
            point("2024-01-10", 1.0, 0.9, e1rm=130),
        ]

        result = calc_next(
            last,
            {"targetRepsRange": "8-12"},
            profile_type="recomposition",
            history=history,
            today=TODAY,
        )

        assert result.decision == Decision.PLATEAU_REP_ADD
        assert result.weight_kg == 100
        assert result.reps == 12

    def test_plateau_needs_three_points(self):
        last = {"weightKg": 100, "reps": 10, "rir": 1, "dateISO": "2024-01-10"}
        history = [point("2024-01-06", 1.0, 0.9), point("2024-01-10", 1.0, 0.9)]

        result = calc_next(last, {"targetRepsRange": "8-12"}, history=history, today=TODAY)

        assert result.decision == Decision.HOLD

    def test_rep_add_below_top_of_range(self):
        last = {"weightKg": 60, "reps": 9, "rir": 2, "dateISO": "2024-01-10"}

        result = calc_next(last, {"targetRepsRange": "8-12"}, today=TODAY)

        assert result.decision == Decision.REP_ADD
        assert result.weight_kg == 60
        assert result.reps == 10

    def test_hold_without_history_or_rir(self):
        last = {"weightKg": 100, "reps": 6, "dateISO": "2024-01-10"}

        result = calc_next(last, RANGE_6_8, history=[], today=TODAY)

        assert result.decision == Decision.HOLD
        assert result.weight_kg == 100
        assert result.reps == 6
        assert "technique" in result.explanation

    def test_hold_clamps_reps_into_range(self):
        last = {"weightKg": 100, "reps": 15, "rir": 0, "dateISO": "2024-01-10"}

        result = calc_next(last, RANGE_6_8, today=TODAY)

        assert result.decision == Decision.HOLD
        assert result.reps == 8


@pytest.mark.unit
class TestEmptySuggestions:
    def test_no_last_set(self):
        assert calc_next(None, RANGE_6_8, today=TODAY).is_empty

    def test_time_based_exercise(self):
        last = {"weightKg": 0, "reps": 45, "dateISO": "2024-01-10"}

        assert calc_next(last, {"mode": "time"}, today=TODAY).is_empty


@pytest.mark.unit
class TestDeterminism:
    def test_same_inputs_same_output(self):
        last = {"weightKg": 82.5, "reps": 7, "rir": 1.5, "dateISO": "2024-01-09"}
        history = [point("2024-01-05", 1.5, 0.8), point("2024-01-09", 2.0, 1.0)]

        results = {
            calc_next(last, RANGE_6_8, profile_type="hypertrophy", history=history, today=TODAY)
            for _ in range(5)
        }

        assert len(results) == 1

    def test_weights_rounded_to_one_decimal(self):
        last = {"weightKg": 33.3, "reps": 8, "dateISO": "2023-12-01"}

        result = calc_next(last, RANGE_6_8, profile_type="hypertrophy", today=TODAY)

        assert result.weight_kg == 31.3


@pytest.mark.unit
class TestInitialWeight:
    def test_prefers_next_suggestion(self):
        profiles = {"bench": {"next": {"weightKg": 82.6}, "last": {"weightKg": 80, "reps": 8}}}

        assert initial_weight_for_exercise("bench", profiles, [], 20) == 82.5

    def test_falls_back_to_last(self):
        profiles = {"bench": {"last": {"weightKg": 80, "reps": 8}}}

        assert initial_weight_for_exercise("bench", profiles, [], 20) == 80

    def test_falls_back_to_logged_sets(self):
        sessions = [make_session("s", "2024-01-05", [make_set("bench", 71.1, 8)])]

        assert initial_weight_for_exercise("bench", {}, sessions, 20) == 71.0

    def test_falls_back_to_default(self):
        assert initial_weight_for_exercise("bench", None, None, 30) == 30
        assert initial_weight_for_exercise("bench") == 0

    def test_round_to_increment(self):
        assert round_to_increment(10.1) == 10.0
        assert round_to_increment(10.2) == 10.25
        assert round_to_increment(11, 2.5) == 10.0
