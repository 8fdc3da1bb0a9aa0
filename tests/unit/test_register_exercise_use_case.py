"""
Unit tests for RegisterExerciseUseCase.

Part of IRL-8: Logging sets against the active session

Tests the use case with the fake catalog; no storage involved.
"""

from datetime import date

import pytest

from application.exceptions import ExerciseNotFoundError
from application.use_cases import RegisterExerciseUseCase
from backend.core.history_aggregator import HistoryCache
from backend.core.workout_session import build_set
from domain.models import Decision, TrainingState
from tests.fakes import create_catalog, days_ago, make_session, make_set

TODAY = date(2024, 1, 11)


@pytest.fixture
def use_case():
    return RegisterExerciseUseCase(catalog=create_catalog())


def bench_sets(*reps, weight=100.0, rir=2):
    return [build_set("bench-press", "reps", r, weight, rir=rir) for r in reps]


@pytest.mark.unit
class TestRegisterExercise:
    def test_starts_session_and_writes_profile(self, use_case):
        state = TrainingState()

        result = use_case.execute(state, "bench-press", bench_sets(8, 8, 8), today=TODAY)

        assert len(result.state.sessions) == 1
        session = result.state.sessions[0]
        assert session.id == result.session.id
        assert session.date_iso.startswith("2024-01-11")
        assert len(session.sets) == 3

        profile = result.state.profile_by_exercise_id["bench-press"]
        assert profile.last.weight_kg == 100
        assert profile.last.reps == 8
        assert profile.last.date_iso == "2024-01-11"
        assert profile.next.weight_kg == result.suggestion.weight_kg
        assert result.profile_updated is True
        assert result.is_pr is True

    def test_input_state_not_mutated(self, use_case):
        state = TrainingState()

        use_case.execute(state, "bench-press", bench_sets(8), today=TODAY)

        assert state.sessions == []
        assert state.profile_by_exercise_id == {}

    def test_appends_to_active_session(self, use_case):
        state = TrainingState.model_validate({
            "sessions": [make_session("active", days_ago(0), [make_set("cable-row", 50, 10)])],
        })

        result = use_case.execute(
            state, "bench-press", bench_sets(8), session_id="active", today=TODAY
        )

        assert [s.id for s in result.state.sessions] == ["active"]
        assert [s.exercise_id for s in result.state.sessions[0].sets] == ["cable-row", "bench-press"]

    def test_unknown_session_id_starts_new_session(self, use_case):
        state = TrainingState.model_validate({"sessions": [make_session("old", days_ago(3))]})

        result = use_case.execute(state, "bench-press", bench_sets(8), session_id="nope", today=TODAY)

        assert [s.id for s in result.state.sessions][1:] == ["old"]
        assert result.state.sessions[0].id == result.session.id

    def test_top_set_is_last_rep_set(self, use_case):
        sets = bench_sets(8) + [build_set("bench-press", "reps", 6, 110, rir=0)]

        result = use_case.execute(TrainingState(), "bench-press", sets, today=TODAY)

        last = result.state.profile_by_exercise_id["bench-press"].last
        assert (last.weight_kg, last.reps, last.rir) == (110, 6, 0)

    def test_load_increase_after_strong_sessions(self, use_case):
        state = TrainingState.model_validate({
            "sessions": [
                make_session("prev", days_ago(3), [
                    make_set("bench-press", 100, 8, rir=3, set_id=f"p{i}") for i in range(3)
                ]),
            ],
        })

        result = use_case.execute(state, "bench-press", bench_sets(8, 8, 8, rir=3), today=TODAY)

        assert result.suggestion.decision == Decision.LOAD_INCREASE
        assert result.suggestion.weight_kg == 101.3
        assert [p.date for p in result.history] == ["2024-01-08", "2024-01-11"]

    def test_uses_settings_profile_and_min_weight(self, use_case):
        state = TrainingState.model_validate({
            "settings": {"progressionProfile": "strength", "minWeightKg": 20},
        })

        result = use_case.execute(state, "bench-press", bench_sets(8, 8, 8, rir=3), today=TODAY)

        assert result.suggestion.weight_kg == 102.5

    def test_time_based_exercise_leaves_profile(self, use_case):
        sets = [build_set("plank", "time", 60, 0)]

        result = use_case.execute(TrainingState(), "plank", sets, today=TODAY)

        assert result.profile_updated is False
        assert result.suggestion.is_empty
        assert "plank" not in result.state.profile_by_exercise_id
        assert len(result.state.sessions[0].sets) == 1

    def test_custom_exercise_is_resolved(self, use_case):
        state = TrainingState.model_validate({
            "customExercisesById": {
                "custom/abc": {"id": "custom/abc", "name": "Zottman Curl", "fixed": {"targetRepsRange": "10-12"}},
            },
        })
        sets = [build_set("custom/abc", "reps", 10, 12, rir=2)]

        result = use_case.execute(state, "custom/abc", sets, today=TODAY)

        assert result.suggestion.decision == Decision.REP_ADD
        assert result.suggestion.reps == 11

    def test_unknown_exercise(self, use_case):
        with pytest.raises(ExerciseNotFoundError) as exc_info:
            use_case.execute(TrainingState(), "nope", bench_sets(8), today=TODAY)

        assert exc_info.value.exercise_id == "nope"

    def test_sets_are_stamped_with_exercise_id(self, use_case):
        sets = [build_set("typo", "reps", 8, 100)]

        result = use_case.execute(TrainingState(), "bench-press", sets, today=TODAY)

        assert result.state.sessions[0].sets[0].exercise_id == "bench-press"

    def test_not_a_pr_when_below_best(self, use_case):
        state = TrainingState.model_validate({
            "sessions": [make_session("prev", days_ago(3), [make_set("bench-press", 120, 8)])],
        })

        result = use_case.execute(state, "bench-press", bench_sets(8), today=TODAY)

        assert result.is_pr is False


@pytest.mark.unit
def test_history_cache_used_without_pinned_day():
    cache = HistoryCache()
    use_case = RegisterExerciseUseCase(catalog=create_catalog(), history_cache=cache)

    use_case.execute(TrainingState(), "bench-press", bench_sets(8))

    assert len(cache) == 1
