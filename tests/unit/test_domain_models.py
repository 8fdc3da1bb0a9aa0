"""
Unit tests for domain models.

Part of IRL-3: Explicit entity model for the persisted state blob
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from domain.models import (
    CURRENT_SCHEMA_VERSION,
    TRACKED_ENTITY_KEYS,
    CatalogExercise,
    ProgressionProfileType,
    ProgressionSuggestion,
    Session,
    SetEntry,
    StateEnvelope,
    SyncMetadata,
    SyncPhase,
    SyncStatus,
    TrainingState,
    parse_iso_datetime,
)
from tests.fakes import make_session, make_set


@pytest.mark.unit
class TestTrainingState:
    def test_defaults(self):
        state = TrainingState()

        assert state.version == CURRENT_SCHEMA_VERSION == 5
        assert state.settings.progression_profile == ProgressionProfileType.HYPERTROPHY
        assert state.settings.unit == "kg"
        assert state.sessions == []

    def test_camel_case_blob_round_trip(self):
        blob = {
            "version": 5,
            "sessions": [make_session("s1", "2024-01-10", [make_set("bench", 100, 8)])],
            "profileByExerciseId": {"bench": {"last": {"weightKg": 100, "reps": 8}}},
            "userRoutinesIndex": {"upper": ["bench"]},
        }

        state = TrainingState.model_validate(blob)
        out = state.to_blob()

        assert state.profile_by_exercise_id["bench"].last.weight_kg == 100
        assert out["userRoutinesIndex"] == {"upper": ["bench"]}
        assert out["sessions"][0]["dateISO"] == "2024-01-10"
        assert out["sessions"][0]["sets"][0]["exerciseId"] == "bench"

    def test_unknown_keys_are_kept(self):
        state = TrainingState.model_validate({"favoriteColor": "teal", "settings": {"hapticLevel": 2}})

        blob = state.to_blob()

        assert blob["favoriteColor"] == "teal"
        assert blob["settings"]["hapticLevel"] == 2

    def test_field_names_accepted(self):
        state = TrainingState(user_routines_index={"a": ["x"]})

        assert state.to_blob()["userRoutinesIndex"] == {"a": ["x"]}

    def test_invalid_settings_rejected(self):
        with pytest.raises(ValidationError):
            TrainingState.model_validate({"settings": {"minWeightKg": -5}})

    def test_tracked_keys(self):
        assert TRACKED_ENTITY_KEYS == ("sessions", "profileByExerciseId", "userRoutinesIndex")


@pytest.mark.unit
class TestSessionModels:
    def test_set_volume(self):
        assert SetEntry(id="1", exercise_id="bench", reps=8, weight_kg=100).volume == 800
        assert SetEntry(id="2", exercise_id="plank", mode="time", reps=60, weight_kg=0).volume == 0
        assert SetEntry(id="3", exercise_id="bench", reps=8).volume == 0

    def test_session_day(self):
        session = Session.model_validate(make_session("s", "2024-01-10T18:30:00"))

        assert session.day().isoformat() == "2024-01-10"
        assert session.is_strength

    def test_invalid_date_has_no_day(self):
        session = Session.model_validate(make_session("s", "someday"))

        assert session.day() is None

    def test_session_requires_id_and_date(self):
        with pytest.raises(ValidationError):
            Session.model_validate({"id": "x"})


@pytest.mark.unit
class TestParseIsoDatetime:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-01-10", datetime(2024, 1, 10)),
            ("2024-01-10T18:30:00", datetime(2024, 1, 10, 18, 30)),
            ("2024-01-10T18:30:00Z", datetime(2024, 1, 10, 18, 30)),
            ("2024-01-10T20:30:00+02:00", datetime(2024, 1, 10, 18, 30)),
            ("2024-01-10garbage", datetime(2024, 1, 10)),
        ],
    )
    def test_parses(self, value, expected):
        assert parse_iso_datetime(value) == expected

    @pytest.mark.parametrize("value", [None, "", "yesterday"])
    def test_invalid(self, value):
        assert parse_iso_datetime(value) is None


@pytest.mark.unit
class TestCatalogExercise:
    def test_aliases(self):
        exercise = CatalogExercise.model_validate({
            "id": "bench",
            "name": "Bench",
            "targetRepsRange": "6-8",
            "targetSets": 4,
        })

        assert exercise.target_reps_range == "6-8"
        assert exercise.target_sets == 4
        assert exercise.mode == "reps"

    def test_target_sets_must_be_positive(self):
        with pytest.raises(ValidationError):
            CatalogExercise(id="x", name="X", target_sets=0)


@pytest.mark.unit
class TestSyncModels:
    def test_envelope_parses_metadata(self):
        envelope = StateEnvelope.model_validate({
            "userId": "u1",
            "state": {"sessions": []},
            "metadata": {"updatedAt": {"sessions": 5}, "lastSyncedAt": "2024-01-01T00:00:00Z"},
        })

        assert envelope.user_id == "u1"
        assert envelope.metadata.updated_at.sessions == 5
        assert envelope.metadata.updated_at.user_routines_index == 0

    def test_metadata_defaults_to_zero_clocks(self):
        assert SyncMetadata().updated_at.to_dict() == {
            "sessions": 0,
            "profileByExerciseId": 0,
            "userRoutinesIndex": 0,
        }

    def test_status_is_frozen(self):
        status = SyncStatus()

        assert status.phase == SyncPhase.IDLE
        with pytest.raises(ValidationError):
            status.phase = SyncPhase.ERROR

    def test_empty_suggestion(self):
        assert ProgressionSuggestion().is_empty
