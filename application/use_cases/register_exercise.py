"""
RegisterExercise Use Case.

Part of IRL-8: Logging sets against the active session

Records the sets of one exercise, then asks the progression engine for the
next target and stores ``{last, next}`` in the exercise's profile. The
caller persists the returned state through the sync storage service.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional, Sequence

from application.exceptions import ExerciseNotFoundError
from application.ports import ExerciseCatalog
from backend.core.exercise_resolver import resolve_exercise, target_sets_for
from backend.core.history_aggregator import DEFAULT_WEEKS, HistoryCache, build_history
from backend.core.progression_engine import calc_next
from backend.core.workout_session import append_sets, create_strength_session, detect_e1rm_pr
from domain.models import (
    ExerciseProfile,
    HistoryPoint,
    LastPerformance,
    NextSuggestion,
    ProgressionSuggestion,
    Session,
    SetEntry,
    TrainingState,
)

logger = logging.getLogger(__name__)


@dataclass
class RegisterExerciseResult:
    """Result of the RegisterExercise use case execution."""

    state: TrainingState
    session: Session
    suggestion: ProgressionSuggestion
    history: List[HistoryPoint] = field(default_factory=list)
    is_pr: bool = False
    profile_updated: bool = False


class RegisterExerciseUseCase:
    """
    Use case for registering a completed exercise.

    Orchestrates the following workflow:
    1. Resolve the exercise (custom exercises shadow the catalog)
    2. Append the sets to the active session, or start a new one
    3. Take the last rep set as the top set
    4. Build the trailing history and run the progression engine
    5. Write ``{last, next}`` into the exercise profile

    The input state is never mutated.

    Usage:
        >>> use_case = RegisterExerciseUseCase(catalog=catalog)
        >>> result = use_case.execute(state, "barbell-bench-press", sets)
        >>> result.profile_updated
        True
    """

    def __init__(
        self,
        catalog: Optional[ExerciseCatalog],
        history_cache: Optional[HistoryCache] = None,
        *,
        history_weeks: int = DEFAULT_WEEKS,
        default_target_sets: int = 3,
    ) -> None:
        """
        Initialize the use case with required dependencies.

        Args:
            catalog: Exercise catalog for prescriptions
            history_cache: Optional caller-owned memo for history rollups
            history_weeks: Trailing window fed to the engine
            default_target_sets: Compliance denominator when unknown
        """
        self._catalog = catalog
        self._history_cache = history_cache
        self._history_weeks = history_weeks
        self._default_target_sets = default_target_sets

    def execute(
        self,
        state: TrainingState,
        exercise_id: str,
        sets: Sequence[SetEntry],
        *,
        session_id: Optional[str] = None,
        routine_key: Optional[str] = None,
        today: Optional[date] = None,
    ) -> RegisterExerciseResult:
        """
        Execute the register exercise workflow.

        Args:
            state: Current training state
            exercise_id: Exercise the sets belong to
            sets: Completed sets, in the order they were performed
            session_id: Active session to append to; a new strength session
                is started when missing or unknown
            routine_key: Routine for a newly started session
            today: Reference day (defaults to today)

        Returns:
            RegisterExerciseResult with the new state

        Raises:
            ExerciseNotFoundError: If the exercise is neither custom nor in
                the catalog
        """
        exercise = resolve_exercise(exercise_id, state, self._catalog)
        if exercise is None:
            raise ExerciseNotFoundError(exercise_id)

        pinned = today is not None
        today = today or date.today()
        sets = [s.model_copy(update={"exercise_id": exercise_id}) for s in sets]

        is_pr = detect_e1rm_pr(state.sessions, sets, exercise_id)

        sessions = list(state.sessions)
        active_index = next(
            (i for i, s in enumerate(sessions) if session_id and s.id == session_id),
            None,
        )
        if active_index is None:
            started = datetime.combine(today, datetime.now().time()) if pinned else datetime.now()
            session = append_sets(create_strength_session(routine_key, now=started), sets)
            sessions.insert(0, session)
            logger.info(f"Started session {session.id} for {exercise_id}")
        else:
            session = append_sets(sessions[active_index], sets)
            sessions[active_index] = session

        new_state = state.model_copy(update={"sessions": sessions}, deep=True)

        top = next((s for s in reversed(sets) if not s.is_time_based), None)
        if top is None:
            logger.debug(f"No rep sets for {exercise_id}; profile left unchanged")
            return RegisterExerciseResult(
                state=new_state,
                session=session,
                suggestion=ProgressionSuggestion.empty(),
                is_pr=is_pr,
            )

        day = session.day() or today
        last = LastPerformance(
            weight_kg=top.weight_kg or 0.0,
            reps=top.reps or 0,
            rir=top.rir,
            date_iso=day.isoformat(),
        )

        target_sets = target_sets_for(exercise, self._default_target_sets)
        history = self._history(new_state.sessions, exercise_id, target_sets, today if pinned else None)

        suggestion = calc_next(
            last,
            exercise,
            profile={"minWeightKg": state.settings.min_weight_kg},
            profile_type=state.settings.progression_profile,
            history=history,
            today=today,
        )

        profiles = dict(new_state.profile_by_exercise_id)
        profiles[exercise_id] = ExerciseProfile(
            last=last,
            next=NextSuggestion(
                weight_kg=suggestion.weight_kg,
                reps=suggestion.reps,
                explanation=suggestion.explanation,
            ),
        )
        new_state = new_state.model_copy(update={"profile_by_exercise_id": profiles})
        logger.info(
            f"Registered {len(sets)} set(s) of {exercise_id}: "
            f"{suggestion.decision.value if suggestion.decision else 'none'} -> "
            f"{suggestion.weight_kg} kg x {suggestion.reps}"
        )

        return RegisterExerciseResult(
            state=new_state,
            session=session,
            suggestion=suggestion,
            history=history,
            is_pr=is_pr,
            profile_updated=True,
        )

    def _history(
        self,
        sessions: Sequence[Session],
        exercise_id: str,
        target_sets: int,
        today: Optional[date],
    ) -> List[HistoryPoint]:
        if today is not None:
            return build_history(
                sessions,
                exercise_id,
                target_sets=target_sets,
                weeks=self._history_weeks,
                now=datetime.combine(today, time.max),
            )
        if self._history_cache is not None:
            return self._history_cache.get_or_build(
                sessions, exercise_id, target_sets=target_sets, weeks=self._history_weeks
            )
        return build_history(sessions, exercise_id, target_sets=target_sets, weeks=self._history_weeks)
