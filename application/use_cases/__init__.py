"""
Application Use Cases for the IronLog Progression API.

Part of IRL-8: Logging sets against the active session

This package contains application-level use cases that orchestrate domain logic
and coordinate between ports/adapters. Use cases are the entry points for
business operations and contain the application's workflow logic.

Architecture follows Clean Architecture / Hexagonal pattern:
- Use cases orchestrate domain objects and ports
- Dependencies are injected via constructors for testability
- Use cases return domain models, not API responses

Usage:
    from application.use_cases import RegisterExerciseUseCase

    use_case = RegisterExerciseUseCase(catalog=catalog)
    result = use_case.execute(state, "barbell-bench-press", sets)
    await sync_storage.save_state(result.state, state, metadata)
"""

from application.use_cases.register_exercise import (
    RegisterExerciseResult,
    RegisterExerciseUseCase,
)

__all__ = [
    "RegisterExerciseUseCase",
    "RegisterExerciseResult",
]
