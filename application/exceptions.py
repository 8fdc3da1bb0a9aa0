"""
Application-layer exceptions.

Part of IRL-9: Sync storage error taxonomy

These exceptions are used across application and infrastructure layers.
None of them is fatal: the sync service converts them into an ``error``
sync status and keeps the caller's in-memory state.
"""


class IronLogError(Exception):
    """Base class for errors raised by this project."""

    pass


class StorageError(IronLogError):
    """A storage slot could not be read or written.

    Raised by slot store adapters on I/O failures (disk full, network
    errors, quota exceeded on the remote backend).
    """

    def __init__(self, message: str, *, slot_key: str = ""):
        super().__init__(message)
        self.message = message
        self.slot_key = slot_key


class ExerciseNotFoundError(IronLogError):
    """An exercise id is neither in the catalog nor a custom exercise."""

    def __init__(self, exercise_id: str):
        super().__init__(f"Unknown exercise: {exercise_id}")
        self.exercise_id = exercise_id
