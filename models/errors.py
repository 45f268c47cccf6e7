"""Error taxonomy for workout state changes."""


class WorkoutMapperError(Exception):
    """Base class for every error raised by Workout Mapper."""


class ValidationError(WorkoutMapperError, ValueError):
    """Raised when user input cannot produce a workout.

    Nothing has been mutated when this is raised; the message is meant to be
    shown to the user.
    """

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class NotFoundError(WorkoutMapperError, LookupError):
    """Raised when a workout id is not present."""

    def __init__(self, workout_id: str, where: str = "store"):
        super().__init__(f"Workout {workout_id!r} not found in {where}")
        self.workout_id = workout_id


class DuplicateIdError(WorkoutMapperError):
    """Raised when a workout id is registered twice. Signals a programming error."""

    def __init__(self, workout_id: str, where: str = "store"):
        super().__init__(f"Workout {workout_id!r} already present in {where}")
        self.workout_id = workout_id


class CorruptSnapshotError(WorkoutMapperError):
    """Raised when persisted data cannot be turned back into workouts."""

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record


class PersistenceError(WorkoutMapperError):
    """Raised when the snapshot could not be written.

    In-memory state is not rolled back; only durability is lost.
    """

    def __init__(self, message: str, workout_id: str = None):
        super().__init__(message)
        self.workout_id = workout_id


class GeolocationError(WorkoutMapperError):
    """Raised when the current position cannot be determined."""
