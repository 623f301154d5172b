"""
Engine error taxonomy.

Lifecycle violations surface to callers as typed failures:

- ValidationError: malformed request or exercise definition
- StateConflict: the attempt/exercise state forbids the operation
    - AlreadyActive, RetryExhausted, NotInProgress, Expired
- NotFoundError: missing exercise, attempt, or question

The answer scorer never raises these; malformed answers score zero.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""


class ValidationError(EngineError):
    """Raised when a request or definition is malformed."""


class NotFoundError(EngineError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class StateConflict(EngineError):
    """Raised when the current state forbids the requested transition."""


class AlreadyActive(StateConflict):
    """The user already has an in-progress attempt for this exercise."""

    def __init__(self, user_id: str, exercise_id: str):
        self.user_id = user_id
        self.exercise_id = exercise_id
        super().__init__(f"User {user_id} already has an active attempt for exercise {exercise_id}")


class RetryExhausted(StateConflict):
    """The exercise retry policy allows no further attempts."""


class NotInProgress(StateConflict):
    """The attempt has already reached a terminal status."""

    def __init__(self, attempt_id: str, status: str):
        self.attempt_id = attempt_id
        self.status = status
        super().__init__(f"Attempt {attempt_id} is not in progress (status: {status})")


class Expired(StateConflict):
    """The attempt deadline passed; it has been timed out."""

    def __init__(self, attempt_id: str):
        self.attempt_id = attempt_id
        super().__init__(f"Attempt {attempt_id} has expired")
