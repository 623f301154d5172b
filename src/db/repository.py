"""
Repository contracts and in-memory implementations.

The attempt repository owns the two atomic operations the lifecycle relies on:

- add(): conditional insert that refuses a second in-progress attempt for
  the same (user, exercise) pair
- update(): compare-and-swap on (id, version); the stored version is bumped
  on success and the caller's copy is updated to match

In-memory repositories serialize those operations under a single store lock
and hand out copies, so callers never share mutable state with the store.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Protocol, runtime_checkable

from loguru import logger

from src.exercise.errors import AlreadyActive
from src.exercise.models import Attempt, AttemptStatus, Exercise

TimeoutCallback = Callable[[Attempt], None]


# =============================================================================
# Protocol Definitions
# =============================================================================


@runtime_checkable
class ExerciseRepository(Protocol):
    """Protocol for exercise lookup."""

    def get_by_id(self, exercise_id: str) -> Exercise | None:
        ...

    def add(self, exercise: Exercise) -> None:
        ...


@runtime_checkable
class AttemptRepository(Protocol):
    """Protocol for attempt storage."""

    def get_by_id(self, attempt_id: str) -> Attempt | None:
        ...

    def add(self, attempt: Attempt) -> None:
        """Insert; raises AlreadyActive if the pair already has an in-progress attempt."""
        ...

    def update(self, attempt: Attempt) -> bool:
        """Store if the stored version equals attempt.version. Returns False on a lost race."""
        ...

    def get_active_attempt(self, user_id: str, exercise_id: str) -> Attempt | None:
        ...

    def count_completed(self, user_id: str, exercise_id: str) -> int:
        ...

    def list_for_user(
        self,
        user_id: str,
        exercise_id: str | None = None,
        skip: int = 0,
        take: int | None = None,
    ) -> list[Attempt]:
        """Newest first."""
        ...

    def list_for_exercise(self, exercise_id: str) -> list[Attempt]:
        ...

    def time_out_expired_attempts(self, now: datetime, on_timeout: TimeoutCallback) -> int:
        """
        Seal every in-progress attempt with expires_at < now.

        on_timeout mutates a copy (status, scores); the copy is then stored
        with a conditional update. Attempts that finished concurrently are
        skipped. Returns the number of attempts timed out.
        """
        ...


# =============================================================================
# In-Memory Implementations
# =============================================================================


class InMemoryExerciseRepository:
    def __init__(self, exercises: list[Exercise] | None = None):
        self._exercises: dict[str, Exercise] = {}
        for exercise in exercises or []:
            self.add(exercise)

    def get_by_id(self, exercise_id: str) -> Exercise | None:
        return self._exercises.get(exercise_id)

    def add(self, exercise: Exercise) -> None:
        # Exercises are frozen; no copy needed
        self._exercises[exercise.id] = exercise


class InMemoryAttemptRepository:
    def __init__(self):
        self._attempts: dict[str, Attempt] = {}
        self._lock = threading.Lock()

    def get_by_id(self, attempt_id: str) -> Attempt | None:
        with self._lock:
            stored = self._attempts.get(attempt_id)
            return copy.deepcopy(stored) if stored else None

    def add(self, attempt: Attempt) -> None:
        with self._lock:
            if attempt.status is AttemptStatus.IN_PROGRESS and self._find_active(attempt.user_id, attempt.exercise_id):
                raise AlreadyActive(attempt.user_id, attempt.exercise_id)
            self._attempts[attempt.id] = copy.deepcopy(attempt)

    def update(self, attempt: Attempt) -> bool:
        with self._lock:
            stored = self._attempts.get(attempt.id)
            if stored is None or stored.version != attempt.version:
                return False
            attempt.version += 1
            self._attempts[attempt.id] = copy.deepcopy(attempt)
            return True

    def get_active_attempt(self, user_id: str, exercise_id: str) -> Attempt | None:
        with self._lock:
            active = self._find_active(user_id, exercise_id)
            return copy.deepcopy(active) if active else None

    def count_completed(self, user_id: str, exercise_id: str) -> int:
        with self._lock:
            return sum(
                1
                for a in self._attempts.values()
                if a.user_id == user_id and a.exercise_id == exercise_id and a.status is AttemptStatus.COMPLETED
            )

    def list_for_user(
        self,
        user_id: str,
        exercise_id: str | None = None,
        skip: int = 0,
        take: int | None = None,
    ) -> list[Attempt]:
        with self._lock:
            matching = [
                a
                for a in self._attempts.values()
                if a.user_id == user_id and (exercise_id is None or a.exercise_id == exercise_id)
            ]
        matching.sort(key=lambda a: a.started_at, reverse=True)
        end = None if take is None else skip + take
        return [copy.deepcopy(a) for a in matching[skip:end]]

    def list_for_exercise(self, exercise_id: str) -> list[Attempt]:
        with self._lock:
            return [copy.deepcopy(a) for a in self._attempts.values() if a.exercise_id == exercise_id]

    def time_out_expired_attempts(self, now: datetime, on_timeout: TimeoutCallback) -> int:
        with self._lock:
            candidates = [
                copy.deepcopy(a)
                for a in self._attempts.values()
                if a.status is AttemptStatus.IN_PROGRESS and a.expires_at is not None and a.expires_at < now
            ]

        timed_out = 0
        for attempt in candidates:
            on_timeout(attempt)
            if self.update(attempt):
                timed_out += 1
            else:
                logger.debug(f"Sweep lost race for attempt {attempt.id}; skipped")
        return timed_out

    def _find_active(self, user_id: str, exercise_id: str) -> Attempt | None:
        for attempt in self._attempts.values():
            if (
                attempt.user_id == user_id
                and attempt.exercise_id == exercise_id
                and attempt.status is AttemptStatus.IN_PROGRESS
            ):
                return attempt
        return None
