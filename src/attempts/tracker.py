"""
Attempt State Machine.

Owns the exercise-attempt lifecycle:

    in_progress --complete--> completed
                --abandon---> abandoned
                --time_out--> timed_out   (also via sweep, expired submit/complete)

Terminal states never transition again. Every mutation is a compare-and-swap
on the attempt's version: a caller that loses the race reloads, and if the
attempt turned terminal in the meantime it sees NotInProgress. The sweep
silently skips attempts that finished concurrently.

Scoring happens once, when an attempt is completed or timed out.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

from loguru import logger

from src.db.repository import AttemptRepository, ExerciseRepository
from src.exercise.errors import (
    Expired,
    NotFoundError,
    NotInProgress,
    RetryExhausted,
    StateConflict,
    ValidationError,
)
from src.exercise.models import Attempt, AttemptStatus, Exercise, utc_now
from src.scoring import AnswerScorer

from .comprehension import ComprehensionScorer
from .projections import (
    AttemptInfo,
    AttemptStatistics,
    CanAttemptResult,
    ComprehensionScoreBreakdown,
    ExerciseTimeAnalysis,
)

T = TypeVar("T")

Clock = Callable[[], datetime]

MAX_CAS_RETRIES = 3

# Time analysis
RECOMMEND_LONGER_ABOVE = 0.8  # average / limit
RECOMMENDED_LIMIT_FACTOR = 1.2
EFFICIENCY_RATINGS: tuple[tuple[float, str], ...] = (
    (0.9, "Zaman sınırı yeterli"),
    (0.7, "İyi zaman kullanımı"),
    (0.5, "Hızlı tamamlanıyor"),
)
FASTEST_RATING = "Çok hızlı, zorluk artırılabilir"


class AttemptStateMachine:
    """
    Attempt lifecycle service.

    Example:
        tracker = AttemptStateMachine(exercises, attempts)
        info = tracker.start_attempt(exercise_id, user_id)
        tracker.submit_answer(info.id, question_id, "a,c")
        result = tracker.complete(info.id)
    """

    def __init__(
        self,
        exercises: ExerciseRepository,
        attempts: AttemptRepository,
        scorer: AnswerScorer | None = None,
        clock: Clock = utc_now,
        comprehension: ComprehensionScorer | None = None,
    ):
        self.exercises = exercises
        self.attempts = attempts
        self.scorer = scorer or AnswerScorer()
        self.clock = clock
        self.comprehension = comprehension or ComprehensionScorer()

    # =========================================================================
    # Lifecycle Operations
    # =========================================================================

    def start_attempt(self, exercise_id: str, user_id: str) -> AttemptInfo:
        """
        Start a new attempt.

        Raises:
            NotFoundError: Exercise does not exist
            ValidationError: Exercise inactive or user id missing
            AlreadyActive: User already has an in-progress attempt
            RetryExhausted: Retry policy forbids another attempt
        """
        if not user_id:
            raise ValidationError("User id is required")

        exercise = self._get_exercise(exercise_id)
        if not exercise.is_active:
            raise ValidationError(f"Exercise {exercise_id} is not active")

        now = self.clock()

        # An expired attempt the sweep has not reached yet must not block a new start
        active = self.attempts.get_active_attempt(user_id, exercise_id)
        if active is not None and active.is_expired(now):
            self._time_out_stale(active.id)

        self._check_retry_policy(exercise, user_id)

        attempt = Attempt.start(exercise, user_id, now)
        self.attempts.add(attempt)  # atomic; raises AlreadyActive

        logger.info(f"Started attempt {attempt.id} for user {user_id} on exercise {exercise_id}")
        return AttemptInfo.from_attempt(attempt, now)

    def submit_answer(
        self,
        attempt_id: str,
        question_id: str,
        answer: str,
        time_spent_seconds: float | None = None,
    ) -> AttemptInfo:
        """
        Record or replace the answer to one question. Answers are scored at completion.

        Raises:
            NotFoundError: Attempt or question does not exist
            ValidationError: Answer is None or time spent is negative
            NotInProgress: Attempt already finished
            Expired: Deadline passed; the attempt has been timed out
        """
        if answer is None:
            raise ValidationError("Answer is required")
        if time_spent_seconds is not None and time_spent_seconds < 0:
            raise ValidationError("Time spent cannot be negative")

        def apply(attempt: Attempt, exercise: Exercise, now: datetime) -> bool:
            if exercise.get_question(question_id) is None:
                raise NotFoundError("Question", question_id)
            if attempt.is_expired(now):
                self._finalize(attempt, exercise, now, AttemptStatus.TIMED_OUT)
                return True
            attempt.upsert_answer(question_id, answer, time_spent_seconds, now)
            return False

        attempt, expired = self._transition(attempt_id, apply)
        if expired:
            logger.info(f"Attempt {attempt_id} expired on submit; timed out")
            raise Expired(attempt_id)

        logger.debug(f"Answer recorded for question {question_id} on attempt {attempt_id}")
        return AttemptInfo.from_attempt(attempt, self.clock())

    def complete(self, attempt_id: str) -> AttemptInfo:
        """
        Finish and score an attempt.

        Past the deadline the attempt is sealed as timed_out instead, with
        the same scoring.
        """

        def apply(attempt: Attempt, exercise: Exercise, now: datetime) -> None:
            status = AttemptStatus.TIMED_OUT if attempt.is_expired(now) else AttemptStatus.COMPLETED
            self._finalize(attempt, exercise, now, status)

        attempt, _ = self._transition(attempt_id, apply)
        logger.info(
            f"Attempt {attempt_id} {attempt.status.value}: "
            f"{attempt.total_score:g}/{attempt.max_score} ({attempt.score_percentage:.1f}%)"
        )
        return AttemptInfo.from_attempt(attempt, self.clock())

    def abandon(self, attempt_id: str) -> AttemptInfo:
        """Give up on an attempt. Nothing is scored."""

        def apply(attempt: Attempt, exercise: Exercise, now: datetime) -> None:
            attempt.seal(AttemptStatus.ABANDONED, now)

        attempt, _ = self._transition(attempt_id, apply)
        logger.info(f"Attempt {attempt_id} abandoned")
        return AttemptInfo.from_attempt(attempt, self.clock())

    def time_out(self, attempt_id: str) -> AttemptInfo:
        """
        Seal an attempt as timed_out and score the answers submitted so far.

        Idempotent: on an attempt that is already terminal this returns the
        stored projection unchanged.
        """

        def apply(attempt: Attempt, exercise: Exercise, now: datetime) -> None:
            self._finalize(attempt, exercise, now, AttemptStatus.TIMED_OUT)

        attempt, _ = self._transition(attempt_id, apply, allow_terminal=True)
        return AttemptInfo.from_attempt(attempt, self.clock())

    def sweep(self) -> int:
        """Time out every in-progress attempt past its deadline. Returns the count."""
        now = self.clock()
        count = self.attempts.time_out_expired_attempts(now, lambda attempt: self._seal_expired(attempt, now))
        if count:
            logger.info(f"Sweep timed out {count} expired attempt(s)")
        return count

    # =========================================================================
    # Queries
    # =========================================================================

    def get_attempt(self, attempt_id: str) -> AttemptInfo:
        return AttemptInfo.from_attempt(self._get_attempt(attempt_id), self.clock())

    def get_current_attempt(self, exercise_id: str, user_id: str) -> AttemptInfo | None:
        attempt = self.attempts.get_active_attempt(user_id, exercise_id)
        return AttemptInfo.from_attempt(attempt, self.clock()) if attempt else None

    def get_user_attempts(
        self,
        user_id: str,
        exercise_id: str | None = None,
        skip: int = 0,
        take: int = 20,
    ) -> list[AttemptInfo]:
        """Newest first."""
        if skip < 0 or take < 0:
            raise ValidationError("skip and take must be non-negative")
        now = self.clock()
        return [
            AttemptInfo.from_attempt(a, now)
            for a in self.attempts.list_for_user(user_id, exercise_id, skip=skip, take=take)
        ]

    def can_attempt(self, exercise_id: str, user_id: str) -> CanAttemptResult:
        exercise = self.exercises.get_by_id(exercise_id)
        if exercise is None:
            return CanAttemptResult(can_attempt=False, reason="Exercise not found")
        if not exercise.is_active:
            return CanAttemptResult(can_attempt=False, reason="Exercise is not active")

        active = self.attempts.get_active_attempt(user_id, exercise_id)
        if active is not None and not active.is_expired(self.clock()):
            return CanAttemptResult(
                can_attempt=False,
                reason="User already has an active attempt",
                active_attempt_id=active.id,
            )

        completed = self.attempts.count_completed(user_id, exercise_id)
        if not exercise.allow_retry and completed > 0:
            return CanAttemptResult(can_attempt=False, reason="Retries are not allowed for this exercise")
        if completed >= exercise.max_retries:
            return CanAttemptResult(
                can_attempt=False,
                reason=f"Maximum retry limit ({exercise.max_retries}) reached",
                remaining_attempts=0,
            )

        return CanAttemptResult(can_attempt=True, remaining_attempts=exercise.max_retries - completed)

    def get_attempt_statistics(self, user_id: str, exercise_id: str | None = None) -> AttemptStatistics:
        attempts = self.attempts.list_for_user(user_id, exercise_id)
        if not attempts:
            return AttemptStatistics()

        completed = sorted(
            (a for a in attempts if a.status is AttemptStatus.COMPLETED),
            key=lambda a: a.started_at,
        )
        passed = [a for a in completed if a.is_passed]
        durations = [a.time_spent.total_seconds() for a in completed if a.time_spent is not None]

        return AttemptStatistics(
            total_attempts=len(attempts),
            completed_attempts=len(completed),
            passed_attempts=len(passed),
            pass_rate=len(passed) / len(completed) * 100 if completed else 0.0,
            average_score=_mean([a.score_percentage for a in completed]),
            best_score=max((a.score_percentage for a in completed), default=0.0),
            average_time_spent_seconds=_mean(durations),
            first_attempt_at=min(a.started_at for a in attempts),
            last_attempt_at=max(a.started_at for a in attempts),
            improvement_trend=improvement_trend([a.score_percentage for a in completed]),
        )

    def get_time_analysis(self, exercise_id: str) -> ExerciseTimeAnalysis:
        exercise = self._get_exercise(exercise_id)
        limit = exercise.time_limit_minutes
        durations = [
            a.time_spent.total_seconds()
            for a in self.attempts.list_for_exercise(exercise_id)
            if a.time_spent is not None
        ]
        if not durations:
            return ExerciseTimeAnalysis(
                exercise_id=exercise_id,
                time_limit_minutes=limit,
                recommended_time_limit_minutes=limit,
            )

        average_seconds = _mean(durations)
        utilization = (average_seconds / 60) / limit
        recommended = math.ceil(limit * RECOMMENDED_LIMIT_FACTOR) if utilization > RECOMMEND_LONGER_ABOVE else limit

        rating = FASTEST_RATING
        for threshold, label in EFFICIENCY_RATINGS:
            if utilization > threshold:
                rating = label
                break

        return ExerciseTimeAnalysis(
            exercise_id=exercise_id,
            time_limit_minutes=limit,
            measured_attempts=len(durations),
            average_time_spent_seconds=average_seconds,
            shortest_time_spent_seconds=min(durations),
            longest_time_spent_seconds=max(durations),
            time_utilization_rate=utilization * 100,
            recommended_time_limit_minutes=recommended,
            efficiency_rating=rating,
        )

    def get_comprehension_breakdown(self, attempt_id: str) -> ComprehensionScoreBreakdown:
        attempt = self._get_attempt(attempt_id)
        if not attempt.status.is_terminal:
            raise StateConflict(f"Attempt {attempt_id} has not finished yet")
        exercise = self._get_exercise(attempt.exercise_id)
        return self.comprehension.breakdown(attempt, exercise)

    # =========================================================================
    # Internals
    # =========================================================================

    def _get_exercise(self, exercise_id: str) -> Exercise:
        exercise = self.exercises.get_by_id(exercise_id)
        if exercise is None:
            raise NotFoundError("Exercise", exercise_id)
        return exercise

    def _get_attempt(self, attempt_id: str) -> Attempt:
        attempt = self.attempts.get_by_id(attempt_id)
        if attempt is None:
            raise NotFoundError("Attempt", attempt_id)
        return attempt

    def _check_retry_policy(self, exercise: Exercise, user_id: str) -> None:
        completed = self.attempts.count_completed(user_id, exercise.id)
        if not exercise.allow_retry and completed > 0:
            raise RetryExhausted(f"Retries are not allowed for exercise {exercise.id}")
        if completed >= exercise.max_retries:
            raise RetryExhausted(f"Maximum retry limit ({exercise.max_retries}) reached for exercise {exercise.id}")

    def _transition(
        self,
        attempt_id: str,
        apply: Callable[[Attempt, Exercise, datetime], T],
        allow_terminal: bool = False,
    ) -> tuple[Attempt, T | None]:
        """
        Load, mutate and compare-and-swap an attempt, reloading on a lost race.

        A terminal attempt raises NotInProgress, or is returned unchanged
        when allow_terminal is set.
        """
        for _ in range(MAX_CAS_RETRIES):
            attempt = self._get_attempt(attempt_id)
            if attempt.status.is_terminal:
                if allow_terminal:
                    return attempt, None
                raise NotInProgress(attempt_id, attempt.status.value)

            exercise = self._get_exercise(attempt.exercise_id)
            result = apply(attempt, exercise, self.clock())
            if self.attempts.update(attempt):
                return attempt, result

            logger.debug(f"Concurrent update on attempt {attempt_id}; reloading")

        raise StateConflict(f"Attempt {attempt_id} is being modified concurrently; retry later")

    def _finalize(self, attempt: Attempt, exercise: Exercise, now: datetime, status: AttemptStatus) -> None:
        """Score every question (unanswered earns 0), then seal."""
        total = 0.0
        for question in exercise.questions:
            answer = attempt.get_answer(question.id)
            if answer is None:
                continue
            result = self.scorer.score(question, answer.user_answer)
            answer.is_correct = result.is_correct
            answer.points_earned = result.points_earned
            answer.feedback = result.feedback
            total += result.points_earned

        attempt.total_score = min(total, float(attempt.max_score))
        attempt.score_percentage = (
            max(0.0, min(100.0, attempt.total_score / attempt.max_score * 100)) if attempt.max_score > 0 else 0.0
        )
        attempt.is_passed = attempt.score_percentage >= exercise.passing_score
        attempt.seal(status, now)

    def _seal_expired(self, attempt: Attempt, now: datetime) -> None:
        exercise = self.exercises.get_by_id(attempt.exercise_id)
        if exercise is None:
            logger.warning(f"Exercise {attempt.exercise_id} missing; timing out attempt {attempt.id} unscored")
            attempt.seal(AttemptStatus.TIMED_OUT, now)
            return
        self._finalize(attempt, exercise, now, AttemptStatus.TIMED_OUT)

    def _time_out_stale(self, attempt_id: str) -> None:
        try:
            self.time_out(attempt_id)
        except StateConflict as e:
            logger.debug(f"Could not time out stale attempt {attempt_id}: {e}")


def improvement_trend(scores: list[float]) -> float:
    """Mean of the later half minus mean of the earlier half (odd middle goes later)."""
    if len(scores) < 2:
        return 0.0
    half = len(scores) // 2
    return _mean(scores[half:]) - _mean(scores[:half])


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0
