"""
Read-only projections returned to callers of the attempt tracker.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.exercise.models import Answer, Attempt, AttemptStatus, QuestionCategory


class AnswerInfo(BaseModel):
    """A scored (or not yet scored) answer."""

    question_id: str
    user_answer: str
    is_correct: bool
    points_earned: float
    feedback: str | None
    time_spent_seconds: float | None
    answered_at: datetime

    @classmethod
    def from_answer(cls, answer: Answer) -> AnswerInfo:
        return cls(
            question_id=answer.question_id,
            user_answer=answer.user_answer,
            is_correct=answer.is_correct,
            points_earned=answer.points_earned,
            feedback=answer.feedback,
            time_spent_seconds=answer.time_spent_seconds,
            answered_at=answer.answered_at,
        )


class AttemptInfo(BaseModel):
    """Caller-facing view of an attempt."""

    id: str
    exercise_id: str
    user_id: str
    status: AttemptStatus
    started_at: datetime
    expires_at: datetime | None = None
    completed_at: datetime | None = None

    total_questions: int = Field(..., description="Questions in the exercise")
    questions_answered: int = Field(..., description="Questions with a submitted answer")
    completion_percentage: float = Field(..., ge=0, le=100)
    remaining_time_seconds: float | None = Field(None, description="Seconds until expiry; None when terminal or untimed")
    time_spent_seconds: float | None = Field(None, description="Seconds from start to completion")

    total_score: float = 0.0
    max_score: int = 0
    score_percentage: float = Field(0.0, ge=0, le=100)
    is_passed: bool = False

    answers: list[AnswerInfo] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_attempt(cls, attempt: Attempt, now: datetime) -> AttemptInfo:
        remaining = attempt.remaining_time(now)
        spent = attempt.time_spent
        return cls(
            id=attempt.id,
            exercise_id=attempt.exercise_id,
            user_id=attempt.user_id,
            status=attempt.status,
            started_at=attempt.started_at,
            expires_at=attempt.expires_at,
            completed_at=attempt.completed_at,
            total_questions=attempt.total_questions,
            questions_answered=attempt.questions_answered,
            completion_percentage=attempt.completion_percentage(),
            remaining_time_seconds=remaining.total_seconds() if remaining is not None else None,
            time_spent_seconds=spent.total_seconds() if spent is not None else None,
            total_score=attempt.total_score,
            max_score=attempt.max_score,
            score_percentage=attempt.score_percentage,
            is_passed=attempt.is_passed,
            answers=[AnswerInfo.from_answer(a) for a in attempt.answers],
        )


class CanAttemptResult(BaseModel):
    """Whether a user may start a new attempt, and why not."""

    can_attempt: bool
    reason: str | None = None
    remaining_attempts: int | None = Field(None, description="None when retries are unlimited by count")
    active_attempt_id: str | None = None


class AttemptStatistics(BaseModel):
    """Aggregate performance of a user, optionally for one exercise."""

    total_attempts: int = 0
    completed_attempts: int = 0
    passed_attempts: int = 0
    pass_rate: float = Field(0.0, description="Passed / completed, percentage")
    average_score: float = 0.0
    best_score: float = 0.0
    average_time_spent_seconds: float = 0.0
    first_attempt_at: datetime | None = None
    last_attempt_at: datetime | None = None
    improvement_trend: float = Field(0.0, description="Mean score of later half minus earlier half")


class ExerciseTimeAnalysis(BaseModel):
    """How users spend the time limit of one exercise."""

    exercise_id: str
    time_limit_minutes: int
    measured_attempts: int = Field(0, description="Finished attempts with a recorded duration")
    average_time_spent_seconds: float = 0.0
    shortest_time_spent_seconds: float = 0.0
    longest_time_spent_seconds: float = 0.0
    time_utilization_rate: float = Field(0.0, description="Average time spent over the time limit, percentage")
    recommended_time_limit_minutes: int
    efficiency_rating: str = ""


# =============================================================================
# Comprehension Breakdown
# =============================================================================


class ReadingSpeedLevel(str, Enum):
    VERY_SLOW = "very_slow"
    SLOW = "slow"
    AVERAGE = "average"
    FAST = "fast"
    VERY_FAST = "very_fast"

    @property
    def rank(self) -> int:
        return list(ReadingSpeedLevel).index(self)


class CategoryScore(BaseModel):
    category: QuestionCategory
    label: str = Field(..., description="Display name of the category")
    score: float = Field(0.0, description="Points from correctly answered questions")
    max_score: float = 0.0
    percentage: float = 0.0
    question_count: int = 0
    correct_count: int = 0


class ReadingSpeedAnalysis(BaseModel):
    words_per_minute: float = 0.0
    word_count: int = 0
    total_time_seconds: float = 0.0
    reading_time_seconds: float = Field(0.0, description="Total time minus the share spent on questions")
    speed_level: ReadingSpeedLevel | None = Field(None, description="None when speed cannot be measured")
    percentile: int = 0
    feedback: str = ""


class ComprehensionScoreBreakdown(BaseModel):
    """Per-skill comprehension report for a finished attempt."""

    attempt_id: str
    overall_score: float = Field(0.0, description="Correct-answer points over categorized points, percentage")
    main_idea: CategoryScore
    detail: CategoryScore
    inference: CategoryScore
    vocabulary: CategoryScore
    summary: CategoryScore
    reading_speed: ReadingSpeedAnalysis
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @property
    def categories(self) -> list[CategoryScore]:
        return [self.main_idea, self.detail, self.inference, self.vocabulary, self.summary]
