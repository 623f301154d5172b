"""
Exercise and attempt data contracts.

Question, Option, ReadingText and Exercise are authored once and immutable
thereafter. Attempt and Answer are created by start/submit operations and
sealed by complete, abandon or time-out.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from src.reading.models import TextAnalysisResult


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Enums
# =============================================================================


class QuestionType(str, Enum):
    """The seven answer shapes the scorer understands."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    FILL_IN_THE_BLANK = "fill_in_the_blank"
    ESSAY = "essay"
    MATCHING = "matching"
    ORDERING = "ordering"


class QuestionCategory(str, Enum):
    """Comprehension skill a question measures."""

    MAIN_IDEA = "main_idea"
    DETAIL = "detail"
    INFERENCE = "inference"
    VOCABULARY = "vocabulary"
    SUMMARY = "summary"


class AttemptStatus(str, Enum):
    """Attempt lifecycle states. Only IN_PROGRESS is non-terminal."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self is not AttemptStatus.IN_PROGRESS


# =============================================================================
# Authoring Contracts
# =============================================================================


@dataclass(frozen=True)
class Option:
    """A selectable option, accepted answer text, matching key or ordering item."""

    id: str
    text: str
    is_correct: bool = False
    order_index: int = 0
    matching_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "is_correct": self.is_correct,
            "order_index": self.order_index,
            "matching_value": self.matching_value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Option:
        return cls(**data)


@dataclass(frozen=True)
class Question:
    """A single question with its options."""

    id: str
    text: str
    type: QuestionType
    points: int
    options: tuple[Option, ...] = ()
    order_index: int = 0
    category: QuestionCategory | None = None

    @property
    def correct_options(self) -> list[Option]:
        return [o for o in self.options if o.is_correct]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "points": self.points,
            "options": [o.to_dict() for o in self.options],
            "order_index": self.order_index,
            "category": self.category.value if self.category else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        return cls(
            id=data["id"],
            text=data["text"],
            type=QuestionType(data["type"]),
            points=data["points"],
            options=tuple(Option.from_dict(o) for o in data.get("options", [])),
            order_index=data.get("order_index", 0),
            category=QuestionCategory(data["category"]) if data.get("category") else None,
        )


@dataclass(frozen=True)
class ReadingText:
    """A reading passage with its authoring-time analysis."""

    id: str
    title: str
    content: str
    analysis: TextAnalysisResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "analysis": self.analysis.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReadingText:
        return cls(
            id=data["id"],
            title=data["title"],
            content=data["content"],
            analysis=TextAnalysisResult.from_dict(data["analysis"]),
        )


@dataclass(frozen=True)
class Exercise:
    """An authored exercise: questions plus timing, passing and retry policy."""

    id: str
    title: str
    questions: tuple[Question, ...]
    time_limit_minutes: int = 30
    passing_score: int = 60  # percentage
    allow_retry: bool = True
    max_retries: int = 3
    is_time_limited: bool = True
    is_active: bool = True
    reading_text: ReadingText | None = None

    @property
    def max_score(self) -> int:
        return sum(q.points for q in self.questions)

    @property
    def time_limit(self) -> timedelta:
        return timedelta(minutes=self.time_limit_minutes)

    def get_question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions],
            "time_limit_minutes": self.time_limit_minutes,
            "passing_score": self.passing_score,
            "allow_retry": self.allow_retry,
            "max_retries": self.max_retries,
            "is_time_limited": self.is_time_limited,
            "is_active": self.is_active,
            "reading_text": self.reading_text.to_dict() if self.reading_text else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Exercise:
        payload = dict(data)
        payload["questions"] = tuple(Question.from_dict(q) for q in data.get("questions", []))
        if data.get("reading_text"):
            payload["reading_text"] = ReadingText.from_dict(data["reading_text"])
        return cls(**payload)


# =============================================================================
# Attempt State
# =============================================================================


@dataclass
class Answer:
    """A submitted answer; scoring fields are filled at completion or time-out."""

    question_id: str
    user_answer: str
    is_correct: bool = False
    points_earned: float = 0.0
    feedback: str | None = None
    time_spent_seconds: float | None = None
    answered_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "user_answer": self.user_answer,
            "is_correct": self.is_correct,
            "points_earned": self.points_earned,
            "feedback": self.feedback,
            "time_spent_seconds": self.time_spent_seconds,
            "answered_at": self.answered_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Answer:
        payload = dict(data)
        payload["answered_at"] = datetime.fromisoformat(payload["answered_at"])
        return cls(**payload)


@dataclass
class Attempt:
    """One timed run by a user through an exercise."""

    exercise_id: str
    user_id: str
    started_at: datetime
    expires_at: datetime | None
    total_questions: int
    max_score: int
    id: str = field(default_factory=new_id)
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    completed_at: datetime | None = None
    answers: list[Answer] = field(default_factory=list)
    total_score: float = 0.0
    score_percentage: float = 0.0
    is_passed: bool = False
    version: int = 0  # bumped on every stored update

    @classmethod
    def start(cls, exercise: Exercise, user_id: str, now: datetime) -> Attempt:
        expires_at = now + exercise.time_limit if exercise.is_time_limited else None
        return cls(
            exercise_id=exercise.id,
            user_id=user_id,
            started_at=now,
            expires_at=expires_at,
            total_questions=len(exercise.questions),
            max_score=exercise.max_score,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def questions_answered(self) -> int:
        return len(self.answers)

    @property
    def time_spent(self) -> timedelta | None:
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    def get_answer(self, question_id: str) -> Answer | None:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def remaining_time(self, now: datetime) -> timedelta | None:
        if self.expires_at is None or self.status.is_terminal:
            return None
        return max(timedelta(0), self.expires_at - now)

    def completion_percentage(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return min(100.0, self.questions_answered / self.total_questions * 100)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def upsert_answer(self, question_id: str, user_answer: str, time_spent_seconds: float | None, now: datetime) -> Answer:
        """Record or replace the answer to a question; scoring is deferred."""
        existing = self.get_answer(question_id)
        if existing is not None:
            existing.user_answer = user_answer
            existing.time_spent_seconds = time_spent_seconds
            existing.answered_at = now
            return existing

        answer = Answer(
            question_id=question_id,
            user_answer=user_answer,
            time_spent_seconds=time_spent_seconds,
            answered_at=now,
        )
        self.answers.append(answer)
        return answer

    def seal(self, status: AttemptStatus, now: datetime) -> None:
        """Move to a terminal status. Terminal attempts never change status again."""
        if self.status.is_terminal:
            raise ValueError(f"Attempt {self.id} is already {self.status.value}")
        if not status.is_terminal:
            raise ValueError("Cannot seal an attempt as in_progress")
        self.status = status
        self.completed_at = now

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "exercise_id": self.exercise_id,
            "user_id": self.user_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "total_questions": self.total_questions,
            "max_score": self.max_score,
            "answers": [a.to_dict() for a in self.answers],
            "total_score": self.total_score,
            "score_percentage": self.score_percentage,
            "is_passed": self.is_passed,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Attempt:
        return cls(
            id=data["id"],
            exercise_id=data["exercise_id"],
            user_id=data["user_id"],
            status=AttemptStatus(data["status"]),
            started_at=datetime.fromisoformat(data["started_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]) if data.get("expires_at") else None,
            completed_at=datetime.fromisoformat(data["completed_at"]) if data.get("completed_at") else None,
            total_questions=data["total_questions"],
            max_score=data["max_score"],
            answers=[Answer.from_dict(a) for a in data.get("answers", [])],
            total_score=data.get("total_score", 0.0),
            score_percentage=data.get("score_percentage", 0.0),
            is_passed=data.get("is_passed", False),
            version=data.get("version", 0),
        )
