"""
Attempt storage.

The partial unique index uq_attempts_active is what makes "at most one
in-progress attempt per user and exercise" hold under concurrent starts:
the second insert fails with an IntegrityError.

`version` backs the compare-and-swap updates in SqlAttemptRepository.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from src.exercise.models import Answer, Attempt, AttemptStatus

from .base import Base


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; stored values are always UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class AttemptRecord(Base):
    __tablename__ = "exercise_attempts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    exercise_id: Mapped[str] = mapped_column(
        ForeignKey("exercises.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=AttemptStatus.IN_PROGRESS.value)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    total_questions: Mapped[int] = mapped_column(Integer, default=0)
    max_score: Mapped[int] = mapped_column(Integer, default=0)
    total_score: Mapped[float] = mapped_column(Float, default=0.0)
    score_percentage: Mapped[float] = mapped_column(Float, default=0.0)
    is_passed: Mapped[bool] = mapped_column(Boolean, default=False)

    # Answer.to_dict() payloads in submission order
    answers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index(
            "uq_attempts_active",
            "user_id",
            "exercise_id",
            unique=True,
            sqlite_where=text("status = 'in_progress'"),
            postgresql_where=text("status = 'in_progress'"),
        ),
        Index("idx_attempts_user_exercise", "user_id", "exercise_id"),
        Index("idx_attempts_status_expires", "status", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<AttemptRecord id={self.id} user={self.user_id} status={self.status}>"

    @classmethod
    def from_domain(cls, attempt: Attempt) -> AttemptRecord:
        record = cls(id=attempt.id)
        record.apply(attempt)
        return record

    def apply(self, attempt: Attempt) -> None:
        """Copy mutable attempt state onto this row (version excluded)."""
        self.exercise_id = attempt.exercise_id
        self.user_id = attempt.user_id
        self.status = attempt.status.value
        self.started_at = attempt.started_at
        self.expires_at = attempt.expires_at
        self.completed_at = attempt.completed_at
        self.total_questions = attempt.total_questions
        self.max_score = attempt.max_score
        self.total_score = attempt.total_score
        self.score_percentage = attempt.score_percentage
        self.is_passed = attempt.is_passed
        self.answers = [a.to_dict() for a in attempt.answers]
        self.version = attempt.version

    def to_domain(self) -> Attempt:
        answers = [Answer.from_dict(a) for a in self.answers or []]
        for answer in answers:
            answer.answered_at = as_utc(answer.answered_at)
        return Attempt(
            id=self.id,
            exercise_id=self.exercise_id,
            user_id=self.user_id,
            status=AttemptStatus(self.status),
            started_at=as_utc(self.started_at),
            expires_at=as_utc(self.expires_at),
            completed_at=as_utc(self.completed_at),
            total_questions=self.total_questions,
            max_score=self.max_score,
            answers=answers,
            total_score=self.total_score,
            score_percentage=self.score_percentage,
            is_passed=self.is_passed,
            version=self.version,
        )
