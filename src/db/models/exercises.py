"""
Exercise storage.

Exercises are immutable once authored, so the full definition (questions,
options and the attached reading-text analysis) lives in one JSON column.
Frequently filtered settings are mirrored as plain columns.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.exercise.models import Exercise

from .base import Base


class ExerciseRecord(Base):
    __tablename__ = "exercises"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    time_limit_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False)

    # Full Exercise.to_dict() payload
    definition: Mapped[dict] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<ExerciseRecord id={self.id} title={self.title!r}>"

    @classmethod
    def from_domain(cls, exercise: Exercise) -> ExerciseRecord:
        return cls(
            id=exercise.id,
            title=exercise.title,
            is_active=exercise.is_active,
            time_limit_minutes=exercise.time_limit_minutes,
            passing_score=exercise.passing_score,
            definition=exercise.to_dict(),
        )

    def to_domain(self) -> Exercise:
        return Exercise.from_dict(self.definition)
