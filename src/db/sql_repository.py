"""
SQLAlchemy-backed repositories.

Concurrency guarantees come from the database, not from Python locks:
- the partial unique index uq_attempts_active rejects a second in-progress
  attempt per (user, exercise), translated to AlreadyActive
- update() is `UPDATE ... WHERE id = :id AND version = :version`
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from src.exercise.errors import AlreadyActive
from src.exercise.models import Attempt, AttemptStatus, Exercise

from .database import SessionLocal, session_scope
from .models import AttemptRecord, ExerciseRecord
from .repository import TimeoutCallback


class SqlExerciseRepository:
    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self.session_factory = session_factory or SessionLocal

    def get_by_id(self, exercise_id: str) -> Exercise | None:
        with session_scope(self.session_factory) as session:
            record = session.get(ExerciseRecord, exercise_id)
            return record.to_domain() if record else None

    def add(self, exercise: Exercise) -> None:
        with session_scope(self.session_factory) as session:
            session.merge(ExerciseRecord.from_domain(exercise))
        logger.debug(f"Stored exercise {exercise.id}")


class SqlAttemptRepository:
    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self.session_factory = session_factory or SessionLocal

    def get_by_id(self, attempt_id: str) -> Attempt | None:
        with session_scope(self.session_factory) as session:
            record = session.get(AttemptRecord, attempt_id)
            return record.to_domain() if record else None

    def add(self, attempt: Attempt) -> None:
        try:
            with session_scope(self.session_factory) as session:
                session.add(AttemptRecord.from_domain(attempt))
        except IntegrityError as e:
            if attempt.status is AttemptStatus.IN_PROGRESS and self.get_active_attempt(
                attempt.user_id, attempt.exercise_id
            ):
                raise AlreadyActive(attempt.user_id, attempt.exercise_id) from e
            raise

    def update(self, attempt: Attempt) -> bool:
        expected = attempt.version
        record = AttemptRecord.from_domain(attempt)
        values = {
            "status": record.status,
            "completed_at": record.completed_at,
            "total_score": record.total_score,
            "score_percentage": record.score_percentage,
            "is_passed": record.is_passed,
            "answers": record.answers,
            "version": expected + 1,
        }
        with session_scope(self.session_factory) as session:
            result = session.execute(
                update(AttemptRecord)
                .where(AttemptRecord.id == attempt.id, AttemptRecord.version == expected)
                .values(**values)
            )
            swapped = result.rowcount == 1

        if swapped:
            attempt.version = expected + 1
        return swapped

    def get_active_attempt(self, user_id: str, exercise_id: str) -> Attempt | None:
        with session_scope(self.session_factory) as session:
            record = session.scalars(
                select(AttemptRecord).where(
                    AttemptRecord.user_id == user_id,
                    AttemptRecord.exercise_id == exercise_id,
                    AttemptRecord.status == AttemptStatus.IN_PROGRESS.value,
                )
            ).first()
            return record.to_domain() if record else None

    def count_completed(self, user_id: str, exercise_id: str) -> int:
        with session_scope(self.session_factory) as session:
            return session.scalar(
                select(func.count())
                .select_from(AttemptRecord)
                .where(
                    AttemptRecord.user_id == user_id,
                    AttemptRecord.exercise_id == exercise_id,
                    AttemptRecord.status == AttemptStatus.COMPLETED.value,
                )
            ) or 0

    def list_for_user(
        self,
        user_id: str,
        exercise_id: str | None = None,
        skip: int = 0,
        take: int | None = None,
    ) -> list[Attempt]:
        query = select(AttemptRecord).where(AttemptRecord.user_id == user_id)
        if exercise_id is not None:
            query = query.where(AttemptRecord.exercise_id == exercise_id)
        query = query.order_by(AttemptRecord.started_at.desc()).offset(skip)
        if take is not None:
            query = query.limit(take)

        with session_scope(self.session_factory) as session:
            return [record.to_domain() for record in session.scalars(query)]

    def list_for_exercise(self, exercise_id: str) -> list[Attempt]:
        with session_scope(self.session_factory) as session:
            records = session.scalars(select(AttemptRecord).where(AttemptRecord.exercise_id == exercise_id))
            return [record.to_domain() for record in records]

    def time_out_expired_attempts(self, now: datetime, on_timeout: TimeoutCallback) -> int:
        with session_scope(self.session_factory) as session:
            candidates = [
                record.to_domain()
                for record in session.scalars(
                    select(AttemptRecord).where(
                        AttemptRecord.status == AttemptStatus.IN_PROGRESS.value,
                        AttemptRecord.expires_at.is_not(None),
                        AttemptRecord.expires_at < now,
                    )
                )
            ]

        timed_out = 0
        for attempt in candidates:
            on_timeout(attempt)
            if self.update(attempt):
                timed_out += 1
            else:
                logger.debug(f"Sweep lost race for attempt {attempt.id}; skipped")
        return timed_out
