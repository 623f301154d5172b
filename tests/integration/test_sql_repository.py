"""
Integration tests for the SQLAlchemy repositories.

Each test runs against a fresh SQLite file so the partial unique index,
the versioned UPDATE and timezone handling are exercised for real.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from src.attempts import AttemptStateMachine
from src.db.database import init_db, make_engine, make_session_factory
from src.db.sql_repository import SqlAttemptRepository, SqlExerciseRepository
from src.exercise import create_reading_text
from src.exercise.errors import AlreadyActive
from src.exercise.models import Attempt, AttemptStatus


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'engine.db'}")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def exercise(make_exercise):
    return make_exercise()


@pytest.fixture
def exercises(session_factory, exercise):
    repo = SqlExerciseRepository(session_factory)
    repo.add(exercise)
    return repo


@pytest.fixture
def attempts(session_factory):
    return SqlAttemptRepository(session_factory)


@pytest.fixture
def tracker(exercises, attempts, clock):
    return AttemptStateMachine(exercises, attempts, clock=clock)


class TestExerciseStorage:
    """Test exercise persistence."""

    def test_round_trip(self, session_factory, make_exercise):
        """The stored definition restores an equal Exercise."""
        text = create_reading_text("Deniz", "Deniz mavidir. Dalgalar sahile vurur.")
        exercise = make_exercise("ex-2", reading_text=text)
        repo = SqlExerciseRepository(session_factory)

        repo.add(exercise)

        assert repo.get_by_id("ex-2") == exercise

    def test_add_is_idempotent(self, exercises, exercise):
        """Adding the same exercise twice keeps one row."""
        exercises.add(exercise)
        assert exercises.get_by_id(exercise.id) == exercise

    def test_missing(self, exercises):
        """Unknown ids return None."""
        assert exercises.get_by_id("missing") is None


class TestAttemptStorage:
    """Test attempt persistence and atomic operations."""

    def test_timestamps_come_back_in_utc(self, attempts, exercise, clock):
        """SQLite drops tzinfo; loaded attempts are UTC-aware again."""
        attempt = Attempt.start(exercise, "user-1", clock.now)
        attempts.add(attempt)

        loaded = attempts.get_by_id(attempt.id)

        assert loaded.started_at == clock.now
        assert loaded.expires_at == clock.now + timedelta(minutes=10)
        assert loaded.started_at.tzinfo is not None

    def test_second_active_attempt_rejected(self, attempts, exercise, clock):
        """The partial unique index allows one in-progress attempt per pair."""
        attempts.add(Attempt.start(exercise, "user-1", clock.now))

        with pytest.raises(AlreadyActive):
            attempts.add(Attempt.start(exercise, "user-1", clock.now))

    def test_finished_attempts_do_not_block(self, attempts, exercise, clock):
        """The unique index only covers in_progress rows."""
        first = Attempt.start(exercise, "user-1", clock.now)
        attempts.add(first)
        first.seal(AttemptStatus.ABANDONED, clock.now)
        assert attempts.update(first) is True

        attempts.add(Attempt.start(exercise, "user-1", clock.now))
        assert len(attempts.list_for_user("user-1")) == 2

    def test_compare_and_swap(self, attempts, exercise, clock):
        """An update from a stale copy is refused."""
        attempt = Attempt.start(exercise, "user-1", clock.now)
        attempts.add(attempt)
        first = attempts.get_by_id(attempt.id)
        second = attempts.get_by_id(attempt.id)

        first.upsert_answer("q1", "a", None, clock.now)
        assert attempts.update(first) is True
        assert first.version == 1

        second.upsert_answer("q2", "a,b", None, clock.now)
        assert attempts.update(second) is False

        stored = attempts.get_by_id(attempt.id)
        assert stored.version == 1
        assert [a.question_id for a in stored.answers] == ["q1"]
        assert stored.answers[0].answered_at == clock.now


class TestTrackerOnSql:
    """Run the state machine end to end on SQLite."""

    def test_full_lifecycle(self, tracker, clock, correct_answers):
        """Start, answer, complete and read back."""
        info = tracker.start_attempt("ex-1", "user-1")
        for question_id, answer in correct_answers.items():
            tracker.submit_answer(info.id, question_id, answer)
        clock.advance(minutes=3)

        result = tracker.complete(info.id)

        assert result.status is AttemptStatus.COMPLETED
        assert result.total_score == pytest.approx(70.0)
        assert result.time_spent_seconds == 180
        assert tracker.get_attempt(info.id).is_passed is True
        assert tracker.can_attempt("ex-1", "user-1").remaining_attempts == 2

    def test_sweep(self, tracker, clock):
        """Expired rows are timed out once."""
        expired = tracker.start_attempt("ex-1", "user-1")
        clock.advance(minutes=6)
        live = tracker.start_attempt("ex-1", "user-2")
        clock.advance(minutes=5)

        assert tracker.sweep() == 1
        assert tracker.sweep() == 0
        assert tracker.get_attempt(expired.id).status is AttemptStatus.TIMED_OUT
        assert tracker.get_attempt(live.id).status is AttemptStatus.IN_PROGRESS

    def test_user_attempts_newest_first(self, tracker, clock):
        """Ordering and pagination happen in SQL."""
        ids = []
        for _ in range(3):
            info = tracker.start_attempt("ex-1", "user-1")
            tracker.abandon(info.id)
            ids.append(info.id)
            clock.advance(minutes=1)

        assert [a.id for a in tracker.get_user_attempts("user-1")] == list(reversed(ids))
        assert [a.id for a in tracker.get_user_attempts("user-1", skip=2, take=5)] == [ids[0]]

    @pytest.mark.slow
    def test_concurrent_starts_admit_exactly_one(self, tracker):
        """Racing inserts: the database lets exactly one through."""

        def start(_):
            try:
                return tracker.start_attempt("ex-1", "user-1")
            except AlreadyActive:
                return None

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(start, range(8)))

        assert sum(1 for r in results if r is not None) == 1
