"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Keep the module-level engine off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "")

from src.exercise.models import (  # noqa: E402
    Exercise,
    Option,
    Question,
    QuestionCategory,
    QuestionType,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite database)")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Injectable UTC clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """A frozen clock starting at 2024-03-01 09:00 UTC."""
    return FakeClock()


@pytest.fixture
def sample_questions():
    """One question of every type, 10 points each, ids q1..q8."""
    return [
        Question(
            id="q1",
            text="Metnin ana fikri nedir?",
            type=QuestionType.MULTIPLE_CHOICE,
            points=10,
            order_index=1,
            category=QuestionCategory.MAIN_IDEA,
            options=(
                Option(id="a", text="Okumanın önemi", is_correct=True),
                Option(id="b", text="Sporun faydaları"),
                Option(id="c", text="Tarih bilgisi"),
            ),
        ),
        Question(
            id="q2",
            text="Metinde geçen şehirler hangileridir?",
            type=QuestionType.MULTIPLE_CHOICE,
            points=10,
            order_index=2,
            category=QuestionCategory.DETAIL,
            options=(
                Option(id="a", text="İstanbul", is_correct=True),
                Option(id="b", text="Ankara", is_correct=True),
                Option(id="c", text="Paris"),
            ),
        ),
        Question(
            id="q3",
            text="Yazar kitap okumayı sever.",
            type=QuestionType.TRUE_FALSE,
            points=10,
            order_index=3,
            category=QuestionCategory.INFERENCE,
            options=(
                Option(id="true", text="Doğru", is_correct=True),
                Option(id="false", text="Yanlış"),
            ),
        ),
        Question(
            id="q4",
            text="Okula giden kişiye ne denir?",
            type=QuestionType.SHORT_ANSWER,
            points=10,
            order_index=4,
            category=QuestionCategory.VOCABULARY,
            options=(Option(id="s1", text="öğrenci", is_correct=True),),
        ),
        Question(
            id="q5",
            text="Kitap okumak ____ geliştirir.",
            type=QuestionType.FILL_IN_THE_BLANK,
            points=10,
            order_index=5,
            category=QuestionCategory.VOCABULARY,
            options=(Option(id="f1", text="hayal gücünü", is_correct=True),),
        ),
        Question(
            id="q6",
            text="Kavramları eşleştirin.",
            type=QuestionType.MATCHING,
            points=10,
            order_index=6,
            category=QuestionCategory.DETAIL,
            options=(
                Option(id="m1", text="Roman", is_correct=True, matching_value="uzun anlatı"),
                Option(id="m2", text="Şiir", is_correct=True, matching_value="dizeler"),
            ),
        ),
        Question(
            id="q7",
            text="Olayları sıralayın.",
            type=QuestionType.ORDERING,
            points=10,
            order_index=7,
            category=QuestionCategory.SUMMARY,
            options=(
                Option(id="A", text="Uyandı", order_index=1),
                Option(id="B", text="Kahvaltı yaptı", order_index=2),
                Option(id="C", text="Okula gitti", order_index=3),
            ),
        ),
        Question(
            id="q8",
            text="Okumanın faydalarını anlatın.",
            type=QuestionType.ESSAY,
            points=10,
            order_index=8,
            category=QuestionCategory.SUMMARY,
            options=(Option(id="e1", text="okuma bilgi kelime dağarcığı", is_correct=True),),
        ),
    ]


@pytest.fixture
def make_exercise(sample_questions):
    """Factory for exercises built from sample_questions with overridable settings."""

    def _make(exercise_id: str = "ex-1", **overrides) -> Exercise:
        settings = {
            "title": "Okuma Alışkanlığı",
            "questions": tuple(sample_questions),
            "time_limit_minutes": 10,
            "passing_score": 60,
            "allow_retry": True,
            "max_retries": 3,
        }
        settings.update(overrides)
        return Exercise(id=exercise_id, **settings)

    return _make


@pytest.fixture
def correct_answers():
    """Full-credit answers for every sample question except the essay."""
    return {
        "q1": "a",
        "q2": "a,b",
        "q3": "true",
        "q4": "öğrenci",
        "q5": "hayal gücünü",
        "q6": "m1:uzun anlatı,m2:dizeler",
        "q7": "A,B,C",
    }
