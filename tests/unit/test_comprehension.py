"""
Unit tests for the comprehension score breakdown.
"""

import pytest

from src.attempts import AttemptStateMachine
from src.attempts.comprehension import (
    CATEGORY_RECOMMENDATIONS,
    GENERAL_RECOMMENDATION,
    SPEED_RECOMMENDATION,
    classify_reading_speed,
    speed_percentile,
)
from src.attempts.projections import ReadingSpeedLevel
from src.db.repository import InMemoryAttemptRepository, InMemoryExerciseRepository
from src.exercise.models import QuestionCategory, ReadingText
from src.reading import TextDifficultyAnalyzer


def reading_text(word_count: int) -> ReadingText:
    content = " ".join(["kelime"] * word_count) + "."
    return ReadingText(
        id="rt-1",
        title="Okuma",
        content=content,
        analysis=TextDifficultyAnalyzer().analyze(content),
    )


@pytest.fixture
def build_tracker(make_exercise, clock):
    def _build(**overrides):
        exercises = InMemoryExerciseRepository([make_exercise(**overrides)])
        return AttemptStateMachine(exercises, InMemoryAttemptRepository(), clock=clock)

    return _build


def finish(tracker, clock, answers, minutes):
    info = tracker.start_attempt("ex-1", "user-1")
    for question_id, answer in answers.items():
        tracker.submit_answer(info.id, question_id, answer)
    clock.advance(minutes=minutes)
    tracker.complete(info.id)
    return tracker.get_comprehension_breakdown(info.id)


class TestReadingSpeedBands:
    """Test WPM classification."""

    @pytest.mark.parametrize(
        "wpm,level",
        [
            (450, ReadingSpeedLevel.VERY_FAST),
            (400, ReadingSpeedLevel.VERY_FAST),
            (399.9, ReadingSpeedLevel.FAST),
            (200, ReadingSpeedLevel.AVERAGE),
            (150, ReadingSpeedLevel.SLOW),
            (149, ReadingSpeedLevel.VERY_SLOW),
        ],
    )
    def test_classify(self, wpm, level):
        """Lower bounds are inclusive."""
        assert classify_reading_speed(wpm) is level

    def test_percentile(self):
        """Percentiles step with speed; below 150 WPM is the 10th."""
        assert speed_percentile(420) == 95
        assert speed_percentile(350) == 85
        assert speed_percentile(260) == 60
        assert speed_percentile(100) == 10


class TestCategoryBreakdown:
    """Test per-category scoring."""

    def test_categories_from_correct_answers(self, build_tracker, clock, correct_answers):
        """Each category sums points of fully correct answers only."""
        tracker = build_tracker(reading_text=reading_text(300))

        breakdown = finish(tracker, clock, correct_answers, minutes=5)

        assert breakdown.main_idea.percentage == 100
        assert breakdown.detail.score == 20
        assert breakdown.detail.question_count == 2
        assert breakdown.summary.max_score == 20
        assert breakdown.summary.percentage == 50
        assert breakdown.summary.label == "Özetleme"
        assert breakdown.overall_score == pytest.approx(87.5)

    def test_partial_credit_does_not_count(self, build_tracker, clock, correct_answers):
        """A partially correct answer contributes nothing to its category."""
        tracker = build_tracker()
        answers = dict(correct_answers, q2="a")

        breakdown = finish(tracker, clock, answers, minutes=5)

        assert breakdown.detail.score == 10
        assert breakdown.detail.correct_count == 1
        assert breakdown.detail.percentage == 50

    def test_uncategorized_exercise_uses_attempt_score(self, build_tracker, clock, sample_questions):
        """Without categorized questions the overall score is the attempt's."""
        from dataclasses import replace

        questions = tuple(replace(q, category=None) for q in sample_questions)
        tracker = build_tracker(questions=questions)

        breakdown = finish(tracker, clock, {"q1": "a"}, minutes=1)

        assert breakdown.overall_score == pytest.approx(12.5)
        assert all(c.question_count == 0 for c in breakdown.categories)
        assert breakdown.strengths == []

    def test_strengths_weaknesses_recommendations(self, build_tracker, clock, correct_answers):
        """Strong categories are praised, weak ones get a targeted recommendation."""
        tracker = build_tracker(reading_text=reading_text(300))

        breakdown = finish(tracker, clock, correct_answers, minutes=5)

        assert "Ana Fikir: %100 başarı" in breakdown.strengths
        assert "Özetleme: %50 başarı - geliştirilmeli" in breakdown.weaknesses
        assert CATEGORY_RECOMMENDATIONS[QuestionCategory.SUMMARY] in breakdown.recommendations
        assert CATEGORY_RECOMMENDATIONS[QuestionCategory.MAIN_IDEA] not in breakdown.recommendations
        assert GENERAL_RECOMMENDATION not in breakdown.recommendations

    def test_low_overall_adds_general_recommendation(self, build_tracker, clock):
        """Overall below 70% recommends a regular reading habit."""
        tracker = build_tracker()

        breakdown = finish(tracker, clock, {"q1": "a"}, minutes=1)

        assert GENERAL_RECOMMENDATION in breakdown.recommendations


class TestReadingSpeed:
    """Test reading speed estimated from the attached text."""

    def test_slow_reader(self, build_tracker, clock, correct_answers):
        """300 words over 80% of 5 minutes: 75 WPM, very slow."""
        tracker = build_tracker(reading_text=reading_text(300))

        speed = finish(tracker, clock, correct_answers, minutes=5).reading_speed

        assert speed.word_count == 300
        assert speed.total_time_seconds == 300
        assert speed.reading_time_seconds == pytest.approx(240)
        assert speed.words_per_minute == pytest.approx(75)
        assert speed.speed_level is ReadingSpeedLevel.VERY_SLOW
        assert speed.percentile == 10

    def test_slow_reader_gets_speed_advice(self, build_tracker, clock, correct_answers):
        """Slow reading is a weakness with a speed recommendation."""
        tracker = build_tracker(reading_text=reading_text(300))

        breakdown = finish(tracker, clock, correct_answers, minutes=5)

        assert any(w.startswith("Okuma Hızı") for w in breakdown.weaknesses)
        assert SPEED_RECOMMENDATION in breakdown.recommendations

    def test_fast_reader(self, build_tracker, clock, correct_answers):
        """1000 words in 2 minutes of reading: 500 WPM."""
        tracker = build_tracker(reading_text=reading_text(1000))

        breakdown = finish(tracker, clock, correct_answers, minutes=2.5)
        speed = breakdown.reading_speed

        assert speed.words_per_minute == pytest.approx(500)
        assert speed.speed_level is ReadingSpeedLevel.VERY_FAST
        assert "500 WPM" in speed.feedback
        assert "Hızlı Okuma: 500 WPM" in breakdown.strengths
        assert SPEED_RECOMMENDATION not in breakdown.recommendations

    def test_no_reading_text(self, build_tracker, clock, correct_answers):
        """Without a text the speed is not measured."""
        tracker = build_tracker()

        speed = finish(tracker, clock, correct_answers, minutes=5).reading_speed

        assert speed.speed_level is None
        assert speed.words_per_minute == 0.0
        assert speed.feedback == ""
