"""
Comprehension score breakdown for finished attempts.

Splits an attempt's result by question category (main idea, detail,
inference, vocabulary, summary), estimates reading speed from the attached
reading text, and derives strengths, weaknesses and recommendations.
"""

from __future__ import annotations

from src.exercise.models import Attempt, Exercise, QuestionCategory

from .projections import CategoryScore, ComprehensionScoreBreakdown, ReadingSpeedAnalysis, ReadingSpeedLevel

CATEGORY_LABELS: dict[QuestionCategory, str] = {
    QuestionCategory.MAIN_IDEA: "Ana Fikir",
    QuestionCategory.DETAIL: "Detay",
    QuestionCategory.INFERENCE: "Çıkarım",
    QuestionCategory.VOCABULARY: "Kelime Bilgisi",
    QuestionCategory.SUMMARY: "Özetleme",
}

CATEGORY_RECOMMENDATIONS: dict[QuestionCategory, str] = {
    QuestionCategory.MAIN_IDEA: "Ana fikri bulmak için metni paragraf paragraf okuyun ve her paragrafın ana düşüncesini belirleyin.",
    QuestionCategory.DETAIL: "Detayları kaçırmamak için önemli bilgileri işaretleyin ve not alın.",
    QuestionCategory.INFERENCE: "Satır aralarını okuma becerinizi geliştirin. Yazarın ima ettiği anlamları bulun.",
    QuestionCategory.VOCABULARY: "Kelime hazinenizi genişletin. Bilinmeyen kelimeleri bağlamdan anlamaya çalışın.",
    QuestionCategory.SUMMARY: "Okuduğunuz her bölümü birkaç cümleyle kendi kelimelerinizle özetlemeyi deneyin.",
}

SPEED_RECOMMENDATION = "Hızlı okuma teknikleri ile okuma hızınızı artırın. Göz hareketlerini geliştirin."
GENERAL_RECOMMENDATION = "Düzenli okuma alışkanlığı edinin ve farklı türde metinlerle pratik yapın."

STRENGTH_THRESHOLD = 80.0
WEAKNESS_THRESHOLD = 60.0
RECOMMENDATION_THRESHOLD = 70.0

# Share of the attempt assumed to be spent reading rather than answering
READING_TIME_SHARE = 0.8

SPEED_LEVELS: tuple[tuple[float, ReadingSpeedLevel], ...] = (
    (400, ReadingSpeedLevel.VERY_FAST),
    (300, ReadingSpeedLevel.FAST),
    (200, ReadingSpeedLevel.AVERAGE),
    (150, ReadingSpeedLevel.SLOW),
)

SPEED_PERCENTILES: tuple[tuple[float, int], ...] = (
    (400, 95),
    (350, 85),
    (300, 75),
    (250, 60),
    (200, 50),
    (150, 25),
)

SPEED_FEEDBACK: dict[ReadingSpeedLevel, str] = {
    ReadingSpeedLevel.VERY_FAST: "Mükemmel! {wpm:.0f} WPM ile çok hızlı okuyorsunuz. Bu hızı koruyarak anlama düzeyinizi artırmaya odaklanın.",
    ReadingSpeedLevel.FAST: "Harika! {wpm:.0f} WPM hızlı okuma seviyesi. Biraz daha hızlanabilir ve anlama kalitesini koruyabilirsiniz.",
    ReadingSpeedLevel.AVERAGE: "İyi seviye! {wpm:.0f} WPM ortalama okuma hızı. Hızlı okuma teknikleriyle gelişebilirsiniz.",
    ReadingSpeedLevel.SLOW: "{wpm:.0f} WPM biraz yavaş. Göz hareketlerini geliştirerek daha hızlı okumaya çalışın.",
    ReadingSpeedLevel.VERY_SLOW: "{wpm:.0f} WPM oldukça yavaş. Temel hızlı okuma tekniklerini öğrenmenizi öneririz.",
}


def classify_reading_speed(wpm: float) -> ReadingSpeedLevel:
    for lower, level in SPEED_LEVELS:
        if wpm >= lower:
            return level
    return ReadingSpeedLevel.VERY_SLOW


def speed_percentile(wpm: float) -> int:
    for lower, percentile in SPEED_PERCENTILES:
        if wpm >= lower:
            return percentile
    return 10


class ComprehensionScorer:
    """Build a ComprehensionScoreBreakdown from a scored attempt."""

    def breakdown(self, attempt: Attempt, exercise: Exercise) -> ComprehensionScoreBreakdown:
        scores = {category: self.category_score(attempt, exercise, category) for category in QuestionCategory}

        total = sum(s.score for s in scores.values())
        total_max = sum(s.max_score for s in scores.values())
        overall = total / total_max * 100 if total_max > 0 else attempt.score_percentage

        speed = self.reading_speed(attempt, exercise)

        return ComprehensionScoreBreakdown(
            attempt_id=attempt.id,
            overall_score=overall,
            main_idea=scores[QuestionCategory.MAIN_IDEA],
            detail=scores[QuestionCategory.DETAIL],
            inference=scores[QuestionCategory.INFERENCE],
            vocabulary=scores[QuestionCategory.VOCABULARY],
            summary=scores[QuestionCategory.SUMMARY],
            reading_speed=speed,
            strengths=self.strengths(scores.values(), speed),
            weaknesses=self.weaknesses(scores.values(), speed),
            recommendations=self.recommendations(scores.values(), speed, overall),
        )

    def category_score(self, attempt: Attempt, exercise: Exercise, category: QuestionCategory) -> CategoryScore:
        """Only fully correct answers count toward a category's score."""
        questions = [q for q in exercise.questions if q.category is category]
        max_score = sum(q.points for q in questions)

        score = 0.0
        correct = 0
        for question in questions:
            answer = attempt.get_answer(question.id)
            if answer is not None and answer.is_correct:
                score += answer.points_earned
                correct += 1

        return CategoryScore(
            category=category,
            label=CATEGORY_LABELS[category],
            score=score,
            max_score=max_score,
            percentage=score / max_score * 100 if max_score > 0 else 0.0,
            question_count=len(questions),
            correct_count=correct,
        )

    def reading_speed(self, attempt: Attempt, exercise: Exercise) -> ReadingSpeedAnalysis:
        word_count = exercise.reading_text.analysis.statistics.word_count if exercise.reading_text else 0
        spent = attempt.time_spent
        total_seconds = spent.total_seconds() if spent is not None else 0.0
        reading_seconds = total_seconds * READING_TIME_SHARE

        if word_count == 0 or reading_seconds <= 0:
            return ReadingSpeedAnalysis(word_count=word_count, total_time_seconds=total_seconds)

        wpm = word_count / (reading_seconds / 60)
        level = classify_reading_speed(wpm)
        return ReadingSpeedAnalysis(
            words_per_minute=wpm,
            word_count=word_count,
            total_time_seconds=total_seconds,
            reading_time_seconds=reading_seconds,
            speed_level=level,
            percentile=speed_percentile(wpm),
            feedback=SPEED_FEEDBACK[level].format(wpm=wpm),
        )

    def strengths(self, scores, speed: ReadingSpeedAnalysis) -> list[str]:
        strengths = [
            f"{s.label}: %{s.percentage:.0f} başarı"
            for s in scores
            if s.question_count > 0 and s.percentage >= STRENGTH_THRESHOLD
        ]
        if speed.speed_level is not None and speed.speed_level.rank >= ReadingSpeedLevel.FAST.rank:
            strengths.append(f"Hızlı Okuma: {speed.words_per_minute:.0f} WPM")
        return strengths

    def weaknesses(self, scores, speed: ReadingSpeedAnalysis) -> list[str]:
        weaknesses = [
            f"{s.label}: %{s.percentage:.0f} başarı - geliştirilmeli"
            for s in scores
            if s.question_count > 0 and s.percentage < WEAKNESS_THRESHOLD
        ]
        if speed.speed_level is not None and speed.speed_level.rank <= ReadingSpeedLevel.SLOW.rank:
            weaknesses.append(f"Okuma Hızı: {speed.words_per_minute:.0f} WPM - artırılmalı")
        return weaknesses

    def recommendations(self, scores, speed: ReadingSpeedAnalysis, overall: float) -> list[str]:
        recommendations = [
            CATEGORY_RECOMMENDATIONS[s.category]
            for s in scores
            if s.question_count > 0 and s.percentage < RECOMMENDATION_THRESHOLD
        ]
        if speed.speed_level is not None and speed.speed_level.rank <= ReadingSpeedLevel.AVERAGE.rank:
            recommendations.append(SPEED_RECOMMENDATION)
        if overall < RECOMMENDATION_THRESHOLD:
            recommendations.append(GENERAL_RECOMMENDATION)
        return recommendations
