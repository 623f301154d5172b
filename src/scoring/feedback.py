"""
Fixed Turkish feedback messages keyed on question type and outcome.
"""

from __future__ import annotations

from enum import Enum

from src.exercise.models import QuestionType


class Outcome(str, Enum):
    CORRECT = "correct"
    PARTIAL = "partial"
    INCORRECT = "incorrect"
    UNANSWERED = "unanswered"


CORRECT_FEEDBACK = "Doğru! Tebrikler."
UNANSWERED_FEEDBACK = "Bu soru cevaplanmadı."
FALLBACK_FEEDBACK = "Cevabınızı gözden geçiriniz."

INCORRECT_FEEDBACK: dict[QuestionType, str] = {
    QuestionType.MULTIPLE_CHOICE: "Yanlış cevap. Doğru seçeneği bulmak için metni tekrar gözden geçirin.",
    QuestionType.TRUE_FALSE: "Yanlış. Bu ifadenin doğruluk değerini belirlemek için metindeki bilgileri kontrol edin.",
    QuestionType.SHORT_ANSWER: "Eksik veya yanlış cevap. Soruyu tekrar okuyarak daha detaylı cevap vermeye çalışın.",
    QuestionType.FILL_IN_THE_BLANK: "Boşluk için uygun kelime/ifade bulunamadı. Metindeki ipuçlarını takip edin.",
    QuestionType.ESSAY: "Cevabınız geliştirilebilir. Daha fazla detay ve örnek ekleyerek yanıtınızı zenginleştirebilirsiniz.",
    QuestionType.MATCHING: "Eşleştirmede hata var. Her seçeneği dikkatle değerlendirin.",
    QuestionType.ORDERING: "Sıralama yanlış. Olayların/bilgilerin mantıklı sırasını düşünün.",
}

PARTIAL_FEEDBACK: dict[QuestionType, str] = {
    QuestionType.MULTIPLE_CHOICE: "Kısmen doğru. Bazı doğru seçenekleri buldunuz, diğerlerini de metinde arayın.",
    QuestionType.SHORT_ANSWER: "Neredeyse doğru. Yazımı kontrol edin.",
    QuestionType.FILL_IN_THE_BLANK: "Neredeyse doğru. Boşluğa yazdığınız ifadenin yazımını kontrol edin.",
    QuestionType.ESSAY: "Cevabınız kısmen yeterli. Daha fazla detay ve örnek ekleyerek yanıtınızı zenginleştirebilirsiniz.",
    QuestionType.MATCHING: "Eşleştirmelerin bir kısmı doğru. Kalan seçenekleri dikkatle değerlendirin.",
    QuestionType.ORDERING: "Sıralamanın bir kısmı doğru. Olayların/bilgilerin mantıklı sırasını düşünün.",
}


def feedback_for(question_type: QuestionType, outcome: Outcome) -> str:
    if outcome is Outcome.CORRECT:
        return CORRECT_FEEDBACK
    if outcome is Outcome.UNANSWERED:
        return UNANSWERED_FEEDBACK
    if outcome is Outcome.PARTIAL and question_type in PARTIAL_FEEDBACK:
        return PARTIAL_FEEDBACK[question_type]
    return INCORRECT_FEEDBACK.get(question_type, FALLBACK_FEEDBACK)
