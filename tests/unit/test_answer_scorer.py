"""
Unit tests for the answer scorer.

Tests each question-type strategy, feedback selection and the guarantee
that scoring never raises and never leaves [0, points].
"""

import pytest

from src.exercise.models import Option, Question, QuestionType
from src.scoring import (
    AnswerScorer,
    HeuristicEssayRubric,
    Outcome,
    StrategyRegistry,
    levenshtein,
    similarity,
)
from src.scoring.base import clamp_fraction
from src.scoring.feedback import CORRECT_FEEDBACK, FALLBACK_FEEDBACK, INCORRECT_FEEDBACK, UNANSWERED_FEEDBACK


@pytest.fixture
def scorer():
    return AnswerScorer()


@pytest.fixture
def questions(sample_questions):
    return {q.id: q for q in sample_questions}


class TestStrategyRegistry:
    """Test strategy registration."""

    def test_every_question_type_has_a_strategy(self):
        """The registry is exhaustive over QuestionType."""
        assert StrategyRegistry.missing() == []
        assert set(StrategyRegistry.list_strategies()) == {t.value for t in QuestionType}

    def test_get_unregistered_type_raises(self, monkeypatch):
        """get() raises KeyError when nothing is registered for a type."""
        monkeypatch.setattr(StrategyRegistry, "_strategies", {})

        with pytest.raises(KeyError):
            StrategyRegistry.get(QuestionType.ESSAY)
        assert StrategyRegistry.missing() == list(QuestionType)


class TestSimilarity:
    """Test edit distance helpers."""

    def test_levenshtein(self):
        """Classic kitten/sitting distance."""
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("", "abc") == 3
        assert levenshtein("abc", "abc") == 0

    def test_similarity_of_empty_strings(self):
        """Two empty strings are identical."""
        assert similarity("", "") == 1.0


class TestMultipleChoice:
    """Test single- and multi-select scoring."""

    @pytest.fixture
    def multi_select(self):
        return Question(
            id="mc",
            text="Hangileri doğrudur?",
            type=QuestionType.MULTIPLE_CHOICE,
            points=30,
            options=(
                Option(id="1", text="Bir", is_correct=True),
                Option(id="2", text="İki", is_correct=True),
                Option(id="3", text="Üç", is_correct=True),
                Option(id="4", text="Dört"),
            ),
        )

    def test_exact_set_is_full_credit(self, scorer, multi_select):
        """Order and whitespace of ids do not matter."""
        result = scorer.score(multi_select, " 3, 1 ,2")

        assert result.is_correct is True
        assert result.points_earned == 30
        assert result.feedback == CORRECT_FEEDBACK

    def test_multi_select_partial_credit(self, scorer, multi_select):
        """{1,2,4} vs {1,2,3}: (2 correct - 1 incorrect) / 3 of 30 points."""
        result = scorer.score(multi_select, "1,2,4")

        assert result.is_correct is False
        assert result.points_earned == pytest.approx(10.0)
        assert result.outcome is Outcome.PARTIAL

    def test_more_wrong_than_right_floors_at_zero(self, scorer, multi_select):
        """Partial credit never goes negative."""
        result = scorer.score(multi_select, "1,4")
        assert result.points_earned == 0.0

    def test_single_correct_has_no_partial_credit(self, scorer, questions):
        """Selecting the right option plus a wrong one earns nothing."""
        result = scorer.score(questions["q1"], "a,b")

        assert result.is_correct is False
        assert result.points_earned == 0.0
        assert result.feedback == INCORRECT_FEEDBACK[QuestionType.MULTIPLE_CHOICE]

    def test_half_of_two_correct(self, scorer, questions):
        """One of two correct options earns half."""
        result = scorer.score(questions["q2"], "a")
        assert result.points_earned == pytest.approx(5.0)


class TestTrueFalse:
    """Test binary true/false scoring."""

    def test_match_is_case_insensitive(self, scorer, questions):
        """TRUE matches option id 'true'."""
        result = scorer.score(questions["q3"], "TRUE")

        assert result.is_correct is True
        assert result.points_earned == 10

    def test_wrong_option(self, scorer, questions):
        """The other option earns nothing."""
        result = scorer.score(questions["q3"], "false")

        assert result.is_correct is False
        assert result.points_earned == 0.0


class TestFreeText:
    """Test short-answer and fill-in-the-blank scoring."""

    def test_exact_match_ignores_turkish_case(self, scorer, questions):
        """ÖĞRENCİ lowers to öğrenci."""
        result = scorer.score(questions["q4"], "  ÖĞRENCİ ")

        assert result.is_correct is True
        assert result.points_earned == 10

    def test_one_letter_typo_earns_similarity(self, scorer):
        """öğrencı vs öğrenci: similarity 6/7 > 0.8."""
        question = Question(
            id="sa",
            text="Okula giden kişi?",
            type=QuestionType.SHORT_ANSWER,
            points=7,
            options=(Option(id="s", text="öğrenci", is_correct=True),),
        )
        result = scorer.score(question, "öğrencı")

        assert result.is_correct is False
        assert result.points_earned == pytest.approx(6.0)
        assert result.outcome is Outcome.PARTIAL

    def test_distant_answer_earns_nothing(self, scorer, questions):
        """Similarity at or below 0.8 scores zero."""
        result = scorer.score(questions["q4"], "öğretmen")
        assert result.points_earned == 0.0

    def test_fill_in_the_blank_uses_same_rules(self, scorer, questions):
        """Fill-in-the-blank accepts near matches too."""
        exact = scorer.score(questions["q5"], "Hayal gücünü")
        near = scorer.score(questions["q5"], "hayal gücüni")

        assert exact.is_correct is True
        assert 8.0 < near.points_earned < 10.0


class TestMatching:
    """Test id:value pair scoring."""

    def test_all_pairs_correct(self, scorer, questions):
        """Values compare case-insensitively after trimming."""
        result = scorer.score(questions["q6"], "m2: DİZELER , m1:Uzun Anlatı")

        assert result.is_correct is True
        assert result.points_earned == 10

    def test_half_the_pairs(self, scorer, questions):
        """One of two pairs earns half."""
        result = scorer.score(questions["q6"], "m1:uzun anlatı,m2:kısa anlatı")
        assert result.points_earned == pytest.approx(5.0)

    def test_missing_separator_is_unparsable(self, scorer, questions):
        """A pair without ':' voids the whole answer."""
        result = scorer.score(questions["q6"], "m1:uzun anlatı,m2-dizeler")

        assert result.points_earned == 0.0
        assert result.details["reason"] == "unparsable"

    def test_duplicate_key_is_unparsable(self, scorer, questions):
        """Repeating an option id voids the whole answer."""
        result = scorer.score(questions["q6"], "m1:uzun anlatı,m1:dizeler")
        assert result.points_earned == 0.0

    def test_extra_pairs_are_not_exact(self, scorer, questions):
        """Extra submitted pairs keep full points but not correctness."""
        result = scorer.score(questions["q6"], "m1:uzun anlatı,m2:dizeler,m9:fazla")

        assert result.points_earned == 10
        assert result.is_correct is False


class TestOrdering:
    """Test adjacency-based ordering scoring."""

    @pytest.fixture
    def four_items(self):
        return Question(
            id="ord",
            text="Sıralayın",
            type=QuestionType.ORDERING,
            points=12,
            options=tuple(Option(id=i, text=i, order_index=n) for n, i in enumerate("ABCD")),
        )

    def test_exact_sequence(self, scorer, questions):
        """The authored order earns full credit."""
        result = scorer.score(questions["q7"], "A,B,C")

        assert result.is_correct is True
        assert result.points_earned == 10

    def test_swapping_last_two_breaks_every_pair(self, scorer, questions):
        """[A,C,B] preserves neither A->B nor B->C."""
        result = scorer.score(questions["q7"], "A,C,B")

        assert result.points_earned == 0.0
        assert result.feedback == INCORRECT_FEEDBACK[QuestionType.ORDERING]

    def test_one_preserved_adjacency(self, scorer, four_items):
        """[A,B,D,C] keeps only A->B: 1/3 of the points."""
        result = scorer.score(four_items, "A,B,D,C")
        assert result.points_earned == pytest.approx(4.0)

    def test_single_item_needs_exact_match(self, scorer):
        """With one item there are no adjacencies to credit."""
        question = Question(
            id="one",
            text="Tek",
            type=QuestionType.ORDERING,
            points=5,
            options=(Option(id="X", text="x"),),
        )
        assert scorer.score(question, "X").points_earned == 5
        assert scorer.score(question, "X,Y").points_earned == 0.0


class TestEssay:
    """Test the essay heuristic and rubric injection."""

    @pytest.fixture
    def rubric(self):
        return HeuristicEssayRubric()

    def test_keywords_from_question_and_correct_options(self, rubric, questions):
        """Keywords are long, non-stop, distinct words."""
        keywords = rubric.keywords(questions["q8"])

        assert "okumanın" in keywords
        assert "dağarcığı" in keywords
        assert len(keywords) == len(set(keywords))
        assert all(len(k) > 3 for k in keywords)

    def test_score_is_monotonic_in_keyword_coverage(self, scorer, rubric, questions):
        """Holding length and structure fixed, more keywords never score less."""
        question = questions["q8"]
        keywords = rubric.keywords(question)

        scores = []
        for covered in range(len(keywords) + 1):
            words = keywords[:covered] + ["dolgu"] * (len(keywords) + 5 - covered)
            scores.append(scorer.score(question, " ".join(words) + ".").points_earned)

        assert scores == sorted(scores)
        assert scores[-1] > scores[0]

    def test_full_essay_earns_full_points(self, scorer, rubric, questions):
        """100+ words, 3 sentences and every keyword."""
        question = questions["q8"]
        body = " ".join(rubric.keywords(question) + ["metin"] * 100)
        answer = f"{body}. İkinci cümle. Üçüncü cümle."

        assert scorer.score(question, answer).points_earned == pytest.approx(10.0)

    def test_custom_rubric_is_used(self, questions):
        """An injected rubric replaces the heuristic."""

        class HalfRubric:
            def evaluate(self, question, answer):
                return 0.5

        scorer = AnswerScorer(essay_rubric=HalfRubric())
        assert scorer.score(questions["q8"], "herhangi bir cevap").points_earned == pytest.approx(5.0)


class TestRobustness:
    """Test blank input, failures and the points invariant."""

    @pytest.mark.parametrize("answer", [None, "", "   "])
    def test_blank_answer_is_unanswered(self, scorer, questions, answer):
        """Blank answers score zero with the unanswered message."""
        result = scorer.score(questions["q1"], answer)

        assert result.points_earned == 0.0
        assert result.outcome is Outcome.UNANSWERED
        assert result.feedback == UNANSWERED_FEEDBACK

    def test_failing_rubric_degrades_to_zero(self, questions):
        """An exception inside a strategy is caught."""

        class BrokenRubric:
            def evaluate(self, question, answer):
                raise RuntimeError("grader offline")

        result = AnswerScorer(essay_rubric=BrokenRubric()).score(questions["q8"], "bir cevap")

        assert result.points_earned == 0.0
        assert result.is_correct is False
        assert "grader offline" in result.details["error"]

    @pytest.mark.parametrize(
        "answer",
        ["::", ",,,", "a:b:c", "a,a,a", "🙂", "A,A,B,C", "x" * 500, "m1:uzun anlatı," * 10],
    )
    def test_points_stay_within_bounds(self, scorer, sample_questions, answer):
        """0 <= points_earned <= points for any input and question type."""
        for question in sample_questions:
            result = scorer.score(question, answer)
            assert 0.0 <= result.points_earned <= question.points

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rubric_score_earns_nothing(self, questions, value):
        """A rubric returning NaN or infinity gives zero credit, not full marks."""

        class NonFiniteRubric:
            def evaluate(self, question, answer):
                return value

        result = AnswerScorer(essay_rubric=NonFiniteRubric()).score(questions["q8"], "bir şey")

        assert result.points_earned == 0.0
        assert result.is_correct is False
        assert result.outcome is Outcome.INCORRECT

    @pytest.mark.parametrize(
        "value, expected",
        [(float("nan"), 0.0), (float("inf"), 0.0), (-0.5, 0.0), (1.7, 1.0), (0.25, 0.25)],
    )
    def test_clamp_fraction(self, value, expected):
        """Fractions land in [0, 1]; non-finite values count as zero."""
        assert clamp_fraction(value) == pytest.approx(expected)

    def test_question_without_type_degrades_to_zero(self, scorer):
        """A question with no type gets the fallback message instead of raising."""
        question = Question(id="x", text="?", type=None, points=5)

        result = scorer.score(question, "a")

        assert result.points_earned == 0.0
        assert result.is_correct is False
        assert result.outcome is Outcome.INCORRECT
        assert result.feedback == FALLBACK_FEEDBACK
