import pytest

from agents.parsing import parse_score
from interview_session.models import Language, QuestionAnswer
from services.scoring import (
    aggregate_score,
    fallback_evaluation,
    has_repeated_pattern,
    is_nonsense,
    performance_level,
    score_answer,
)

PARAGRAPH = (
    "Designing resilient REST services means versioning contracts carefully, validating every request at the "
    "edge, caching idempotent reads, tracing slow queries through structured logs, and rolling out schema "
    "changes behind feature flags while monitoring error budgets closely."
)


@pytest.mark.parametrize(
    "length, expected",
    [(9, 10), (19, 20), (49, 40), (99, 60), (199, 80), (200, 90)],
)
def test_length_buckets(length, expected):
    answer = PARAGRAPH[:length]
    assert len(answer.strip()) == length
    assert score_answer(answer) == expected


@pytest.mark.parametrize("answer", [None, "", "   ", "no", "I don't know", "yes", "ok"])
def test_empty_refusals_and_tiny_answers_score_zero(answer):
    assert score_answer(answer) == 0


@pytest.mark.parametrize("answer", ["abcabcabc", "hmm", "asdfgh jkl", "qwerty stuff"])
def test_nonsense_scores_five(answer):
    assert is_nonsense(answer.lower())
    assert score_answer(answer) == 5


def test_repeated_pattern_detection():
    assert has_repeated_pattern("abcabc")
    assert has_repeated_pattern("abcxabc")
    assert not has_repeated_pattern("abcxyabc")
    assert not has_repeated_pattern("abcab")


def test_aggregate_is_integer_mean_and_counts_missing_answers_as_zero():
    pairs = [
        QuestionAnswer(question="Question 1: A?", answer=PARAGRAPH[:9]),
        QuestionAnswer(question="Question 2: B?", answer=PARAGRAPH[:19]),
        QuestionAnswer(question="Question 3: C?", answer="No answer provided"),
    ]
    assert aggregate_score(pairs) == (10 + 20 + 0) // 3
    assert aggregate_score([]) == 0


@pytest.mark.parametrize(
    "score, english, spanish",
    [
        (80, "excellent", "excelente"),
        (79, "good", "bueno"),
        (60, "good", "bueno"),
        (59, "fair", "regular"),
        (40, "fair", "regular"),
        (39, "needs improvement", "necesita mejorar"),
    ],
)
def test_performance_levels(score, english, spanish):
    assert performance_level(score) == english
    assert performance_level(score, Language.ES) == spanish


def test_fallback_report_records_zero_and_lists_estimates():
    pairs = [QuestionAnswer(question="Question 1: A?", answer=PARAGRAPH[:99])]
    text = fallback_evaluation(pairs, subject="REST APIs")
    assert parse_score(text) == 0
    assert "REST APIs" in text
    assert "Q1: estimated 60/100" in text
    assert "good (60/100)" in text

    text_es = fallback_evaluation(pairs, subject="REST APIs", language=Language.ES)
    assert parse_score(text_es) == 0
    assert "Puntuación: 0" in text_es
    assert "P1: estimado 60/100" in text_es


def test_fallback_report_without_pairs():
    text = fallback_evaluation([], subject="REST APIs")
    assert "Score: 0" in text
    assert "Questions reviewed: 0." in text
