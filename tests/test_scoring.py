"""Tests for score computation and feedback bands."""
import pytest

from kidquiz.services.scoring import (
    FEEDBACK_MESSAGES, FeedbackTier, compute_score, count_correct, feedback_tier,
)

from conftest import make_questions


def _answers_with_correct(questions, k):
    """First k answers correct, the rest wrong."""
    answers = []
    for i, q in enumerate(questions):
        if i < k:
            answers.append(q.correct_answer_index)
        else:
            answers.append((q.correct_answer_index + 1) % 4)
    return answers


class TestComputeScore:
    """score == k * 100 / N for every k."""

    @pytest.mark.parametrize("k", range(0, 21))
    def test_twenty_questions_multiples_of_five(self, k, sample_questions):
        answers = _answers_with_correct(sample_questions, k)

        score = compute_score(sample_questions, answers)

        assert score == k * 5
        assert 0 <= score <= 100

    def test_fourteen_correct_is_seventy_mid(self, sample_questions):
        """20-question quiz, 14 right and 6 wrong -> 70, mid tier."""
        answers = _answers_with_correct(sample_questions, 14)

        score = compute_score(sample_questions, answers)

        assert score == 70
        assert feedback_tier(score) is FeedbackTier.MID

    def test_other_lengths(self):
        questions = make_questions(10)
        answers = _answers_with_correct(questions, 7)

        assert compute_score(questions, answers) == 70
        assert count_correct(questions, answers) == 7

    def test_unanswered_counts_as_wrong(self, sample_questions):
        answers = [-1] * 20

        assert compute_score(sample_questions, answers) == 0

    def test_empty_quiz_rejected(self):
        with pytest.raises(ValueError):
            compute_score([], [])

    def test_length_mismatch_rejected(self, sample_questions):
        with pytest.raises(ValueError):
            compute_score(sample_questions, [0, 1])


class TestFeedbackTier:
    """Boundaries are inclusive at 100, 80 and 50."""

    @pytest.mark.parametrize("score,tier", [
        (100, FeedbackTier.TOP),
        (95, FeedbackTier.HIGH),
        (80, FeedbackTier.HIGH),
        (75, FeedbackTier.MID),
        (50, FeedbackTier.MID),
        (45, FeedbackTier.LOW),
        (0, FeedbackTier.LOW),
    ])
    def test_bands(self, score, tier):
        assert feedback_tier(score) is tier

    def test_every_tier_has_a_message(self):
        assert set(FEEDBACK_MESSAGES) == set(FeedbackTier)
