from enum import Enum
from typing import Sequence

from kidquiz.models import Question


class FeedbackTier(str, Enum):
    TOP = "top"
    HIGH = "high"
    MID = "mid"
    LOW = "low"


FEEDBACK_MESSAGES = {
    FeedbackTier.TOP: "🏆 Xuất sắc! Thiên tài tương lai đây rồi!",
    FeedbackTier.HIGH: "🌟 Giỏi lắm! Bé nắm bài rất chắc!",
    FeedbackTier.MID: "👍 Bé làm khá tốt, nhưng đề này hơi khó phải không?",
    FeedbackTier.LOW: "💪 Đề nâng cao khó quá! Bé đừng nản nhé!",
}


def count_correct(questions: Sequence[Question], answers: Sequence[int]) -> int:
    """Number of answers matching the correct option of their question."""
    return sum(
        1 for question, answer in zip(questions, answers)
        if answer == question.correct_answer_index
    )


def compute_score(questions: Sequence[Question], answers: Sequence[int]) -> int:
    """Score out of 100; each question is worth 100 / len(questions) points."""
    if not questions:
        raise ValueError("Cannot score an empty quiz")
    if len(answers) != len(questions):
        raise ValueError(f"Expected {len(questions)} answers, got {len(answers)}")
    return round(count_correct(questions, answers) * 100 / len(questions))


def feedback_tier(score: int) -> FeedbackTier:
    if score == 100:
        return FeedbackTier.TOP
    if score >= 80:
        return FeedbackTier.HIGH
    if score >= 50:
        return FeedbackTier.MID
    return FeedbackTier.LOW
