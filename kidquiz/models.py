"""Data models for quizzes, results and their wire formats."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from kidquiz.exceptions import GenerationError, ValidationError

logger = logging.getLogger(__name__)

OPTION_COUNT = 4
UNANSWERED = -1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Subject(str, Enum):
    """Quiz subject. The value is the display string stored remotely."""
    MATH = "Toán"
    VIETNAMESE = "Tiếng Việt"

    @classmethod
    def parse(cls, value: Any) -> "Subject":
        """Accept either the stored value ("Toán") or the member name ("MATH")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value == member.value or value.upper() == member.name:
                    return member
        raise ValueError(f"Unknown subject: {value!r}")


@dataclass(frozen=True)
class Question:
    """Single multiple-choice question."""
    id: int
    question_text: str
    options: tuple[str, ...]
    correct_answer_index: int
    explanation: str
    svg_image: Optional[str] = None


@dataclass(frozen=True)
class QuizData:
    """A generated quiz, owned by the active session."""
    id: str
    subject: Subject
    questions: tuple[Question, ...]
    created_at: datetime


@dataclass(frozen=True)
class QuizResult:
    """Scored submission. Created once, never modified."""
    quiz_id: str
    subject: Subject
    score: int
    total_questions: int
    date: datetime
    user_answers: tuple[int, ...]


# ============================================================================
# TIMESTAMPS
# ============================================================================

def now_utc() -> datetime:
    """Current UTC time truncated to milliseconds (what the export format keeps)."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def to_epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(value: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=value)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse epoch milliseconds or an ISO-8601 string into an aware UTC datetime.

    Raises:
        ValueError: value is neither
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return from_epoch_ms(int(value))
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        moment = moment.astimezone(timezone.utc)
        return moment.replace(microsecond=moment.microsecond // 1000 * 1000)
    raise ValueError(f"Invalid timestamp: {value!r}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ============================================================================
# CONVERTERS: generator payload -> Question
# ============================================================================

def question_from_payload(raw: Any, position: int) -> Question:
    """
    Convert one generator record into a Question.

    The id is the 1-based position; whatever id the payload carries is ignored.

    Raises:
        GenerationError: record does not match the question schema
    """
    if not isinstance(raw, dict):
        raise GenerationError(f"Question {position} is not an object")

    text = raw.get("questionText")
    if not isinstance(text, str) or not text.strip():
        raise GenerationError(f"Question {position} has no questionText")

    options = raw.get("options")
    if (
        not isinstance(options, list)
        or len(options) != OPTION_COUNT
        or not all(isinstance(opt, str) for opt in options)
    ):
        raise GenerationError(f"Question {position} must have exactly {OPTION_COUNT} string options")

    correct = raw.get("correctAnswerIndex")
    if not _is_int(correct) or not 0 <= correct < OPTION_COUNT:
        raise GenerationError(f"Question {position} has invalid correctAnswerIndex: {correct!r}")

    explanation = raw.get("explanation")
    if not isinstance(explanation, str):
        raise GenerationError(f"Question {position} has no explanation")

    svg = raw.get("svgImage")
    if not isinstance(svg, str) or "<svg" not in svg:
        svg = None

    return Question(
        id=position,
        question_text=text.strip(),
        options=tuple(opt.strip() for opt in options),
        correct_answer_index=correct,
        explanation=explanation.strip(),
        svg_image=svg.strip() if svg else None,
    )


# ============================================================================
# CONVERTERS: QuizResult <-> export file
# ============================================================================

EXPORT_FIELDS = ("quizId", "subject", "score", "totalQuestions", "userAnswers", "date")


def result_to_export(result: QuizResult) -> dict:
    """Serialize a result in the export file shape (camelCase, date in epoch ms)."""
    return {
        "quizId": result.quiz_id,
        "subject": result.subject.value,
        "score": result.score,
        "totalQuestions": result.total_questions,
        "date": to_epoch_ms(result.date),
        "userAnswers": list(result.user_answers),
    }


def result_from_export(item: Any, position: int) -> QuizResult:
    """
    Validate one element of an imported file.

    Raises:
        ValidationError: element is not result-shaped
    """
    if not isinstance(item, dict):
        raise ValidationError(f"Record {position} is not an object")

    missing = [name for name in EXPORT_FIELDS if name not in item]
    if missing:
        raise ValidationError(f"Record {position} is missing: {', '.join(missing)}")

    quiz_id = item["quizId"]
    if _is_int(quiz_id):
        quiz_id = str(quiz_id)
    if not isinstance(quiz_id, str) or not quiz_id:
        raise ValidationError(f"Record {position} has invalid quizId")

    try:
        subject = Subject.parse(item["subject"])
    except ValueError as e:
        raise ValidationError(f"Record {position}: {e}") from e

    score = item["score"]
    if not _is_int(score) or not 0 <= score <= 100:
        raise ValidationError(f"Record {position} has invalid score: {score!r}")

    total = item["totalQuestions"]
    if not _is_int(total) or total <= 0:
        raise ValidationError(f"Record {position} has invalid totalQuestions: {total!r}")

    answers = item["userAnswers"]
    if not isinstance(answers, list) or not all(
        _is_int(a) and UNANSWERED <= a < OPTION_COUNT for a in answers
    ):
        raise ValidationError(f"Record {position} has invalid userAnswers")

    try:
        date = parse_timestamp(item["date"])
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Record {position} has invalid date") from e

    return QuizResult(
        quiz_id=quiz_id,
        subject=subject,
        score=score,
        total_questions=total,
        date=date,
        user_answers=tuple(answers),
    )


# ============================================================================
# CONVERTERS: QuizResult <-> result store row
# ============================================================================

def result_to_store_row(result: QuizResult, device_id: str) -> dict:
    """Row for the quiz_results table; created_at carries the result date."""
    return {
        "user_id": device_id,
        "quiz_id": result.quiz_id,
        "subject": result.subject.value,
        "score": result.score,
        "total_questions": result.total_questions,
        "user_answers": list(result.user_answers),
        "created_at": result.date.isoformat(),
    }


def result_from_store_row(row: Any) -> Optional[QuizResult]:
    """Convert a store row back into a QuizResult. Malformed rows yield None."""
    try:
        return QuizResult(
            quiz_id=str(row["quiz_id"]),
            subject=Subject.parse(row["subject"]),
            score=int(row["score"]),
            total_questions=int(row["total_questions"]),
            date=parse_timestamp(row["created_at"]),
            user_answers=tuple(int(a) for a in row["user_answers"] or ()),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Skipping malformed store row %r: %s", row, e)
        return None
