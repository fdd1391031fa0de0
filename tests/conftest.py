"""Shared fixtures for the quiz bot tests."""
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from kidquiz.models import Question, QuizResult, Subject
from kidquiz.services.history_store import HistoryStore


def make_questions(count: int = 20) -> list[Question]:
    """Questions whose correct option cycles 0, 1, 2, 3."""
    return [
        Question(
            id=i,
            question_text=f"Câu hỏi số {i}?",
            options=("A1", "B2", "C3", "D4"),
            correct_answer_index=(i - 1) % 4,
            explanation=f"Giải thích {i}",
            svg_image="<svg width='10'></svg>" if i % 2 == 0 else None,
        )
        for i in range(1, count + 1)
    ]


def make_result(quiz_id: str = "1700000000000", score: int = 70, day: int = 1) -> QuizResult:
    return QuizResult(
        quiz_id=quiz_id,
        subject=Subject.MATH,
        score=score,
        total_questions=20,
        date=datetime(2026, 3, day, 8, 30, tzinfo=timezone.utc),
        user_answers=tuple([0, 1, 2, 3] * 5),
    )


@pytest.fixture
def sample_questions():
    """Canonical 20-question quiz."""
    return make_questions(20)


@pytest.fixture
def sample_history():
    """Three results, newest first."""
    return [
        make_result("1700000000003", score=100, day=3),
        make_result("1700000000002", score=55, day=2),
        make_result("1700000000001", score=20, day=1),
    ]


@pytest.fixture
def mock_store():
    """ResultStore double with async methods."""
    store = MagicMock()
    store.insert = AsyncMock()
    store.select_all = AsyncMock(return_value=[])
    store.delete_all = AsyncMock()
    store.close = AsyncMock()
    return store


@pytest.fixture
def history_store(mock_store):
    return HistoryStore(mock_store)


@pytest.fixture
def local_history_store():
    """Adapter without a configured store."""
    return HistoryStore(None)
