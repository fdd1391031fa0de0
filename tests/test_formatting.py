"""Tests for screen text formatting."""
from kidquiz.models import Question, QuizData, Subject
from kidquiz.services.formatting import (
    MESSAGE_LIMIT,
    REVIEW_FIELD_LIMIT,
    chunk_blocks,
    format_review,
    format_review_messages,
)

from conftest import make_questions


def _long_question(i: int) -> Question:
    return Question(
        id=i,
        question_text="Tom & Jerry " * 200,
        options=("a & b " * 150, "B", "C", "D"),
        correct_answer_index=0,
        explanation="<giải thích> & " * 300,
    )


def _balanced(text: str) -> bool:
    return text.count("<b>") == text.count("</b>")


class TestFormatReview:

    def test_marks_correct_and_chosen(self):
        question = make_questions(1)[0]

        text = format_review(question, 1)

        assert text.startswith("❌")
        assert "A. A1 ✔" in text
        assert "B. B2 ✘" in text

    def test_long_fields_clipped_before_escaping(self):
        text = format_review(_long_question(1), 0)

        assert "…" in text
        # Entities stay whole: every & starts an escape sequence
        assert text.count("&") == text.count("&amp;") + text.count("&lt;") + text.count("&gt;")
        explanation = text.split("💡 ", 1)[1]
        assert len(explanation) <= 5 * REVIEW_FIELD_LIMIT


class TestChunkBlocks:

    def test_joins_small_blocks(self):
        assert chunk_blocks(["a", "b"], limit=10) == ["a\n\nb"]

    def test_starts_new_message_at_limit(self):
        assert chunk_blocks(["aaaa", "bbbb"], limit=6) == ["aaaa", "bbbb"]

    def test_oversize_block_split_on_lines(self):
        block = "\n".join(f"<b>{i}</b> xxxxxxxx" for i in range(10))

        messages = chunk_blocks([block], limit=40)

        assert len(messages) > 1
        assert all(len(m) <= 40 for m in messages)
        assert all(_balanced(m) for m in messages)
        assert "\n".join(messages) == block

    def test_long_review_fits_telegram_limit(self):
        quiz = QuizData(
            id="1",
            subject=Subject.MATH,
            questions=tuple(_long_question(i) for i in range(1, 4)),
            created_at=None,
        )

        messages = format_review_messages(quiz, [0, 1, 2])

        assert all(len(m) <= MESSAGE_LIMIT for m in messages)
        assert all(_balanced(m) for m in messages)
