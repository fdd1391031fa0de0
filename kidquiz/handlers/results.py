from aiogram.types import Message

from kidquiz.handlers.common import render
from kidquiz.keyboards.quiz_kb import result_keyboard
from kidquiz.services.controller import QuizController
from kidquiz.services.formatting import format_result, format_review_messages


async def show_results(message: Message, controller: QuizController):
    """Score summary in place, then the per-question review; buttons on the last message."""
    session = controller.session
    quiz, result = session.quiz, session.result

    reviews = format_review_messages(quiz, result.user_answers)
    summary_markup = None if reviews else result_keyboard()
    await render(message, format_result(quiz, result), summary_markup)

    for i, text in enumerate(reviews):
        markup = result_keyboard() if i == len(reviews) - 1 else None
        await message.answer(text, reply_markup=markup, parse_mode="HTML")
