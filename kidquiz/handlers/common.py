import logging

from aiogram.exceptions import TelegramBadRequest
from aiogram.types import InlineKeyboardMarkup, Message

from kidquiz.keyboards.history_kb import history_keyboard
from kidquiz.keyboards.main_menu import main_menu_keyboard
from kidquiz.keyboards.quiz_kb import question_keyboard
from kidquiz.services.controller import QuizController
from kidquiz.services.formatting import format_history, format_home, format_question

logger = logging.getLogger(__name__)


async def render(
    message: Message, text: str, reply_markup: InlineKeyboardMarkup | None = None, edit: bool = True
):
    """Edit the screen message in place; send a new one if it cannot be edited."""
    if edit:
        try:
            await message.edit_text(text, reply_markup=reply_markup, parse_mode="HTML")
            return
        except TelegramBadRequest as e:
            if "message is not modified" in str(e):
                return
            logger.debug("Cannot edit message, sending a new one: %s", e)
    await message.answer(text, reply_markup=reply_markup, parse_mode="HTML")


async def show_home(message: Message, controller: QuizController, edit: bool = True):
    await render(message, format_home(controller), main_menu_keyboard(), edit=edit)


async def show_question(message: Message, controller: QuizController, edit: bool = True):
    session = controller.session
    index = controller.cursor
    keyboard = question_keyboard(
        session.quiz.questions[index],
        index,
        len(session.quiz.questions),
        session.answers[index],
        session.can_submit,
    )
    await render(message, format_question(controller), keyboard, edit=edit)


async def show_history(message: Message, controller: QuizController, edit: bool = True):
    manageable = controller.store_enabled and not controller.loading
    await render(message, format_history(controller), history_keyboard(manageable), edit=edit)
