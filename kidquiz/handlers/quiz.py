from aiogram import Router, F
from aiogram.types import BufferedInputFile, CallbackQuery

from kidquiz.handlers.common import render, show_home, show_question
from kidquiz.handlers.results import show_results
from kidquiz.keyboards.quiz_kb import confirm_exit_keyboard, generating_keyboard
from kidquiz.models import Subject
from kidquiz.services.controller import ControllerRegistry, QuizController
from kidquiz.services.formatting import format_generating
from kidquiz.services.quiz_session import Screen

router = Router()

EXIT_CONFIRM_TEXT = "Bé có chắc muốn thoát không? Bài làm sẽ không được lưu."
NOT_FINISHED_TEXT = "Bé hãy hoàn thành hết câu hỏi nhé!"


def _parse_indices(data: str, parts: int) -> tuple[int, ...] | None:
    """'ans:3:1' -> (3, 1). None if malformed."""
    chunks = data.split(":")[1:]
    if len(chunks) != parts:
        return None
    try:
        return tuple(int(c) for c in chunks)
    except ValueError:
        return None


async def _generate(callback: CallbackQuery, controller: QuizController, token: int):
    """Show the waiting screen, wait for the generator, then render whatever screen results."""
    await render(callback.message, format_generating(controller.session.subject), generating_keyboard())
    await callback.answer()

    applied = await controller.run_generation(token)
    if not applied:
        # The child left the waiting screen; a newer screen is already shown
        return

    if controller.screen is Screen.TAKING:
        await show_question(callback.message, controller)
    else:
        await show_home(callback.message, controller)


@router.callback_query(F.data.startswith("subject:"))
async def subject_selected(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    name = callback.data.split(":", 1)[1]
    if name not in Subject.__members__:
        await callback.answer()
        return

    token = controller.begin_generation(Subject[name])
    if token is None:
        await callback.answer()
        return
    await _generate(callback, controller, token)


@router.callback_query(F.data == "new_quiz")
async def new_quiz(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    token = controller.request_new_quiz()
    if token is None:
        await callback.answer()
        return
    await _generate(callback, controller, token)


@router.callback_query(F.data.startswith("ans:"))
async def answer_selected(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    indices = _parse_indices(callback.data, 2)
    if indices is None or not controller.select_answer(*indices):
        await callback.answer()
        return

    await show_question(callback.message, controller)
    await callback.answer()


@router.callback_query(F.data.startswith("nav:"))
async def navigate(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    indices = _parse_indices(callback.data, 1)
    if indices is None or not controller.move_cursor(indices[0]):
        await callback.answer()
        return

    await show_question(callback.message, controller)
    await callback.answer()


@router.callback_query(F.data.startswith("img:"))
async def send_picture(callback: CallbackQuery, registry: ControllerRegistry):
    """Telegram cannot show inline SVG, so the picture goes out as a document."""
    controller = await registry.get(callback.from_user.id)
    indices = _parse_indices(callback.data, 1)
    quiz = controller.session.quiz
    if controller.screen is not Screen.TAKING or indices is None:
        await callback.answer()
        return
    index = indices[0]
    if not 0 <= index < len(quiz.questions) or not quiz.questions[index].svg_image:
        await callback.answer()
        return

    question = quiz.questions[index]
    await callback.message.answer_document(
        BufferedInputFile(question.svg_image.encode("utf-8"), filename=f"cau-{question.id}.svg"),
        caption=f"Hình minh họa câu {question.id}",
    )
    await callback.answer()


@router.callback_query(F.data == "submit")
async def submit_quiz(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if controller.screen is not Screen.TAKING:
        await callback.answer()
        return

    result = controller.submit()
    if result is None:
        await callback.answer(NOT_FINISHED_TEXT, show_alert=True)
        return

    await callback.answer()
    await show_results(callback.message, controller)


@router.callback_query(F.data == "exit_quiz")
async def exit_requested(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if controller.screen is not Screen.TAKING:
        await callback.answer()
        return

    await render(callback.message, EXIT_CONFIRM_TEXT, confirm_exit_keyboard())
    await callback.answer()


@router.callback_query(F.data == "exit_confirm")
async def exit_confirmed(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if not controller.exit_quiz():
        await callback.answer()
        return

    await show_home(callback.message, controller)
    await callback.answer()


@router.callback_query(F.data == "exit_cancel")
async def exit_cancelled(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if controller.screen is Screen.TAKING:
        await show_question(callback.message, controller)
    await callback.answer()
