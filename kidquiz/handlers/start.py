from aiogram import Router, F
from aiogram.filters import CommandStart
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from kidquiz.handlers.common import show_home, show_question
from kidquiz.services.controller import ControllerRegistry
from kidquiz.services.quiz_session import Screen

router = Router()


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext, registry: ControllerRegistry):
    await state.clear()
    controller = await registry.get(message.from_user.id)
    controller.cancel_import()

    # A quiz in progress is only left through the confirmed exit
    if controller.screen is Screen.TAKING:
        await show_question(message, controller, edit=False)
        return

    controller.return_home()
    await show_home(message, controller, edit=False)


@router.callback_query(F.data == "go_home")
async def go_home(callback: CallbackQuery, state: FSMContext, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if controller.screen is Screen.TAKING:
        await callback.answer()
        return

    await state.clear()
    controller.cancel_import()
    controller.return_home()
    await show_home(callback.message, controller)
    await callback.answer()
