import logging
from datetime import date

from aiogram import Router, F
from aiogram.types import BufferedInputFile, CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from kidquiz.exceptions import StoreError, ValidationError
from kidquiz.handlers.common import render, show_history
from kidquiz.keyboards.history_kb import cancel_keyboard, confirm_keyboard
from kidquiz.services.controller import ControllerRegistry, QuizController
from kidquiz.services.quiz_session import Screen
from kidquiz.states.history_states import HistoryFlow

logger = logging.getLogger(__name__)

router = Router()

MAX_IMPORT_BYTES = 5 * 1024 * 1024

LOCKED_TEXT = "🔒 Cần cấu hình kết nối dữ liệu để sử dụng tính năng đồng bộ."
BUSY_TEXT = "⏳ Đang xử lý dữ liệu, bé chờ chút nhé."
EMPTY_EXPORT_TEXT = "Chưa có dữ liệu để sao lưu!"
IMPORT_PROMPT_TEXT = "⬆️ Gửi file sao lưu (.json) vào đây để khôi phục lịch sử."
BAD_FILE_TEXT = "File không đúng định dạng!"
IMPORT_FAILED_TEXT = "Lỗi khi đọc file hoặc đồng bộ. Vui lòng thử lại."
IMPORT_DONE_TEXT = "Khôi phục và đồng bộ thành công!"
CLEAR_CONFIRM_TEXT = (
    "⚠️ CẢNH BÁO: Bạn có chắc muốn xóa toàn bộ lịch sử học tập trên đám mây không? "
    "Hành động này không thể hoàn tác."
)
CLEAR_FAILED_TEXT = "Lỗi khi xóa dữ liệu."


async def _manageable(callback: CallbackQuery, controller: QuizController) -> bool:
    """Management buttons are inert without a store, while busy, or off the History screen."""
    if controller.screen is not Screen.HISTORY:
        await callback.answer()
        return False
    if not controller.store_enabled:
        await callback.answer(LOCKED_TEXT, show_alert=True)
        return False
    if controller.loading:
        await callback.answer(BUSY_TEXT, show_alert=True)
        return False
    return True


@router.callback_query(F.data == "open_history")
async def open_history(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if controller.screen is not Screen.HISTORY and not controller.open_history():
        await callback.answer()
        return

    await show_history(callback.message, controller)
    await callback.answer()


@router.callback_query(F.data == "hist:export")
async def export_history(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if not await _manageable(callback, controller):
        return

    payload = controller.export_history()
    if payload is None:
        await callback.answer(EMPTY_EXPORT_TEXT, show_alert=True)
        return

    filename = f"lich-su-hoc-tap-{date.today().isoformat()}.json"
    await callback.message.answer_document(
        BufferedInputFile(payload.encode("utf-8"), filename=filename),
    )
    await callback.answer()


@router.callback_query(F.data == "hist:import")
async def import_requested(callback: CallbackQuery, state: FSMContext, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if not await _manageable(callback, controller):
        return

    await state.set_state(HistoryFlow.waiting_import_file)
    await render(callback.message, IMPORT_PROMPT_TEXT, cancel_keyboard())
    await callback.answer()


@router.message(HistoryFlow.waiting_import_file, F.document)
async def import_file_received(message: Message, state: FSMContext, registry: ControllerRegistry):
    controller = await registry.get(message.from_user.id)
    document = message.document

    if document.file_size and document.file_size > MAX_IMPORT_BYTES:
        await message.answer(BAD_FILE_TEXT)
        return

    try:
        file = await message.bot.download(document)
        count = controller.prepare_import(file.read())
    except ValidationError as e:
        logger.info("Rejected import file from %s: %s", message.from_user.id, e)
        await state.clear()
        await message.answer(BAD_FILE_TEXT)
        await show_history(message, controller, edit=False)
        return

    await state.set_state(HistoryFlow.confirming_import)
    await message.answer(
        f"Tìm thấy {count} bài thi trong file. Bạn có muốn đồng bộ lên đám mây không?",
        reply_markup=confirm_keyboard("import"),
    )


@router.message(HistoryFlow.waiting_import_file)
async def import_expects_file(message: Message):
    await message.answer(IMPORT_PROMPT_TEXT)


@router.callback_query(HistoryFlow.confirming_import, F.data == "hist:import_confirm")
async def import_confirmed(callback: CallbackQuery, state: FSMContext, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    await state.clear()
    if not await _manageable(callback, controller):
        controller.cancel_import()
        return

    # Busy before the first await so a stale clear/import tap is refused
    controller.loading = True
    try:
        await render(callback.message, BUSY_TEXT)
        await callback.answer()
        report = await controller.confirm_import()
    except StoreError as e:
        logger.error("Import for %s failed: %s", controller.device_id, e)
        report = None
        await callback.message.answer(IMPORT_FAILED_TEXT)
    finally:
        controller.loading = False

    if report is not None and report.failed:
        await callback.message.answer(
            f"Đã đồng bộ {report.total - report.failed}/{report.total} bài. "
            f"{report.failed} bài chưa lưu được, vui lòng thử lại sau."
        )
    elif report is not None:
        await callback.message.answer(IMPORT_DONE_TEXT)

    await show_history(callback.message, controller, edit=False)


@router.callback_query(F.data == "hist:clear")
async def clear_requested(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if not await _manageable(callback, controller):
        return

    await render(callback.message, CLEAR_CONFIRM_TEXT, confirm_keyboard("clear"))
    await callback.answer()


@router.callback_query(F.data == "hist:clear_confirm")
async def clear_confirmed(callback: CallbackQuery, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    if not await _manageable(callback, controller):
        return

    try:
        await controller.clear_history()
    except StoreError as e:
        logger.error("Clearing history of %s failed: %s", controller.device_id, e)
        await callback.answer(CLEAR_FAILED_TEXT, show_alert=True)
    else:
        await callback.answer()

    await show_history(callback.message, controller)


@router.callback_query(F.data == "hist:cancel")
async def management_cancelled(callback: CallbackQuery, state: FSMContext, registry: ControllerRegistry):
    controller = await registry.get(callback.from_user.id)
    await state.clear()
    controller.cancel_import()
    if controller.screen is Screen.HISTORY:
        await show_history(callback.message, controller)
    await callback.answer()
