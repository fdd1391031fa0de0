from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from kidquiz.models import Question

OPTION_LABELS = ("A", "B", "C", "D")


def generating_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="❌ Hủy", callback_data="go_home")],
    ])


def question_keyboard(
    question: Question, index: int, total: int, chosen: int, can_submit: bool
) -> InlineKeyboardMarkup:
    """Options A-D, navigation, picture, submit (only when complete) and exit."""
    buttons = []
    for i, _ in enumerate(question.options):
        label = OPTION_LABELS[i]
        text = f"🔵 {label}" if i == chosen else label
        buttons.append(InlineKeyboardButton(text=text, callback_data=f"ans:{index}:{i}"))
    rows = [buttons[:2], buttons[2:]]

    nav = []
    if index > 0:
        nav.append(InlineKeyboardButton(text="◀️ Câu trước", callback_data=f"nav:{index - 1}"))
    if index < total - 1:
        nav.append(InlineKeyboardButton(text="Câu sau ▶️", callback_data=f"nav:{index + 1}"))
    if nav:
        rows.append(nav)

    if question.svg_image:
        rows.append([InlineKeyboardButton(text="🖼 Xem hình", callback_data=f"img:{index}")])

    if can_submit:
        rows.append([InlineKeyboardButton(text="✅ Nộp bài", callback_data="submit")])
    rows.append([InlineKeyboardButton(text="🚪 Thoát", callback_data="exit_quiz")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def confirm_exit_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="Thoát", callback_data="exit_confirm"),
            InlineKeyboardButton(text="Làm tiếp", callback_data="exit_cancel"),
        ],
    ])


def result_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="Làm đề mới ▶️", callback_data="new_quiz")],
        [InlineKeyboardButton(text="🏠 Về trang chủ", callback_data="go_home")],
    ])
