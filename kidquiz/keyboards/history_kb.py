from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton


def history_keyboard(manageable: bool) -> InlineKeyboardMarkup:
    """Management buttons only when the store is configured and idle."""
    rows = []
    if manageable:
        rows.append([
            InlineKeyboardButton(text="⬇️ Sao lưu", callback_data="hist:export"),
            InlineKeyboardButton(text="⬆️ Khôi phục", callback_data="hist:import"),
        ])
        rows.append([InlineKeyboardButton(text="🗑 Xóa lịch sử", callback_data="hist:clear")])
    rows.append([InlineKeyboardButton(text="🏠 Về trang chủ", callback_data="go_home")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def confirm_keyboard(action: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="Đồng ý", callback_data=f"hist:{action}_confirm"),
            InlineKeyboardButton(text="Hủy", callback_data="hist:cancel"),
        ],
    ])


def cancel_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="Hủy", callback_data="hist:cancel")],
    ])
