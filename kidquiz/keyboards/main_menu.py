from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from kidquiz.models import Subject


def main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🧮 Toán - Thử thách ngay", callback_data=f"subject:{Subject.MATH.name}")],
        [InlineKeyboardButton(text="📖 Tiếng Việt - Thử thách ngay", callback_data=f"subject:{Subject.VIETNAMESE.name}")],
        [InlineKeyboardButton(text="🕘 Lịch sử học tập", callback_data="open_history")],
    ])
