from aiogram.fsm.state import StatesGroup, State


class HistoryFlow(StatesGroup):
    waiting_import_file = State()
    confirming_import = State()
