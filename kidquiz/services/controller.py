"""Per-client application state and the async orchestration around it."""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from kidquiz.exceptions import GenerationError
from kidquiz.models import Question, QuizResult, Subject
from kidquiz.services.device_identity import get_or_create_device_id
from kidquiz.services.history_store import HistoryStore, ImportReport
from kidquiz.services.question_generator import generate_questions
from kidquiz.services.quiz_session import QuizSession, Screen

logger = logging.getLogger(__name__)

Generator = Callable[[Subject], Awaitable[List[Question]]]


class QuizController:
    """
    Owns everything one client sees: the session, the history list, the
    device id and the busy flag used while an import or clear is running.
    """

    def __init__(
        self,
        device_id: str,
        history_store: HistoryStore,
        generator: Generator = generate_questions,
    ):
        self.device_id = device_id
        self.history_store = history_store
        self.session = QuizSession()
        self.history: List[QuizResult] = []
        self.loading = False
        self.cursor = 0
        self.pending_import: Optional[List[QuizResult]] = None
        self._generator = generator

    @property
    def screen(self) -> Screen:
        return self.session.screen

    @property
    def store_enabled(self) -> bool:
        return self.history_store.enabled

    async def bootstrap(self):
        """Startup fetch of the remote history (skipped without a store)."""
        if not self.store_enabled:
            return
        self.loading = True
        try:
            self.history = await self.history_store.load_history(self.device_id)
        finally:
            self.loading = False

    # ------------------------------------------------------------------
    # Quiz flow
    # ------------------------------------------------------------------

    def begin_generation(self, subject: Subject) -> Optional[int]:
        return self.session.begin_generation(subject)

    def request_new_quiz(self) -> Optional[int]:
        return self.session.request_new_quiz()

    async def run_generation(self, token: int) -> bool:
        """
        Call the generator for the pending subject and apply the outcome.

        Returns False when the response arrived for an abandoned request.
        """
        subject = self.session.subject
        try:
            questions = await self._generator(subject)
        except GenerationError as e:
            logger.warning("Quiz generation failed for %s: %s", subject.name, e)
            return self.session.fail_generation(token)

        applied = self.session.complete_generation(token, questions)
        if applied:
            self.cursor = 0
        return applied

    def select_answer(self, question_index: int, option_index: int) -> bool:
        if not self.session.select_answer(question_index, option_index):
            return False
        last = len(self.session.answers) - 1
        self.cursor = min(question_index + 1, last)
        return True

    def move_cursor(self, question_index: int) -> bool:
        if self.screen is not Screen.TAKING:
            return False
        if not 0 <= question_index < len(self.session.answers):
            return False
        self.cursor = question_index
        return True

    def submit(self) -> Optional[QuizResult]:
        result = self.session.submit()
        if result is not None:
            self.history_store.record_result(self.history, result, self.device_id)
        return result

    def exit_quiz(self) -> bool:
        return self.session.exit_quiz()

    def return_home(self) -> bool:
        return self.session.return_home()

    def open_history(self) -> bool:
        return self.session.open_history()

    # ------------------------------------------------------------------
    # History management
    # ------------------------------------------------------------------

    def export_history(self) -> Optional[str]:
        """Serialized history, or None when there is nothing to export."""
        if not self.history:
            return None
        return self.history_store.export_history(self.history)

    def prepare_import(self, payload: str | bytes) -> int:
        """
        Validate an import file and keep it until the user confirms.

        Raises:
            ValidationError: payload is not a list of results
        """
        self.pending_import = self.history_store.parse_import(payload)
        return len(self.pending_import)

    def cancel_import(self):
        self.pending_import = None

    async def confirm_import(self) -> Optional[ImportReport]:
        """
        Upload the pending records and replace the history with the store's view.

        Raises:
            StoreReadError: reload after the inserts failed
        """
        records, self.pending_import = self.pending_import, None
        if records is None or not self.store_enabled:
            return None

        self.loading = True
        try:
            report = await self.history_store.import_history(records, self.device_id)
        finally:
            self.loading = False
        if report is not None:
            self.history = report.history
        return report

    async def clear_history(self) -> bool:
        """
        Delete the remote history; the local list is emptied only on success.

        Raises:
            StoreWriteError: delete failed, local history left as it was
        """
        if not self.store_enabled:
            return False

        self.loading = True
        try:
            cleared = await self.history_store.clear_history(self.device_id)
        finally:
            self.loading = False
        if cleared:
            self.history = []
        return cleared


class ControllerRegistry:
    """Creates one bootstrapped controller per client, on first contact."""

    def __init__(self, history_store: HistoryStore, generator: Generator = generate_questions):
        self.history_store = history_store
        self._generator = generator
        self._controllers: Dict[int, QuizController] = {}
        # Locks per client so two first updates do not bootstrap twice
        self._locks: Dict[int, asyncio.Lock] = {}

    async def get(self, client_key: int) -> QuizController:
        controller = self._controllers.get(client_key)
        if controller is not None:
            return controller

        lock = self._locks.setdefault(client_key, asyncio.Lock())
        async with lock:
            controller = self._controllers.get(client_key)
            if controller is None:
                device_id = await get_or_create_device_id(client_key)
                controller = QuizController(device_id, self.history_store, self._generator)
                await controller.bootstrap()
                self._controllers[client_key] = controller
        return controller
