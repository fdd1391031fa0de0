"""Scenario tests for the per-client controller and its registry."""
import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from kidquiz.exceptions import GenerationError, StoreReadError, StoreWriteError, ValidationError
from kidquiz.models import Subject
from kidquiz.services.controller import ControllerRegistry, QuizController
from kidquiz.services.history_store import HistoryStore
from kidquiz.services.quiz_session import GENERATION_FAILED_MESSAGE, Screen

from conftest import make_questions, make_result


def _controller(history_store, generator=None) -> QuizController:
    generator = generator or AsyncMock(return_value=make_questions(20))
    return QuizController("user_abc", history_store, generator)


async def _start_quiz(controller, subject=Subject.MATH):
    token = controller.begin_generation(subject)
    assert await controller.run_generation(token)


def _answer(controller, correct: int):
    for i, q in enumerate(controller.session.quiz.questions):
        option = q.correct_answer_index if i < correct else (q.correct_answer_index + 1) % 4
        controller.select_answer(i, option)


# ============================================================================
# QUIZ FLOW
# ============================================================================


class TestQuizFlow:

    async def test_bootstrap_loads_history(self, history_store, mock_store, sample_history):
        mock_store.select_all.return_value = sample_history
        controller = _controller(history_store)

        await controller.bootstrap()

        assert controller.history == sample_history
        assert controller.loading is False

    async def test_bootstrap_without_store_skips_fetch(self, local_history_store):
        controller = _controller(local_history_store)

        await controller.bootstrap()

        assert controller.history == []

    async def test_fourteen_of_twenty_math(self, history_store, mock_store):
        """MATH quiz, 14 correct, 6 wrong -> 70 and a detached insert."""
        controller = _controller(history_store)
        await _start_quiz(controller)
        _answer(controller, 14)

        result = controller.submit()

        assert result.score == 70
        assert result.subject is Subject.MATH
        assert controller.screen is Screen.RESULT
        assert controller.history[0] is result
        await history_store.drain()
        mock_store.insert.assert_awaited_once_with(result, "user_abc")

    async def test_submit_blocked_with_unanswered(self, history_store, mock_store):
        controller = _controller(history_store)
        await _start_quiz(controller)
        controller.select_answer(0, 0)

        assert controller.submit() is None
        assert controller.history == []
        mock_store.insert.assert_not_awaited()

    async def test_submit_survives_store_failure(self, history_store, mock_store):
        mock_store.insert.side_effect = StoreWriteError("offline")
        controller = _controller(history_store)
        await _start_quiz(controller)
        _answer(controller, 20)

        result = controller.submit()
        await history_store.drain()

        assert controller.history == [result]
        assert controller.screen is Screen.RESULT

    async def test_generator_rejection_returns_home(self, history_store, sample_history):
        generator = AsyncMock(side_effect=GenerationError("quota"))
        controller = _controller(history_store, generator)
        controller.history = list(sample_history)
        token = controller.begin_generation(Subject.VIETNAMESE)

        assert await controller.run_generation(token)

        assert controller.screen is Screen.HOME
        assert controller.session.error == GENERATION_FAILED_MESSAGE
        assert controller.history == sample_history

    async def test_abandoned_generation_is_discarded(self, history_store):
        gate = asyncio.Event()

        async def slow_generator(subject):
            await gate.wait()
            return make_questions(20)

        controller = _controller(history_store, slow_generator)
        token = controller.begin_generation(Subject.MATH)
        pending = asyncio.create_task(controller.run_generation(token))
        await asyncio.sleep(0)

        controller.return_home()
        gate.set()

        assert await pending is False
        assert controller.screen is Screen.HOME
        assert controller.session.quiz is None

    async def test_cursor_follows_answers(self, history_store):
        controller = _controller(history_store)
        await _start_quiz(controller)

        controller.select_answer(0, 1)
        assert controller.cursor == 1
        controller.select_answer(19, 1)
        assert controller.cursor == 19
        assert controller.move_cursor(5)
        assert not controller.move_cursor(20)
        assert controller.cursor == 5

    async def test_new_quiz_from_result(self, history_store):
        generator = AsyncMock(return_value=make_questions(20))
        controller = _controller(history_store, generator)
        await _start_quiz(controller, Subject.VIETNAMESE)
        _answer(controller, 20)
        controller.submit()

        token = controller.request_new_quiz()
        assert await controller.run_generation(token)

        assert controller.screen is Screen.TAKING
        generator.assert_awaited_with(Subject.VIETNAMESE)


# ============================================================================
# HISTORY MANAGEMENT
# ============================================================================


class TestHistoryManagement:

    def test_export_empty_returns_none(self, history_store):
        assert _controller(history_store).export_history() is None

    def test_export_serializes_history(self, history_store, sample_history):
        controller = _controller(history_store)
        controller.history = list(sample_history)

        data = json.loads(controller.export_history())

        assert len(data) == 3

    async def test_import_three_records(self, history_store, mock_store, sample_history):
        """3 valid records -> 3 inserts, then one reload that becomes the history."""
        stored = [make_result("old", day=1)] + list(sample_history)
        mock_store.select_all.return_value = stored
        controller = _controller(history_store)
        payload = HistoryStore.export_history(sample_history)

        assert controller.prepare_import(payload) == 3
        report = await controller.confirm_import()

        assert mock_store.insert.await_count == 3
        mock_store.select_all.assert_awaited_once()
        assert controller.history == stored
        assert len(controller.history) >= 3
        assert report.failed == 0
        assert controller.pending_import is None

    def test_import_rejects_non_array(self, history_store, sample_history):
        controller = _controller(history_store)
        controller.history = list(sample_history)

        with pytest.raises(ValidationError):
            controller.prepare_import('{"not": "a list"}')

        assert controller.history == sample_history
        assert controller.pending_import is None

    async def test_import_reload_failure_keeps_history(self, history_store, mock_store, sample_history):
        mock_store.select_all.side_effect = StoreReadError("down")
        controller = _controller(history_store)
        controller.history = list(sample_history)
        controller.prepare_import(HistoryStore.export_history(sample_history[:1]))

        with pytest.raises(StoreReadError):
            await controller.confirm_import()

        assert controller.history == sample_history
        assert controller.loading is False

    async def test_confirm_without_pending_is_noop(self, history_store, mock_store):
        assert await _controller(history_store).confirm_import() is None
        mock_store.insert.assert_not_awaited()

    async def test_clear_success_empties(self, history_store, sample_history):
        controller = _controller(history_store)
        controller.history = list(sample_history)

        assert await controller.clear_history()

        assert controller.history == []

    async def test_clear_failure_leaves_history_identical(self, history_store, mock_store, sample_history):
        mock_store.delete_all.side_effect = StoreWriteError("denied")
        controller = _controller(history_store)
        controller.history = list(sample_history)
        before = list(controller.history)

        with pytest.raises(StoreWriteError):
            await controller.clear_history()

        assert controller.history == before
        assert controller.loading is False

    async def test_unconfigured_store_operations_never_raise(self, local_history_store, sample_history):
        controller = _controller(local_history_store)
        controller.history = list(sample_history)
        controller.prepare_import(HistoryStore.export_history(sample_history))

        await controller.bootstrap()
        assert await controller.confirm_import() is None
        assert await controller.clear_history() is False
        assert controller.history == sample_history


# ============================================================================
# REGISTRY
# ============================================================================


class TestControllerRegistry:

    @patch("kidquiz.services.controller.get_or_create_device_id", new_callable=AsyncMock)
    async def test_creates_once_per_client(self, mock_device_id, history_store, mock_store):
        mock_device_id.return_value = "user_xyz"
        registry = ControllerRegistry(history_store, AsyncMock())

        first, second = await asyncio.gather(registry.get(1), registry.get(1))

        assert first is second
        assert first.device_id == "user_xyz"
        mock_device_id.assert_awaited_once_with(1)
        mock_store.select_all.assert_awaited_once_with("user_xyz")

    @patch("kidquiz.services.controller.get_or_create_device_id", new_callable=AsyncMock)
    async def test_separate_clients(self, mock_device_id, history_store):
        mock_device_id.side_effect = ["user_a", "user_b"]
        registry = ControllerRegistry(history_store, AsyncMock())

        a = await registry.get(1)
        b = await registry.get(2)

        assert a is not b
        assert (a.device_id, b.device_id) == ("user_a", "user_b")
