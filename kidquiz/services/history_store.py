"""Keeps the local history list in step with the remote result store."""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from kidquiz.exceptions import StoreError, ValidationError
from kidquiz.models import QuizResult, result_from_export, result_to_export
from kidquiz.store.client import ResultStore

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    """Outcome of an import: how many inserts failed, and the reloaded history."""
    total: int
    failed: int
    history: List[QuizResult] = field(default_factory=list)


class HistoryStore:
    """
    Optimistic history synchronization.

    Local history changes first; remote writes follow. A failed background
    write is logged and never rolls the local list back. Without a store
    every remote operation is skipped and nothing raises.
    """

    def __init__(self, store: Optional[ResultStore]):
        self.store = store
        self._background: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self.store is not None

    async def load_history(self, device_id: str) -> List[QuizResult]:
        """Fetch the device's history, newest first. Failures give an empty list."""
        if not self.enabled:
            return []
        try:
            return await self.store.select_all(device_id)
        except StoreError as e:
            logger.error("Failed to load history for %s: %s", device_id, e)
            return []

    def record_result(
        self, history: List[QuizResult], result: QuizResult, device_id: str
    ) -> Optional[asyncio.Task]:
        """
        Prepend the result to the in-memory history, then persist it in the background.

        Returns the background task (None when the store is not configured).
        """
        history.insert(0, result)
        if not self.enabled:
            return None

        task = asyncio.create_task(self._persist(result, device_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _persist(self, result: QuizResult, device_id: str):
        try:
            await self.store.insert(result, device_id)
        except StoreError as e:
            logger.error("Failed to save result %s: %s", result.quiz_id, e)

    async def drain(self):
        """Wait for pending background writes (shutdown, tests)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    @staticmethod
    def export_history(history: Sequence[QuizResult]) -> str:
        """Pretty-printed JSON array of the history, order preserved."""
        return json.dumps(
            [result_to_export(result) for result in history],
            ensure_ascii=False,
            indent=2,
        )

    @staticmethod
    def parse_import(payload: str | bytes) -> List[QuizResult]:
        """
        Decode an exported file.

        Raises:
            ValidationError: not JSON, not an array, or an element is not result-shaped
        """
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(f"File is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise ValidationError("File must contain a list of results")

        return [result_from_export(item, i) for i, item in enumerate(data, 1)]

    async def import_history(
        self, records: Sequence[QuizResult], device_id: str
    ) -> Optional[ImportReport]:
        """
        Insert every record concurrently, wait for all of them, then reload.

        Raises:
            StoreReadError: the reload after the inserts failed
        """
        if not self.enabled:
            return None

        outcomes = await asyncio.gather(
            *(self.store.insert(record, device_id) for record in records),
            return_exceptions=True,
        )
        failed = 0
        for record, outcome in zip(records, outcomes):
            if isinstance(outcome, BaseException):
                failed += 1
                logger.error("Import of quiz %s failed: %s", record.quiz_id, outcome)

        history = await self.store.select_all(device_id)
        logger.info("Imported %d/%d results for %s", len(records) - failed, len(records), device_id)
        return ImportReport(total=len(records), failed=failed, history=history)

    async def clear_history(self, device_id: str) -> bool:
        """
        Delete every remote result of the device.

        Returns False when the store is not configured.

        Raises:
            StoreWriteError: the delete failed
        """
        if not self.enabled:
            return False
        await self.store.delete_all(device_id)
        return True

    async def close(self):
        await self.drain()
        if self.store is not None:
            await self.store.close()
