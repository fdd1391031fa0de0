"""Async client for the Supabase REST result store."""
import logging
from typing import List, Optional

import httpx

from kidquiz.exceptions import StoreReadError, StoreWriteError
from kidquiz.models import QuizResult, result_from_store_row, result_to_store_row

logger = logging.getLogger(__name__)


class ResultStore:
    """Insert / select / delete quiz results partitioned by device id."""

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "quiz_results",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            url: Supabase project URL (https://<ref>.supabase.co)
            api_key: anon key, sent both as apikey and bearer token
            table: results table name
            timeout: request timeout in seconds
            transport: custom httpx transport (tests)
        """
        self.table = table
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def _path(self) -> str:
        return f"/{self.table}"

    async def insert(self, result: QuizResult, device_id: str) -> None:
        """
        Insert one result row.

        Raises:
            StoreWriteError: transport failure or non-2xx response
        """
        try:
            response = await self._client.post(
                self._path,
                json=result_to_store_row(result, device_id),
                headers={"Prefer": "return=minimal"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreWriteError(f"Insert of quiz {result.quiz_id} failed: {e}") from e

    async def select_all(self, device_id: str) -> List[QuizResult]:
        """
        Fetch every result of a device, newest first.

        Raises:
            StoreReadError: transport failure, non-2xx response or non-JSON body
        """
        try:
            response = await self._client.get(
                self._path,
                params={
                    "select": "*",
                    "user_id": f"eq.{device_id}",
                    "order": "created_at.desc",
                },
            )
            response.raise_for_status()
            rows = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise StoreReadError(f"History fetch failed: {e}") from e

        if not isinstance(rows, list):
            raise StoreReadError(f"Unexpected history payload: {type(rows).__name__}")

        results = []
        for row in rows:
            result = result_from_store_row(row)
            if result:
                results.append(result)
        return results

    async def delete_all(self, device_id: str) -> None:
        """
        Delete every result of a device.

        Raises:
            StoreWriteError: transport failure or non-2xx response
        """
        try:
            response = await self._client.delete(
                self._path,
                params={"user_id": f"eq.{device_id}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreWriteError(f"History delete failed: {e}") from e

    async def close(self):
        await self._client.aclose()
