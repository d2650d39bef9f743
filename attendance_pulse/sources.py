"""HTTP client for reading roster and check-in rows from Supabase (PostgREST)."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from .models import CheckinEvent, MalformedRowError, RosterEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

ROSTER_COLUMNS = "wing_negeri,nama,no_pekerja"
CHECKIN_COLUMNS = "wing_negeri,tarikh_kehadiran,sesi,nama,no_pekerja"


class SourceFetchError(RuntimeError):
    """Raised when a table cannot be read."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"Failed to read '{source}': {message}")
        self.source = source
        self.message = message


class SupabaseClient:
    """Simple async wrapper around the PostgREST endpoints used by Attendance Pulse."""

    def __init__(
        self,
        url: str,
        key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def select(
        self,
        table: str,
        columns: str,
        *,
        filters: Optional[Dict[str, Optional[str]]] = None,
        limit: int = 10000,
    ) -> list[dict[str, Any]]:
        """Return up to ``limit`` rows of ``table`` matching every equality filter."""

        params: Dict[str, Any] = {"select": columns, "offset": 0, "limit": limit}
        for column, value in (filters or {}).items():
            if value:
                params[column] = f"eq.{value}"

        try:
            response = await self._client.get(f"/{table}", params=params)
        except httpx.HTTPError as exc:
            raise SourceFetchError(table, str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            raise SourceFetchError(table, _error_message(response))
        try:
            data = response.json()
        except ValueError as exc:
            raise SourceFetchError(table, "response is not valid JSON") from exc
        if not isinstance(data, list):
            raise SourceFetchError(table, "expected a list of rows")
        logger.debug("Fetched %s rows from %s with %s", len(data), table, params)
        return data


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"


def _convert(rows: List[Dict[str, Any]], factory: Callable[[Dict[str, Any]], T], table: str) -> List[T]:
    converted: List[T] = []
    for row in rows:
        try:
            converted.append(factory(row))
        except MalformedRowError as exc:
            logger.warning("Skipping malformed row in %s: %s", table, exc)
    return converted


class RosterSource:
    """Reads the master roster of expected participants."""

    def __init__(self, client: SupabaseClient, table: str, limit: int = 10000) -> None:
        self.client = client
        self.table = table
        self.limit = limit

    async def fetch(self, unit: Optional[str] = None, *, limit: Optional[int] = None) -> List[RosterEntry]:
        try:
            rows = await self.client.select(
                self.table,
                ROSTER_COLUMNS,
                filters={"wing_negeri": unit},
                limit=limit or self.limit,
            )
        except SourceFetchError as exc:
            logger.error("Roster fetch failed: %s", exc)
            raise
        return _convert(rows, RosterEntry.from_row, self.table)


class CheckinSource:
    """Reads the check-in log."""

    def __init__(self, client: SupabaseClient, table: str, limit: int = 10000) -> None:
        self.client = client
        self.table = table
        self.limit = limit

    async def fetch(
        self,
        date: Optional[str] = None,
        session: Optional[str] = None,
        unit: Optional[str] = None,
        *,
        limit: Optional[int] = None,
    ) -> List[CheckinEvent]:
        try:
            rows = await self.client.select(
                self.table,
                CHECKIN_COLUMNS,
                filters={"tarikh_kehadiran": date, "sesi": session, "wing_negeri": unit},
                limit=limit or self.limit,
            )
        except SourceFetchError as exc:
            logger.error("Check-in fetch failed: %s", exc)
            raise
        return _convert(rows, CheckinEvent.from_row, self.table)


__all__ = [
    "CheckinSource",
    "RosterSource",
    "SourceFetchError",
    "SupabaseClient",
]
