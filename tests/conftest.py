from __future__ import annotations

from typing import List, Optional

import pytest

from attendance_pulse.config import Settings
from attendance_pulse.models import CheckinEvent, RosterEntry
from attendance_pulse.sources import SourceFetchError


class FakeClient:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakeRosterSource:
    def __init__(self, rows: List[RosterEntry], error: Optional[str] = None) -> None:
        self._rows = rows
        self._error = error
        self.client = FakeClient()
        self.calls: list[dict] = []

    async def fetch(self, unit=None, *, limit=None):
        self.calls.append({"unit": unit, "limit": limit})
        if self._error:
            raise SourceFetchError("senarai_peserta_penuh", self._error)
        return [row for row in self._rows if unit is None or row.unit == unit]


class FakeCheckinSource:
    def __init__(self, rows: List[CheckinEvent], error: Optional[str] = None) -> None:
        self._rows = rows
        self._error = error
        self.client = FakeClient()
        self.calls: list[dict] = []

    async def fetch(self, date=None, session=None, unit=None, *, limit=None):
        self.calls.append({"date": date, "session": session, "unit": unit, "limit": limit})
        if self._error:
            raise SourceFetchError("pendaftaran", self._error)
        return [
            row
            for row in self._rows
            if (date is None or row.date == date)
            and (session is None or row.session == session)
            and (unit is None or row.unit == unit)
        ]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_key="anon",
        api_key="secret",
        debounce_seconds=0.0,
    )


@pytest.fixture
def roster() -> List[RosterEntry]:
    return [
        RosterEntry(unit="U1", name="Alice", person_id="P1"),
        RosterEntry(unit="U1", name="Bob", person_id="P2"),
        RosterEntry(unit="U2", name="Cara", person_id="P3"),
    ]


@pytest.fixture
def checkins() -> List[CheckinEvent]:
    return [CheckinEvent(unit="U1", date="D1", session="S1", person_id="P1", name="Alice")]
