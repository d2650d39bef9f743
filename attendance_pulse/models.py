"""Dataclasses representing Attendance Pulse domain models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

ALL_UNITS_SENTINELS = frozenset({"all", "Semua"})
UNASSIGNED_UNIT = "Other"
NO_NAME = "no name on file"


class MalformedRowError(ValueError):
    """Raised when a fetched row lacks a field the engine cannot do without."""


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(slots=True, frozen=True)
class RosterEntry:
    unit: str
    name: str
    person_id: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RosterEntry":
        person_id = _text(row.get("no_pekerja"))
        if not person_id.strip():
            raise MalformedRowError(f"roster row without no_pekerja: {row!r}")
        return cls(
            unit=_text(row.get("wing_negeri")),
            name=_text(row.get("nama")),
            person_id=person_id,
        )


@dataclass(slots=True, frozen=True)
class CheckinEvent:
    unit: str
    date: str
    session: str
    person_id: str
    name: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CheckinEvent":
        person_id = _text(row.get("no_pekerja"))
        if not person_id.strip():
            raise MalformedRowError(f"check-in row without no_pekerja: {row!r}")
        return cls(
            unit=_text(row.get("wing_negeri")),
            date=_text(row.get("tarikh_kehadiran")),
            session=_text(row.get("sesi")),
            person_id=person_id,
            name=_text(row.get("nama")),
        )


@dataclass(slots=True)
class ScheduleIndex:
    """Filter vocabulary derived from one pass over the check-in log."""

    dates: List[str] = field(default_factory=list)
    sessions: List[str] = field(default_factory=list)
    date_to_sessions: Dict[str, List[str]] = field(default_factory=dict)
    units: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class FilterSelection:
    date: Optional[str] = None
    session: Optional[str] = None
    unit: Optional[str] = None

    @classmethod
    def build(
        cls,
        date: Optional[str] = None,
        session: Optional[str] = None,
        unit: Optional[str] = None,
    ) -> "FilterSelection":
        """Normalise blank strings to ``None``."""

        return cls(date=date or None, session=session or None, unit=unit or None)

    @property
    def unit_filter(self) -> Optional[str]:
        if not self.unit or self.unit in ALL_UNITS_SENTINELS:
            return None
        return self.unit

    def with_changes(self, **changes: Any) -> "FilterSelection":
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class ChartPoint:
    unit: str
    total: int
    present: int
    percent: float


@dataclass(slots=True, frozen=True)
class PersonEntry:
    name: str
    person_id: str
    unit: str


@dataclass(slots=True, frozen=True)
class AttendanceStats:
    total_roster: int
    peak_attendance: int
    average_attendance: int
    average_attendance_percent: float
    headline_policy: str
    headline_attendance: int


@dataclass(slots=True)
class AggregationResult:
    stats: AttendanceStats
    chart_series: List[ChartPoint]
    present_list: List[PersonEntry]
    absent_list: List[PersonEntry]
    unlisted: List[PersonEntry] = field(default_factory=list)

    @property
    def total_roster(self) -> int:
        return self.stats.total_roster

    @property
    def peak_attendance(self) -> int:
        return self.stats.peak_attendance

    @property
    def average_attendance_percent(self) -> float:
        return self.stats.average_attendance_percent

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "ALL_UNITS_SENTINELS",
    "AggregationResult",
    "AttendanceStats",
    "ChartPoint",
    "CheckinEvent",
    "FilterSelection",
    "MalformedRowError",
    "NO_NAME",
    "PersonEntry",
    "RosterEntry",
    "ScheduleIndex",
    "UNASSIGNED_UNIT",
]
