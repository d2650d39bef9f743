"""Headcount statistics and per-unit chart series for a filter selection."""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import (
    AggregationResult,
    AttendanceStats,
    ChartPoint,
    CheckinEvent,
    FilterSelection,
    RosterEntry,
    UNASSIGNED_UNIT,
)
from .reconcile import reconcile
from .schedule import PINNED_SESSIONS, pinned_session_for

logger = logging.getLogger(__name__)

GroupKey = Tuple[str, str]
GroupCounts = Dict[GroupKey, int]


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def effective_session(
    selection: FilterSelection, pinned: Mapping[str, str] = PINNED_SESSIONS
) -> Optional[str]:
    """The session the check-in filter applies, honouring pinned dates."""

    if selection.session:
        return selection.session
    return pinned_session_for(selection.date, pinned)


def filter_roster(roster: Iterable[RosterEntry], selection: FilterSelection) -> List[RosterEntry]:
    """Unit-filtered roster, one entry per person id (first row wins)."""

    unit = selection.unit_filter
    kept: List[RosterEntry] = []
    seen: set[str] = set()
    for entry in roster:
        if unit is not None and entry.unit != unit:
            continue
        if entry.person_id in seen:
            logger.warning("Duplicate roster entry for %s ignored", entry.person_id)
            continue
        seen.add(entry.person_id)
        kept.append(entry)
    return kept


def filter_checkins(
    checkins: Iterable[CheckinEvent],
    selection: FilterSelection,
    pinned: Mapping[str, str] = PINNED_SESSIONS,
) -> List[CheckinEvent]:
    unit = selection.unit_filter
    session = effective_session(selection, pinned)
    return [
        event
        for event in checkins
        if (unit is None or event.unit == unit)
        and (not selection.date or event.date == selection.date)
        and (session is None or event.session == session)
    ]


def group_counts(checkins: Iterable[CheckinEvent]) -> GroupCounts:
    """Rows per (date, session); repeat check-ins count every time."""

    return dict(Counter((event.date, event.session) for event in checkins))


def peak_attendance(counts: GroupCounts) -> int:
    return max(counts.values(), default=0)


def average_attendance(counts: GroupCounts) -> int:
    if not counts:
        return 0
    return int(round_half_up(sum(counts.values()) / len(counts)))


def session_divisor(counts: GroupCounts) -> int:
    return len(counts) or 1


HEADLINE_POLICIES: Dict[str, Callable[[GroupCounts], int]] = {
    "peak": peak_attendance,
    "average": average_attendance,
}


def attendance_percent(attended: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round_half_up(attended / total * 100, 1)


def _unit_label(unit: str) -> str:
    return unit if unit.strip() else UNASSIGNED_UNIT


def chart_series(
    roster: Iterable[RosterEntry], checkins: Iterable[CheckinEvent], divisor: int
) -> List[ChartPoint]:
    """Per-unit bars; present counts are averaged over the sessions in scope."""

    divisor = divisor or 1
    total_by_unit = Counter(_unit_label(entry.unit) for entry in roster)
    present_by_unit = Counter(_unit_label(event.unit) for event in checkins)

    points: List[ChartPoint] = []
    for unit in sorted(total_by_unit):
        total = total_by_unit[unit]
        present = int(round_half_up(present_by_unit.get(unit, 0) / divisor))
        points.append(
            ChartPoint(unit=unit, total=total, present=present, percent=attendance_percent(present, total))
        )
    return points


def compute_stats(total_roster: int, counts: GroupCounts, headline_policy: str = "peak") -> AttendanceStats:
    try:
        headline = HEADLINE_POLICIES[headline_policy]
    except KeyError as exc:
        raise ValueError(f"Unknown headline policy: {headline_policy}") from exc

    average = average_attendance(counts)
    return AttendanceStats(
        total_roster=total_roster,
        peak_attendance=peak_attendance(counts),
        average_attendance=average,
        average_attendance_percent=attendance_percent(average, total_roster),
        headline_policy=headline_policy,
        headline_attendance=headline(counts),
    )


def aggregate_rows(
    selection: FilterSelection,
    roster: Iterable[RosterEntry],
    checkins: Iterable[CheckinEvent],
    *,
    headline_policy: str = "peak",
    pinned: Mapping[str, str] = PINNED_SESSIONS,
) -> AggregationResult:
    """Run one aggregation pass over already-fetched rows."""

    scoped_roster = filter_roster(roster, selection)
    scoped_checkins = filter_checkins(checkins, selection, pinned)
    counts = group_counts(scoped_checkins)

    present, absent, unlisted = reconcile(scoped_roster, scoped_checkins)
    return AggregationResult(
        stats=compute_stats(len(scoped_roster), counts, headline_policy),
        chart_series=chart_series(scoped_roster, scoped_checkins, session_divisor(counts)),
        present_list=present,
        absent_list=absent,
        unlisted=unlisted,
    )


__all__ = [
    "HEADLINE_POLICIES",
    "aggregate_rows",
    "attendance_percent",
    "average_attendance",
    "chart_series",
    "compute_stats",
    "effective_session",
    "filter_checkins",
    "filter_roster",
    "group_counts",
    "peak_attendance",
    "round_half_up",
    "session_divisor",
]
