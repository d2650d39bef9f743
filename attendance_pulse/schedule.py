"""Builds the filter vocabulary (dates, sessions, units) from raw rows."""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional

from .models import CheckinEvent, FilterSelection, RosterEntry, ScheduleIndex

# Dates that only admit a single session, everywhere downstream.
PINNED_SESSIONS: Mapping[str, str] = {"16-12-2025": "Pitching Projek RMK-13"}

_DATE_SEPARATORS = re.compile(r"[-/]")


def _iso_timestamp(value: str) -> float:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        return parsed.timestamp()
    return float(calendar.timegm(parsed.timetuple()))


def date_sort_key(value: str) -> float:
    """Return a UTC timestamp for ``value``; unparseable input sorts as the epoch.

    Accepts ``YYYY-MM-DD`` and ``DD-MM-YYYY`` / ``DD/MM/YYYY``. The width of the
    first field decides which end holds the year. Year-first values may carry a
    time of day (``2025-01-01T09:00``).
    """

    text = value.strip() if value else ""
    if not text:
        return 0.0
    parts = _DATE_SEPARATORS.split(text)
    try:
        if len(parts) == 3 and len(parts[0]) != 4:
            day, month, year = parts
        elif len(parts) == 3 and parts[2].isdigit():
            year, month, day = parts
        else:
            return _iso_timestamp(text)
        parsed = date(int(year), int(month), int(day))
    except ValueError:
        return 0.0
    return float(calendar.timegm(parsed.timetuple()))


def sort_dates(dates: Iterable[str]) -> List[str]:
    return sorted(set(dates), key=lambda d: (date_sort_key(d), d))


def pinned_session_for(day: Optional[str], pinned: Mapping[str, str] = PINNED_SESSIONS) -> Optional[str]:
    if not day:
        return None
    return pinned.get(day)


def admits(event: CheckinEvent, pinned: Mapping[str, str] = PINNED_SESSIONS) -> bool:
    """True when the event belongs in the vocabulary."""

    if not event.date.strip() or not event.session.strip():
        return False
    required = pinned.get(event.date)
    return required is None or event.session == required


def build_schedule_index(
    checkins: Iterable[CheckinEvent],
    roster: Iterable[RosterEntry] = (),
    pinned: Mapping[str, str] = PINNED_SESSIONS,
) -> ScheduleIndex:
    dates: set[str] = set()
    sessions: set[str] = set()
    date_to_sessions: Dict[str, List[str]] = {}

    for event in checkins:
        if not admits(event, pinned):
            continue
        dates.add(event.date)
        sessions.add(event.session)
        seen = date_to_sessions.setdefault(event.date, [])
        if event.session not in seen:
            seen.append(event.session)

    ordered_dates = sort_dates(dates)
    units = sorted({entry.unit for entry in roster if entry.unit.strip()})
    return ScheduleIndex(
        dates=ordered_dates,
        sessions=sorted(sessions),
        date_to_sessions={d: sorted(date_to_sessions[d]) for d in ordered_dates},
        units=units,
    )


def sessions_for_date(index: ScheduleIndex, day: Optional[str]) -> List[str]:
    """Sessions selectable for ``day``; every known session when no date applies."""

    if day and day in index.date_to_sessions:
        return list(index.date_to_sessions[day])
    return list(index.sessions)


def resolve_selection(index: ScheduleIndex, selection: FilterSelection) -> FilterSelection:
    """Default the date to the earliest one and drop a session the date does not have."""

    resolved = selection
    if not resolved.date and index.dates:
        resolved = resolved.with_changes(date=index.dates[0])
    if resolved.session and resolved.session not in sessions_for_date(index, resolved.date):
        resolved = resolved.with_changes(session=None)
    return resolved


__all__ = [
    "PINNED_SESSIONS",
    "admits",
    "build_schedule_index",
    "date_sort_key",
    "pinned_session_for",
    "resolve_selection",
    "sessions_for_date",
    "sort_dates",
]
