"""Present/absent partition of the roster by person id."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from .models import CheckinEvent, NO_NAME, PersonEntry, RosterEntry


def _by_name(entries: Iterable[PersonEntry]) -> List[PersonEntry]:
    return sorted(entries, key=lambda entry: entry.name)


def first_attendance(checkins: Iterable[CheckinEvent]) -> Dict[str, PersonEntry]:
    """One entry per attendee, named after their first check-in."""

    attendees: Dict[str, PersonEntry] = {}
    for event in checkins:
        if event.person_id not in attendees:
            attendees[event.person_id] = PersonEntry(
                name=event.name if event.name.strip() else NO_NAME,
                person_id=event.person_id,
                unit=event.unit,
            )
    return attendees


def reconcile(
    roster: Sequence[RosterEntry], checkins: Iterable[CheckinEvent]
) -> Tuple[List[PersonEntry], List[PersonEntry], List[PersonEntry]]:
    """Return ``(present, absent, unlisted)``.

    ``present`` and ``absent`` partition ``roster`` exactly. Attendees who are
    not on the roster land in ``unlisted`` instead of ``present``.
    """

    attendees = first_attendance(checkins)
    roster_ids = {entry.person_id for entry in roster}

    present = [person for pid, person in attendees.items() if pid in roster_ids]
    unlisted = [person for pid, person in attendees.items() if pid not in roster_ids]
    absent = [
        PersonEntry(
            name=entry.name if entry.name.strip() else NO_NAME,
            person_id=entry.person_id,
            unit=entry.unit,
        )
        for entry in roster
        if entry.person_id not in attendees
    ]
    return _by_name(present), _by_name(absent), _by_name(unlisted)


__all__ = ["first_attendance", "reconcile"]
