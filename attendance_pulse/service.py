"""Core orchestration logic for Attendance Pulse."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Tuple

from .aggregation import aggregate_rows, effective_session
from .config import Settings
from .models import AggregationResult, FilterSelection, ScheduleIndex
from .schedule import build_schedule_index, resolve_selection
from .sources import CheckinSource, RosterSource, SupabaseClient

logger = logging.getLogger(__name__)


async def _fetch_all(*fetches):
    """Await every fetch; the first failure cancels the ones still running."""

    tasks = [asyncio.ensure_future(fetch) for fetch in fetches]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


class AttendancePulseService:
    """High-level service that fetches row snapshots and runs the engine over them."""

    def __init__(self, settings: Settings, roster: RosterSource, checkins: CheckinSource) -> None:
        self.settings = settings
        self.roster = roster
        self.checkins = checkins

    @classmethod
    def from_settings(cls, settings: Settings) -> "AttendancePulseService":
        client = SupabaseClient(
            settings.supabase_url, settings.supabase_key, timeout=settings.request_timeout
        )
        return cls(
            settings,
            RosterSource(client, settings.roster_table, settings.row_limit),
            CheckinSource(client, settings.checkin_table, settings.row_limit),
        )

    async def close(self) -> None:
        await self.roster.client.close()
        if self.checkins.client is not self.roster.client:
            await self.checkins.client.close()

    async def build_schedule_index(self) -> ScheduleIndex:
        limit = self.settings.schedule_row_limit
        checkins, roster = await _fetch_all(
            self.checkins.fetch(limit=limit),
            self.roster.fetch(limit=limit),
        )
        index = build_schedule_index(checkins, roster)
        logger.info(
            "Schedule index built: %s dates, %s sessions, %s units",
            len(index.dates),
            len(index.sessions),
            len(index.units),
        )
        return index

    async def aggregate(self, selection: FilterSelection) -> AggregationResult:
        unit = selection.unit_filter
        roster, checkins = await _fetch_all(
            self.roster.fetch(unit),
            self.checkins.fetch(selection.date, effective_session(selection), unit),
        )
        result = aggregate_rows(
            selection, roster, checkins, headline_policy=self.settings.headline_policy
        )
        logger.debug(
            "Aggregated %s: %s roster, %s check-ins", selection, len(roster), len(checkins)
        )
        return result

    async def dashboard(
        self, selection: FilterSelection, resolve: bool = True
    ) -> Tuple[FilterSelection, AggregationResult]:
        """Aggregate ``selection`` after defaulting its date and validating its session.

        The schedule index is only fetched when there is something to resolve.
        """

        if resolve and (not selection.date or selection.session):
            selection = resolve_selection(await self.build_schedule_index(), selection)
        return selection, await self.aggregate(selection)


class LatestSelectionRunner:
    """Debounced aggregation where a newer selection supersedes the one in flight."""

    def __init__(self, service: AttendancePulseService, debounce: Optional[float] = None) -> None:
        self.service = service
        self.debounce = service.settings.debounce_seconds if debounce is None else debounce
        self._task: Optional[asyncio.Task[AggregationResult]] = None

    async def _run(self, selection: FilterSelection) -> AggregationResult:
        if self.debounce > 0:
            await asyncio.sleep(self.debounce)
        return await self.service.aggregate(selection)

    async def submit(self, selection: FilterSelection) -> Optional[AggregationResult]:
        """Aggregate ``selection``; returns ``None`` if a newer submit superseded it."""

        if self._task is not None and not self._task.done():
            self._task.cancel()
        task = asyncio.create_task(self._run(selection))
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self._task is not task:
                logger.debug("Discarding superseded aggregation for %s", selection)
                return None
            raise
        if self._task is not task:
            logger.debug("Discarding stale aggregation for %s", selection)
            return None
        return result

    async def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass


__all__ = ["AttendancePulseService", "LatestSelectionRunner"]
