"""MCP server exposing Attendance Pulse data tools."""

from __future__ import annotations

from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import load_settings
from .models import FilterSelection
from .schedule import sessions_for_date
from .service import AttendancePulseService

mcp = FastMCP("attendance-pulse")

_settings = load_settings()
_service = AttendancePulseService.from_settings(_settings)


@mcp.tool()
async def get_filter_options() -> dict:
    """Return the selectable dates, sessions per date and units."""

    index = await _service.build_schedule_index()
    return index.as_dict()


@mcp.tool()
async def get_sessions_for_date(date: Optional[str] = None) -> dict:
    """Return the sessions held on a date, or every session when no date is given."""

    index = await _service.build_schedule_index()
    return {"date": date, "sessions": sessions_for_date(index, date)}


@mcp.tool()
async def get_dashboard(
    date: Optional[str] = None,
    session: Optional[str] = None,
    unit: Optional[str] = None,
) -> dict:
    """Return attendance statistics, the per-unit chart and present/absent lists."""

    selection = FilterSelection.build(date=date, session=session, unit=unit)
    selection, result = await _service.dashboard(selection)
    return {"selection": selection.as_dict(), **result.as_dict()}


__all__ = [
    "mcp",
    "get_dashboard",
    "get_filter_options",
    "get_sessions_for_date",
]
