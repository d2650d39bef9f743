"""FastAPI application exposing the Attendance Pulse REST API."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, status

from .config import Settings, load_settings
from .models import FilterSelection
from .schedule import sessions_for_date
from .service import AttendancePulseService
from .sources import SourceFetchError


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[AttendancePulseService] = None,
) -> FastAPI:
    settings = settings or load_settings()
    service = service or AttendancePulseService.from_settings(settings)

    async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> None:
        if x_api_key != settings.api_key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid api key")

    def get_service() -> AttendancePulseService:
        return service

    def source_unavailable(exc: SourceFetchError) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"source": exc.source, "message": exc.message},
        )

    app = FastAPI(title="Attendance Pulse API", version="1.0.0")

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - io bound
        await service.close()

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/filters")
    async def get_filters(
        _: None = Depends(verify_api_key),
        svc: AttendancePulseService = Depends(get_service),
    ) -> dict[str, object]:
        try:
            index = await svc.build_schedule_index()
        except SourceFetchError as exc:
            raise source_unavailable(exc) from exc
        return index.as_dict()

    @app.get("/api/filters/sessions")
    async def get_sessions(
        date: Optional[str] = None,
        _: None = Depends(verify_api_key),
        svc: AttendancePulseService = Depends(get_service),
    ) -> dict[str, object]:
        try:
            index = await svc.build_schedule_index()
        except SourceFetchError as exc:
            raise source_unavailable(exc) from exc
        return {"date": date, "sessions": sessions_for_date(index, date)}

    @app.get("/api/dashboard")
    async def get_dashboard(
        date: Optional[str] = None,
        session: Optional[str] = None,
        unit: Optional[str] = None,
        resolve: bool = True,
        _: None = Depends(verify_api_key),
        svc: AttendancePulseService = Depends(get_service),
    ) -> dict[str, object]:
        selection = FilterSelection.build(date=date, session=session, unit=unit)
        try:
            selection, result = await svc.dashboard(selection, resolve=resolve)
        except SourceFetchError as exc:
            raise source_unavailable(exc) from exc
        return {"selection": selection.as_dict(), **result.as_dict()}

    return app


__all__ = ["create_app"]
