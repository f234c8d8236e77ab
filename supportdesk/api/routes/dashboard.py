from __future__ import annotations

from fastapi import APIRouter, Query

from supportdesk.api.schemas import ActivityResponse, DashboardStatsResponse
from supportdesk.dependencies.auth import Session

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(session: Session) -> DashboardStatsResponse:
    return DashboardStatsResponse.model_validate(session.store.dashboard_stats())


@router.get("/activities", response_model=list[ActivityResponse], summary="Recent activity, newest first")
async def recent_activities(
    session: Session,
    limit: int | None = Query(default=None, ge=1, le=500),
) -> list[ActivityResponse]:
    return [ActivityResponse.model_validate(activity) for activity in session.store.visible_activities(limit)]
