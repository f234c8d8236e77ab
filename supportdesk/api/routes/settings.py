from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from supportdesk.dependencies.auth import Session

router = APIRouter(prefix="/settings", tags=["settings"])


class RateModel(BaseModel):
    rate_per_hour: float


@router.get("/rate", response_model=RateModel, summary="Global billing rate")
async def get_rate(session: Session) -> RateModel:
    return RateModel(rate_per_hour=session.store.rate_per_hour)


@router.put("/rate", response_model=RateModel)
async def set_rate(payload: RateModel, session: Session) -> RateModel:
    return RateModel(rate_per_hour=session.store.set_rate_per_hour(payload.rate_per_hour))
