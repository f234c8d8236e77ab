from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from supportdesk.api.schemas import ConversionRequestResponse
from supportdesk.dependencies.auth import Session
from supportdesk.domain import ApprovalState, ApprovalTrack

router = APIRouter(prefix="/approvals", tags=["approvals"])


class ApprovalDecisionRequest(BaseModel):
    track: ApprovalTrack
    decision: ApprovalState


@router.get("", response_model=list[ConversionRequestResponse], summary="Conversion requests visible to the caller")
async def list_approvals(session: Session) -> list[ConversionRequestResponse]:
    requests = session.store.list_conversion_requests()
    return [ConversionRequestResponse.model_validate(request) for request in requests]


@router.put("/{ticket_id}", response_model=ConversionRequestResponse)
async def decide_approval(
    ticket_id: str, payload: ApprovalDecisionRequest, session: Session
) -> ConversionRequestResponse:
    request = session.store.update_approval(ticket_id, payload.track, payload.decision)
    return ConversionRequestResponse.model_validate(request)
