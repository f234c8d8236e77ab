from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from supportdesk.api.schemas import (
    ConversionRequestResponse,
    MessageResponse,
    TicketResponse,
    TimeEntryResponse,
)
from supportdesk.dependencies.auth import Session
from supportdesk.domain import ProposedType, TicketCategory, TicketPriority, TicketStatus
from supportdesk.errors import ValidationError

router = APIRouter(prefix="/tickets", tags=["tickets"])


class TicketCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    priority: TicketPriority = TicketPriority.MEDIUM
    category: TicketCategory = TicketCategory.SUPPORT
    organization_id: str | None = None


class TicketUpdateRequest(BaseModel):
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assigned_to: str | None = None

    def ensure_payload(self) -> None:
        if not self.model_fields_set & {"status", "priority", "assigned_to"}:
            raise ValidationError("No fields provided for update")


class MessageCreateRequest(BaseModel):
    content: str = Field(..., min_length=1)
    is_internal: bool = False


class TimeEntryCreateRequest(BaseModel):
    hours: float
    description: str = Field(..., min_length=1)
    entry_date: date | None = Field(default=None, alias="date")


class ConversionCreateRequest(BaseModel):
    proposed_type: ProposedType
    reason: str = Field(..., min_length=1)


@router.get("", response_model=list[TicketResponse], summary="List tickets visible to the caller")
async def list_tickets(
    session: Session,
    status_filter: TicketStatus | None = Query(default=None, alias="status"),
    priority: TicketPriority | None = None,
    category: TicketCategory | None = None,
    organization_id: str | None = None,
    assigned_to: str | None = None,
    search: str | None = None,
) -> list[TicketResponse]:
    tickets = session.store.list_tickets(
        status=status_filter,
        priority=priority,
        category=category,
        organization_id=organization_id,
        assigned_to=assigned_to,
        search=search,
    )
    return [TicketResponse.model_validate(ticket) for ticket in tickets]


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: TicketCreateRequest, session: Session) -> TicketResponse:
    ticket = session.store.create_ticket(
        payload.title,
        payload.description,
        payload.priority,
        payload.category,
        payload.organization_id,
    )
    return TicketResponse.model_validate(ticket)


@router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(ticket_id: str, session: Session) -> TicketResponse:
    return TicketResponse.model_validate(session.store.get_ticket(ticket_id))


@router.patch("/{ticket_id}", response_model=TicketResponse)
async def update_ticket(ticket_id: str, payload: TicketUpdateRequest, session: Session) -> TicketResponse:
    payload.ensure_payload()
    store = session.store
    # assignment is the only change that can fail on its input, so it goes first
    if "assigned_to" in payload.model_fields_set:
        store.assign_ticket(ticket_id, payload.assigned_to)
    if payload.priority is not None:
        store.update_priority(ticket_id, payload.priority)
    if payload.status is not None:
        store.update_status(ticket_id, payload.status)
    return TicketResponse.model_validate(store.get_ticket(ticket_id))


@router.post("/{ticket_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def add_message(ticket_id: str, payload: MessageCreateRequest, session: Session) -> MessageResponse:
    message = session.store.add_message(ticket_id, payload.content, payload.is_internal)
    return MessageResponse.model_validate(message)


@router.post("/{ticket_id}/time-entries", response_model=TimeEntryResponse, status_code=status.HTTP_201_CREATED)
async def add_time_entry(ticket_id: str, payload: TimeEntryCreateRequest, session: Session) -> TimeEntryResponse:
    entry = session.store.add_time_entry(ticket_id, payload.hours, payload.description, payload.entry_date)
    return TimeEntryResponse.model_validate(entry)


@router.post(
    "/{ticket_id}/conversion",
    response_model=ConversionRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_conversion(
    ticket_id: str, payload: ConversionCreateRequest, session: Session
) -> ConversionRequestResponse:
    request = session.store.request_conversion(ticket_id, payload.proposed_type, payload.reason)
    return ConversionRequestResponse.model_validate(request)
