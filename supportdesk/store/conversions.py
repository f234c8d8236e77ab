from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping

from supportdesk.domain import (
    ActivityType,
    ApprovalState,
    ApprovalTrack,
    ConversionRequest,
    ProposedType,
    TicketCategory,
    User,
)
from supportdesk.errors import ConflictError, InvalidTransitionError, NotFoundError, ValidationError

from . import authorization
from .activity import ActivityRecorder
from .tables import EntityTables, short_id
from .validation import coerce_enum, require_text

logger = logging.getLogger(__name__)


class ApprovalStateMachine:
    """Validate moves on a single approval track."""

    _TRANSITIONS: Mapping[ApprovalState, frozenset[ApprovalState]] = {
        ApprovalState.PENDING: frozenset({ApprovalState.APPROVED, ApprovalState.REJECTED}),
        ApprovalState.APPROVED: frozenset(),
        ApprovalState.REJECTED: frozenset(),
    }

    @classmethod
    def initial_state(cls) -> ApprovalState:
        return ApprovalState.PENDING

    @classmethod
    def can_transition(cls, current: ApprovalState, new: ApprovalState) -> bool:
        if current == new:
            return True
        return new in cls._TRANSITIONS.get(current, frozenset())

    @classmethod
    def assert_transition(cls, current: ApprovalState, new: ApprovalState) -> None:
        if not cls.can_transition(current, new):
            raise InvalidTransitionError(
                f"Approval already decided: {current.value} -> {new.value}",
                details={"from": current.value, "to": new.value},
            )


class ConversionWorkflow:
    """Dual-track sign-off for turning a ticket into a development item."""

    def __init__(self, tables: EntityTables, recorder: ActivityRecorder) -> None:
        self._tables = tables
        self._recorder = recorder

    def request_conversion(
        self,
        ticket_id: str,
        proposed_type: ProposedType | str,
        reason: str,
        *,
        actor: User | None,
    ) -> ConversionRequest:
        staff = authorization.require_internal(actor)
        ticket = self._tables.get_ticket(ticket_id)
        if ticket.conversion_request is not None:
            raise ConflictError(
                f"Ticket {ticket.id} already has a conversion request",
                details={"ticket_id": ticket.id},
            )
        proposed_type = coerce_enum(ProposedType, proposed_type, "proposed_type")
        reason = require_text(reason, "reason")

        now = self._tables.now()
        request = ConversionRequest(
            id=short_id("cr"),
            ticket_id=ticket.id,
            proposed_type=proposed_type,
            reason=reason,
            proposed_by=staff.id,
            created_at=now,
            internal_approval=ApprovalStateMachine.initial_state(),
            client_approval=ApprovalStateMachine.initial_state(),
        )
        ticket.conversion_request = request
        ticket.updated_at = now
        self._recorder.record(
            ActivityType.CONVERSION_REQUESTED,
            f"Conversion requested: {ticket.id} to {proposed_type.value}",
            staff.id,
            ticket.id,
        )
        logger.info("Conversion %s requested on %s", request.id, ticket.id)
        return replace(request)

    def update_approval(
        self,
        ticket_id: str,
        track: ApprovalTrack | str,
        decision: ApprovalState | str,
        *,
        actor: User | None,
    ) -> ConversionRequest:
        ticket = self._tables.get_ticket(ticket_id)
        track = coerce_enum(ApprovalTrack, track, "track")
        decision = coerce_enum(ApprovalState, decision, "decision")
        reviewer = authorization.require_approval_track(actor, ticket, track)
        request = ticket.conversion_request
        if request is None:
            raise NotFoundError(
                f"Ticket {ticket.id} has no conversion request",
                details={"ticket_id": ticket.id},
            )
        if decision is ApprovalState.PENDING:
            raise ValidationError("decision must be approved or rejected", details={"field": "decision"})
        current = request.state_of(track)
        ApprovalStateMachine.assert_transition(current, decision)
        if current is decision:
            return replace(request)

        if track is ApprovalTrack.INTERNAL:
            request.internal_approval = decision
        else:
            request.client_approval = decision
        ticket.updated_at = self._tables.now()
        logger.info("Conversion %s %s track %s by %s", request.id, track.value, decision.value, reviewer.id)

        # decided tracks never change again, so this fires once per request
        if decision is ApprovalState.APPROVED and request.is_approved:
            ticket.category = TicketCategory(request.proposed_type.value)
            self._recorder.record(
                ActivityType.CONVERSION_APPROVED,
                f"Conversion of {ticket.id} to {request.proposed_type.value} approved",
                reviewer.id,
                ticket.id,
            )
        return replace(request)
