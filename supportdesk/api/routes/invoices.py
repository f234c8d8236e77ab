from __future__ import annotations

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from supportdesk.api.schemas import InvoicePreviewResponse, InvoiceResponse, InvoiceSummaryResponse
from supportdesk.dependencies.auth import Session
from supportdesk.domain import InvoicePreview, InvoiceStatus

router = APIRouter(prefix="/invoices", tags=["invoices"])


class InvoicePreviewRequest(BaseModel):
    organization_id: str
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1)
    rate_per_hour: float | None = Field(default=None, ge=0)


class InvoiceCreateRequest(BaseModel):
    organization_id: str
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1)
    tickets_closed: int = Field(..., ge=0)
    total_hours: float = Field(..., ge=0)
    rate_per_hour: float = Field(..., ge=0)

    def to_preview(self) -> InvoicePreview:
        return InvoicePreview(
            organization_id=self.organization_id,
            month=self.month,
            year=self.year,
            tickets_closed=self.tickets_closed,
            total_hours=self.total_hours,
            rate_per_hour=self.rate_per_hour,
            total_amount=self.total_hours * self.rate_per_hour,
        )


class InvoiceStatusChangeRequest(BaseModel):
    status: InvoiceStatus


@router.get("", response_model=list[InvoiceResponse], summary="Invoices visible to the caller, newest period first")
async def list_invoices(session: Session) -> list[InvoiceResponse]:
    return [InvoiceResponse.model_validate(invoice) for invoice in session.store.visible_invoices()]


@router.get("/summary", response_model=InvoiceSummaryResponse)
async def invoice_summary(session: Session) -> InvoiceSummaryResponse:
    return InvoiceSummaryResponse.model_validate(session.store.invoice_summary())


@router.post("/preview", response_model=InvoicePreviewResponse)
async def preview_invoice(payload: InvoicePreviewRequest, session: Session) -> InvoicePreviewResponse:
    preview = session.store.preview_invoice(
        payload.organization_id, payload.month, payload.year, payload.rate_per_hour
    )
    return InvoicePreviewResponse.model_validate(preview)


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(payload: InvoiceCreateRequest, session: Session) -> InvoiceResponse:
    invoice = session.store.create_invoice(payload.to_preview())
    return InvoiceResponse.model_validate(invoice)


@router.put("/{invoice_id}/status", response_model=InvoiceResponse)
async def change_invoice_status(
    invoice_id: str, payload: InvoiceStatusChangeRequest, session: Session
) -> InvoiceResponse:
    invoice = session.store.update_invoice_status(invoice_id, payload.status)
    return InvoiceResponse.model_validate(invoice)
