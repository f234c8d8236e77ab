from __future__ import annotations

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from supportdesk.api.schemas import OrganizationResponse
from supportdesk.dependencies.auth import Session
from supportdesk.domain import Plan
from supportdesk.errors import NotFoundError

router = APIRouter(prefix="/organizations", tags=["directory"])


class OrganizationCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_email: str = Field(..., min_length=1)
    plan: Plan = Plan.STARTER


class OrganizationUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    contact_email: str | None = Field(default=None, min_length=1)
    plan: Plan | None = None


@router.get("", response_model=list[OrganizationResponse])
async def list_organizations(session: Session) -> list[OrganizationResponse]:
    return [OrganizationResponse.model_validate(org) for org in session.store.list_organizations()]


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(payload: OrganizationCreateRequest, session: Session) -> OrganizationResponse:
    org = session.store.create_organization(payload.name, payload.contact_email, payload.plan)
    return OrganizationResponse.model_validate(org)


@router.get("/{org_id}", response_model=OrganizationResponse)
async def get_organization(org_id: str, session: Session) -> OrganizationResponse:
    org = session.store.get_org_by_id(org_id)
    if org is None:
        raise NotFoundError(f"Organization {org_id} not found", details={"organization_id": org_id})
    return OrganizationResponse.model_validate(org)


@router.put("/{org_id}", response_model=OrganizationResponse)
async def update_organization(
    org_id: str, payload: OrganizationUpdateRequest, session: Session
) -> OrganizationResponse:
    org = session.store.update_organization(
        org_id, name=payload.name, plan=payload.plan, contact_email=payload.contact_email
    )
    return OrganizationResponse.model_validate(org)


@router.delete("/{org_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_organization(org_id: str, session: Session) -> None:
    session.store.delete_organization(org_id)
