from __future__ import annotations

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from supportdesk.api.schemas import UserResponse
from supportdesk.dependencies.auth import Session
from supportdesk.domain import Role
from supportdesk.errors import NotFoundError

router = APIRouter(prefix="/users", tags=["directory"])


class UserCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3)
    role: Role
    organization_id: str | None = None
    password: str | None = None


class UserUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3)
    role: Role | None = None
    organization_id: str | None = None


@router.get("", response_model=list[UserResponse])
async def list_users(session: Session) -> list[UserResponse]:
    return [UserResponse.model_validate(user) for user in session.store.list_users()]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreateRequest, session: Session) -> UserResponse:
    user = session.store.create_user(
        payload.name, payload.email, payload.role, payload.organization_id, payload.password
    )
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, session: Session) -> UserResponse:
    user = session.store.get_user_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found", details={"user_id": user_id})
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, payload: UserUpdateRequest, session: Session) -> UserResponse:
    user = session.store.update_user(
        user_id,
        name=payload.name,
        email=payload.email,
        role=payload.role,
        organization_id=payload.organization_id,
    )
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, session: Session) -> None:
    session.store.delete_user(user_id)
