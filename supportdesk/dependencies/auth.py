from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from supportdesk.domain import User
from supportdesk.errors import AuthenticationError
from supportdesk.store import PortalStore

from .store import StoreDep


class StoreSession:
    """The shared store paired with the user a request acts as.

    The store keeps a single current user, so the identity is rebound on
    every access to ``store``; handlers call the store synchronously right
    after reading the attribute.
    """

    def __init__(self, store: PortalStore, user: User) -> None:
        self._store = store
        self.user = user

    @property
    def store(self) -> PortalStore:
        self._store.set_current_user(self.user.id)
        return self._store


async def get_current_user(
    request: Request,
    store: StoreDep,
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> User:
    """Resolve the user an upstream gateway has already authenticated.

    No credentials are checked here; an unknown or missing id is rejected.
    """

    cached = getattr(request.state, "user", None)
    if isinstance(cached, User):
        return cached

    if not x_user_id:
        raise AuthenticationError("Missing X-User-Id header")
    user = store.tables.users.get(x_user_id)
    if user is None:
        raise AuthenticationError("Unknown user", details={"user_id": x_user_id})
    request.state.user = user
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def get_session(store: StoreDep, user: CurrentUser) -> StoreSession:
    return StoreSession(store, user)


Session = Annotated[StoreSession, Depends(get_session)]
