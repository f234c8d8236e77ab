from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from supportdesk.store import PortalStore


async def get_store(request: Request) -> PortalStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Portal store is not configured")
    return store


StoreDep = Annotated[PortalStore, Depends(get_store)]
