# clicr/dependencies.py
"""
Request-scoped wiring for the routers.
One store + one SyncService per request; the working copy cache lives on app.state.
"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from typing import Optional

from clicr.database import get_db
from clicr.errors import Forbidden
from clicr.services.store import SqlOccupancyStore
from clicr.services.sync_service import SyncService
from clicr.services.working_copy import WorkingCopyCache


def get_store(db: Session = Depends(get_db)) -> SqlOccupancyStore:
    return SqlOccupancyStore(db)


def get_cache(request: Request) -> WorkingCopyCache:
    return request.app.state.working_copy_cache


def get_sync_service(store: SqlOccupancyStore = Depends(get_store),
                     cache: WorkingCopyCache = Depends(get_cache)) -> SyncService:
    return SyncService(store, cache)


def current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Principal identity is established upstream and passed as X-User-Id."""
    if not x_user_id:
        raise Forbidden("Missing X-User-Id header", reason="UNKNOWN_PRINCIPAL")
    return x_user_id
