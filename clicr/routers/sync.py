# clicr/routers/sync.py
"""
Sync endpoint.
GET  /sync: scope-filtered state for the calling principal.
POST /sync: run one command ({action, payload, venue_id?}) and return the refreshed state.
"""

from fastapi import APIRouter, Depends, Header
from typing import Optional

from clicr.dependencies import current_user_id, get_sync_service
from clicr.schemas.commands import SyncCommand, SyncResponse
from clicr.schemas.state import ScopedStateOut
from clicr.services.sync_service import SyncService

router = APIRouter()


@router.get("/sync", response_model=ScopedStateOut, summary="Scoped state for the caller")
def get_state(
    user_id: str = Depends(current_user_id),
    x_user_email: Optional[str] = Header(None),
    service: SyncService = Depends(get_sync_service),
):
    """Unknown principals that send X-User-Email are provisioned as OWNER with no assignments."""
    return service.get_state(user_id, x_user_email)


@router.post("/sync", response_model=SyncResponse, summary="Execute a sync command")
def post_action(
    body: SyncCommand,
    user_id: str = Depends(current_user_id),
    service: SyncService = Depends(get_sync_service),
):
    return service.execute(user_id, body)
