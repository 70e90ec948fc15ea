# clicr/routers/scans.py
"""ID scan evaluation without recording (door preview / ban review screen)."""

from fastapi import APIRouter, Depends

from clicr.dependencies import current_user_id, get_sync_service
from clicr.schemas.id_document import EvaluateRequest, EvaluateResponse
from clicr.services.sync_service import SyncService

router = APIRouter()


@router.post("/scans/evaluate", response_model=EvaluateResponse, summary="Evaluate a parsed ID")
def evaluate_scan(
    body: EvaluateRequest,
    user_id: str = Depends(current_user_id),
    service: SyncService = Depends(get_sync_service),
):
    """
    Runs the age / expiry / ban checks for one venue and lists name matches
    from the ban registry tiered HARD or SOFT. Nothing is stored.
    Use POST /sync with RECORD_SCAN to log the scan and count the entry.
    """
    return service.evaluate_document(user_id, body)
