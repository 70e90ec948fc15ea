# clicr/routers/alerts.py
from fastapi import APIRouter, Depends

from clicr.dependencies import current_user_id, get_sync_service
from clicr.schemas.state import CapacityAlertOut
from clicr.services.sync_service import SyncService

router = APIRouter()


@router.get("/alerts", response_model=list[CapacityAlertOut], summary="Capacity alerts for visible venues")
def get_all_alerts(
    limit: int = 50,
    user_id: str = Depends(current_user_id),
    service: SyncService = Depends(get_sync_service),
):
    """Newest first. Only venues assigned to the caller are included."""
    return service.alerts(user_id, limit=limit)
