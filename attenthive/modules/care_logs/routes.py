from fastapi import APIRouter, Depends, Query
from attenthive.database.supabase_client import get_supabase
from attenthive.modules.care_logs.schemas import (
    CareLogCreate, CareLogUpdate, CareLogResponse, CareLogListResponse, CareLogSavedResponse
)
from attenthive.modules.care_logs.service import CareLogService
from attenthive.core.dependencies import get_current_actor, check_recipient_access
from attenthive.core.exceptions import ValidationFailedError
from attenthive.modules.users.schemas import Actor
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/care-logs", tags=["care-logs"])


def get_care_log_service(supabase: Client = Depends(get_supabase)) -> CareLogService:
    return CareLogService(supabase)


@router.get("", response_model=CareLogListResponse)
async def list_care_logs(
    recipient_id: Optional[str] = Query(None, alias="recipientId"),
    actor: Actor = Depends(get_current_actor),
    service: CareLogService = Depends(get_care_log_service),
    supabase: Client = Depends(get_supabase)
):
    """Activity history of a recipient, newest first (any member may read)"""
    if not recipient_id:
        raise ValidationFailedError("recipientId query parameter is required")
    check_recipient_access(supabase, actor, recipient_id)
    logs, pet_name = service.list_for_recipient(recipient_id)
    return CareLogListResponse(logs=logs, pet_name=pet_name)


@router.post("", response_model=CareLogSavedResponse, status_code=201)
async def create_care_log(
    log_data: CareLogCreate,
    actor: Actor = Depends(get_current_actor),
    service: CareLogService = Depends(get_care_log_service)
):
    """Log a care activity (owners and caregivers)"""
    log = service.create_log(actor, log_data)
    return CareLogSavedResponse(message="Care activity logged successfully", log=log)


@router.patch("/{log_id}", response_model=CareLogResponse)
async def update_care_log(
    log_id: str,
    log_data: CareLogUpdate,
    actor: Actor = Depends(get_current_actor),
    service: CareLogService = Depends(get_care_log_service)
):
    return service.update_log(actor, log_id, log_data)


@router.delete("/{log_id}", status_code=200)
async def delete_care_log(
    log_id: str,
    actor: Actor = Depends(get_current_actor),
    service: CareLogService = Depends(get_care_log_service)
):
    service.delete_log(actor, log_id)
    return {"success": True}
