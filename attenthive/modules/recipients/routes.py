from fastapi import APIRouter, Depends, File, UploadFile
from attenthive.config import settings
from attenthive.database.supabase_client import get_supabase
from attenthive.modules.recipients.schemas import (
    RecipientCreate, RecipientUpdate, RecipientResponse, RecipientDetailResponse,
    RecipientListItem, RecipientCreatedResponse, PhotoResponse
)
from attenthive.modules.recipients.service import RecipientService
from attenthive.core.dependencies import get_current_actor, check_recipient_access, check_recipient_write
from attenthive.modules.users.schemas import Actor
from supabase import Client
from typing import List

router = APIRouter(prefix="/recipients", tags=["recipients"])


def get_recipient_service(supabase: Client = Depends(get_supabase)) -> RecipientService:
    return RecipientService(supabase)


@router.post("", response_model=RecipientCreatedResponse, status_code=201)
async def create_recipient(
    recipient_data: RecipientCreate,
    actor: Actor = Depends(get_current_actor),
    service: RecipientService = Depends(get_recipient_service)
):
    """Create a care recipient; the caller becomes its primary owner"""
    pet = service.create_recipient(actor, recipient_data)
    return RecipientCreatedResponse(message="Pet created successfully!", pet=pet)


@router.get("", response_model=List[RecipientListItem])
async def list_recipients(
    actor: Actor = Depends(get_current_actor),
    service: RecipientService = Depends(get_recipient_service)
):
    """Recipients owned by the caller with their most recent activity. Shared ones are under /hives/shared-pets."""
    return service.list_owned(actor)


@router.get("/{recipient_id}", response_model=RecipientDetailResponse)
async def get_recipient(
    recipient_id: str,
    actor: Actor = Depends(get_current_actor),
    service: RecipientService = Depends(get_recipient_service),
    supabase: Client = Depends(get_supabase)
):
    """Recipient detail plus what the caller may do with it"""
    access = check_recipient_access(supabase, actor, recipient_id)
    recipient = service.get_recipient(recipient_id)
    return RecipientDetailResponse(
        **recipient.model_dump(),
        access=service.describe_access(actor, access)
    )


@router.patch("/{recipient_id}", response_model=RecipientResponse)
async def update_recipient(
    recipient_id: str,
    recipient_data: RecipientUpdate,
    actor: Actor = Depends(get_current_actor),
    service: RecipientService = Depends(get_recipient_service)
):
    """Edit recipient details (owners and co-owners)"""
    return service.update_recipient(actor, recipient_id, recipient_data)


@router.delete("/{recipient_id}", status_code=204)
async def delete_recipient(
    recipient_id: str,
    actor: Actor = Depends(get_current_actor),
    service: RecipientService = Depends(get_recipient_service)
):
    """Delete a recipient with its memberships and care logs (primary owner only)"""
    service.delete_recipient(actor, recipient_id)
    return None


@router.post("/{recipient_id}/photo", response_model=PhotoResponse)
async def upload_photo(
    recipient_id: str,
    file: UploadFile = File(...),
    actor: Actor = Depends(get_current_actor),
    service: RecipientService = Depends(get_recipient_service),
    supabase: Client = Depends(get_supabase)
):
    """Upload a profile photo (JPEG, PNG or WebP, 5 MB max)"""
    check_recipient_write(supabase, actor, recipient_id)
    # Read at most one byte past the cap
    content = await file.read(settings.max_photo_bytes + 1)
    return PhotoResponse(image_url=service.upload_photo(recipient_id, content))


@router.delete("/{recipient_id}/photo", response_model=PhotoResponse)
async def delete_photo(
    recipient_id: str,
    actor: Actor = Depends(get_current_actor),
    service: RecipientService = Depends(get_recipient_service),
    supabase: Client = Depends(get_supabase)
):
    """Remove the profile photo"""
    check_recipient_write(supabase, actor, recipient_id)
    service.delete_photo(recipient_id)
    return PhotoResponse(image_url=None)
