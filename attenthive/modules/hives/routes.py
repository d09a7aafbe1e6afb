from fastapi import APIRouter, Body, Depends, Query
from attenthive.database.supabase_client import get_supabase
from attenthive.modules.hives.schemas import (
    InviteRequest, InviteResponse, MemberRemoveRequest,
    HiveMembersResponse, SharedPetsResponse
)
from attenthive.modules.hives.service import HiveService
from attenthive.core.dependencies import get_current_actor, check_recipient_access
from attenthive.core.exceptions import ValidationFailedError
from attenthive.core.permissions import HiveRole
from attenthive.modules.users.schemas import Actor
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/hives", tags=["hives"])

INVITE_MESSAGES = {
    HiveRole.OWNER: "Co-owner invited successfully",
    HiveRole.CAREGIVER: "Caregiver invited successfully",
    HiveRole.VIEWER: "Viewer invited successfully",
}


def get_hive_service(supabase: Client = Depends(get_supabase)) -> HiveService:
    return HiveService(supabase)


@router.post("/invite", response_model=InviteResponse, status_code=201)
async def invite_member(
    invite: InviteRequest,
    actor: Actor = Depends(get_current_actor),
    service: HiveService = Depends(get_hive_service)
):
    """Share a recipient with an existing account (owners only; co-owners only by the primary owner)"""
    membership = service.invite_member_to_pet(actor, invite.recipient_id, invite.email, invite.role)
    return InviteResponse(message=INVITE_MESSAGES[invite.role], membership=membership)


@router.get("/members", response_model=HiveMembersResponse)
async def list_members(
    recipient_id: Optional[str] = Query(None, alias="recipientId"),
    actor: Actor = Depends(get_current_actor),
    service: HiveService = Depends(get_hive_service),
    supabase: Client = Depends(get_supabase)
):
    """List hive members of a recipient (any member or the owner may look)"""
    if not recipient_id:
        raise ValidationFailedError("recipientId query parameter is required")
    access = check_recipient_access(supabase, actor, recipient_id)
    members = service.get_hive_members_for_pet(recipient_id)
    return HiveMembersResponse(members=members, count=len(members), is_owner=access.kind.is_owner)


@router.delete("/members", status_code=200)
async def remove_member(
    payload: Optional[MemberRemoveRequest] = Body(None),
    membership_id: Optional[str] = Query(None, alias="membershipId"),
    actor: Actor = Depends(get_current_actor),
    service: HiveService = Depends(get_hive_service)
):
    """Remove a hive member. membershipId may come in the body or the query string."""
    payload = payload or MemberRemoveRequest()
    target = payload.membership_id or membership_id
    if not target:
        raise ValidationFailedError("membershipId is required to remove a hive member")
    service.remove_member(actor, target, payload.recipient_id)
    return {"success": True}


@router.delete("/{recipient_id}/caregivers/{user_id}", status_code=200)
async def remove_caregiver(
    recipient_id: str,
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    service: HiveService = Depends(get_hive_service)
):
    """Remove a caregiver (primary owner only; co-owners and viewers are left alone)"""
    removed = service.remove_caregiver_from_pet(actor, recipient_id, user_id)
    return {"removed": removed}


@router.get("/shared-pets", response_model=SharedPetsResponse)
async def list_shared_pets(
    actor: Actor = Depends(get_current_actor),
    service: HiveService = Depends(get_hive_service)
):
    """Recipients shared with the current user as caregiver or viewer"""
    shared = service.get_shared_pets_for_user(actor.id)
    return SharedPetsResponse(shared_pets=shared, count=len(shared))
