from fastapi import APIRouter, Depends
from attenthive.database.supabase_client import get_supabase
from attenthive.modules.users.schemas import Actor, UserProfileUpdate, UserProfileResponse
from attenthive.modules.users.service import UserService
from attenthive.core.dependencies import get_current_actor
from supabase import Client

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("/me", response_model=UserProfileResponse)
async def get_my_profile(
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service)
):
    """Profile of the logged-in user (account page)"""
    return service.get_profile(actor.id)


@router.patch("/me", response_model=UserProfileResponse)
async def update_my_profile(
    profile_data: UserProfileUpdate,
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service)
):
    """Partial profile update; only name, phone and address are editable"""
    return service.update_profile(actor.id, profile_data)
