from fastapi import APIRouter, Depends
from attenthive.database.supabase_client import get_supabase
from attenthive.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
)
from attenthive.modules.auth.service import AuthService
from attenthive.core.dependencies import get_auth_service, get_bearer_token, get_current_actor
from attenthive.modules.users.schemas import Actor
from attenthive.modules.users.service import UserService
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_me(
    actor: Actor = Depends(get_current_actor),
    supabase: Client = Depends(get_supabase)
):
    """Current user with profile (for frontend UI)."""
    profile = UserService(supabase).get_profile(actor.id)
    return {"user": profile}
