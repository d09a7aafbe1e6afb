"""
Core dependencies for route protection and recipient access checking
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from attenthive.core.access import AccessResult, can_access_recipient, can_write_to_recipient
from attenthive.core.exceptions import NotFoundError, UnauthorizedError
from attenthive.database.supabase_client import get_auth_client, get_supabase
from attenthive.modules.auth.service import AuthService
from attenthive.modules.users.schemas import Actor
from attenthive.modules.users.service import UserService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_auth_service(
    auth_client: Client = Depends(get_auth_client),
    supabase: Client = Depends(get_supabase)
) -> AuthService:
    return AuthService(auth_client, UserService(supabase))


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Verified Supabase Auth identity for the bearer token"""
    return auth_service.get_current_user(token)


def get_current_actor(
    request: Request,
    user_data: Dict[str, Any] = Depends(get_current_user),
    supabase: Client = Depends(get_supabase)
) -> Actor:
    """
    Resolve the users row acting in this request.
    Accounts that exist only in Supabase Auth get their row created here, so
    every handler and service downstream can rely on Actor.id.
    """
    cached = getattr(request.state, "actor", None)
    if cached is not None:
        return cached
    email = user_data.get("email")
    if not email:
        raise UnauthorizedError()
    metadata = user_data.get("user_metadata") or {}
    name = metadata.get("full_name") or metadata.get("name") or ""
    actor = UserService(supabase).get_or_create_by_email(email, name)
    request.state.actor = actor
    return actor


def check_recipient_access(supabase: Client, actor: Actor, recipient_id: str) -> AccessResult:
    """Read gate. Denials look like a missing recipient so existence is not revealed."""
    access = can_access_recipient(supabase, actor.id, recipient_id)
    if not access.can_access:
        logger.warning(f"User {actor.id} denied read access to recipient {recipient_id}")
        raise NotFoundError("Pet not found")
    return access


def check_recipient_write(supabase: Client, actor: Actor, recipient_id: str) -> None:
    """Write gate: owners and caregivers only. Same not-found answer as the read gate."""
    if not can_write_to_recipient(supabase, actor.id, recipient_id):
        logger.warning(f"User {actor.id} denied write access to recipient {recipient_id}")
        raise NotFoundError("Pet not found")
