import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError
from supabase import Client

from attenthive.core.exceptions import (
    AttentHiveError, InternalError, NotFoundError, ValidationFailedError
)
from attenthive.modules.users.schemas import Actor, UserProfileResponse, UserProfileUpdate

logger = logging.getLogger(__name__)

# Stored for accounts whose credentials live only in Supabase Auth; never used to log in.
EXTERNAL_AUTH_PASSWORD_PLACEHOLDER = "supabase-auth"
UNIQUE_VIOLATION = "23505"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get users row by email, None if there is no account"""
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("email", normalize_email(email))\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error looking up user by email: {e}")
            raise InternalError("Failed to look up user")
        return result.data[0] if result.data else None

    def create_user(self, email: str, name: str = "") -> Dict[str, Any]:
        result = self.supabase.table("users").insert({
            "email": normalize_email(email),
            "name": name or "",
            "password_hash": EXTERNAL_AUTH_PASSWORD_PLACEHOLDER,
        }).execute()
        if not result.data:
            raise InternalError("Failed to create user")
        return result.data[0]

    def get_or_create_by_email(self, email: str, name: str = "") -> Actor:
        """Resolve the users row for a verified identity, creating it on first sight."""
        user = self.get_user_by_email(email)
        if user is None:
            try:
                user = self.create_user(email, name)
                logger.info(f"Created user row for {normalize_email(email)}")
            except APIError as e:
                # Two first requests from the same account raced; the other insert won.
                if e.code != UNIQUE_VIOLATION:
                    logger.error(f"Error creating user row: {e}")
                    raise InternalError("Failed to create user")
                user = self.get_user_by_email(email)
                if user is None:
                    raise InternalError("Failed to resolve user")
        return Actor(id=user["id"], email=user["email"], name=user.get("name") or "")

    def get_profile(self, user_id: str) -> UserProfileResponse:
        try:
            result = self.supabase.table("users")\
                .select("id, name, email, phone, address, created_at, updated_at")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading profile {user_id}: {e}")
            raise InternalError("Failed to load profile")
        if not result.data:
            raise NotFoundError("User not found")
        return UserProfileResponse(**result.data[0])

    def update_profile(self, user_id: str, profile_data: UserProfileUpdate) -> UserProfileResponse:
        """Partial update; fields left out of the payload are untouched"""
        update_data = profile_data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationFailedError("No fields to update")
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise NotFoundError("User not found")
            return UserProfileResponse(**result.data[0])
        except AttentHiveError:
            raise
        except Exception as e:
            logger.error(f"Error updating profile {user_id}: {e}")
            raise InternalError("Unable to save profile")
