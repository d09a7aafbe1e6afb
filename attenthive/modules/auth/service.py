import hashlib
import logging
import time
from supabase import Client
from attenthive.core.exceptions import (
    AttentHiveError, ConflictError, InternalError, UnauthorizedError, ValidationFailedError
)
from attenthive.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from attenthive.modules.users.service import UserService
from typing import Dict, Any

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, users: UserService = None):
        self.supabase = supabase
        self.users = users or UserService(supabase)

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register with Supabase Auth and create the matching users row"""
        if self.users.get_user_by_email(register_data.email) is not None:
            raise ConflictError("User already exists")
        try:
            user_metadata = {}
            if register_data.name:
                user_metadata["full_name"] = register_data.name

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise ValidationFailedError("Failed to register user")
        except AttentHiveError:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ConflictError("User already exists")
            logger.error(f"Registration failed: {error_message}")
            raise InternalError("Registration failed")

        actor = self.users.get_or_create_by_email(register_data.email, register_data.name or "")
        logger.info(f"Registered user {actor.id}")
        return RegisterResponse(
            user_id=actor.id,
            email=actor.email,
            message="User registered successfully"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise UnauthorizedError("Invalid email or password")
            logger.error(f"Login failed: {error_message}")
            raise InternalError("Login failed")

        if not auth_response.user or not auth_response.session:
            raise UnauthorizedError("Invalid email or password")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        if cache_key in _AUTH_USER_CACHE:
            user_data, expiry = _AUTH_USER_CACHE[cache_key]
            if now < expiry:
                return user_data
            del _AUTH_USER_CACHE[cache_key]
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise UnauthorizedError("Invalid or expired token")
            logger.warning(f"Token verification failed: {error_msg}")
            raise UnauthorizedError("Authentication failed")
        if not user_response or not user_response.user:
            raise UnauthorizedError("Invalid or expired token")
        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
        }
        if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
            _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
        return user_data

    def logout(self, token: str) -> bool:
        """Drop the cached identity; Supabase JWTs are stateless and expire on their own"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False
