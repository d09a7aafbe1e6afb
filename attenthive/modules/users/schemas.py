from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Actor(BaseModel):
    """The users row behind the current request."""
    id: str
    email: str
    name: str = ""


class UserProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class UserProfileResponse(BaseModel):
    id: str
    name: str = ""
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
