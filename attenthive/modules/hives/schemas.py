from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from datetime import datetime

from attenthive.core.permissions import HiveRole


class InviteRequest(BaseModel):
    recipient_id: str = Field(alias="recipientId", min_length=1)
    email: EmailStr
    role: HiveRole = HiveRole.CAREGIVER

    class Config:
        populate_by_name = True


class MemberRemoveRequest(BaseModel):
    membership_id: Optional[str] = Field(default=None, alias="membershipId")
    recipient_id: Optional[str] = Field(default=None, alias="recipientId")

    class Config:
        populate_by_name = True


class MembershipResponse(BaseModel):
    id: str
    recipient_id: str
    user_id: str
    role: HiveRole
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: str


class HiveMemberResponse(MembershipResponse):
    label: str
    user: Optional[MemberUser] = None


class InviteResponse(BaseModel):
    message: str
    membership: MembershipResponse


class HiveMembersResponse(BaseModel):
    members: List[HiveMemberResponse]
    count: int
    is_owner: bool = Field(alias="isOwner")

    class Config:
        populate_by_name = True


class SharedPetsResponse(BaseModel):
    shared_pets: List[Dict[str, Any]] = Field(alias="sharedPets")
    count: int

    class Config:
        populate_by_name = True
