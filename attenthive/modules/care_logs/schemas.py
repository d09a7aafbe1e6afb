from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class CareLogCreate(BaseModel):
    pet_id: str = Field(alias="petId", min_length=1)
    activity_type: str = Field(alias="activityType", min_length=1)
    notes: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")

    class Config:
        populate_by_name = True


class CareLogUpdate(BaseModel):
    notes: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")

    class Config:
        populate_by_name = True


class CareLogUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class CareLogResponse(BaseModel):
    id: str
    recipient_id: str
    user_id: str
    activity_type: str
    notes: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    edited_at: Optional[datetime] = None
    user: Optional[CareLogUser] = None

    class Config:
        from_attributes = True


class CareLogListResponse(BaseModel):
    logs: List[CareLogResponse]
    pet_name: str = Field(alias="petName")

    class Config:
        populate_by_name = True


class CareLogSavedResponse(BaseModel):
    message: str
    log: CareLogResponse
