from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime

from attenthive.config.activity_config import is_valid_subtype
from attenthive.core.permissions import AccessKind, HiveRole


class RecipientCategory(str, Enum):
    PET = "PET"
    PLANT = "PLANT"
    PERSON = "PERSON"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


def _not_in_future(value: Optional[date]) -> Optional[date]:
    if value is not None and value > date.today():
        raise ValueError("Birth date cannot be in the future")
    return value


class RecipientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    category: RecipientCategory = RecipientCategory.PET
    subtype: str
    breed: Optional[str] = Field(default=None, max_length=100)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    weight: Optional[float] = Field(default=None, gt=0)
    characteristics: List[str] = []
    description: Optional[str] = Field(default=None, max_length=500)
    special_notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("birth_date")
    @classmethod
    def birth_date_not_in_future(cls, value):
        return _not_in_future(value)

    @model_validator(mode="after")
    def check_subtype(self):
        if not is_valid_subtype(self.category.value, self.subtype):
            raise ValueError(f"Subtype {self.subtype} is not valid for {self.category.value}")
        return self


class RecipientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    subtype: Optional[str] = None
    breed: Optional[str] = Field(default=None, max_length=100)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    weight: Optional[float] = Field(default=None, gt=0)
    characteristics: Optional[List[str]] = None
    description: Optional[str] = Field(default=None, max_length=500)
    special_notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("birth_date")
    @classmethod
    def birth_date_not_in_future(cls, value):
        return _not_in_future(value)

    @field_validator("name", "subtype")
    @classmethod
    def not_null(cls, value):
        # Both columns are NOT NULL; leave the field out to keep it unchanged
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class RecipientResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    category: RecipientCategory
    subtype: str
    breed: Optional[str] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    weight: Optional[float] = None
    characteristics: List[str] = []
    description: Optional[str] = None
    special_notes: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecipientAccess(BaseModel):
    role: Optional[HiveRole] = None
    kind: AccessKind
    label: str
    can_write: bool
    can_edit: bool
    can_invite: bool


class RecipientDetailResponse(RecipientResponse):
    access: RecipientAccess


class RecipientListItem(RecipientResponse):
    last_log: Optional[Dict[str, Any]] = None


class RecipientCreatedResponse(BaseModel):
    message: str
    pet: RecipientResponse


class PhotoResponse(BaseModel):
    image_url: Optional[str] = None
