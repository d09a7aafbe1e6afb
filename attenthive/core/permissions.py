"""
Hive permission rules
Pure functions over a recipient's ownership snapshot: the primary owner
(care_recipients.owner_id) plus its hive membership rows. A membership with
role OWNER is a co-owner; the primary owner never has a membership row.

None of these functions raise. A snapshot without members behaves as if only
the primary owner exists.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class HiveRole(str, Enum):
    OWNER = "OWNER"
    CAREGIVER = "CAREGIVER"
    VIEWER = "VIEWER"


class AccessKind(str, Enum):
    PRIMARY_OWNER = "PRIMARY_OWNER"
    CO_OWNER = "CO_OWNER"
    CAREGIVER = "CAREGIVER"
    VIEWER = "VIEWER"
    NO_ACCESS = "NO_ACCESS"

    @property
    def can_read(self) -> bool:
        return self is not AccessKind.NO_ACCESS

    @property
    def can_write(self) -> bool:
        return self in (AccessKind.PRIMARY_OWNER, AccessKind.CO_OWNER, AccessKind.CAREGIVER)

    @property
    def is_owner(self) -> bool:
        return self in (AccessKind.PRIMARY_OWNER, AccessKind.CO_OWNER)

    @property
    def role(self) -> Optional[HiveRole]:
        """Stored role equivalent; both owner kinds report OWNER."""
        if self.is_owner:
            return HiveRole.OWNER
        if self is AccessKind.CAREGIVER:
            return HiveRole.CAREGIVER
        if self is AccessKind.VIEWER:
            return HiveRole.VIEWER
        return None


class PetMember(BaseModel):
    user_id: str
    role: HiveRole


class PetOwnership(BaseModel):
    owner_id: str
    members: Optional[List[PetMember]] = None


def _find_member(pet: PetOwnership, user_id: str) -> Optional[PetMember]:
    for member in pet.members or []:
        if member.user_id == user_id:
            return member
    return None


def resolve_access_kind(pet: PetOwnership, user_id: str) -> AccessKind:
    """Classify user_id against the snapshot once; everything else derives from this."""
    if pet.owner_id == user_id:
        return AccessKind.PRIMARY_OWNER
    member = _find_member(pet, user_id)
    if member is None:
        return AccessKind.NO_ACCESS
    if member.role == HiveRole.OWNER:
        return AccessKind.CO_OWNER
    if member.role == HiveRole.CAREGIVER:
        return AccessKind.CAREGIVER
    return AccessKind.VIEWER


def is_primary_owner(pet: PetOwnership, user_id: str) -> bool:
    return pet.owner_id == user_id


def is_co_owner(pet: PetOwnership, user_id: str) -> bool:
    return resolve_access_kind(pet, user_id) is AccessKind.CO_OWNER


def is_owner(pet: PetOwnership, user_id: str) -> bool:
    return is_primary_owner(pet, user_id) or is_co_owner(pet, user_id)


def can_edit_pet(pet: PetOwnership, user_id: str) -> bool:
    return is_owner(pet, user_id)


def can_invite_members(pet: PetOwnership, user_id: str) -> bool:
    return is_owner(pet, user_id)


def can_invite_role(pet: PetOwnership, user_id: str, role: HiveRole) -> bool:
    """Only the primary owner may create co-owners."""
    if not can_invite_members(pet, user_id):
        return False
    if role == HiveRole.OWNER:
        return is_primary_owner(pet, user_id)
    return True


def can_remove_member(pet: PetOwnership, acting_user_id: str, target_user_id: str) -> bool:
    """
    The primary owner can remove any member but never themselves.
    A co-owner can remove caregivers only.
    Nobody else can remove anyone, and nobody can remove the primary owner.
    """
    if is_primary_owner(pet, target_user_id):
        return False
    if not is_owner(pet, acting_user_id):
        return False
    if acting_user_id == target_user_id:
        return False
    if is_primary_owner(pet, acting_user_id):
        return True
    target = _find_member(pet, target_user_id)
    return target is not None and target.role == HiveRole.CAREGIVER


def get_member_role_label(pet: PetOwnership, user_id: str) -> str:
    # VIEWER and outsiders currently fall through to "Caregiver"; see DESIGN.md.
    kind = resolve_access_kind(pet, user_id)
    if kind is AccessKind.PRIMARY_OWNER:
        return "Owner"
    if kind is AccessKind.CO_OWNER:
        return "Co-owner"
    return "Caregiver"
