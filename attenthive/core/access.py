"""
Recipient access checks
Read-path helpers that answer "can this user see / write to this recipient".
They return result objects instead of raising for a denial; only unexpected
database failures escape, as InternalError.
"""

import logging
from typing import Optional

from postgrest.exceptions import APIError
from pydantic import BaseModel
from supabase import Client

from attenthive.core.exceptions import InternalError
from attenthive.core.permissions import (
    AccessKind, HiveRole, PetMember, PetOwnership, resolve_access_kind
)

logger = logging.getLogger(__name__)

# Postgres "invalid text representation", raised for ids that are not uuids
INVALID_TEXT_REPRESENTATION = "22P02"


class AccessResult(BaseModel):
    can_access: bool
    role: Optional[HiveRole] = None
    kind: AccessKind = AccessKind.NO_ACCESS
    owner_id: Optional[str] = None

    @classmethod
    def denied(cls) -> "AccessResult":
        return cls(can_access=False, role=None, kind=AccessKind.NO_ACCESS)


def _fetch_recipient_with_hives(supabase: Client, recipient_id: str, user_id: Optional[str] = None):
    """One round trip: owner_id plus membership rows, optionally narrowed to one user."""
    query = supabase.table("care_recipients")\
        .select("id, owner_id, hives(user_id, role)")\
        .eq("id", recipient_id)
    if user_id is not None:
        query = query.eq("hives.user_id", user_id)
    try:
        result = query.limit(1).execute()
    except APIError as e:
        if e.code == INVALID_TEXT_REPRESENTATION:
            return None
        logger.error(f"Error loading recipient {recipient_id}: {e}")
        raise InternalError("Failed to load care recipient")
    if not result.data:
        return None
    return result.data[0]


def _to_ownership(row: dict) -> PetOwnership:
    members = [PetMember(user_id=m["user_id"], role=m["role"]) for m in row.get("hives") or []]
    return PetOwnership(owner_id=row["owner_id"], members=members)


def load_ownership(supabase: Client, recipient_id: str) -> Optional[PetOwnership]:
    """Snapshot with every membership row, or None if the recipient does not exist."""
    row = _fetch_recipient_with_hives(supabase, recipient_id)
    if row is None:
        return None
    return _to_ownership(row)


def can_access_recipient(supabase: Client, user_id: str, recipient_id: str) -> AccessResult:
    row = _fetch_recipient_with_hives(supabase, recipient_id, user_id=user_id)
    if row is None:
        return AccessResult.denied()
    kind = resolve_access_kind(_to_ownership(row), user_id)
    if not kind.can_read:
        return AccessResult.denied()
    return AccessResult(can_access=True, role=kind.role, kind=kind, owner_id=row["owner_id"])


def can_write_to_recipient(supabase: Client, user_id: str, recipient_id: str) -> bool:
    """The one gate for every mutation on a recipient's data. VIEWER never passes."""
    access = can_access_recipient(supabase, user_id, recipient_id)
    if not access.can_access:
        return False
    return access.role in (HiveRole.OWNER, HiveRole.CAREGIVER)
