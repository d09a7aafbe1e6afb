import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from attenthive.core.access import INVALID_TEXT_REPRESENTATION, load_ownership
from attenthive.core.exceptions import (
    ConflictError, ForbiddenError, InternalError, NotFoundError,
    ValidationFailedError
)
from attenthive.core.permissions import (
    AccessKind, HiveRole, PetOwnership, can_invite_members, can_remove_member,
    get_member_role_label, is_primary_owner, resolve_access_kind
)
from attenthive.modules.hives.schemas import HiveMemberResponse, MembershipResponse
from attenthive.modules.users.schemas import Actor
from attenthive.modules.users.service import UserService, normalize_email

logger = logging.getLogger(__name__)

SHARED_ROLES = [HiveRole.CAREGIVER.value, HiveRole.VIEWER.value]


class HiveService:
    def __init__(self, supabase: Client, users: UserService = None):
        self.supabase = supabase
        self.users = users or UserService(supabase)

    def _get_ownership(self, recipient_id: str) -> PetOwnership:
        ownership = load_ownership(self.supabase, recipient_id)
        if ownership is None:
            raise NotFoundError("Pet not found")
        return ownership

    def invite_member_to_pet(
        self,
        actor: Actor,
        recipient_id: str,
        email: str,
        role: HiveRole = HiveRole.CAREGIVER
    ) -> MembershipResponse:
        """
        Grant access to a recipient for the account registered under email.
        Re-inviting an existing member updates their role in place, so the
        call is idempotent and doubles as the way to change a member's role.
        """
        role = HiveRole(role)
        ownership = self._get_ownership(recipient_id)

        if not can_invite_members(ownership, actor.id):
            logger.warning(f"User {actor.id} tried to invite to recipient {recipient_id} without owner rights")
            raise ForbiddenError("Not authorized to share this pet")

        if role == HiveRole.OWNER and not is_primary_owner(ownership, actor.id):
            logger.warning(f"Co-owner {actor.id} tried to invite a co-owner to recipient {recipient_id}")
            raise ForbiddenError("Only the primary owner can invite co-owners")

        if normalize_email(email) == normalize_email(actor.email):
            raise ConflictError("You cannot invite yourself")

        invited_user = self.users.get_user_by_email(email)
        if invited_user is None:
            raise NotFoundError("No user found with that email")

        if is_primary_owner(ownership, invited_user["id"]):
            raise ConflictError("That user is already the owner of this pet")

        existing = resolve_access_kind(ownership, invited_user["id"])
        if existing is AccessKind.CO_OWNER and not is_primary_owner(ownership, actor.id):
            logger.warning(
                f"Co-owner {actor.id} tried to change the role of co-owner {invited_user['id']} "
                f"on recipient {recipient_id}"
            )
            raise ForbiddenError("Only the primary owner can change a co-owner's role")

        try:
            result = self.supabase.table("hives").upsert(
                {
                    "recipient_id": recipient_id,
                    "user_id": invited_user["id"],
                    "role": role.value,
                },
                on_conflict="recipient_id,user_id"
            ).execute()
        except Exception as e:
            logger.error(f"Error saving hive membership for recipient {recipient_id}: {e}")
            raise InternalError("Failed to save membership")

        if not result.data:
            raise InternalError("Failed to save membership")

        logger.info(f"User {actor.id} granted {role.value} on recipient {recipient_id} to user {invited_user['id']}")
        return MembershipResponse(**result.data[0])

    def remove_member(self, actor: Actor, membership_id: str, recipient_id: Optional[str] = None) -> None:
        """Remove one membership row, subject to can_remove_member"""
        try:
            result = self.supabase.table("hives")\
                .select("id, recipient_id, user_id, role")\
                .eq("id", membership_id)\
                .limit(1)\
                .execute()
        except APIError as e:
            if e.code == INVALID_TEXT_REPRESENTATION:
                raise NotFoundError("Hive membership not found")
            logger.error(f"Error loading hive membership {membership_id}: {e}")
            raise InternalError("Failed to remove hive member")
        except Exception as e:
            logger.error(f"Error loading hive membership {membership_id}: {e}")
            raise InternalError("Failed to remove hive member")

        if not result.data:
            raise NotFoundError("Hive membership not found")
        membership = result.data[0]

        if recipient_id and membership["recipient_id"] != recipient_id:
            raise ValidationFailedError("membershipId does not belong to the specified recipientId")

        ownership = self._get_ownership(membership["recipient_id"])
        if not can_remove_member(ownership, actor.id, membership["user_id"]):
            logger.warning(f"User {actor.id} denied removing membership {membership_id}")
            raise ForbiddenError("You do not have permission to remove this member")

        try:
            self.supabase.table("hives")\
                .delete()\
                .eq("id", membership_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting hive membership {membership_id}: {e}")
            raise InternalError("Failed to remove hive member")

        logger.info(f"User {actor.id} removed user {membership['user_id']} from recipient {membership['recipient_id']}")

    def remove_caregiver_from_pet(self, actor: Actor, recipient_id: str, caregiver_user_id: str) -> int:
        """
        Narrow removal kept for the caregiver list: primary owner only, and
        only rows with role CAREGIVER are touched, so co-owners and viewers
        survive. Returns the number of rows deleted.
        """
        ownership = self._get_ownership(recipient_id)
        if not is_primary_owner(ownership, actor.id):
            raise ForbiddenError("Not authorized to remove caregivers for this pet")

        try:
            result = self.supabase.table("hives")\
                .delete()\
                .eq("recipient_id", recipient_id)\
                .eq("user_id", caregiver_user_id)\
                .eq("role", HiveRole.CAREGIVER.value)\
                .execute()
        except Exception as e:
            logger.error(f"Error removing caregiver {caregiver_user_id} from {recipient_id}: {e}")
            raise InternalError("Failed to remove caregiver")

        removed = len(result.data or [])
        logger.info(f"User {actor.id} removed {removed} caregiver row(s) from recipient {recipient_id}")
        return removed

    def get_hive_members_for_pet(self, recipient_id: str) -> List[HiveMemberResponse]:
        """Membership rows with their users. The primary owner is not among them."""
        ownership = self._get_ownership(recipient_id)
        try:
            result = self.supabase.table("hives")\
                .select("id, recipient_id, user_id, role, created_at, users(id, name, email)")\
                .eq("recipient_id", recipient_id)\
                .order("created_at")\
                .execute()
        except Exception as e:
            logger.error(f"Error listing hive members for {recipient_id}: {e}")
            raise InternalError("Failed to fetch hive members")

        members = []
        for row in result.data or []:
            members.append(HiveMemberResponse(
                id=row["id"],
                recipient_id=row["recipient_id"],
                user_id=row["user_id"],
                role=row["role"],
                created_at=row.get("created_at"),
                label=get_member_role_label(ownership, row["user_id"]),
                user=row.get("users"),
            ))
        return members

    def get_shared_pets_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Recipients shared with user_id as CAREGIVER or VIEWER, each with a
        hive_role marker. Co-owner rows are left out of this listing even
        though they grant access.
        """
        try:
            result = self.supabase.table("hives")\
                .select("role, care_recipients(*)")\
                .eq("user_id", user_id)\
                .in_("role", SHARED_ROLES)\
                .execute()
        except Exception as e:
            logger.error(f"Error listing shared pets for {user_id}: {e}")
            raise InternalError("Failed to fetch shared pets")

        shared = []
        for row in result.data or []:
            recipient = row.get("care_recipients")
            if recipient:
                shared.append({**recipient, "hive_role": row["role"]})
        return shared
