import logging
from datetime import datetime, timezone
from typing import Dict, List

from supabase import Client

from attenthive.config import settings
from attenthive.config.activity_config import is_valid_subtype, sanitize_characteristics
from attenthive.core.access import AccessResult, load_ownership
from attenthive.core.exceptions import (
    ForbiddenError, InternalError, NotFoundError, ValidationFailedError
)
from attenthive.core.permissions import (
    PetMember, PetOwnership, can_edit_pet, can_invite_members, get_member_role_label,
    is_primary_owner, resolve_access_kind
)
from attenthive.modules.recipients.schemas import (
    RecipientAccess, RecipientCreate, RecipientListItem, RecipientResponse, RecipientUpdate
)
from attenthive.modules.recipients.storage import ALLOWED_MIME_TYPES, PhotoStorage, detect_image_type
from attenthive.modules.users.schemas import Actor

logger = logging.getLogger(__name__)


def _serialize(data: Dict) -> Dict:
    """JSON-safe copy of a validated payload for the Supabase client"""
    row = {}
    for key, value in data.items():
        if hasattr(value, "isoformat"):
            value = value.isoformat()
        elif hasattr(value, "value"):
            value = value.value
        row[key] = value
    return row


class RecipientService:
    def __init__(self, supabase: Client, storage: PhotoStorage = None):
        self.supabase = supabase
        self.storage = storage or PhotoStorage(supabase)

    def create_recipient(self, actor: Actor, recipient_data: RecipientCreate) -> RecipientResponse:
        """Create a care recipient owned by actor"""
        row = _serialize(recipient_data.model_dump())
        row["characteristics"] = sanitize_characteristics(recipient_data.characteristics)
        row["owner_id"] = actor.id
        try:
            result = self.supabase.table("care_recipients").insert(row).execute()
        except Exception as e:
            logger.error(f"Error creating recipient for {actor.id}: {e}")
            raise InternalError("Something went wrong while creating the pet")
        if not result.data:
            raise InternalError("Something went wrong while creating the pet")
        logger.info(f"User {actor.id} created recipient {result.data[0]['id']}")
        return RecipientResponse(**result.data[0])

    def get_recipient(self, recipient_id: str) -> RecipientResponse:
        try:
            result = self.supabase.table("care_recipients")\
                .select("*")\
                .eq("id", recipient_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading recipient {recipient_id}: {e}")
            raise InternalError("Failed to load pet")
        if not result.data:
            raise NotFoundError("Pet not found")
        return RecipientResponse(**result.data[0])

    def list_owned(self, actor: Actor) -> List[RecipientListItem]:
        """Recipients actor is primary owner of, newest first, each with its latest care log"""
        try:
            result = self.supabase.table("care_recipients")\
                .select("*")\
                .eq("owner_id", actor.id)\
                .order("created_at", desc=True)\
                .execute()
            recipients = result.data or []
            latest: Dict[str, Dict] = {}
            if recipients:
                logs = self.supabase.table("care_logs")\
                    .select("*, users(id, name)")\
                    .in_("recipient_id", [r["id"] for r in recipients])\
                    .order("created_at", desc=True)\
                    .execute()
                for log in logs.data or []:
                    latest.setdefault(log["recipient_id"], log)
        except Exception as e:
            logger.error(f"Error listing recipients for {actor.id}: {e}")
            raise InternalError("Failed to fetch pets")
        return [RecipientListItem(**r, last_log=latest.get(r["id"])) for r in recipients]

    def describe_access(self, actor: Actor, access: AccessResult) -> RecipientAccess:
        """What actor may do, in the shape the detail page renders"""
        members = []
        if access.role is not None and access.owner_id != actor.id:
            members.append(PetMember(user_id=actor.id, role=access.role))
        snapshot = PetOwnership(owner_id=access.owner_id or "", members=members)
        kind = resolve_access_kind(snapshot, actor.id)
        return RecipientAccess(
            role=kind.role,
            kind=kind,
            label=get_member_role_label(snapshot, actor.id),
            can_write=kind.can_write,
            can_edit=can_edit_pet(snapshot, actor.id),
            can_invite=can_invite_members(snapshot, actor.id),
        )

    def update_recipient(self, actor: Actor, recipient_id: str, recipient_data: RecipientUpdate) -> RecipientResponse:
        """Owners and co-owners may edit; other members get 403, strangers 404"""
        ownership = load_ownership(self.supabase, recipient_id)
        if ownership is None or not resolve_access_kind(ownership, actor.id).can_read:
            raise NotFoundError("Pet not found")
        if not can_edit_pet(ownership, actor.id):
            raise ForbiddenError("Only owners can edit this pet")

        update_data = _serialize(recipient_data.model_dump(exclude_unset=True))
        if not update_data:
            raise ValidationFailedError("No fields to update")
        if "subtype" in update_data:
            current = self.get_recipient(recipient_id)
            if not is_valid_subtype(current.category.value, update_data["subtype"]):
                raise ValidationFailedError(
                    f"Subtype {update_data['subtype']} is not valid for {current.category.value}"
                )
        if "characteristics" in update_data:
            update_data["characteristics"] = sanitize_characteristics(update_data["characteristics"])
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = self.supabase.table("care_recipients")\
                .update(update_data)\
                .eq("id", recipient_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating recipient {recipient_id}: {e}")
            raise InternalError("Failed to update pet")
        if not result.data:
            raise NotFoundError("Pet not found")
        logger.info(f"User {actor.id} updated recipient {recipient_id}")
        return RecipientResponse(**result.data[0])

    def delete_recipient(self, actor: Actor, recipient_id: str) -> bool:
        """Primary owner only. Memberships and care logs go first."""
        ownership = load_ownership(self.supabase, recipient_id)
        if ownership is None or not resolve_access_kind(ownership, actor.id).can_read:
            raise NotFoundError("Pet not found")
        if not is_primary_owner(ownership, actor.id):
            raise ForbiddenError("Only the primary owner can delete this pet")

        recipient = self.get_recipient(recipient_id)
        try:
            self.supabase.table("care_logs").delete().eq("recipient_id", recipient_id).execute()
            self.supabase.table("hives").delete().eq("recipient_id", recipient_id).execute()
            result = self.supabase.table("care_recipients").delete().eq("id", recipient_id).execute()
        except Exception as e:
            logger.error(f"Error deleting recipient {recipient_id}: {e}")
            raise InternalError("Failed to delete pet")

        photo_path = self.storage.path_from_public_url(recipient.image_url)
        if photo_path:
            self.storage.delete_file(photo_path)
        logger.info(f"User {actor.id} deleted recipient {recipient_id}")
        return len(result.data or []) > 0

    def upload_photo(self, recipient_id: str, content: bytes) -> str:
        """Store a new profile photo and point image_url at it. Caller has checked write access."""
        if len(content) > settings.max_photo_bytes:
            raise ValidationFailedError(
                f"File is too large. Maximum size is {settings.max_photo_bytes // (1024 * 1024)} MB."
            )
        content_type = detect_image_type(content)
        if content_type not in ALLOWED_MIME_TYPES:
            raise ValidationFailedError("Unsupported file type. Please upload a JPEG, PNG, or WebP image.")

        previous = self.get_recipient(recipient_id)
        path = self.storage.build_path(recipient_id, content_type)
        try:
            public_url = self.storage.upload_file(content, path, content_type)
        except Exception:
            # Nothing written to the table yet, so state stays consistent
            raise InternalError("Failed to upload image to storage.")

        try:
            self.supabase.table("care_recipients")\
                .update({"image_url": public_url, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", recipient_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error saving image_url for {recipient_id}: {e}")
            self.storage.delete_file(path)
            raise InternalError("Failed to save image")

        old_path = self.storage.path_from_public_url(previous.image_url)
        if old_path and old_path != path:
            self.storage.delete_file(old_path)
        logger.info(f"Uploaded photo {path} for recipient {recipient_id}")
        return public_url

    def delete_photo(self, recipient_id: str) -> None:
        recipient = self.get_recipient(recipient_id)
        try:
            self.supabase.table("care_recipients")\
                .update({"image_url": None, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", recipient_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error clearing image_url for {recipient_id}: {e}")
            raise InternalError("Failed to remove image")
        path = self.storage.path_from_public_url(recipient.image_url)
        if path:
            self.storage.delete_file(path)
