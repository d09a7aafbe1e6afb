import logging
from datetime import datetime, timezone
from typing import List, Tuple

from supabase import Client

from attenthive.config.activity_config import ACTIVITY_TYPES, is_valid_action_for_subtype
from attenthive.core.access import can_write_to_recipient
from attenthive.core.exceptions import InternalError, NotFoundError, ValidationFailedError
from attenthive.modules.care_logs.schemas import CareLogCreate, CareLogResponse, CareLogUpdate
from attenthive.modules.users.schemas import Actor

logger = logging.getLogger(__name__)

LOG_COLUMNS = "*, users(id, name, email)"


def _to_response(row: dict) -> CareLogResponse:
    data = {k: v for k, v in row.items() if k != "users"}
    return CareLogResponse(**data, user=row.get("users"))


class CareLogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_log(self, log_id: str) -> dict:
        try:
            result = self.supabase.table("care_logs")\
                .select(LOG_COLUMNS)\
                .eq("id", log_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading care log {log_id}: {e}")
            raise NotFoundError("Care log not found")
        if not result.data:
            raise NotFoundError("Care log not found")
        return result.data[0]

    def _get_writable_log(self, actor: Actor, log_id: str) -> dict:
        # Viewers and strangers get the same answer as a missing log
        log = self._get_log(log_id)
        if not can_write_to_recipient(self.supabase, actor.id, log["recipient_id"]):
            logger.warning(f"User {actor.id} denied write access to care log {log_id}")
            raise NotFoundError("Care log not found")
        return log

    def list_for_recipient(self, recipient_id: str) -> Tuple[List[CareLogResponse], str]:
        """Logs of a recipient, newest first, and the recipient's name. Caller has checked read access."""
        try:
            recipient = self.supabase.table("care_recipients")\
                .select("id, name")\
                .eq("id", recipient_id)\
                .limit(1)\
                .execute()
            logs = self.supabase.table("care_logs")\
                .select(LOG_COLUMNS)\
                .eq("recipient_id", recipient_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error listing care logs for {recipient_id}: {e}")
            raise InternalError("Failed to fetch care logs")
        if not recipient.data:
            raise NotFoundError("Pet not found")
        return [_to_response(row) for row in logs.data or []], recipient.data[0]["name"]

    def create_log(self, actor: Actor, log_data: CareLogCreate) -> CareLogResponse:
        """
        Record an activity. The type must be known, the actor must be able
        to write to the recipient, and the type must apply to its subtype
        (NOTE applies everywhere).
        """
        if log_data.activity_type not in ACTIVITY_TYPES:
            raise ValidationFailedError("Invalid activity type")
        if not can_write_to_recipient(self.supabase, actor.id, log_data.pet_id):
            logger.warning(f"User {actor.id} denied logging activity for recipient {log_data.pet_id}")
            raise NotFoundError("Pet not found")

        try:
            recipient = self.supabase.table("care_recipients")\
                .select("id, subtype")\
                .eq("id", log_data.pet_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading recipient {log_data.pet_id}: {e}")
            raise InternalError("Something went wrong while logging the activity")
        if not recipient.data:
            raise NotFoundError("Pet not found")
        subtype = recipient.data[0].get("subtype")
        if not is_valid_action_for_subtype(log_data.activity_type, subtype):
            raise ValidationFailedError(
                f"Activity {log_data.activity_type} is not available for {subtype}"
            )

        try:
            result = self.supabase.table("care_logs").insert({
                "recipient_id": log_data.pet_id,
                "user_id": actor.id,
                "activity_type": log_data.activity_type,
                "notes": log_data.notes,
                "metadata": log_data.metadata,
                "photo_url": log_data.photo_url,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating care log for {log_data.pet_id}: {e}")
            raise InternalError("Something went wrong while logging the activity")
        if not result.data:
            raise InternalError("Something went wrong while logging the activity")

        logger.info(f"User {actor.id} logged {log_data.activity_type} for recipient {log_data.pet_id}")
        return _to_response(self._get_log(result.data[0]["id"]))

    def update_log(self, actor: Actor, log_id: str, log_data: CareLogUpdate) -> CareLogResponse:
        """Edit notes or photo. An explicit null clears the field; edited_at is stamped."""
        self._get_writable_log(actor, log_id)
        update_data = log_data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationFailedError("No fields to update")
        update_data["edited_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = self.supabase.table("care_logs")\
                .update(update_data)\
                .eq("id", log_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating care log {log_id}: {e}")
            raise InternalError("Failed to update care log")
        if not result.data:
            raise NotFoundError("Care log not found")
        logger.info(f"User {actor.id} edited care log {log_id}")
        return _to_response(self._get_log(log_id))

    def delete_log(self, actor: Actor, log_id: str) -> None:
        self._get_writable_log(actor, log_id)
        try:
            self.supabase.table("care_logs").delete().eq("id", log_id).execute()
        except Exception as e:
            logger.error(f"Error deleting care log {log_id}: {e}")
            raise InternalError("Failed to delete care log")
        logger.info(f"User {actor.id} deleted care log {log_id}")
