import logging
import time
from typing import Optional

from supabase import Client

from attenthive.config import settings

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]
EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


def detect_image_type(content: bytes) -> Optional[str]:
    """
    Image type from the file signature. The client's declared content type
    is not trusted: an HTML or SVG payload can claim to be image/jpeg.
    """
    if len(content) < 12:
        return None
    if content[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if content[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    return None


class PhotoStorage:
    def __init__(self, supabase: Client, bucket: str = None):
        self.supabase = supabase
        self.bucket_name = bucket or settings.photo_bucket

    def upload_file(self, file_content: bytes, path: str, content_type: str) -> str:
        """Upload to Supabase Storage and return the public URL"""
        try:
            self.supabase.storage.from_(self.bucket_name).upload(
                path,
                file_content,
                file_options={"content-type": content_type, "upsert": "true"}
            )
        except Exception as e:
            logger.error(f"Failed to upload {path} to storage: {str(e)}")
            raise
        return self.supabase.storage.from_(self.bucket_name).get_public_url(path)

    def delete_file(self, path: str) -> bool:
        try:
            self.supabase.storage.from_(self.bucket_name).remove([path])
            return True
        except Exception as e:
            logger.error(f"Failed to delete {path} from storage: {str(e)}")
            return False

    def path_from_public_url(self, url: Optional[str]) -> Optional[str]:
        """Object path inside our bucket, or None for URLs we do not own"""
        if not url:
            return None
        marker = f"/object/public/{self.bucket_name}/"
        if marker not in url:
            return None
        return url.split(marker, 1)[1].split("?", 1)[0]

    @staticmethod
    def build_path(recipient_id: str, content_type: str) -> str:
        # Timestamped so re-uploads never collide with a cached URL
        return f"pets/{recipient_id}/{int(time.time() * 1000)}.{EXTENSIONS[content_type]}"
