"""Supabase Storage wrapper for cover images, avatars and personnel photos."""
import logging
import time
import uuid
from typing import Optional

from supabase import Client

logger = logging.getLogger(__name__)


def build_object_path(filename: Optional[str], prefix: str = "") -> str:
    """Timestamped object key keeping the uploaded file's extension."""
    ext = ""
    if filename and "." in filename:
        ext = "." + filename.rsplit(".", 1)[-1].lower()
    name = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}{ext}"
    return f"{prefix.strip('/')}/{name}" if prefix else name


class SupabaseStorage:
    def __init__(self, supabase: Client, bucket_name: str):
        if not bucket_name:
            raise ValueError("Storage bucket name must be configured")
        self.supabase = supabase
        self.bucket_name = bucket_name

    def upload_file(
        self,
        file_content: bytes,
        path: str,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> str:
        """Upload file to the bucket and return its public URL"""
        try:
            self.supabase.storage.from_(self.bucket_name).upload(
                path,
                file_content,
                {"content-type": content_type, "upsert": "true" if upsert else "false"},
            )
        except Exception as e:
            logger.error(f"Failed to upload {path} to bucket {self.bucket_name}: {str(e)}")
            raise
        return self.get_public_url(path)

    def get_public_url(self, path: str) -> str:
        return self.supabase.storage.from_(self.bucket_name).get_public_url(path)
