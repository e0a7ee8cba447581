import logging
import time
import uuid
from typing import List, Optional
from datetime import datetime, timezone
from urllib.parse import urlparse
from supabase import Client

from app.core.config import settings
from app.core.errors import AuthenticationError, ContentValidationError, NotFoundError
from app.models.content import ContentType, StudyContentResponse, StudyContentUpdate, FileUrlResponse

logger = logging.getLogger(__name__)


def validate_body(content_type: ContentType, content: Optional[str]) -> None:
    """Text rules for notes and links"""
    if content_type == ContentType.NOTE and not content:
        raise ContentValidationError("Content is required for notes")

    if content_type == ContentType.LINK:
        if not content:
            raise ContentValidationError("URL is required for links")
        parsed = urlparse(content)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ContentValidationError("Link must be an http(s) URL")


class ContentService:
    def __init__(self, db: Client, user_id: str):
        if not user_id:
            raise AuthenticationError("User not authenticated")
        self.db = db
        self.user_id = user_id
        self.bucket = settings.storage_bucket

    def _storage(self):
        return self.db.storage.from_(self.bucket)

    async def create_content(
        self,
        theme: str,
        content_type: ContentType,
        title: str,
        content: Optional[str] = None,
        file_data: Optional[bytes] = None,
        file_name: Optional[str] = None,
        mime_type: Optional[str] = None
    ) -> StudyContentResponse:
        """Create a note, link or PDF for a theme.

        Input is checked before anything is uploaded. A PDF goes to the
        storage bucket under the user's folder and the row only keeps its
        path and original name.
        """
        theme = (theme or "").strip()
        title = (title or "").strip()
        content = (content or "").strip() or None

        if not theme:
            raise ContentValidationError("Theme is required")
        if not title:
            raise ContentValidationError("Title is required")

        if content_type != ContentType.PDF:
            validate_body(content_type, content)
        else:
            if not file_data or not file_name:
                raise ContentValidationError("A file is required for PDFs")
            content = None

        file_path = None
        if content_type == ContentType.PDF:
            file_path = self._upload(file_data, file_name, mime_type)

        try:
            result = self.db.table("study_content").insert({
                "user_id": self.user_id,
                "theme": theme,
                "content_type": content_type.value,
                "title": title,
                "content": content,
                "file_path": file_path,
                "file_name": file_name if file_path else None
            }).execute()
        except Exception:
            if file_path:
                self._remove_file(file_path)
            raise

        return StudyContentResponse(**result.data[0])

    async def list_content(self, theme: Optional[str] = None) -> List[StudyContentResponse]:
        query = self.db.table("study_content").select("*").eq("user_id", self.user_id)
        if theme:
            query = query.eq("theme", theme)

        result = query.order("created_at", desc=True).execute()
        return [StudyContentResponse(**row) for row in result.data or []]

    async def get_content(self, content_id: str) -> StudyContentResponse:
        result = self.db.table("study_content").select("*").eq(
            "id", content_id
        ).eq("user_id", self.user_id).execute()
        if not result.data:
            raise NotFoundError("Content not found")
        return StudyContentResponse(**result.data[0])

    async def update_content(self, content_id: str, updates: StudyContentUpdate) -> StudyContentResponse:
        """Change the title or body, holding the body to the item's type rules"""
        item = await self.get_content(content_id)

        update_data = updates.model_dump(exclude_unset=True, exclude_none=True)
        if "title" in update_data:
            update_data["title"] = update_data["title"].strip()
            if not update_data["title"]:
                raise ContentValidationError("Title is required")

        if "content" in update_data:
            if item.content_type == ContentType.PDF:
                raise ContentValidationError("PDFs have no text content")
            update_data["content"] = update_data["content"].strip()
            validate_body(item.content_type, update_data["content"])

        if not update_data:
            return item

        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        result = self.db.table("study_content").update(update_data).eq(
            "id", content_id
        ).eq("user_id", self.user_id).execute()
        if not result.data:
            raise NotFoundError("Content not found")

        return StudyContentResponse(**result.data[0])

    async def delete_content(self, content_id: str) -> None:
        """Delete a content item; its file is removed on a best-effort basis"""
        item = await self.get_content(content_id)

        if item.file_path:
            self._remove_file(item.file_path)

        self.db.table("study_content").delete().eq(
            "id", content_id
        ).eq("user_id", self.user_id).execute()
        logger.info(f"Content {content_id} deleted for user {self.user_id}")

    async def file_url(self, content_id: str) -> FileUrlResponse:
        item = await self.get_content(content_id)
        if not item.file_path:
            raise NotFoundError("Content has no file")

        ttl = settings.signed_url_ttl_seconds
        signed = self._storage().create_signed_url(item.file_path, ttl)
        # storage3 has returned both spellings across releases
        url = signed.get("signedURL") or signed.get("signedUrl")
        return FileUrlResponse(signed_url=url, expires_in=ttl)

    def _upload(self, file_data: bytes, file_name: str, mime_type: Optional[str]) -> str:
        ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else "pdf"
        path = f"{self.user_id}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{ext}"

        self._storage().upload(path, file_data, {
            "content-type": mime_type or "application/pdf",
            "cache-control": "3600",
            "upsert": "false"
        })
        logger.info(f"Uploaded {file_name} to {self.bucket}/{path}")
        return path

    def _remove_file(self, path: str) -> None:
        try:
            self._storage().remove([path])
        except Exception as e:
            logger.error(f"Failed to delete file {path}: {e}")
