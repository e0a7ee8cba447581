from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

class ContentType(str, Enum):
    NOTE = "note"
    LINK = "link"
    PDF = "pdf"

class StudyContentUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None

class StudyContentResponse(BaseModel):
    id: str
    user_id: str
    theme: str
    content_type: ContentType
    title: str
    content: Optional[str] = None
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class FileUrlResponse(BaseModel):
    signed_url: str
    expires_in: int
