from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import List, Optional
from supabase import Client

from app.models.content import ContentType, StudyContentResponse, StudyContentUpdate, FileUrlResponse
from app.core.security import verify_token
from app.core.database import get_database
from app.services.content_service import ContentService

router = APIRouter()


@router.post("", response_model=StudyContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    theme: str = Form(...),
    content_type: ContentType = Form(...),
    title: str = Form(...),
    content: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Add a note, link or PDF to a theme"""
    file_data = await file.read() if file is not None else None

    return await ContentService(db, user_id).create_content(
        theme=theme,
        content_type=content_type,
        title=title,
        content=content,
        file_data=file_data,
        file_name=file.filename if file is not None else None,
        mime_type=file.content_type if file is not None else None
    )


@router.get("", response_model=List[StudyContentResponse])
async def get_content(
    theme: Optional[str] = Query(None),
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await ContentService(db, user_id).list_content(theme)


@router.put("/{content_id}", response_model=StudyContentResponse)
async def update_content(
    content_id: str,
    updates: StudyContentUpdate,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await ContentService(db, user_id).update_content(content_id, updates)


@router.delete("/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content(
    content_id: str,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    await ContentService(db, user_id).delete_content(content_id)


@router.get("/{content_id}/file-url", response_model=FileUrlResponse)
async def get_file_url(
    content_id: str,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Time-limited signed URL for a content item's file"""
    return await ContentService(db, user_id).file_url(content_id)
