from fastapi import APIRouter, Depends, status
from typing import List
from supabase import Client

from app.models.study import (
    StudySessionCreate, StudySessionResponse, SessionRecorded, ThemeOverview, ThemeDeleted
)
from app.core.security import verify_token
from app.core.database import get_database
from app.services.study_service import StudyService

router = APIRouter()


@router.post("", response_model=SessionRecorded, status_code=status.HTTP_201_CREATED)
async def create_study_session(
    session_data: StudySessionCreate,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Log a study session and schedule its review"""
    return await StudyService(db, user_id).record_session(session_data)


@router.get("", response_model=List[StudySessionResponse])
async def get_study_sessions(
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await StudyService(db, user_id).list_sessions()


@router.get("/themes", response_model=ThemeOverview)
async def get_theme_overview(
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Per-theme accuracy and activity summary"""
    return await StudyService(db, user_id).theme_overview()


@router.get("/themes/{theme}", response_model=List[StudySessionResponse])
async def get_theme_history(
    theme: str,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await StudyService(db, user_id).theme_history(theme)


@router.delete("/themes/{theme}", response_model=ThemeDeleted)
async def delete_theme(
    theme: str,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Delete all sessions and reviews of a theme (study content is kept)"""
    return await StudyService(db, user_id).delete_theme(theme)
