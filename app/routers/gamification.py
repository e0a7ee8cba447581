from fastapi import APIRouter, Depends, Query
from typing import List
from supabase import Client

from app.models.achievement import (
    BadgeDefinition, GamificationProfile, PointsHistoryEntry, StudyStreak, UserBadge,
    UserPoints, UserStats
)
from app.core.security import verify_token
from app.core.database import get_database
from app.services.badges import BADGE_DEFINITIONS
from app.services.gamification_service import GamificationService

router = APIRouter()


@router.get("/profile", response_model=GamificationProfile)
async def get_user_game_profile(
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Get complete gamification profile for user"""
    gamification = GamificationService(db, user_id)

    badges = await gamification.get_user_badges()

    return GamificationProfile(
        points=await gamification.get_user_points(),
        streak=await gamification.get_user_streak(),
        badges=badges,
        badge_details=[BADGE_DEFINITIONS[badge.badge_type] for badge in badges],
        recent_points=await gamification.get_points_history(10)
    )


@router.get("/points", response_model=UserPoints)
async def get_user_points(
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await GamificationService(db, user_id).get_user_points()


@router.get("/points/history", response_model=List[PointsHistoryEntry])
async def get_points_history(
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await GamificationService(db, user_id).get_points_history(limit)


@router.get("/streak", response_model=StudyStreak)
async def get_user_streak(
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await GamificationService(db, user_id).get_user_streak()


@router.get("/badges", response_model=List[UserBadge])
async def get_user_badges(
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await GamificationService(db, user_id).get_user_badges()


@router.get("/badges/catalog", response_model=List[BadgeDefinition])
async def get_badge_catalog():
    """All badges that exist, earned or not"""
    return list(BADGE_DEFINITIONS.values())


@router.get("/stats", response_model=UserStats)
async def get_user_stats(
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await GamificationService(db, user_id).collect_stats()
