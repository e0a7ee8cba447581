from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from enum import Enum

class BadgeType(str, Enum):
    FIRST_SESSION = "first_session"      # first study session
    SESSIONS_10 = "10_sessions"
    SESSIONS_50 = "50_sessions"
    SESSIONS_100 = "100_sessions"
    REVIEWS_5 = "5_reviews"
    REVIEWS_10 = "10_reviews"
    REVIEWS_25 = "25_reviews"
    THEMES_5 = "5_themes"
    THEMES_10 = "10_themes"
    STREAK_7 = "streak_7"
    STREAK_30 = "streak_30"
    STREAK_100 = "streak_100"
    PERFECT_SESSION = "perfect_session"  # 100% accuracy in a session
    IMPROVEMENT = "improvement"          # catalog only, never auto-granted

class PointsSource(str, Enum):
    STUDY_SESSION = "study_session"
    REVIEW = "review"
    BADGE = "badge"
    STREAK = "streak"

class BadgeDefinition(BaseModel):
    type: BadgeType
    name: str
    description: str
    icon: str
    color: str

class UserPoints(BaseModel):
    user_id: str
    points: int = 0
    updated_at: Optional[datetime] = None

class PointsHistoryEntry(BaseModel):
    id: str
    user_id: str
    points: int
    source: PointsSource
    source_id: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

class StudyStreak(BaseModel):
    user_id: str
    current_streak: int = 0
    longest_streak: int = 0
    last_study_date: Optional[date] = None
    updated_at: Optional[datetime] = None

class UserBadge(BaseModel):
    id: str
    user_id: str
    badge_type: BadgeType
    earned_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

class UserStats(BaseModel):
    total_sessions: int = 0
    total_reviews: int = 0
    total_themes: int = 0
    current_streak: int = 0
    has_perfect_session: bool = False

class SideEffectFailure(BaseModel):
    step: str
    error: str

class GamificationProfile(BaseModel):
    points: UserPoints
    streak: StudyStreak
    badges: List[UserBadge]
    badge_details: List[BadgeDefinition]
    recent_points: List[PointsHistoryEntry]
