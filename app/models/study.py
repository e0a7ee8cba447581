from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime
from enum import Enum

from app.models.achievement import BadgeType, SideEffectFailure

class ReviewUrgency(str, Enum):
    OVERDUE = "overdue"
    TODAY = "today"
    SOON = "soon"          # within 3 days
    SCHEDULED = "scheduled"

class StudySessionCreate(BaseModel):
    theme: str = Field(..., min_length=1)
    content: str = ""
    total_questions: int = Field(..., gt=0)
    correct_questions: int = Field(..., ge=0)
    session_date: date

    @field_validator("theme")
    @classmethod
    def theme_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("theme must not be blank")
        return value

    @field_validator("session_date")
    @classmethod
    def not_in_future(cls, value: date) -> date:
        if value > date.today():
            raise ValueError("session_date cannot be in the future")
        return value

    @model_validator(mode="after")
    def correct_within_total(self):
        if self.correct_questions > self.total_questions:
            raise ValueError("correct_questions cannot exceed total_questions")
        return self

class StudySessionResponse(BaseModel):
    id: str
    user_id: str
    theme: str
    content: Optional[str] = None
    total_questions: int
    correct_questions: int
    accuracy_percentage: float
    session_date: date
    created_at: Optional[datetime] = None

class ScheduledReviewResponse(BaseModel):
    id: str
    user_id: str
    study_session_id: str
    theme: str
    review_date: date
    is_completed: bool = False
    was_rescheduled: bool = False
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

class PendingReview(ScheduledReviewResponse):
    urgency: ReviewUrgency
    days_until: int

class RescheduleRequest(BaseModel):
    review_date: date

class CalendarEventRequest(BaseModel):
    provider_token: str
    start_time: Optional[datetime] = None
    duration_minutes: int = Field(60, gt=0, le=24 * 60)

class SessionRecorded(BaseModel):
    session: StudySessionResponse
    review: ScheduledReviewResponse
    points_awarded: int = 0
    new_badges: List[BadgeType] = []
    side_effect_failures: List[SideEffectFailure] = []

class ReviewCompleted(BaseModel):
    review: ScheduledReviewResponse
    points_awarded: int = 0
    new_badges: List[BadgeType] = []
    side_effect_failures: List[SideEffectFailure] = []

class ThemeSummary(BaseModel):
    theme: str
    session_count: int
    average_accuracy: float
    lowest_accuracy: float
    last_session_date: date

class ThemeOverview(BaseModel):
    total_sessions: int
    average_accuracy: float
    unique_themes: int
    themes: List[ThemeSummary]

class ThemeDeleted(BaseModel):
    theme: str
    sessions_deleted: int
    reviews_deleted: int
