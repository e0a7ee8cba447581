from fastapi import APIRouter, Depends
from typing import Dict, List
from supabase import Client

from app.models.study import (
    PendingReview, ScheduledReviewResponse, ReviewCompleted, RescheduleRequest,
    CalendarEventRequest
)
from app.core.security import verify_token
from app.core.database import get_database
from app.services.study_service import StudyService
from app.services.calendar_service import CalendarService

router = APIRouter()
calendar_service = CalendarService()


@router.get("", response_model=List[PendingReview])
async def get_scheduled_reviews(
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    """Pending reviews, soonest first, with urgency labels"""
    return await StudyService(db, user_id).list_pending_reviews()


@router.post("/{review_id}/complete", response_model=ReviewCompleted)
async def complete_review(
    review_id: str,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await StudyService(db, user_id).complete_review(review_id)


@router.put("/{review_id}/reschedule", response_model=ScheduledReviewResponse)
async def reschedule_review(
    review_id: str,
    reschedule: RescheduleRequest,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    return await StudyService(db, user_id).reschedule_review(review_id, reschedule.review_date)


@router.post("/{review_id}/calendar")
async def add_review_to_calendar(
    review_id: str,
    event_request: CalendarEventRequest,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
) -> Dict:
    """Create a Google Calendar event for a scheduled review"""
    review = await StudyService(db, user_id).get_review(review_id)
    event = await calendar_service.create_review_event(
        review,
        event_request.provider_token,
        start_time=event_request.start_time,
        duration_minutes=event_request.duration_minutes
    )
    return {"event_id": event.get("id"), "html_link": event.get("htmlLink")}
