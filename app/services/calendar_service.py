import logging
from typing import Dict, Optional
from datetime import datetime, time, timedelta, timezone

import httpx

from app.core.config import settings
from app.core.errors import CalendarError
from app.models.study import ScheduledReviewResponse

logger = logging.getLogger(__name__)

DEFAULT_REVIEW_HOUR = 9


class CalendarService:
    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_url = api_url or settings.google_calendar_api_url
        self.timeout = timeout or settings.calendar_timeout_seconds
        self.transport = transport

    def build_event(
        self,
        review: ScheduledReviewResponse,
        start_time: Optional[datetime] = None,
        duration_minutes: int = 60
    ) -> Dict:
        """Google Calendar event body for a scheduled review"""
        if start_time is None:
            start_time = datetime.combine(review.review_date, time(DEFAULT_REVIEW_HOUR), tzinfo=timezone.utc)
        elif start_time.tzinfo is None:
            start_time = start_time.replace(tzinfo=timezone.utc)
        end_time = start_time + timedelta(minutes=duration_minutes)

        return {
            "summary": f"Review: {review.theme}",
            "description": f"Scheduled review of '{review.theme}'",
            "start": {"dateTime": start_time.isoformat()},
            "end": {"dateTime": end_time.isoformat()},
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": 24 * 60},
                    {"method": "popup", "minutes": 30}
                ]
            }
        }

    async def create_review_event(
        self,
        review: ScheduledReviewResponse,
        provider_token: str,
        start_time: Optional[datetime] = None,
        duration_minutes: int = 60
    ) -> Dict:
        if not provider_token:
            raise CalendarError("Google token not found. Sign in with Google again.", status_code=400)

        event = self.build_event(review, start_time, duration_minutes)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.api_url,
                    json=event,
                    headers={"Authorization": f"Bearer {provider_token}"}
                )
        except httpx.HTTPError as e:
            logger.error(f"Google Calendar request failed: {e}")
            raise CalendarError(f"Google Calendar unreachable: {e}")

        if response.status_code >= 400:
            message = response.reason_phrase
            try:
                error = response.json().get("error")
            except ValueError:
                error = None
            if isinstance(error, dict):
                message = error.get("message") or message
            elif error:
                message = str(error)
            logger.error(f"Google Calendar API error {response.status_code}: {message}")
            raise CalendarError(f"Google Calendar API error: {message}")

        logger.info(f"Calendar event created for review {review.id}")
        return response.json()
