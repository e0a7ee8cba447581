import logging
from typing import List, Dict
from datetime import date, datetime, timezone
from supabase import Client

from app.core.errors import AuthenticationError, ConflictError, NotFoundError
from app.models.achievement import BadgeType, PointsSource, SideEffectFailure
from app.models.study import (
    StudySessionCreate, StudySessionResponse, ScheduledReviewResponse, PendingReview,
    ReviewUrgency, SessionRecorded, ReviewCompleted, ThemeSummary, ThemeOverview,
    ThemeDeleted
)
from app.services.gamification_service import (
    GamificationService, PointsLedgerError, record_failure
)
from app.services.scoring import accuracy_percentage, review_due_date, session_points, review_points

logger = logging.getLogger(__name__)

SOON_WINDOW_DAYS = 3


def review_urgency(review_date: date, today: date) -> ReviewUrgency:
    days_until = (review_date - today).days
    if days_until < 0:
        return ReviewUrgency.OVERDUE
    if days_until == 0:
        return ReviewUrgency.TODAY
    if days_until <= SOON_WINDOW_DAYS:
        return ReviewUrgency.SOON
    return ReviewUrgency.SCHEDULED


class StudyService:
    def __init__(self, db: Client, user_id: str):
        if not user_id:
            raise AuthenticationError("User not authenticated")
        self.db = db
        self.user_id = user_id
        self.gamification = GamificationService(db, user_id)

    async def record_session(self, session_input: StudySessionCreate) -> SessionRecorded:
        """Store a study session, schedule its review and run the rewards chain.

        Only the session and review inserts can fail the call. Points, streak
        and badges are best-effort and any failure is reported back in
        ``side_effect_failures``.
        """
        accuracy = accuracy_percentage(session_input.correct_questions, session_input.total_questions)

        session_result = self.db.table("study_sessions").insert({
            "user_id": self.user_id,
            "theme": session_input.theme,
            "content": session_input.content,
            "total_questions": session_input.total_questions,
            "correct_questions": session_input.correct_questions,
            "accuracy_percentage": accuracy,
            "session_date": session_input.session_date.isoformat()
        }).execute()
        session = StudySessionResponse(**session_result.data[0])

        review_result = self.db.table("scheduled_reviews").insert({
            "user_id": self.user_id,
            "study_session_id": session.id,
            "theme": session.theme,
            "review_date": review_due_date(session.session_date, accuracy).isoformat()
        }).execute()
        review = ScheduledReviewResponse(**review_result.data[0])

        logger.info(
            f"Session {session.id} recorded for user {self.user_id}, review on {review.review_date}"
        )

        failures: List[SideEffectFailure] = []
        points_awarded = 0
        new_badges: List[BadgeType] = []

        points = session_points(accuracy)
        try:
            await self.gamification.add_points(
                points,
                PointsSource.STUDY_SESSION,
                session.id,
                f"Session: {session.theme} ({accuracy:.0f}% correct)"
            )
            points_awarded = points
        except PointsLedgerError as e:
            points_awarded = e.points
            record_failure(failures, "points_history", e)
        except Exception as e:
            record_failure(failures, "points", e)

        try:
            await self.gamification.update_streak(session.session_date)
        except Exception as e:
            record_failure(failures, "streak", e)

        if accuracy == 100:
            try:
                if await self.gamification.check_and_award_badge(
                    BadgeType.PERFECT_SESSION, failures=failures
                ):
                    new_badges.append(BadgeType.PERFECT_SESSION)
            except Exception as e:
                record_failure(failures, "perfect_session", e)

        new_badges.extend(await self._evaluate_badges(failures))

        return SessionRecorded(
            session=session,
            review=review,
            points_awarded=points_awarded,
            new_badges=new_badges,
            side_effect_failures=failures
        )

    async def list_sessions(self) -> List[StudySessionResponse]:
        result = self.db.table("study_sessions").select("*").eq(
            "user_id", self.user_id
        ).order("session_date", desc=True).execute()
        return [StudySessionResponse(**row) for row in result.data or []]

    async def theme_history(self, theme: str) -> List[StudySessionResponse]:
        result = self.db.table("study_sessions").select("*").eq(
            "user_id", self.user_id
        ).eq("theme", theme).order("session_date", desc=True).execute()
        return [StudySessionResponse(**row) for row in result.data or []]

    async def theme_overview(self) -> ThemeOverview:
        """Aggregate per-theme statistics over all of the user's sessions"""
        sessions = await self.list_sessions()

        grouped: Dict[str, List[StudySessionResponse]] = {}
        for session in sessions:
            grouped.setdefault(session.theme, []).append(session)

        themes = []
        for theme, theme_sessions in grouped.items():
            accuracies = [s.accuracy_percentage for s in theme_sessions]
            themes.append(ThemeSummary(
                theme=theme,
                session_count=len(theme_sessions),
                average_accuracy=round(sum(accuracies) / len(accuracies), 2),
                lowest_accuracy=min(accuracies),
                last_session_date=max(s.session_date for s in theme_sessions)
            ))
        themes.sort(key=lambda t: t.last_session_date, reverse=True)

        total = len(sessions)
        average = sum(s.accuracy_percentage for s in sessions) / total if total else 0

        return ThemeOverview(
            total_sessions=total,
            average_accuracy=round(average, 2),
            unique_themes=len(themes),
            themes=themes
        )

    async def delete_theme(self, theme: str) -> ThemeDeleted:
        """Delete every session and review of a theme. Study content is kept."""
        reviews = self.db.table("scheduled_reviews").delete().eq(
            "user_id", self.user_id
        ).eq("theme", theme).execute()

        sessions = self.db.table("study_sessions").delete().eq(
            "user_id", self.user_id
        ).eq("theme", theme).execute()

        logger.info(f"Theme '{theme}' deleted for user {self.user_id}")
        return ThemeDeleted(
            theme=theme,
            sessions_deleted=len(sessions.data or []),
            reviews_deleted=len(reviews.data or [])
        )

    async def list_pending_reviews(self) -> List[PendingReview]:
        result = self.db.table("scheduled_reviews").select("*").eq(
            "user_id", self.user_id
        ).eq("is_completed", False).order("review_date").execute()

        today = date.today()
        pending = []
        for row in result.data or []:
            review = ScheduledReviewResponse(**row)
            pending.append(PendingReview(
                **review.model_dump(),
                urgency=review_urgency(review.review_date, today),
                days_until=(review.review_date - today).days
            ))
        return pending

    async def get_review(self, review_id: str) -> ScheduledReviewResponse:
        result = self.db.table("scheduled_reviews").select("*").eq(
            "id", review_id
        ).eq("user_id", self.user_id).execute()
        if not result.data:
            raise NotFoundError("Review not found")
        return ScheduledReviewResponse(**result.data[0])

    async def complete_review(self, review_id: str) -> ReviewCompleted:
        """Mark a review as done, then award points, streak and badges"""
        review = await self.get_review(review_id)
        if review.is_completed:
            raise ConflictError("Review already completed")

        updated = self.db.table("scheduled_reviews").update({
            "is_completed": True,
            "completed_at": datetime.now(timezone.utc).isoformat()
        }).eq("id", review_id).eq("user_id", self.user_id).execute()
        if updated.data:
            review = ScheduledReviewResponse(**updated.data[0])

        logger.info(f"Review {review_id} completed by user {self.user_id}")

        failures: List[SideEffectFailure] = []
        points_awarded = 0

        try:
            await self.gamification.add_points(
                review_points(),
                PointsSource.REVIEW,
                review_id,
                f"Review: {review.theme}"
            )
            points_awarded = review_points()
        except PointsLedgerError as e:
            points_awarded = e.points
            record_failure(failures, "points_history", e)
        except Exception as e:
            record_failure(failures, "points", e)

        # Completing a review counts as studying today
        try:
            await self.gamification.update_streak(date.today())
        except Exception as e:
            record_failure(failures, "streak", e)

        new_badges = await self._evaluate_badges(failures)

        return ReviewCompleted(
            review=review,
            points_awarded=points_awarded,
            new_badges=new_badges,
            side_effect_failures=failures
        )

    async def reschedule_review(self, review_id: str, review_date: date) -> ScheduledReviewResponse:
        await self.get_review(review_id)

        result = self.db.table("scheduled_reviews").update({
            "review_date": review_date.isoformat(),
            "was_rescheduled": True
        }).eq("id", review_id).eq("user_id", self.user_id).execute()
        if not result.data:
            raise NotFoundError("Review not found")

        return ScheduledReviewResponse(**result.data[0])

    async def _evaluate_badges(self, failures: List[SideEffectFailure]) -> List[BadgeType]:
        try:
            stats = await self.gamification.collect_stats()
            return await self.gamification.check_badges_for_stats(stats, failures)
        except Exception as e:
            record_failure(failures, "badges", e)
            return []
