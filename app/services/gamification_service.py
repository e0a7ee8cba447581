import logging
from typing import List, Dict, Optional, Any
from datetime import date, datetime, timezone
from supabase import Client

from app.core.errors import AuthenticationError, is_duplicate_error
from app.models.achievement import (
    BadgeType, PointsSource, UserPoints, PointsHistoryEntry, StudyStreak,
    UserBadge, UserStats, SideEffectFailure
)
from app.services.badges import evaluate_badges, ordered_badges, badge_name
from app.services.scoring import badge_points
from app.services.streak import advance_streak

logger = logging.getLogger(__name__)


def record_failure(failures: Optional[List[SideEffectFailure]], step: str, error: Exception):
    """Log a swallowed side-effect error and keep it for the response"""
    logger.error(f"Side effect '{step}' failed: {error}")
    if failures is not None:
        failures.append(SideEffectFailure(step=step, error=str(error)))


class PointsLedgerError(Exception):
    """The running total was credited but the ledger entry was not written"""

    def __init__(self, points: int, cause: Exception):
        super().__init__(f"{points} points credited without a ledger entry: {cause}")
        self.points = points


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class GamificationService:
    def __init__(self, db: Client, user_id: str):
        if not user_id:
            raise AuthenticationError("User not authenticated")
        self.db = db
        self.user_id = user_id

    async def get_user_points(self) -> UserPoints:
        """Get the user's running total, creating the row on first access"""
        result = self.db.table("user_points").select("*").eq("user_id", self.user_id).execute()
        if result.data:
            return UserPoints(**result.data[0])

        try:
            created = self.db.table("user_points").insert({"user_id": self.user_id, "points": 0}).execute()
        except Exception as e:
            if not is_duplicate_error(e):
                raise
            # Created by a concurrent request
            created = self.db.table("user_points").select("*").eq("user_id", self.user_id).execute()
        return UserPoints(**created.data[0]) if created.data else UserPoints(user_id=self.user_id)

    async def add_points(
        self,
        points: int,
        source: PointsSource,
        source_id: Optional[str] = None,
        description: Optional[str] = None
    ) -> int:
        """Add points to the running total and append a ledger entry"""
        existing = self.db.table("user_points").select("*").eq("user_id", self.user_id).execute()

        if existing.data:
            new_total = existing.data[0].get("points", 0) + points
            self.db.table("user_points").update({
                "points": new_total,
                "updated_at": _now()
            }).eq("user_id", self.user_id).execute()
        else:
            new_total = points
            self.db.table("user_points").insert({
                "user_id": self.user_id,
                "points": new_total
            }).execute()

        try:
            self.db.table("points_history").insert({
                "user_id": self.user_id,
                "points": points,
                "source": source.value,
                "source_id": source_id,
                "description": description
            }).execute()
        except Exception as e:
            raise PointsLedgerError(points, e) from e

        logger.info(f"Awarded {points} points to user {self.user_id} ({source.value})")
        return new_total

    async def get_points_history(self, limit: int = 20) -> List[PointsHistoryEntry]:
        result = self.db.table("points_history").select("*").eq(
            "user_id", self.user_id
        ).order("created_at", desc=True).limit(limit).execute()
        return [PointsHistoryEntry(**row) for row in result.data or []]

    async def get_user_streak(self) -> StudyStreak:
        """Get the user's streak, creating an empty one on first access"""
        result = self.db.table("study_streaks").select("*").eq("user_id", self.user_id).execute()
        if result.data:
            return StudyStreak(**result.data[0])

        try:
            created = self.db.table("study_streaks").insert({
                "user_id": self.user_id,
                "current_streak": 0,
                "longest_streak": 0,
                "last_study_date": None
            }).execute()
        except Exception as e:
            if not is_duplicate_error(e):
                raise
            created = self.db.table("study_streaks").select("*").eq("user_id", self.user_id).execute()
        return StudyStreak(**created.data[0]) if created.data else StudyStreak(user_id=self.user_id)

    async def update_streak(self, activity_date: date) -> StudyStreak:
        """Register study activity on a given day.

        Read-modify-write without a guard: two devices posting at the same
        moment can lose one update.
        """
        streak = await self.get_user_streak()
        transition = advance_streak(
            streak.current_streak,
            streak.longest_streak,
            streak.last_study_date,
            activity_date
        )

        if not transition.changed:
            return streak

        result = self.db.table("study_streaks").upsert({
            "user_id": self.user_id,
            "current_streak": transition.current_streak,
            "longest_streak": transition.longest_streak,
            "last_study_date": transition.last_study_date.isoformat(),
            "updated_at": _now()
        }, on_conflict="user_id").execute()

        if result.data:
            return StudyStreak(**result.data[0])
        return StudyStreak(
            user_id=self.user_id,
            current_streak=transition.current_streak,
            longest_streak=transition.longest_streak,
            last_study_date=transition.last_study_date
        )

    async def get_user_badges(self) -> List[UserBadge]:
        result = self.db.table("user_badges").select("*").eq(
            "user_id", self.user_id
        ).order("earned_at", desc=True).execute()
        return [UserBadge(**row) for row in result.data or []]

    async def check_and_award_badge(
        self,
        badge_type: BadgeType,
        metadata: Optional[Dict[str, Any]] = None,
        failures: Optional[List[SideEffectFailure]] = None
    ) -> bool:
        """Grant a badge unless the user already has it"""
        existing = self.db.table("user_badges").select("id").eq(
            "user_id", self.user_id
        ).eq("badge_type", badge_type.value).execute()
        if existing.data:
            return False

        return await self._award_badge(badge_type, metadata, failures)

    async def check_badges_for_stats(
        self,
        stats: UserStats,
        failures: Optional[List[SideEffectFailure]] = None
    ) -> List[BadgeType]:
        """Grant every badge the stats qualify for that the user doesn't hold yet"""
        earned = {badge.badge_type for badge in await self.get_user_badges()}
        candidates = ordered_badges(evaluate_badges(stats) - earned)

        new_badges = []
        for badge_type in candidates:
            try:
                if await self._award_badge(badge_type, failures=failures):
                    new_badges.append(badge_type)
            except Exception as e:
                record_failure(failures, f"badge:{badge_type.value}", e)

        return new_badges

    async def _award_badge(
        self,
        badge_type: BadgeType,
        metadata: Optional[Dict[str, Any]] = None,
        failures: Optional[List[SideEffectFailure]] = None
    ) -> bool:
        try:
            result = self.db.table("user_badges").insert({
                "user_id": self.user_id,
                "badge_type": badge_type.value,
                "metadata": metadata or {}
            }).execute()
        except Exception as e:
            if is_duplicate_error(e):
                # Granted by a concurrent request between check and insert
                logger.debug(f"Badge {badge_type.value} already granted to user {self.user_id}")
                return False
            raise

        logger.info(f"Badge {badge_type.value} granted to user {self.user_id}")
        badge_id = result.data[0].get("id") if result.data else None

        try:
            await self.add_points(
                badge_points(),
                PointsSource.BADGE,
                badge_id,
                f"Badge: {badge_name(badge_type)}"
            )
        except Exception as e:
            record_failure(failures, f"badge_points:{badge_type.value}", e)

        return True

    async def collect_stats(self) -> UserStats:
        """Recompute the badge statistics snapshot from storage"""
        sessions = self.db.table("study_sessions").select(
            "theme, accuracy_percentage"
        ).eq("user_id", self.user_id).execute()
        sessions_data = sessions.data or []

        reviews = self.db.table("scheduled_reviews").select("id").eq(
            "user_id", self.user_id
        ).eq("is_completed", True).execute()

        streak = self.db.table("study_streaks").select("current_streak").eq(
            "user_id", self.user_id
        ).execute()
        current_streak = streak.data[0].get("current_streak", 0) if streak.data else 0

        return UserStats(
            total_sessions=len(sessions_data),
            total_reviews=len(reviews.data or []),
            total_themes=len({session["theme"] for session in sessions_data}),
            current_streak=current_streak or 0,
            has_perfect_session=any(
                float(session.get("accuracy_percentage") or 0) == 100 for session in sessions_data
            )
        )
