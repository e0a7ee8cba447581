import asyncio

from app.models.achievement import BadgeType, UserStats
from app.services.badges import BADGE_DEFINITIONS, evaluate_badges, ordered_badges
from app.services.gamification_service import GamificationService
from conftest import USER_ID


def test_catalog_covers_every_badge():
    assert set(BADGE_DEFINITIONS) == set(BadgeType)
    assert len(BADGE_DEFINITIONS) == 14


def test_no_stats_no_badges():
    assert evaluate_badges(UserStats()) == set()


def test_first_session_only_on_exactly_one():
    assert BadgeType.FIRST_SESSION in evaluate_badges(UserStats(total_sessions=1))
    assert BadgeType.FIRST_SESSION not in evaluate_badges(UserStats(total_sessions=2))


def test_thresholds():
    stats = UserStats(
        total_sessions=50, total_reviews=10, total_themes=5,
        current_streak=30, has_perfect_session=True
    )
    assert evaluate_badges(stats) == {
        BadgeType.SESSIONS_10, BadgeType.SESSIONS_50,
        BadgeType.REVIEWS_5, BadgeType.REVIEWS_10,
        BadgeType.THEMES_5,
        BadgeType.STREAK_7, BadgeType.STREAK_30,
        BadgeType.PERFECT_SESSION,
    }


def test_improvement_is_never_evaluated():
    stats = UserStats(
        total_sessions=1000, total_reviews=1000, total_themes=1000,
        current_streak=1000, has_perfect_session=True
    )
    assert BadgeType.IMPROVEMENT not in evaluate_badges(stats)


def test_ordered_badges_follow_catalog_order():
    badges = {BadgeType.STREAK_7, BadgeType.FIRST_SESSION, BadgeType.REVIEWS_5}
    assert ordered_badges(badges) == [BadgeType.FIRST_SESSION, BadgeType.REVIEWS_5, BadgeType.STREAK_7]


def test_same_stats_grant_each_badge_once(fake_db):
    service = GamificationService(fake_db, USER_ID)
    stats = UserStats(total_sessions=10, current_streak=7)

    first = asyncio.run(service.check_badges_for_stats(stats))
    second = asyncio.run(service.check_badges_for_stats(stats))

    assert first == [BadgeType.SESSIONS_10, BadgeType.STREAK_7]
    assert second == []
    assert len(fake_db.rows("user_badges", user_id=USER_ID)) == 2
    # 50 points per badge, credited once
    assert fake_db.rows("user_points", user_id=USER_ID)[0]["points"] == 100


def test_duplicate_insert_counts_as_already_granted(fake_db):
    fake_db.fail_on("user_badges", "insert", code="23505")
    service = GamificationService(fake_db, USER_ID)
    failures = []

    awarded = asyncio.run(service.check_and_award_badge(BadgeType.PERFECT_SESSION, failures=failures))

    assert awarded is False
    assert failures == []
    assert fake_db.rows("points_history") == []


def test_one_failed_badge_does_not_block_the_rest(fake_db):
    fake_db.fail_on("user_badges", "insert", badge_type="10_reviews")
    service = GamificationService(fake_db, USER_ID)
    failures = []

    awarded = asyncio.run(service.check_badges_for_stats(
        UserStats(total_reviews=10, current_streak=7), failures
    ))

    assert awarded == [BadgeType.REVIEWS_5, BadgeType.STREAK_7]
    assert [f.step for f in failures] == ["badge:10_reviews"]
    assert {row["badge_type"] for row in fake_db.rows("user_badges")} == {"5_reviews", "streak_7"}


def test_badge_kept_when_points_fail(fake_db):
    fake_db.fail_on("points_history", "insert")
    service = GamificationService(fake_db, USER_ID)
    failures = []

    awarded = asyncio.run(service.check_and_award_badge(BadgeType.STREAK_7, failures=failures))

    assert awarded is True
    assert len(fake_db.rows("user_badges", badge_type="streak_7")) == 1
    assert [f.step for f in failures] == ["badge_points:streak_7"]
