from typing import Callable, Dict, List, Set

from app.models.achievement import BadgeDefinition, BadgeType, UserStats

BADGE_DEFINITIONS: Dict[BadgeType, BadgeDefinition] = {
    BadgeType.FIRST_SESSION: BadgeDefinition(
        type=BadgeType.FIRST_SESSION, name="First Step",
        description="Complete your first study session", icon="🎯", color="bg-blue-500",
    ),
    BadgeType.SESSIONS_10: BadgeDefinition(
        type=BadgeType.SESSIONS_10, name="Dedication",
        description="Complete 10 study sessions", icon="📚", color="bg-green-500",
    ),
    BadgeType.SESSIONS_50: BadgeDefinition(
        type=BadgeType.SESSIONS_50, name="Persistence",
        description="Complete 50 study sessions", icon="🔥", color="bg-orange-500",
    ),
    BadgeType.SESSIONS_100: BadgeDefinition(
        type=BadgeType.SESSIONS_100, name="Master",
        description="Complete 100 study sessions", icon="👑", color="bg-purple-500",
    ),
    BadgeType.REVIEWS_5: BadgeDefinition(
        type=BadgeType.REVIEWS_5, name="Reviewer",
        description="Complete 5 reviews", icon="🔄", color="bg-blue-500",
    ),
    BadgeType.REVIEWS_10: BadgeDefinition(
        type=BadgeType.REVIEWS_10, name="Seasoned Reviewer",
        description="Complete 10 reviews", icon="⭐", color="bg-yellow-500",
    ),
    BadgeType.REVIEWS_25: BadgeDefinition(
        type=BadgeType.REVIEWS_25, name="Review Master",
        description="Complete 25 reviews", icon="🏆", color="bg-red-500",
    ),
    BadgeType.THEMES_5: BadgeDefinition(
        type=BadgeType.THEMES_5, name="Explorer",
        description="Study 5 different themes", icon="🌍", color="bg-indigo-500",
    ),
    BadgeType.THEMES_10: BadgeDefinition(
        type=BadgeType.THEMES_10, name="Polymath",
        description="Study 10 different themes", icon="🧠", color="bg-pink-500",
    ),
    BadgeType.STREAK_7: BadgeDefinition(
        type=BadgeType.STREAK_7, name="Week on Fire",
        description="7 consecutive days of study", icon="🔥", color="bg-orange-500",
    ),
    BadgeType.STREAK_30: BadgeDefinition(
        type=BadgeType.STREAK_30, name="Month of Dedication",
        description="30 consecutive days of study", icon="💪", color="bg-red-500",
    ),
    BadgeType.STREAK_100: BadgeDefinition(
        type=BadgeType.STREAK_100, name="Legend",
        description="100 consecutive days of study", icon="🌟", color="bg-purple-500",
    ),
    BadgeType.PERFECT_SESSION: BadgeDefinition(
        type=BadgeType.PERFECT_SESSION, name="Perfection",
        description="A session with 100% correct answers", icon="✨", color="bg-yellow-500",
    ),
    BadgeType.IMPROVEMENT: BadgeDefinition(
        type=BadgeType.IMPROVEMENT, name="Evolution",
        description="Significant performance improvement", icon="📈", color="bg-green-500",
    ),
}

# Evaluated in this order; IMPROVEMENT has no rule and is never granted here
BADGE_RULES: Dict[BadgeType, Callable[[UserStats], bool]] = {
    BadgeType.FIRST_SESSION: lambda s: s.total_sessions == 1,
    BadgeType.SESSIONS_10: lambda s: s.total_sessions >= 10,
    BadgeType.SESSIONS_50: lambda s: s.total_sessions >= 50,
    BadgeType.SESSIONS_100: lambda s: s.total_sessions >= 100,
    BadgeType.REVIEWS_5: lambda s: s.total_reviews >= 5,
    BadgeType.REVIEWS_10: lambda s: s.total_reviews >= 10,
    BadgeType.REVIEWS_25: lambda s: s.total_reviews >= 25,
    BadgeType.THEMES_5: lambda s: s.total_themes >= 5,
    BadgeType.THEMES_10: lambda s: s.total_themes >= 10,
    BadgeType.STREAK_7: lambda s: s.current_streak >= 7,
    BadgeType.STREAK_30: lambda s: s.current_streak >= 30,
    BadgeType.STREAK_100: lambda s: s.current_streak >= 100,
    BadgeType.PERFECT_SESSION: lambda s: s.has_perfect_session,
}


def evaluate_badges(stats: UserStats) -> Set[BadgeType]:
    """Every badge whose threshold the stats currently meet"""
    return {badge for badge, rule in BADGE_RULES.items() if rule(stats)}


def ordered_badges(badges: Set[BadgeType]) -> List[BadgeType]:
    return [badge for badge in BADGE_RULES if badge in badges]


def badge_name(badge_type: BadgeType) -> str:
    return BADGE_DEFINITIONS[badge_type].name
