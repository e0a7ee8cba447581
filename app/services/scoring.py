import math
from datetime import date, timedelta

LOW_ACCURACY_THRESHOLD = 60.0
SHORT_REVIEW_INTERVAL_DAYS = 5
LONG_REVIEW_INTERVAL_DAYS = 15

SESSION_BASE_POINTS = 10
REVIEW_POINTS = 15
BADGE_POINTS = 50


def accuracy_percentage(correct_questions: int, total_questions: int) -> float:
    return (correct_questions / total_questions) * 100


def review_due_date(session_date: date, accuracy: float) -> date:
    """Sessions under 60% come back in 5 days, everything else in 15"""
    if accuracy < LOW_ACCURACY_THRESHOLD:
        days = SHORT_REVIEW_INTERVAL_DAYS
    else:
        days = LONG_REVIEW_INTERVAL_DAYS
    return session_date + timedelta(days=days)


def session_points(accuracy: float) -> int:
    """Base 10 plus one point per full 10% of accuracy"""
    return SESSION_BASE_POINTS + math.floor(accuracy / 10)


def review_points() -> int:
    return REVIEW_POINTS


def badge_points() -> int:
    return BADGE_POINTS
