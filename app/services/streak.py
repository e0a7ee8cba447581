from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class StreakTransition:
    current_streak: int
    longest_streak: int
    last_study_date: Optional[date]
    changed: bool


def advance_streak(
    current_streak: int,
    longest_streak: int,
    last_study_date: Optional[date],
    activity_date: date,
) -> StreakTransition:
    """Apply one day of study activity to a streak record.

    Consecutive days extend the streak, same-day activity keeps it and a gap
    of more than one day starts over at 1. Activity dated before the last
    recorded day is ignored.
    """
    if last_study_date is None:
        new_streak = 1
    else:
        gap = (activity_date - last_study_date).days
        if gap < 0:
            return StreakTransition(current_streak, longest_streak, last_study_date, changed=False)
        if gap == 0:
            new_streak = max(current_streak, 1)
        elif gap == 1:
            new_streak = current_streak + 1
        else:
            new_streak = 1

    new_longest = max(longest_streak, new_streak)
    changed = (
        new_streak != current_streak
        or new_longest != longest_streak
        or activity_date != last_study_date
    )
    return StreakTransition(new_streak, new_longest, activity_date, changed)
