from datetime import date

import pytest

from app.services.scoring import (
    accuracy_percentage, review_due_date, session_points, review_points, badge_points
)


@pytest.mark.parametrize("accuracy", [0.0, 25.0, 59.9, 59.999])
def test_low_accuracy_reviews_in_five_days(accuracy):
    assert review_due_date(date(2024, 1, 1), accuracy) == date(2024, 1, 6)


@pytest.mark.parametrize("accuracy", [60.0, 80.0, 100.0])
def test_good_accuracy_reviews_in_fifteen_days(accuracy):
    assert review_due_date(date(2024, 1, 1), accuracy) == date(2024, 1, 16)


def test_review_date_crosses_month_end():
    assert review_due_date(date(2024, 2, 20), 90.0) == date(2024, 3, 6)


def test_session_points():
    assert session_points(0) == 10
    assert session_points(55) == 15
    assert session_points(80) == 18
    assert session_points(99.9) == 19
    assert session_points(100) == 20


def test_constant_rewards():
    assert review_points() == 15
    assert badge_points() == 50


def test_accuracy_percentage():
    assert accuracy_percentage(16, 20) == 80.0
    assert accuracy_percentage(0, 7) == 0.0
    assert accuracy_percentage(3, 3) == 100.0
