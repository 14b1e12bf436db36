"""Tests for the SM-2 scheduler and due classification."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from practice_core.errors import InvalidGradeError
from practice_core.schemas import ScheduleState
from practice_core.scheduling import (
    MIN_EASE_FACTOR,
    ReviewGrade,
    is_due,
    next_state,
    validate_grade,
)

NOW = datetime(2024, 3, 6, 15, 30, tzinfo=timezone.utc)


def test_first_exposure_easy():
    state = next_state(ReviewGrade.EASY, None, NOW)
    assert state.interval == 1.0
    assert state.repetition == 1
    assert state.ease_factor == pytest.approx(2.6)
    assert state.due_date == NOW + timedelta(days=1)
    assert state.status == "learning"


def test_first_exposure_failed_is_due_same_day():
    state = next_state(ReviewGrade.AGAIN, None, NOW)
    assert state.interval == 0.0
    assert state.repetition == 0
    assert state.ease_factor == pytest.approx(1.7)
    assert state.due_date == NOW


def test_passing_grades_grow_interval():
    first = next_state(4, None, NOW)
    second = next_state(4, first, NOW)
    third = next_state(4, second, NOW)
    assert [first.interval, second.interval, third.interval] == [1.0, 6.0, 15.0]
    assert third.repetition == 3
    assert third.ease_factor == pytest.approx(2.5)


def test_hard_pass_lowers_ease():
    state = next_state(ReviewGrade.HARD, None, NOW)
    assert state.interval == 1.0
    assert state.ease_factor == pytest.approx(2.36)


def test_failure_resets_streak():
    previous = ScheduleState(interval=15, repetition=3, ease_factor=2.5)
    state = next_state(ReviewGrade.WRONG, previous, NOW)
    assert state.interval == 0.0
    assert state.repetition == 0
    assert state.ease_factor < 2.5


def test_ease_factor_floor():
    previous = ScheduleState(interval=0, repetition=0, ease_factor=MIN_EASE_FACTOR)
    state = next_state(ReviewGrade.AGAIN, previous, NOW)
    assert state.ease_factor == MIN_EASE_FACTOR


def test_status_follows_interval():
    previous = ScheduleState(interval=12, repetition=2, ease_factor=2.5)
    assert next_state(4, previous, NOW).status == "mastered"
    previous = ScheduleState(interval=6, repetition=2, ease_factor=2.5)
    assert next_state(4, previous, NOW).status == "learned"


def test_integral_float_grade_accepted():
    assert next_state(4.0, None, NOW) == next_state(4, None, NOW)


def test_deterministic():
    previous = ScheduleState(interval=6, repetition=2, ease_factor=2.2)
    assert next_state(3, previous, NOW) == next_state(3, previous, NOW)


@pytest.mark.parametrize("grade", [-1, 6, 2.5, math.nan, math.inf, "5", None, True])
def test_invalid_grades_rejected(grade):
    with pytest.raises(InvalidGradeError):
        next_state(grade, None, NOW)


def test_invalid_grade_is_value_error():
    with pytest.raises(ValueError):
        validate_grade(7, "unit-1")


@pytest.mark.parametrize("previous", [
    None,
    ScheduleState(interval=0, repetition=0, ease_factor=1.3),
    ScheduleState(interval=1, repetition=1, ease_factor=2.5),
    ScheduleState(interval=40, repetition=6, ease_factor=2.9,
                  due_date=datetime(2020, 1, 1, tzinfo=timezone.utc)),
])
def test_due_date_never_before_now(previous):
    for grade in range(0, 6):
        assert next_state(grade, previous, NOW).due_date >= NOW


# ---- Due classification ----

def test_missing_state_not_due():
    assert is_due(None, NOW) is False


def test_missing_due_date_not_due():
    assert is_due(ScheduleState(interval=3), NOW) is False


def test_unparseable_due_date_not_due():
    state = ScheduleState.model_validate({"interval": 3, "dueDate": "someday"})
    assert is_due(state, NOW) is False


def test_past_due_date_is_due():
    state = ScheduleState.model_validate({"interval": 7, "dueDate": "2024-01-01"})
    assert is_due(state, datetime(2024, 1, 5, tzinfo=timezone.utc)) is True


def test_later_today_is_due():
    state = ScheduleState(interval=1, due_date=datetime(2024, 3, 6, 23, 59, tzinfo=timezone.utc))
    assert is_due(state, NOW) is True


def test_tomorrow_not_due():
    state = ScheduleState(interval=1, due_date=datetime(2024, 3, 7, 0, 0, tzinfo=timezone.utc))
    assert is_due(state, NOW) is False
