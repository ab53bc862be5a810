from datetime import date, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.models import UserProgress
from app.services.errors import NotFoundError, StoreError
from app.services.streak_service import streak_service, StreakState
from app.utils.identity import Identity


TODAY = date(2024, 1, 2)


def test_first_activity_starts_streak():
    update = streak_service.next_state(TODAY, StreakState())
    assert update.action == "started"
    assert update.current == StreakState(TODAY, 1)


def test_consecutive_day_increments():
    update = streak_service.next_state(TODAY, StreakState(date(2024, 1, 1), 5))
    assert update.action == "incremented"
    assert update.current.streak_length == 6
    assert update.current.last_update_date == TODAY


@pytest.mark.parametrize("gap_days", [2, 3, 30, 400])
def test_gap_resets_to_one(gap_days):
    update = streak_service.next_state(TODAY, StreakState(TODAY - timedelta(days=gap_days), 9))
    assert update.action == "reset"
    assert update.current == StreakState(TODAY, 1)


def test_future_last_date_resets():
    update = streak_service.next_state(TODAY, StreakState(TODAY + timedelta(days=1), 4))
    assert update.action == "reset"
    assert update.current.streak_length == 1


@pytest.mark.parametrize("prior", [StreakState(), StreakState(date(2023, 12, 31), 3), StreakState(date(2024, 1, 1), 7)])
def test_second_call_same_day_is_no_change(prior):
    first = streak_service.next_state(TODAY, prior)
    second = streak_service.next_state(TODAY, first.current)
    assert second.action == "no_change"
    assert second.current == first.current
    assert not second.changed


def test_month_boundary_counts_as_consecutive():
    update = streak_service.next_state(date(2024, 3, 1), StreakState(date(2024, 2, 29), 2))
    assert update.action == "incremented"


def test_column_round_trip_and_never_started_state():
    assert StreakState.from_column(None) == StreakState()
    assert StreakState.from_column([None, 0]) == StreakState()
    assert StreakState.from_column(0) == StreakState()
    assert StreakState.from_column(["not-a-date", 3]) == StreakState()
    assert StreakState.from_column(["2024-01-01", 5]) == StreakState(date(2024, 1, 1), 5)
    assert StreakState().to_column() == [None, 0]
    assert StreakState(date(2024, 1, 1), 5).to_column() == ["2024-01-01", 5]


def test_display_status():
    assert streak_service.display_status(TODAY, StreakState()) == ("none", 0)
    assert streak_service.display_status(TODAY, StreakState(TODAY, 4)) == ("active", 4)
    assert streak_service.display_status(TODAY, StreakState(date(2024, 1, 1), 4)) == ("pending", 4)
    assert streak_service.display_status(TODAY, StreakState(date(2023, 12, 25), 4)) == ("broken", 0)


def test_update_streak_end_to_end(db, make_user, identity):
    make_user(current_streak=["2024-01-01", 5])

    update = streak_service.update_streak(db, identity, today=TODAY)
    assert update.previous.streak_length == 5
    assert update.current.streak_length == 6
    assert update.action == "incremented"

    again = streak_service.update_streak(db, identity, today=TODAY)
    assert again.action == "no_change"
    assert again.current.streak_length == 6

    db.expire_all()
    assert db.get(UserProgress, "user-1").current_streak == ["2024-01-02", 6]


def test_update_streak_unknown_user(db):
    with pytest.raises(NotFoundError):
        streak_service.update_streak(db, Identity(user_id="ghost"), today=TODAY)


def test_update_streak_store_failure_leaves_state(db, make_user, identity, monkeypatch):
    make_user(current_streak=["2024-01-01", 5])

    def fail():
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(db, "commit", fail)
    with pytest.raises(StoreError):
        streak_service.update_streak(db, identity, today=TODAY)
    monkeypatch.undo()

    db.expire_all()
    assert db.get(UserProgress, "user-1").current_streak == ["2024-01-01", 5]
