from datetime import date, timedelta

import pytest
import pydantic

from app.models import UserProgress
from app.schemas.progress import StreakDisplay, StreakResponse

from conftest import auth_headers, make_token


def test_profile_requires_identity(client):
    resp = client.get("/api/profile")
    assert resp.status_code == 401
    assert resp.json()["error"] == "not_authenticated"


def test_profile_summary(client, make_user):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    make_user(
        total_points=120,
        current_streak=[yesterday, 3],
        coding_questions_attempted=5,
        technical_questions_attempted=2,
        fundamental_questions_attempted=1,
    )

    resp = client.get("/api/profile", headers=auth_headers("user-1"))
    body = resp.json()

    assert resp.status_code == 200
    assert body["total_points"] == 120
    assert body["current_streak"] == [yesterday, 3]
    assert body["streak"]["status"] == "pending"
    assert body["streak"]["display_streak"] == 3
    assert body["total_questions_attempted"] == 8
    assert body["counters"]["coding_questions_attempted"] == 5


def test_award_points_endpoint(client, make_user):
    make_user(total_points=10)

    resp = client.post("/api/progress/points", json={"points": 25}, headers=auth_headers("user-1"))

    assert resp.status_code == 200
    assert resp.json()["previous_points"] == 10
    assert resp.json()["new_total"] == 35


def test_award_points_validation(client, make_user):
    make_user()

    resp = client.post("/api/progress/points", json={"points": 0}, headers=auth_headers("user-1"))
    assert resp.status_code == 422


def test_streak_endpoint_is_idempotent_per_day(client, make_user):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    make_user(current_streak=[yesterday, 5])
    headers = auth_headers("user-1")

    first = client.post("/api/progress/streak", headers=headers).json()
    second = client.post("/api/progress/streak", headers=headers).json()

    assert first["previous_streak"] == 5
    assert first["current_streak"] == 6
    assert first["action"] == "incremented"
    assert second["action"] == "no_change"
    assert second["current_streak"] == 6


def test_streak_endpoint_profile_missing(client):
    resp = client.post("/api/progress/streak", headers=auth_headers("ghost"))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_counter_endpoint(client, make_user, db):
    make_user(aptitude_questions_attempted=2)

    resp = client.post("/api/progress/counters/aptitude_questions_attempted", headers=auth_headers("user-1"))

    assert resp.status_code == 200
    assert resp.json()["previous_count"] == 2
    assert resp.json()["current_count"] == 3
    db.expire_all()
    assert db.get(UserProgress, "user-1").aptitude_questions_attempted == 3


def test_counter_endpoint_rejects_unknown_column(client, make_user, db):
    make_user(total_points=50)

    resp = client.post("/api/progress/counters/total_points", headers=auth_headers("user-1"))

    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"
    assert "coding_questions_attempted" in resp.json()["allowed_columns"]
    db.expire_all()
    assert db.get(UserProgress, "user-1").total_points == 50


def test_cookie_token_and_email_fallback(client, make_user):
    make_user(user_id="legacy-id", email="learner@example.com", coding_questions_attempted=1)
    token = make_token("fresh-auth-id", email="learner@example.com")

    client.cookies.set("supabase-access-token", token)
    resp = client.post("/api/progress/counters/coding_questions_attempted")
    client.cookies.clear()

    assert resp.status_code == 200
    assert resp.json()["user_id"] == "legacy-id"
    assert resp.json()["current_count"] == 2


def test_streak_schemas_reject_unknown_values():
    with pytest.raises(pydantic.ValidationError):
        StreakResponse(message="x", previous_streak=0, current_streak=1, action="doubled")
    with pytest.raises(pydantic.ValidationError):
        StreakDisplay(status="frozen", display_streak=0, streak_length=0)

    assert StreakResponse(message="x", previous_streak=1, current_streak=2, action="incremented")
