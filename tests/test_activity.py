import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.models import DailyActivity, WeeklyActivity
from app.services.activity_service import activity_service, history_stats, parse_history
from app.services.errors import NotFoundError, StoreError, ValidationError

from conftest import auth_headers


ADMIN = {"api_key": "test-admin-key"}


@pytest.fixture()
def seed_today(db):
    db.add_all([
        DailyActivity(uid="user-1", coding_questions_attempted=4, hr_questions_attempted=1),
        DailyActivity(uid="user-2", coding_questions_attempted=1),
        DailyActivity(uid="user-3"),
    ])
    db.commit()


def test_parse_history():
    assert parse_history(None) == []
    assert parse_history("  ") == []
    assert parse_history("3, 0,5") == [3, 0, 5]
    assert parse_history("2,x,4") == [2, 0, 4]


def test_history_stats():
    assert history_stats([3, 0, 5, 2]) == {
        "total": 10,
        "average": 2.5,
        "max": 5,
        "min": 0,
        "days": 4,
        "daily_values": [3, 0, 5, 2],
    }
    assert history_stats([])["days"] == 0
    assert history_stats([1, 1, 2])["average"] == 1.33


def test_record_today_creates_then_increments(db, identity):
    first = activity_service.record_today(db, identity, "coding_questions_attempted")
    second = activity_service.record_today(db, identity, "coding_questions_attempted")

    assert first["action"] == "created_and_incremented"
    assert (first["previous_value"], first["current_value"]) == (0, 1)
    assert second["action"] == "incremented"
    assert (second["previous_value"], second["current_value"]) == (1, 2)

    row = db.get(DailyActivity, "user-1")
    assert row.technical_questions_attempted == 0


def test_record_today_rejects_unlisted_column(db, identity):
    with pytest.raises(ValidationError):
        activity_service.record_today(db, identity, "uid")
    assert db.query(DailyActivity).count() == 0


def test_record_today_store_failure(db, identity, monkeypatch):
    def fail():
        raise SQLAlchemyError("write failed")

    monkeypatch.setattr(db, "commit", fail)
    with pytest.raises(StoreError):
        activity_service.record_today(db, identity, "coding_questions_attempted")


def test_reset_today_all_columns(db, seed_today):
    result = activity_service.reset_today(db)

    assert result["reset_type"] == "all_columns_all_users"
    assert result["total_records_before"] == 3
    assert result["records_updated"] == 3
    assert result["statistics_before_reset"]["coding_questions_attempted"] == {
        "total": 5,
        "max": 4,
        "avg": 1.67,
    }
    db.expire_all()
    assert all(row.coding_questions_attempted == 0 for row in db.query(DailyActivity))
    assert all(row.hr_questions_attempted == 0 for row in db.query(DailyActivity))


def test_reset_today_single_column(db, seed_today):
    result = activity_service.reset_today(db, "coding_questions_attempted")

    assert result["columns_reset"] == ["coding_questions_attempted"]
    assert list(result["statistics_before_reset"]) == ["coding_questions_attempted"]
    db.expire_all()
    assert db.get(DailyActivity, "user-1").coding_questions_attempted == 0
    assert db.get(DailyActivity, "user-1").hr_questions_attempted == 1


def test_reset_today_rejects_unknown_column(db, seed_today):
    with pytest.raises(ValidationError) as exc:
        activity_service.reset_today(db, "total_points")
    assert "coding_questions_attempted" in exc.value.extra["resettable_columns"]


def test_reset_today_without_rows(db):
    result = activity_service.reset_today(db)
    assert result["reset_type"] == "no_records"
    assert result["records_updated"] == 0


def test_get_week(db):
    db.add(WeeklyActivity(uid="user-1", coding_questions_attempted="3,0,5", focus="25,40"))
    db.commit()

    result = activity_service.get_week(db, "user-1")

    assert result["raw_data"]["coding_questions_attempted"] == "3,0,5"
    assert result["raw_data"]["sql_lang_covered"] == ""
    assert result["statistics"]["coding_questions_attempted"]["total"] == 8
    assert result["statistics"]["focus"]["daily_values"] == [25, 40]
    assert result["statistics"]["sql_lang_covered"]["days"] == 0


def test_get_week_missing_user(db):
    with pytest.raises(NotFoundError) as exc:
        activity_service.get_week(db, "nobody")
    assert exc.value.extra["uid"] == "nobody"


def test_reset_week_keeps_focus(db):
    db.add_all([
        WeeklyActivity(uid="user-1", coding_questions_attempted="3,0,5", focus="25"),
        WeeklyActivity(uid="user-2", coding_questions_attempted="1"),
        WeeklyActivity(uid="user-3"),
    ])
    db.commit()

    result = activity_service.reset_week(db)

    coding = result["statistics_before_reset"]["coding_questions_attempted"]
    assert coding == {
        "records_with_data": 2,
        "total_days_tracked": 4,
        "sample_values": ["3,0,5", "1"],
    }
    assert result["records_reset"] == 3
    db.expire_all()
    row = db.get(WeeklyActivity, "user-1")
    assert row.coding_questions_attempted == ""
    assert row.focus == "25"


def test_today_api(client):
    resp = client.post("/api/progress/today/python_lang_covered", headers=auth_headers("user-1"))

    assert resp.status_code == 200
    body = resp.json()
    assert body["current_value"] == 1
    assert body["message"].endswith("(new record created)")


def test_today_api_requires_identity(client):
    resp = client.post("/api/progress/today/python_lang_covered")
    assert resp.status_code == 401


@pytest.mark.parametrize("params", [{}, {"api_key": "wrong"}])
def test_admin_endpoints_require_api_key(client, params):
    assert client.post("/api/activity/today/reset", params=params).status_code == 401
    assert client.get("/api/activity/week/user-1", params=params).status_code == 401
    assert client.post("/api/activity/week/reset", params=params).status_code == 401


def test_reset_today_api(client, seed_today):
    resp = client.post(
        "/api/activity/today/reset",
        params={**ADMIN, "column": "hr_questions_attempted"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["reset_type"] == "single_column_all_users"
    assert body["statistics_before_reset"]["hr_questions_attempted"]["total"] == 1
    assert "timestamp" in body


def test_reset_today_api_bad_column(client):
    resp = client.post("/api/activity/today/reset", params={**ADMIN, "column": "uid"})
    assert resp.status_code == 400


def test_week_api_not_found(client):
    resp = client.get("/api/activity/week/nobody", params=ADMIN)

    assert resp.status_code == 404
    assert resp.json()["uid"] == "nobody"
