import os
from datetime import datetime, timedelta, timezone

import pytest


# Settings are read at import time; configure before the app is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "100000")
os.environ.setdefault("RATE_LIMIT_PER_HOUR", "100000")

from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import UserProgress, CodingQuestion  # noqa: E402
from app.utils.identity import Identity  # noqa: E402


TEST_SECRET = os.environ["SUPABASE_JWT_SECRET"]


def make_token(sub, email=None, expires_in=3600, secret=TEST_SECRET, audience="authenticated"):
    claims = {
        "sub": sub,
        "aud": audience,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(sub, email=None):
    return {"Authorization": f"Bearer {make_token(sub, email)}"}


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def _make_user(user_id="user-1", email="learner@example.com", **fields):
        user = UserProgress(id=user_id, email=email, total_points=fields.pop("total_points", 0), **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture()
def identity():
    return Identity(user_id="user-1", email="learner@example.com")


@pytest.fixture()
def seed_questions(db):
    def _seed(count, model=CodingQuestion):
        db.add_all([
            model(id=n, question=f"Question {n}", answer=f"Approach {n}")
            for n in range(1, count + 1)
        ])
        db.commit()
    return _seed
