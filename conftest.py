"""
Shared fixtures: an in-memory SQLite database, a TestClient and helpers to
create users, quizzes and results with explicit timestamps.
"""

import os

os.environ.update(
    {
        "DATABASE_URL": "sqlite://",
        "DEBUG": "false",
        "LOG_LEVEL": "warning",
        "PASSWORD_HASH_ROUNDS": "4",
        "LOGIN_RATE_LIMIT": "1000/minute",
        "HEALTH_RATE_LIMIT": "1000/minute",
        "AI_API_KEY": "",
        "AI_API_ENDPOINT": "",
        "AI_MODEL": "",
    }
)

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.hasher import PasswordHelper
from app.core.security import jwt_manager
from app.models import Question, Quiz, Result, User
from main import app

FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(name=None, role="user", password="secret123", created_at=None):
        counter["n"] += 1
        name = name or f"Learner {counter['n']}"
        user = User(
            name=name,
            email=f"{role}{counter['n']}@example.com",
            hashed_password=PasswordHelper.hash_password(password),
            role=role,
        )
        if created_at is not None:
            user.created_at = created_at
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_quiz(db):
    def _make_quiz(
        topic="Python",
        title=None,
        source="manual",
        status="published",
        created_by=None,
        questions=2,
    ):
        quiz = Quiz(
            title=title or f"{topic} basics",
            topic=topic,
            difficulty="medium",
            source=source,
            status=status,
            is_public=status == "published",
            created_by=created_by,
        )
        for i in range(questions):
            quiz.questions.append(
                Question(
                    question_text=f"{topic} question {i + 1}?",
                    options=["right", "wrong", "other"],
                    correct_answer="right",
                )
            )
        db.add(quiz)
        db.commit()
        db.refresh(quiz)
        return quiz

    return _make_quiz


@pytest.fixture
def add_result(db):
    def _add_result(user, quiz, score, total, time_taken=0, created_at=None):
        result = Result(
            user_id=user.id,
            quiz_id=quiz.id,
            score=score,
            total_questions=total,
            time_taken=time_taken,
            created_at=created_at or FIXED_NOW - timedelta(hours=1),
        )
        db.add(result)
        db.commit()
        db.refresh(result)
        return result

    return _add_result


@pytest.fixture
def user(make_user):
    return make_user(name="Alice")


@pytest.fixture
def admin(make_user):
    return make_user(name="Admin", role="admin")


def auth_headers(user):
    return {"Authorization": f"Bearer {jwt_manager.create_access_token(user)}"}


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def headers_for():
    return auth_headers
