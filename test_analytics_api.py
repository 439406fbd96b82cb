import time
from datetime import timedelta

from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.services.analytics import AnalyticsService
from app.utils.dates import get_utc_now_naive


def test_user_analytics_payload(client, user, make_quiz, add_result, user_headers):
    now = get_utc_now_naive()
    quiz_a = make_quiz(topic="Python", questions=10)
    quiz_b = make_quiz(topic="History", questions=5)
    add_result(user, quiz_a, 8, 10, 120, now - timedelta(seconds=30))
    add_result(user, quiz_a, 9, 10, 90, now - timedelta(seconds=20))
    add_result(user, quiz_b, 5, 5, 60, now - timedelta(seconds=10))

    response = client.get("/analytics/user", headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["stats"]["total_quizzes_taken"] == 2
    assert body["stats"]["total_attempts"] == 3
    assert body["stats"]["average_score"] == 90.0
    assert body["stats"]["best_score"] == 100.0
    assert body["stats"]["total_time_spent"] == 270
    assert body["stats"]["quizzes_this_week"] == 2
    assert [t["topic"] for t in body["topic_performance"]] == ["History", "Python"]
    assert body["recent_results"][0]["topic"] == "History"
    assert body["streak_data"]["total_active_days"] >= 1
    assert set(body) == {
        "stats",
        "topic_performance",
        "recent_results",
        "progress_over_time",
        "streak_data",
        "success",
    }


def test_user_analytics_for_new_user(client, user_headers):
    response = client.get("/analytics/user", headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["stats"]["total_attempts"] == 0
    assert body["stats"]["last_attempt"] is None
    assert body["recent_results"] == []
    assert body["streak_data"] == {
        "current_streak": 0,
        "longest_streak": 0,
        "total_active_days": 0,
    }


def test_user_analytics_requires_login(client):
    response = client.get("/analytics/user")

    assert response.status_code == 401


def test_store_failure_returns_retrieval_error(client, user_headers, monkeypatch):
    def broken(self, user_id, now=None):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    monkeypatch.setattr(AnalyticsService, "get_user_stats", broken)

    response = client.get("/analytics/user", headers=user_headers)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to fetch analytics data",
        "type": "retrieval_error",
    }


def test_slow_analytics_times_out(client, user_headers, monkeypatch):
    def slow(self, user_id):
        time.sleep(0.5)

    monkeypatch.setattr(AnalyticsService, "get_user_analytics", slow)
    monkeypatch.setattr(settings, "analytics_timeout_seconds", 0.05)

    response = client.get("/analytics/user", headers=user_headers)

    assert response.status_code == 500
    assert response.json()["type"] == "retrieval_error"


def test_platform_analytics_is_admin_only(client, user_headers, admin_headers):
    assert client.get("/analytics/admin", headers=user_headers).status_code == 403

    response = client.get("/analytics/admin", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["users"]["total_users"] == 1
    assert body["quizzes"]["total_quizzes"] == 0


def test_admin_user_list(client, user, make_quiz, add_result, admin_headers):
    add_result(user, make_quiz(), 1, 2)

    response = client.get("/admin/users", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total_count"] == 1
    assert body["users"][0]["name"] == "Alice"
    assert body["users"][0]["status"] == "Active"


def test_admin_user_activity(client, user, make_quiz, add_result, admin_headers):
    add_result(user, make_quiz(topic="Python", questions=4), 3, 4, 30)

    response = client.get(f"/admin/users/{user.id}/activity", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == user.id
    assert body["stats"]["total_attempts"] == 1
    assert body["stats"]["avg_score"] == 75.0
    assert body["topics"] == [{"topic": "Python", "attempts": 1, "avg_score": 75.0}]


def test_admin_user_activity_unknown_user(client, admin_headers):
    response = client.get("/admin/users/999/activity", headers=admin_headers)

    assert response.status_code == 404


def test_admin_views_reject_regular_users(client, user, user_headers):
    assert client.get("/admin/users", headers=user_headers).status_code == 403
    assert (
        client.get(f"/admin/users/{user.id}/activity", headers=user_headers).status_code
        == 403
    )


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
