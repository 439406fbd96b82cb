from datetime import date, datetime, timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import text

from app.core.decorator import RetrievalError
from app.services.analytics import AnalyticsService
from app.utils.dates import get_utc_now_naive

NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def service(db):
    return AnalyticsService(db, clock=lambda: NOW)


@pytest.fixture
def scenario(user, make_quiz, add_result):
    quiz_a = make_quiz(topic="Python", questions=10)
    quiz_b = make_quiz(topic="History", questions=5)
    add_result(user, quiz_a, 8, 10, 120, NOW - timedelta(hours=3))
    add_result(user, quiz_a, 9, 10, 90, NOW - timedelta(hours=2))
    add_result(user, quiz_b, 5, 5, 60, NOW - timedelta(hours=1))
    return quiz_a, quiz_b


def test_scenario_stats(service, user, scenario):
    stats = service.get_user_stats(user.id, now=NOW)

    assert stats.total_quizzes_taken == 2
    assert stats.total_attempts == 3
    assert stats.average_score == 90.0
    assert stats.best_score == 100.0
    assert stats.total_time_spent == 270
    assert stats.quizzes_this_week == 2
    assert stats.last_attempt == NOW - timedelta(hours=1)


def test_average_is_mean_of_row_percentages(service, user, make_quiz, add_result):
    quiz = make_quiz(questions=3)
    other = make_quiz(questions=1)
    add_result(user, quiz, 2, 3)
    add_result(user, quiz, 1, 3)
    add_result(user, other, 1, 1)

    stats = service.get_user_stats(user.id, now=NOW)

    expected = round((2 / 3 * 100 + 1 / 3 * 100 + 100) / 3, 1)
    assert stats.average_score == expected == 66.7
    assert stats.total_quizzes_taken <= stats.total_attempts


def test_rows_without_questions_are_counted_but_not_averaged(
    service, user, make_quiz, add_result
):
    quiz = make_quiz(questions=10)
    empty = make_quiz(topic="Empty", questions=0)
    add_result(user, quiz, 8, 10, 30)
    add_result(user, empty, 0, 0, 5)

    stats = service.get_user_stats(user.id, now=NOW)

    assert stats.total_attempts == 2
    assert stats.total_time_spent == 35
    assert stats.average_score == 80.0
    assert stats.best_score == 80.0


def test_quizzes_this_week_ignores_older_results(service, user, make_quiz, add_result):
    recent = make_quiz(topic="Python")
    old = make_quiz(topic="History")
    add_result(user, recent, 1, 2, created_at=NOW - timedelta(days=2))
    add_result(user, old, 1, 2, created_at=NOW - timedelta(days=8))

    stats = service.get_user_stats(user.id, now=NOW)

    assert stats.total_quizzes_taken == 2
    assert stats.quizzes_this_week == 1


def test_topic_performance(service, user, scenario):
    topics = service.get_topic_performance(user.id)

    assert [t.topic for t in topics] == ["History", "Python"]
    history, python = topics
    assert history.avg_score == 100.0
    assert history.total_attempts == 1
    assert python.unique_quizzes == 1
    assert python.total_attempts == 2
    assert python.avg_score == 85.0
    assert python.best_score == 90.0
    assert python.total_time == 210

    stats = service.get_user_stats(user.id, now=NOW)
    assert sum(t.total_attempts for t in topics) == stats.total_attempts


def test_recent_results_newest_first_and_limited(service, user, make_quiz, add_result):
    quiz = make_quiz(title="Loops", questions=3)
    for i in range(12):
        add_result(user, quiz, i % 4, 3, created_at=NOW - timedelta(minutes=60 - i))

    recent = service.get_recent_results(user.id)

    assert len(recent) == 10
    timestamps = [r.created_at for r in recent]
    assert timestamps == sorted(timestamps, reverse=True)
    assert recent[0].created_at == NOW - timedelta(minutes=49)
    assert recent[0].quiz_title == "Loops"
    assert recent[0].topic == "Python"
    # 11 % 4 == 3 -> 3/3, 10 % 4 == 2 -> 2/3
    assert recent[0].percentage == 100.0
    assert recent[1].percentage == 66.7


def test_progress_over_time(service, user, make_quiz, add_result):
    quiz_a = make_quiz(topic="Python", questions=10)
    quiz_b = make_quiz(topic="History", questions=5)
    add_result(user, quiz_a, 8, 10, created_at=NOW - timedelta(hours=2))
    add_result(user, quiz_a, 9, 10, created_at=NOW - timedelta(hours=1))
    add_result(user, quiz_b, 5, 5, created_at=NOW - timedelta(days=2))
    add_result(user, quiz_b, 1, 5, created_at=NOW - timedelta(days=40))

    progress = service.get_progress_over_time(user.id, now=NOW)

    assert [p.date for p in progress] == [date(2026, 10, 17), date(2026, 10, 19)]
    assert progress[0].average_score == 100.0
    assert progress[0].attempts == 1
    assert progress[1].average_score == 85.0
    assert progress[1].unique_quizzes == 1
    assert progress[1].attempts == 2


def test_streak_data_from_results(service, user, make_quiz, add_result):
    quiz = make_quiz()
    add_result(user, quiz, 1, 2, created_at=NOW - timedelta(hours=1))
    add_result(user, quiz, 2, 2, created_at=NOW - timedelta(hours=2))
    add_result(user, quiz, 1, 2, created_at=NOW - timedelta(days=1))
    add_result(user, quiz, 1, 2, created_at=NOW - timedelta(days=5))

    streak = service.get_streak_data(user.id, now=NOW)

    assert streak.current_streak == 2
    assert streak.longest_streak == 2
    assert streak.total_active_days == 3


def test_user_without_results(service, user):
    analytics = service.get_user_analytics(user.id)

    assert analytics.success is True
    assert analytics.stats.total_attempts == 0
    assert analytics.stats.total_quizzes_taken == 0
    assert analytics.stats.average_score == 0.0
    assert analytics.stats.best_score == 0.0
    assert analytics.stats.total_time_spent == 0
    assert analytics.stats.last_attempt is None
    assert analytics.topic_performance == []
    assert analytics.recent_results == []
    assert analytics.progress_over_time == []
    assert analytics.streak_data.current_streak == 0
    assert analytics.streak_data.longest_streak == 0
    assert analytics.streak_data.total_active_days == 0


def test_analytics_only_sees_own_results(service, user, make_user, scenario, add_result):
    other = make_user(name="Bob")
    add_result(other, scenario[0], 1, 10)

    analytics = service.get_user_analytics(user.id)

    assert analytics.stats.total_attempts == 3
    assert len(analytics.recent_results) == 3


def test_analytics_is_idempotent(service, user, scenario):
    assert service.get_user_analytics(user.id) == service.get_user_analytics(user.id)


def test_unparseable_timestamp_fails_whole_request(service, db, user, make_quiz):
    quiz = make_quiz()
    db.execute(
        text(
            "INSERT INTO results (user_id, quiz_id, score, total_questions, "
            "time_taken, created_at) VALUES (:user_id, :quiz_id, 1, 2, 10, 'yesterday')"
        ),
        {"user_id": user.id, "quiz_id": quiz.id},
    )
    db.commit()

    with pytest.raises(RetrievalError) as exc_info:
        service.get_user_analytics(user.id)

    assert exc_info.value.status_code == 500
    assert exc_info.value.to_content() == {
        "success": False,
        "error": "Failed to fetch analytics data",
        "type": "retrieval_error",
    }


def test_platform_analytics(db, make_user, make_quiz, add_result, admin):
    alice = make_user(name="Alice")
    bob = make_user(name="Bob")
    python = make_quiz(topic="Python", source="AI", status="published", questions=10)
    history = make_quiz(topic="History", source="manual", status="pending", questions=4)
    make_quiz(topic="Art", source="manual", status="rejected")

    now = get_utc_now_naive()
    add_result(alice, python, 8, 10, 100, now - timedelta(minutes=5))
    add_result(alice, history, 3, 4, 50, now - timedelta(minutes=4))
    add_result(bob, python, 10, 10, 70, now - timedelta(minutes=3))
    add_result(bob, history, 0, 0, 5, now - timedelta(minutes=2))

    data = AnalyticsService(db).get_platform_analytics()

    assert data.users.total_users == 2
    assert data.users.active_users == 2
    assert data.users.new_users_week == 2

    assert data.quizzes.total_quizzes == 3
    assert data.quizzes.ai_quizzes == 1
    assert data.quizzes.manual_quizzes == 2
    assert data.quizzes.pending_quizzes == 1
    assert data.quizzes.published_quizzes == 1
    assert data.quizzes.rejected_quizzes == 1

    assert data.attempts.total_attempts == 3
    assert data.attempts.unique_quizzes_taken == 2
    assert data.attempts.unique_users == 2
    assert data.attempts.platform_avg_score == 85.0
    assert data.attempts.total_time_spent == 220
    assert data.attempts.total_correct_answers == 21
    assert data.attempts.total_questions_answered == 24
    assert data.attempts.accuracy_rate == 87.5

    assert [t.topic for t in data.popular_topics] == ["Python", "History"]
    assert data.popular_topics[0].attempt_count == 2

    assert sum(day.attempts for day in data.recent_activity) == 4
    assert sum(day.new_users for day in data.user_growth) == 2
    assert [u.name for u in data.top_users] == ["Bob", "Alice"]
    assert data.top_users[0].avg_score == 100.0
    assert data.top_users[1].avg_score == 77.5


def test_platform_analytics_on_empty_platform(db):
    data = AnalyticsService(db).get_platform_analytics()

    assert data.success is True
    assert data.users.total_users == 0
    assert data.attempts.total_attempts == 0
    assert data.attempts.accuracy_rate == 0.0
    assert data.popular_topics == []
    assert data.top_users == []


def test_all_users_overview(db, make_user, make_quiz, add_result, admin):
    alice = make_user(name="Alice")
    make_user(name="Carol")
    quiz = make_quiz(questions=4)
    add_result(alice, quiz, 3, 4)
    add_result(alice, quiz, 4, 4)

    overview = AnalyticsService(db).get_all_users()

    assert overview.total_count == 2
    by_name = {u.name: u for u in overview.users}
    assert set(by_name) == {"Alice", "Carol"}
    assert by_name["Alice"].status == "Active"
    assert by_name["Alice"].total_attempts == 2
    assert by_name["Alice"].avg_score == 87.5
    assert by_name["Carol"].status == "Inactive"
    assert by_name["Carol"].total_attempts == 0
    assert by_name["Carol"].last_activity is None


def test_user_activity(service, user, scenario):
    activity = service.get_user_activity(user.id)

    assert activity.user.name == "Alice"
    assert activity.stats.total_attempts == 3
    assert activity.stats.unique_quizzes == 2
    assert activity.stats.avg_score == 90.0
    assert activity.stats.first_activity == NOW - timedelta(hours=3)
    assert activity.stats.last_activity == NOW - timedelta(hours=1)
    assert [a.topic for a in activity.attempts] == ["History", "Python", "Python"]
    assert [(t.topic, t.attempts) for t in activity.topics] == [
        ("Python", 2),
        ("History", 1),
    ]


def test_user_activity_for_missing_user(service):
    with pytest.raises(HTTPException) as exc_info:
        service.get_user_activity(999)

    assert exc_info.value.status_code == 404
