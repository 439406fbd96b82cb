from datetime import date, timedelta

from app.services.analytics import calculate_streak

TODAY = date(2026, 10, 19)


def days_ago(n):
    return TODAY - timedelta(days=n)


def as_tuple(streak):
    return (streak.current_streak, streak.longest_streak, streak.total_active_days)


def test_no_activity():
    assert as_tuple(calculate_streak([], TODAY)) == (0, 0, 0)


def test_only_today():
    assert as_tuple(calculate_streak([TODAY], TODAY)) == (1, 1, 1)


def test_single_day_in_the_past():
    assert as_tuple(calculate_streak([days_ago(3)], TODAY)) == (0, 1, 1)


def test_today_and_a_gap():
    assert as_tuple(calculate_streak([TODAY, days_ago(5)], TODAY)) == (1, 1, 2)


def test_run_ending_before_today():
    dates = [days_ago(n) for n in range(3, 13)]
    assert as_tuple(calculate_streak(dates, TODAY)) == (0, 10, 10)


def test_yesterday_does_not_count_as_current():
    dates = [days_ago(1), days_ago(2)]
    assert as_tuple(calculate_streak(dates, TODAY)) == (0, 2, 2)


def test_current_run_shorter_than_longest():
    dates = [TODAY, days_ago(1)] + [days_ago(n) for n in range(10, 15)]
    assert as_tuple(calculate_streak(dates, TODAY)) == (2, 5, 7)


def test_duplicate_and_unordered_dates():
    dates = [days_ago(2), TODAY, days_ago(1), TODAY, days_ago(2)]
    assert as_tuple(calculate_streak(dates, TODAY)) == (3, 3, 3)


def test_same_input_gives_same_result():
    dates = [TODAY, days_ago(1), days_ago(4), days_ago(5), days_ago(6)]
    assert calculate_streak(dates, TODAY) == calculate_streak(dates, TODAY)
    assert calculate_streak(dates, TODAY) == calculate_streak(
        list(reversed(dates)), TODAY
    )
