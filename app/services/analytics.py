import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import Float, case, cast, distinct, func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import retrieval_guard
from app.models.quiz import Quiz
from app.models.result import Result
from app.models.user import User
from app.schemas.analytics import (
    ActivityStats,
    ActivityUser,
    AttemptTotals,
    DailyActivity,
    DailySignups,
    PlatformAnalytics,
    PopularTopic,
    ProgressPoint,
    QuizCounts,
    RecentResult,
    StreakData,
    TopicAttempts,
    TopicPerformance,
    TopUser,
    UserActivity,
    UserAnalytics,
    UserCounts,
    UserOverview,
    UserOverviewList,
    UserStats,
)
from app.utils.dates import get_utc_now_naive, to_date

logger = logging.getLogger(__name__)

# Percentage score of one attempt. NULL when the attempt had no questions,
# so AVG/MAX skip it while COUNT/SUM still see the row.
percentage_expr = case(
    (
        Result.total_questions > 0,
        cast(Result.score, Float) * 100.0 / Result.total_questions,
    ),
    else_=None,
)

attempt_day = func.date(Result.created_at)


def round_percentage(value) -> float:
    """Round a percentage to one decimal place; missing values become 0."""
    if value is None:
        return 0.0
    return round(float(value), 1)


def calculate_streak(activity_dates: Iterable[date], today: date) -> StreakData:
    """
    Derive streak figures from the calendar days a user was active.

    current_streak counts consecutive days ending today (0 if today has no
    activity). longest_streak is the longest run of consecutive days over the
    whole history.
    """
    dates = sorted(set(activity_dates), reverse=True)
    if not dates:
        return StreakData()

    present = set(dates)
    current_streak = 0
    expected = today
    while expected in present:
        current_streak += 1
        expected -= timedelta(days=1)

    longest_streak = 0
    current_run = 1
    for i in range(1, len(dates)):
        if (dates[i - 1] - dates[i]).days == 1:
            current_run += 1
        else:
            longest_streak = max(longest_streak, current_run)
            current_run = 1
    longest_streak = max(longest_streak, current_run)

    return StreakData(
        current_streak=current_streak,
        longest_streak=longest_streak,
        total_active_days=len(dates),
    )


class AnalyticsService:
    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or get_utc_now_naive

    # ============================================
    # User analytics
    # ============================================

    @retrieval_guard("Failed to fetch analytics data")
    def get_user_analytics(self, user_id: int) -> UserAnalytics:
        """
        Compose every analytics section for one user.

        All sections share the same "now" so the payload is consistent. Any
        failure aborts the whole composition.
        """
        logger.info(f"Fetching analytics for user: {user_id}")
        now = self.clock()

        return UserAnalytics(
            stats=self.get_user_stats(user_id, now=now),
            topic_performance=self.get_topic_performance(user_id),
            recent_results=self.get_recent_results(user_id),
            progress_over_time=self.get_progress_over_time(user_id, now=now),
            streak_data=self.get_streak_data(user_id, now=now),
            success=True,
        )

    def get_user_stats(self, user_id: int, now: Optional[datetime] = None) -> UserStats:
        now = now or self.clock()

        row = (
            self.db.query(
                func.count(distinct(Result.quiz_id)).label("total_quizzes_taken"),
                func.count(Result.id).label("total_attempts"),
                func.avg(percentage_expr).label("average_score"),
                func.max(percentage_expr).label("best_score"),
                func.sum(Result.time_taken).label("total_time_spent"),
                func.max(Result.created_at).label("last_attempt"),
            )
            .filter(Result.user_id == user_id)
            .one()
        )

        quizzes_this_week = (
            self.db.query(func.count(distinct(Result.quiz_id)))
            .filter(
                Result.user_id == user_id,
                Result.created_at >= now - timedelta(days=7),
                Result.created_at <= now,
            )
            .scalar()
        )

        return UserStats(
            total_quizzes_taken=int(row.total_quizzes_taken or 0),
            total_attempts=int(row.total_attempts or 0),
            average_score=round_percentage(row.average_score),
            total_time_spent=int(row.total_time_spent or 0),
            last_attempt=row.last_attempt,
            best_score=round_percentage(row.best_score),
            quizzes_this_week=int(quizzes_this_week or 0),
        )

    def get_topic_performance(self, user_id: int) -> List[TopicPerformance]:
        rows = (
            self.db.query(
                Quiz.topic,
                func.count(distinct(Result.quiz_id)).label("unique_quizzes"),
                func.count(Result.id).label("total_attempts"),
                func.avg(percentage_expr).label("avg_score"),
                func.max(percentage_expr).label("best_score"),
                func.sum(Result.time_taken).label("total_time"),
            )
            .select_from(Result)
            .join(Quiz, Result.quiz_id == Quiz.id)
            .filter(Result.user_id == user_id)
            .group_by(Quiz.topic)
            .order_by(Quiz.topic)
            .all()
        )

        topics = [
            TopicPerformance(
                topic=row.topic,
                unique_quizzes=int(row.unique_quizzes),
                total_attempts=int(row.total_attempts),
                avg_score=round_percentage(row.avg_score),
                best_score=round_percentage(row.best_score),
                total_time=int(row.total_time or 0),
            )
            for row in rows
        ]
        # Stable sort: equal averages keep the query order
        topics.sort(key=lambda t: t.avg_score, reverse=True)
        return topics

    def get_recent_results(
        self, user_id: int, limit: Optional[int] = None
    ) -> List[RecentResult]:
        limit = limit or settings.analytics_recent_limit

        rows = (
            self.db.query(Result, Quiz.title, Quiz.topic)
            .join(Quiz, Result.quiz_id == Quiz.id)
            .filter(Result.user_id == user_id)
            .order_by(Result.created_at.desc(), Result.id.desc())
            .limit(limit)
            .all()
        )
        return [
            self._to_recent_result(result, title, topic)
            for result, title, topic in rows
        ]

    def get_progress_over_time(
        self,
        user_id: int,
        days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[ProgressPoint]:
        days = days or settings.analytics_progress_days
        now = now or self.clock()

        rows = (
            self.db.query(
                attempt_day.label("attempt_date"),
                func.avg(percentage_expr).label("daily_avg_score"),
                func.count(distinct(Result.quiz_id)).label("daily_unique_quizzes"),
                func.count(Result.id).label("daily_attempts"),
            )
            .filter(
                Result.user_id == user_id,
                Result.created_at >= now - timedelta(days=days),
            )
            .group_by(attempt_day)
            .order_by(attempt_day)
            .all()
        )

        return [
            ProgressPoint(
                date=to_date(row.attempt_date),
                average_score=round_percentage(row.daily_avg_score),
                unique_quizzes=int(row.daily_unique_quizzes),
                attempts=int(row.daily_attempts),
            )
            for row in rows
        ]

    def get_streak_data(self, user_id: int, now: Optional[datetime] = None) -> StreakData:
        now = now or self.clock()

        rows = (
            self.db.query(distinct(attempt_day))
            .filter(Result.user_id == user_id)
            .all()
        )
        # to_date raises on malformed values; a skipped day would corrupt the streaks
        dates = [to_date(row[0]) for row in rows]
        return calculate_streak(dates, now.date())

    # ============================================
    # Platform analytics (admin)
    # ============================================

    @retrieval_guard("Failed to fetch admin analytics")
    def get_platform_analytics(self) -> PlatformAnalytics:
        """
        Get overall platform analytics.
        """
        now = self.clock()
        week_ago = now - timedelta(days=7)
        month_ago = now - timedelta(days=30)

        total_users = self.db.query(User).filter(User.role == "user").count()
        active_users = (
            self.db.query(func.count(distinct(Result.user_id)))
            .filter(Result.created_at >= month_ago)
            .scalar()
        )
        new_users_week = (
            self.db.query(User)
            .filter(User.role == "user", User.created_at >= week_ago)
            .count()
        )

        quiz_row = self.db.query(
            func.count(Quiz.id).label("total_quizzes"),
            func.sum(case((Quiz.source == "AI", 1), else_=0)).label("ai_quizzes"),
            func.sum(case((Quiz.source == "manual", 1), else_=0)).label("manual_quizzes"),
            func.sum(case((Quiz.status == "pending", 1), else_=0)).label("pending_quizzes"),
            func.sum(case((Quiz.status == "published", 1), else_=0)).label(
                "published_quizzes"
            ),
            func.sum(case((Quiz.status == "rejected", 1), else_=0)).label(
                "rejected_quizzes"
            ),
        ).one()

        attempt_row = (
            self.db.query(
                func.count(Result.id).label("total_attempts"),
                func.count(distinct(Result.quiz_id)).label("unique_quizzes_taken"),
                func.count(distinct(Result.user_id)).label("unique_users"),
                func.avg(percentage_expr).label("platform_avg_score"),
                func.sum(Result.time_taken).label("total_time_spent"),
                func.sum(Result.score).label("total_correct_answers"),
                func.sum(Result.total_questions).label("total_questions_answered"),
            )
            .filter(Result.total_questions > 0)
            .one()
        )
        total_correct = int(attempt_row.total_correct_answers or 0)
        total_answered = int(attempt_row.total_questions_answered or 0)

        popular_rows = (
            self.db.query(
                Quiz.topic,
                func.count(distinct(Result.quiz_id)).label("unique_quizzes"),
                func.count(Result.id).label("attempt_count"),
                func.avg(percentage_expr).label("avg_score"),
            )
            .select_from(Result)
            .join(Quiz, Result.quiz_id == Quiz.id)
            .filter(Result.total_questions > 0)
            .group_by(Quiz.topic)
            .order_by(func.count(Result.id).desc(), Quiz.topic)
            .limit(10)
            .all()
        )

        activity_rows = (
            self.db.query(
                attempt_day.label("activity_date"),
                func.count(Result.id).label("daily_attempts"),
                func.count(distinct(Result.user_id)).label("daily_users"),
                func.count(distinct(Result.quiz_id)).label("daily_quizzes"),
            )
            .filter(Result.created_at >= week_ago)
            .group_by(attempt_day)
            .order_by(attempt_day.desc())
            .all()
        )

        signup_day = func.date(User.created_at)
        growth_rows = (
            self.db.query(
                signup_day.label("signup_date"),
                func.count(User.id).label("new_users"),
            )
            .filter(User.role == "user", User.created_at >= month_ago)
            .group_by(signup_day)
            .order_by(signup_day)
            .all()
        )

        top_rows = (
            self.db.query(
                User.id,
                User.name,
                User.email,
                func.count(Result.id).label("total_attempts"),
                func.avg(percentage_expr).label("avg_score"),
                func.max(percentage_expr).label("best_score"),
                func.sum(Result.time_taken).label("total_time"),
            )
            .join(Result, Result.user_id == User.id)
            .filter(User.role == "user")
            .group_by(User.id, User.name, User.email)
            .order_by(func.coalesce(func.avg(percentage_expr), 0).desc(), User.id)
            .limit(10)
            .all()
        )

        return PlatformAnalytics(
            users=UserCounts(
                total_users=total_users,
                active_users=int(active_users or 0),
                new_users_week=new_users_week,
            ),
            quizzes=QuizCounts(
                total_quizzes=int(quiz_row.total_quizzes or 0),
                ai_quizzes=int(quiz_row.ai_quizzes or 0),
                manual_quizzes=int(quiz_row.manual_quizzes or 0),
                pending_quizzes=int(quiz_row.pending_quizzes or 0),
                published_quizzes=int(quiz_row.published_quizzes or 0),
                rejected_quizzes=int(quiz_row.rejected_quizzes or 0),
            ),
            attempts=AttemptTotals(
                total_attempts=int(attempt_row.total_attempts or 0),
                unique_quizzes_taken=int(attempt_row.unique_quizzes_taken or 0),
                unique_users=int(attempt_row.unique_users or 0),
                platform_avg_score=round_percentage(attempt_row.platform_avg_score),
                total_time_spent=int(attempt_row.total_time_spent or 0),
                total_correct_answers=total_correct,
                total_questions_answered=total_answered,
                accuracy_rate=(
                    round_percentage(total_correct / total_answered * 100)
                    if total_answered
                    else 0.0
                ),
            ),
            popular_topics=[
                PopularTopic(
                    topic=row.topic,
                    unique_quizzes=int(row.unique_quizzes),
                    attempt_count=int(row.attempt_count),
                    avg_score=round_percentage(row.avg_score),
                )
                for row in popular_rows
            ],
            recent_activity=[
                DailyActivity(
                    date=to_date(row.activity_date),
                    attempts=int(row.daily_attempts),
                    unique_users=int(row.daily_users),
                    unique_quizzes=int(row.daily_quizzes),
                )
                for row in activity_rows
            ],
            user_growth=[
                DailySignups(date=to_date(row.signup_date), new_users=int(row.new_users))
                for row in growth_rows
            ],
            top_users=[
                TopUser(
                    id=row.id,
                    name=row.name,
                    email=row.email,
                    total_attempts=int(row.total_attempts),
                    avg_score=round_percentage(row.avg_score),
                    best_score=round_percentage(row.best_score),
                    total_time=int(row.total_time or 0),
                )
                for row in top_rows
            ],
            success=True,
        )

    @retrieval_guard("Failed to fetch users")
    def get_all_users(self) -> UserOverviewList:
        rows = (
            self.db.query(
                User,
                func.count(Result.id).label("total_attempts"),
                func.max(Result.created_at).label("last_activity"),
                func.avg(percentage_expr).label("avg_score"),
            )
            .outerjoin(Result, Result.user_id == User.id)
            .filter(User.role == "user")
            .group_by(User.id)
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

        users = [
            UserOverview(
                id=user.id,
                name=user.name,
                email=user.email,
                role=user.role,
                created_at=user.created_at,
                total_attempts=int(total_attempts),
                last_activity=last_activity,
                avg_score=round_percentage(avg_score),
                status="Active" if last_activity else "Inactive",
            )
            for user, total_attempts, last_activity, avg_score in rows
        ]
        return UserOverviewList(users=users, total_count=len(users), success=True)

    @retrieval_guard("Failed to fetch user activity")
    def get_user_activity(self, user_id: int, limit: int = 50) -> UserActivity:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
            )

        rows = (
            self.db.query(Result, Quiz.title, Quiz.topic)
            .join(Quiz, Result.quiz_id == Quiz.id)
            .filter(Result.user_id == user_id)
            .order_by(Result.created_at.desc(), Result.id.desc())
            .limit(limit)
            .all()
        )

        stats_row = (
            self.db.query(
                func.count(Result.id).label("total_attempts"),
                func.count(distinct(Result.quiz_id)).label("unique_quizzes"),
                func.avg(percentage_expr).label("avg_score"),
                func.max(percentage_expr).label("best_score"),
                func.sum(Result.time_taken).label("total_time"),
                func.min(Result.created_at).label("first_activity"),
                func.max(Result.created_at).label("last_activity"),
            )
            .filter(Result.user_id == user_id)
            .one()
        )

        topic_rows = (
            self.db.query(
                Quiz.topic,
                func.count(Result.id).label("attempts"),
                func.avg(percentage_expr).label("avg_score"),
            )
            .select_from(Result)
            .join(Quiz, Result.quiz_id == Quiz.id)
            .filter(Result.user_id == user_id)
            .group_by(Quiz.topic)
            .order_by(func.count(Result.id).desc(), Quiz.topic)
            .all()
        )

        return UserActivity(
            user=ActivityUser(
                id=user.id,
                name=user.name,
                email=user.email,
                created_at=user.created_at,
            ),
            stats=ActivityStats(
                total_attempts=int(stats_row.total_attempts or 0),
                unique_quizzes=int(stats_row.unique_quizzes or 0),
                avg_score=round_percentage(stats_row.avg_score),
                best_score=round_percentage(stats_row.best_score),
                total_time=int(stats_row.total_time or 0),
                first_activity=stats_row.first_activity,
                last_activity=stats_row.last_activity,
            ),
            attempts=[
                self._to_recent_result(result, title, topic)
                for result, title, topic in rows
            ],
            topics=[
                TopicAttempts(
                    topic=row.topic,
                    attempts=int(row.attempts),
                    avg_score=round_percentage(row.avg_score),
                )
                for row in topic_rows
            ],
            success=True,
        )

    # ============================================
    # Helpers
    # ============================================

    @staticmethod
    def _to_recent_result(result: Result, title: str, topic: str) -> RecentResult:
        percentage = (
            result.score * 100.0 / result.total_questions
            if result.total_questions
            else None
        )
        return RecentResult(
            id=result.id,
            quiz_id=result.quiz_id,
            quiz_title=title,
            topic=topic,
            score=result.score,
            total_questions=result.total_questions,
            percentage=round_percentage(percentage),
            time_taken=result.time_taken or 0,
            created_at=result.created_at,
        )
