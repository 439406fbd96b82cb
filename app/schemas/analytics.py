from datetime import date as calendar_date
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================
# User analytics
# ============================================


class UserStats(BaseModel):
    total_quizzes_taken: int = 0
    total_attempts: int = 0
    average_score: float = 0.0
    total_time_spent: int = 0
    last_attempt: Optional[datetime] = None
    best_score: float = 0.0
    quizzes_this_week: int = 0


class TopicPerformance(BaseModel):
    topic: str
    unique_quizzes: int
    total_attempts: int
    avg_score: float
    best_score: float
    total_time: int


class RecentResult(BaseModel):
    id: int
    quiz_id: int
    quiz_title: str
    topic: str
    score: int
    total_questions: int
    percentage: float
    time_taken: int
    created_at: datetime


class ProgressPoint(BaseModel):
    date: calendar_date
    average_score: float
    unique_quizzes: int
    attempts: int


class StreakData(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    total_active_days: int = 0


class UserAnalytics(BaseModel):
    stats: UserStats
    topic_performance: List[TopicPerformance] = Field(default_factory=list)
    recent_results: List[RecentResult] = Field(default_factory=list)
    progress_over_time: List[ProgressPoint] = Field(default_factory=list)
    streak_data: StreakData
    success: bool = True


# ============================================
# Platform (admin) analytics
# ============================================


class UserCounts(BaseModel):
    total_users: int
    active_users: int
    new_users_week: int


class QuizCounts(BaseModel):
    total_quizzes: int
    ai_quizzes: int
    manual_quizzes: int
    pending_quizzes: int
    published_quizzes: int
    rejected_quizzes: int


class AttemptTotals(BaseModel):
    total_attempts: int
    unique_quizzes_taken: int
    unique_users: int
    platform_avg_score: float
    total_time_spent: int
    total_correct_answers: int
    total_questions_answered: int
    accuracy_rate: float


class PopularTopic(BaseModel):
    topic: str
    unique_quizzes: int
    attempt_count: int
    avg_score: float


class DailyActivity(BaseModel):
    date: calendar_date
    attempts: int
    unique_users: int
    unique_quizzes: int


class DailySignups(BaseModel):
    date: calendar_date
    new_users: int


class TopUser(BaseModel):
    id: int
    name: str
    email: str
    total_attempts: int
    avg_score: float
    best_score: float
    total_time: int


class PlatformAnalytics(BaseModel):
    users: UserCounts
    quizzes: QuizCounts
    attempts: AttemptTotals
    popular_topics: List[PopularTopic] = Field(default_factory=list)
    recent_activity: List[DailyActivity] = Field(default_factory=list)
    user_growth: List[DailySignups] = Field(default_factory=list)
    top_users: List[TopUser] = Field(default_factory=list)
    success: bool = True


# ============================================
# Admin user views
# ============================================


class UserOverview(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime
    total_attempts: int
    last_activity: Optional[datetime] = None
    avg_score: float
    status: str  # Active, Inactive


class UserOverviewList(BaseModel):
    users: List[UserOverview]
    total_count: int
    success: bool = True


class ActivityUser(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime


class ActivityStats(BaseModel):
    total_attempts: int
    unique_quizzes: int
    avg_score: float
    best_score: float
    total_time: int
    first_activity: Optional[datetime] = None
    last_activity: Optional[datetime] = None


class TopicAttempts(BaseModel):
    topic: str
    attempts: int
    avg_score: float


class UserActivity(BaseModel):
    user: ActivityUser
    stats: ActivityStats
    attempts: List[RecentResult] = Field(default_factory=list)
    topics: List[TopicAttempts] = Field(default_factory=list)
    success: bool = True
