from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin
from app.models.user import User
from app.schemas.analytics import UserActivity, UserOverviewList
from app.services.analytics import AnalyticsService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=UserOverviewList)
def list_users(
    current_admin: Annotated[User, Depends(get_current_admin)],
    db: Session = Depends(get_db),
):
    """Every learner account with attempt count, last activity and status."""
    return AnalyticsService(db).get_all_users()


@router.get("/users/{user_id}/activity", response_model=UserActivity)
def get_user_activity(
    user_id: int,
    current_admin: Annotated[User, Depends(get_current_admin)],
    db: Session = Depends(get_db),
):
    return AnalyticsService(db).get_user_activity(user_id)
