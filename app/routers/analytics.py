import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.decorator import RetrievalError
from app.core.dependencies import get_current_admin, get_current_user
from app.models.user import User
from app.schemas.analytics import PlatformAnalytics, UserAnalytics
from app.services.analytics import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
)


@router.get("/user", response_model=UserAnalytics)
async def get_user_analytics(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    """
    Stats, topic performance, recent results, progress and streaks for the
    calling user. Runs in a worker thread under ANALYTICS_TIMEOUT_SECONDS.
    """
    service = AnalyticsService(db)
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(service.get_user_analytics, current_user.id),
            timeout=settings.analytics_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error(
            f"Analytics for user {current_user.id} exceeded "
            f"{settings.analytics_timeout_seconds}s"
        )
        raise RetrievalError()


@router.get("/admin", response_model=PlatformAnalytics)
def get_platform_analytics(
    current_admin: Annotated[User, Depends(get_current_admin)],
    db: Session = Depends(get_db),
):
    """
    Get platform-wide analytics.
    """
    service = AnalyticsService(db)
    return service.get_platform_analytics()
