from .admin import router as admin_router
from .ai import router as ai_router
from .analytics import router as analytics_router
from .auth import router as auth_router
from .quiz import router as quiz_router

routes = [
    auth_router,
    quiz_router,
    ai_router,
    analytics_router,
    admin_router,
]
