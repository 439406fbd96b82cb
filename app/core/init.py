"""
Application initialization module
Handles initial setup tasks like creating the default admin account
"""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.hasher import PasswordHelper
from app.models.user import User

logger = logging.getLogger(__name__)


def init_super_admin(db: Session) -> None:
    """
    Create the default admin account if no admin exists yet.

    Credentials come from settings (ADMIN_DEFAULT_*).
    """
    try:
        existing_admin = db.query(User).filter(User.role == "admin").first()

        if existing_admin:
            logger.info(
                f"✅ Admin user already exists (ID: {existing_admin.id}, Email: {existing_admin.email})"
            )
            return

        super_admin = User(
            name=settings.admin_default_name,
            email=settings.admin_default_email,
            hashed_password=PasswordHelper.hash_password(
                settings.admin_default_password
            ),
            role="admin",
        )

        db.add(super_admin)
        db.commit()
        db.refresh(super_admin)

        logger.info("=" * 60)
        logger.info("🎉 ADMIN ACCOUNT CREATED")
        logger.info(f"Email: {settings.admin_default_email}")
        logger.info("=" * 60)
        logger.warning("⚠️  IMPORTANT: Change the default password immediately!")

    except Exception as e:
        logger.error(f"❌ Failed to initialize admin account: {e}")
        db.rollback()
        raise


def initialize_application(db: Session) -> None:
    """
    Run all application initialization tasks.

    Args:
        db: Database session
    """
    logger.info("🚀 Starting application initialization...")

    init_super_admin(db)

    logger.info("✅ Application initialization completed!")
