"""
Application initialization module
Handles initial setup tasks like creating the default admin account
"""

import logging

from sqlalchemy.orm import Session

from app.core.authorization import UserRole
from app.core.config import settings
from app.core.hasher import PasswordHelper
from app.models.user import User

logger = logging.getLogger(__name__)


def init_super_admin(db: Session) -> None:
    """
    Initialize an admin user if none exists.

    Checks whether any user holds the admin role. If not, creates one
    using credentials from settings (config.py).

    Args:
        db: Database session
    """
    try:
        existing_admin = db.query(User).filter(User.role == UserRole.ADMIN).first()

        if existing_admin:
            logger.info(
                f"✅ Admin user already exists (ID: {existing_admin.id}, Email: {existing_admin.email})"
            )
            return

        email = settings.admin_default_email.lower()
        user = db.query(User).filter(User.email == email).first()
        if user:
            # Promote the account that already owns the bootstrap email
            user.role = UserRole.ADMIN
        else:
            user = User(
                full_name=settings.admin_default_name,
                email=email,
                hashed_password=PasswordHelper.hash_password(
                    settings.admin_default_password
                ),
                role=UserRole.ADMIN,
            )
            db.add(user)

        db.commit()
        db.refresh(user)

        logger.info("=" * 60)
        logger.info("🎉 ADMIN ACCOUNT CREATED SUCCESSFULLY!")
        logger.info("=" * 60)
        logger.info(f"Email: {user.email}")
        logger.warning("⚠️  IMPORTANT: Change the default password immediately!")
        logger.info("=" * 60)

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
