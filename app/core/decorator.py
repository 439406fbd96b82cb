import logging
from datetime import datetime
from functools import wraps
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class DBException(Exception):
    error_type = "database_error"

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_content(self) -> dict:
        return {"success": False, "error": self.message, "type": self.error_type}


class RetrievalError(DBException):
    """The result store could not be read, or returned data we cannot parse."""

    error_type = "retrieval_error"

    def __init__(self, message: str = "Failed to fetch analytics data"):
        super().__init__(message, 500)


class DuplicateSubmissionError(DBException):
    """A result for the same user and quiz was stored moments ago."""

    error_type = "duplicate_submission"

    def __init__(self, last_submission: Optional[datetime] = None):
        self.last_submission = last_submission
        super().__init__(
            "You have already submitted this quiz recently. "
            "Please wait before submitting again.",
            429,
        )

    def to_content(self) -> dict:
        content = super().to_content()
        content["duplicate_prevention"] = True
        content["last_submission"] = (
            self.last_submission.isoformat() if self.last_submission else None
        )
        return content


def db_exception(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError:
            # Usually a duplicate entry
            raise DBException("Duplicate entry: already exists", 409)
        except SQLAlchemyError:
            raise DBException("Database error occurred", 500)

    return wrapper


def retrieval_guard(message: str = "Failed to fetch analytics data"):
    """
    Collapse any store or parse failure inside a read path into a single
    RetrievalError so callers never see a partially built payload.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except RetrievalError:
                raise
            except (SQLAlchemyError, ValueError, TypeError) as e:
                logger.error(f"{func.__name__} failed: {e}", exc_info=True)
                raise RetrievalError(message)

        return wrapper

    return decorator
