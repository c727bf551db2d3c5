import logging
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class DBException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def db_exception(message: str = "Duplicate entry: already exists"):
    """
    Wrap a service method so database failures surface as DBException.
    The wrapped method's owner must expose the session as ``self.db``;
    it is rolled back before the exception propagates.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(f"{func.__qualname__}: integrity error: {e.orig}")
                raise DBException(message, 409)
            except SQLAlchemyError:
                self.db.rollback()
                logger.error(f"{func.__qualname__}: database error", exc_info=True)
                raise DBException("Database error occurred", 500)

        return wrapper

    return decorator
