"""
Database utility functions: unit-of-work handling for service operations.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging import logger


class DatabaseOperationError(Exception):
    """Exception raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run the enclosed statements as one unit of work.

    Commits when the block exits cleanly. On any error the session is rolled
    back; SQLAlchemy errors are re-raised as DatabaseOperationError, anything
    else propagates unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database transaction rolled back: {e}")
        raise DatabaseOperationError(
            "Database operation failed",
            original_error=e,
        ) from e
    except Exception:
        db.rollback()
        raise
