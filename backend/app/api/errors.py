"""
Mapping of service exceptions onto HTTP responses
"""
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status

from app.core import logger
from app.services.errors import RecordNotFoundError, InvalidRecordError


@contextmanager
def service_errors(failure_message: str) -> Iterator[None]:
    """
    Translate service exceptions raised inside the block.

    Unexpected errors are logged with their traceback and reported with the
    generic failure_message only.
    """
    try:
        yield
    except HTTPException:
        raise
    except RecordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidRecordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception(failure_message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_message,
        )
