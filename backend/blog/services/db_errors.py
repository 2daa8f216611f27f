"""
Translation of SQLAlchemy failures into DatabaseError.

Services wrap every store call in `translate_db_errors(...)`. Application
exceptions raised inside the block (NotFoundError, ValidationError) pass
through untouched; anything SQLAlchemy raises is logged with its stack
trace and re-raised as a DatabaseError carrying only the operation name and
error type.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError

from blog.exceptions import DatabaseError

logger = logging.getLogger(__name__)


@contextmanager
def translate_db_errors(operation: str, message: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
        raise DatabaseError(
            message=message,
            context={"operation": operation, "error_type": type(e).__name__, **context},
        ) from e
