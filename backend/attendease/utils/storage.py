"""Translate SQLAlchemy failures into domain errors."""
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from attendease import db
from attendease.errors import StorageConflict, TransientFailure

@contextmanager
def storage_guard(operation: str):
    """Roll back and re-raise storage errors as StorageConflict / TransientFailure.

    IntegrityError is an SQLAlchemyError, so it has to be matched first.
    Everything else (DBAPI errors, pool timeouts) is treated as retryable.
    """
    try:
        yield
    except IntegrityError as exc:
        db.session.rollback()
        raise StorageConflict(
            f"Uniqueness constraint rejected {operation}",
            constraint=str(exc.orig)
        ) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise TransientFailure(
            f"Storage unavailable during {operation}, please retry"
        ) from exc
