# Overview: Unit-of-work, row locking and retry helpers shared by every mutating service.

from __future__ import annotations

import time
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import StorageFailure
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    SQLite serializes writers at the database level instead.
    """
    return query.with_for_update()


@contextmanager
def atomic():
    """
    One unit of work on db.session.

    Commits when the block exits normally. Any exception (domain error or
    storage error) rolls back everything flushed inside the block and
    propagates.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). func must be a complete unit of work
    (normally its body is a `with atomic():` block) so a retry re-reads state.

    Other SQLAlchemy errors, and concurrency errors once attempts are
    exhausted, surface as StorageFailure. Domain errors pass through.
    """
    if attempts is None:
        attempts = current_app.config.get("COMMIT_RETRY_ATTEMPTS", 3)

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                current_app.logger.error("Unit of work failed after %s attempts: %s", attempts, exc)
                raise StorageFailure("Storage operation failed; no changes were applied") from exc
            current_app.logger.warning("Concurrency conflict (attempt %s/%s): %s", attempt + 1, attempts, exc)
            time.sleep(backoff_base * (2 ** attempt))
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception("Unit of work failed")
            raise StorageFailure("Storage operation failed; no changes were applied") from exc
