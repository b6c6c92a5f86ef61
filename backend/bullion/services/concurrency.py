# Overview: Transaction helpers shared by every mutating service operation.

from __future__ import annotations

import time
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import PersistenceFailure
from ..extensions import db


_STAGED_KEY = "bullion.staged_with_commit"


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    The lot version column still turns a lost update into a StaleDataError.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts).
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


@contextmanager
def staged_with_commit(factory):
    """
    Add `factory(result)` to the session right before the next
    run_atomically commit, so the row lands in the same transaction as the
    business writes (used for sync receipts).
    """
    hooks = db.session.info.setdefault(_STAGED_KEY, [])
    hooks.append(factory)
    try:
        yield
    finally:
        hooks.remove(factory)


def run_atomically(func, *, attempts: int = 3, backoff_base: float = 0.05):
    """
    Run `func` (which stages writes on db.session) and commit exactly once.

    WHY: Multi-record transitions (status + detail record, order + items)
    must be observed all-or-nothing. Nothing inside `func` may commit.

    - StaleDataError / OperationalError: rollback, back off, re-run `func`
      from scratch (it re-reads current state, so a lost race surfaces as a
      precondition failure on the next attempt)
    - BullionError raised by `func`: rollback, re-raise unchanged
    - any other SQLAlchemyError: rollback, raise PersistenceFailure
    """
    def _op():
        result = func()
        for factory in list(db.session.info.get(_STAGED_KEY, ())):
            db.session.add(factory(result))
        db.session.commit()
        return result

    try:
        return run_with_retry(_op, attempts=attempts, backoff_base=backoff_base)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Transaction aborted, rolled back")
        raise PersistenceFailure("The store rejected the write; nothing was applied") from exc
    except Exception:
        db.session.rollback()
        raise
