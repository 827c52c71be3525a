from __future__ import annotations

import logging
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from circulation.extensions import db
from circulation.exceptions import CirculationError, StorageConflict


@contextmanager
def unit_of_work():
    """
    One commit point for a whole circulation operation.

    Everything written inside the block commits together or not at all.
    CirculationError rolls back and propagates unchanged; database contention
    rolls back and surfaces as StorageConflict.
    """
    try:
        yield db.session
        db.session.commit()
    except CirculationError:
        db.session.rollback()
        raise
    except (OperationalError, StaleDataError, IntegrityError) as e:
        db.session.rollback()
        current_app.logger.warning(f"[unit_of_work] storage conflict, rolled back: {e}")
        raise StorageConflict(str(e)) from e
    except Exception:
        db.session.rollback()
        raise


def retry_on_conflict(operation, *args, attempts: int | None = None, **kwargs):
    """
    Runs `operation(*args, **kwargs)` again from scratch while it raises StorageConflict.

    Every other error is terminal for the request and propagates on the first attempt.
    """
    if attempts is None:
        attempts = current_app.config.get("CONFLICT_RETRY_ATTEMPTS", 3)
    retrying = Retrying(
        retry=retry_if_exception_type(StorageConflict),
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential_jitter(initial=0.05, max=1.0, jitter=0.05),
        before_sleep=before_sleep_log(current_app.logger, logging.INFO),
        reraise=True,
    )
    return retrying(operation, *args, **kwargs)
