"""
Optimistic transaction runner

Executes a unit of work against db.session and commits it. Conflicting
concurrent writes surface from SQLAlchemy as StaleDataError (version check
failed) or IntegrityError (a unique key was taken in the meantime); both roll
the session back and re-run the unit of work from scratch so every read is
repeated against current state.

The unit of work must therefore be a pure function of what it reads through
the session: no side effects outside the session, no values captured from an
earlier attempt.
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from material_policy import db
from material_policy.buisness.materials.errors import MaterialDomainError, TransientStoreConflict
from material_policy.logger import get_logger

logger = get_logger("material_policy.data.transaction")

DEFAULT_MAX_ATTEMPTS = 5


def _configured_max_attempts():
    try:
        return int(current_app.config.get('MATERIAL_TXN_MAX_ATTEMPTS', DEFAULT_MAX_ATTEMPTS))
    except RuntimeError:
        # Outside an application context
        return DEFAULT_MAX_ATTEMPTS


def run_transaction(fn, max_attempts=None, description="transaction"):
    """
    Run fn() and commit, retrying on optimistic-concurrency conflicts.

    Args:
        fn: Zero-argument callable performing reads and writes through db.session
        max_attempts (int, optional): Attempt budget (default from app config)
        description (str): Label used in log lines

    Returns:
        Whatever fn() returned on the attempt that committed

    Raises:
        TransientStoreConflict: If every attempt collided with a concurrent writer
        MaterialDomainError: Propagated unchanged (after rollback) and never retried
    """
    attempts = max_attempts or _configured_max_attempts()
    last_error = None

    for attempt in range(1, attempts + 1):
        try:
            result = fn()
            db.session.commit()
            if attempt > 1:
                logger.info(f"{description} committed on attempt {attempt}")
            return result
        except (StaleDataError, IntegrityError) as e:
            db.session.rollback()
            last_error = e
            logger.warning(f"{description} conflicted on attempt {attempt}/{attempts}: {e.__class__.__name__}")
        except MaterialDomainError:
            db.session.rollback()
            raise
        except Exception:
            db.session.rollback()
            logger.error(f"{description} failed", exc_info=True)
            raise

    logger.error(f"{description} gave up after {attempts} conflicting attempts")
    raise TransientStoreConflict(
        f"{description} could not be committed after {attempts} attempts because of concurrent changes; "
        f"resubmit the action"
    ) from last_error
