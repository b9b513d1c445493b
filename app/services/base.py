"""
Transaction and error plumbing shared by the service modules
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError

from app import db
from app.errors import ConflictError, ServiceTimeoutError

logger = logging.getLogger(__name__)

# SQLSTATEs raised by PostgreSQL
QUERY_CANCELED = '57014'
UNIQUE_VIOLATION = '23505'


def _pgcode(error):
    return getattr(getattr(error, 'orig', None), 'pgcode', None)


def _is_statement_timeout(error):
    return _pgcode(error) == QUERY_CANCELED


def _is_unique_violation(error):
    if _pgcode(error) == UNIQUE_VIOLATION:
        return True
    # sqlite reports constraint failures by message only
    return 'UNIQUE constraint failed' in str(getattr(error, 'orig', ''))


def _translate(error):
    if isinstance(error, IntegrityError) and _is_unique_violation(error):
        logger.warning('Unique violation: %s', error.orig)
        return ConflictError('Resource already exists')
    if isinstance(error, OperationalError) and _is_statement_timeout(error):
        logger.error('Statement timeout: %s', error.orig)
        return ServiceTimeoutError('The database did not respond in time')
    return None


@contextmanager
def atomic():
    """
    Run the block as one transaction

    Commits when the block finishes, rolls back and re-raises on any error.
    Unique constraint violations surface as ConflictError and statement
    timeouts as ServiceTimeoutError; other integrity errors propagate as is.
    """
    try:
        yield db.session
        db.session.commit()
    except (IntegrityError, OperationalError) as e:
        db.session.rollback()
        translated = _translate(e)
        if translated is None:
            logger.error('Database error: %s', e.orig)
            raise
        raise translated from e
    except Exception:
        db.session.rollback()
        raise


@contextmanager
def reading():
    """Read-only block: maps statement timeouts without committing"""
    try:
        yield db.session
    except OperationalError as e:
        db.session.rollback()
        translated = _translate(e)
        if translated is None:
            raise
        raise translated from e


def apply_updates(entity, changes):
    """Copy `changes` onto `entity` and return the names that differed"""
    changed = []
    for key, value in changes.items():
        if getattr(entity, key) != value:
            setattr(entity, key, value)
            changed.append(key)
    return changed
