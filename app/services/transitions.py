"""
Status transition rules

Every status change in the service layer is checked here before it is
written. Out-of-enum values and illegal moves raise InvalidStatusError and
leave the stored status alone.
"""
import logging

from app.errors import ImmutableStateError, InvalidStatusError
from app.models import (
    Driver,
    DriverDocument,
    Invoice,
    Load,
    LoadAssignment,
    LoadTracking,
    Payment,
    User,
)

logger = logging.getLogger(__name__)

LOAD_TRANSITIONS = {
    'pending': ('accepted', 'cancelled'),
    'accepted': ('in_transit', 'cancelled'),
    'in_transit': ('delivered', 'cancelled'),
    'delivered': (),
    'cancelled': (),
}

ASSIGNMENT_TRANSITIONS = {
    'pending': ('accepted', 'rejected'),
    'accepted': ('completed', 'rejected'),
    'rejected': (),
    'completed': (),
}

# Field events that settle the load they belong to
TRACKING_CASCADE = {
    'delivered': 'delivered',
    'failed': 'cancelled',
}

TRANSITIONS = {
    Load: LOAD_TRANSITIONS,
    LoadAssignment: ASSIGNMENT_TRANSITIONS,
}

LABELS = {
    Load: 'load',
    LoadAssignment: 'assignment',
    LoadTracking: 'tracking',
    Driver: 'driver',
    DriverDocument: 'document',
    Invoice: 'invoice',
    Payment: 'payment',
    User: 'user',
}


def ensure_valid_status(model, status):
    """Raise InvalidStatusError unless status is one of model.STATUSES"""
    if status not in model.STATUSES:
        raise InvalidStatusError(
            f'Invalid {LABELS.get(model, model.__name__.lower())} status "{status}". '
            f'Must be one of: {", ".join(model.STATUSES)}'
        )
    return status


def ensure_transition(model, current, target):
    """
    Check a status change for `model` from `current` to `target`

    Models without a transition table only need `target` in their enum.
    Re-applying the current status is always allowed.
    """
    ensure_valid_status(model, target)
    table = TRANSITIONS.get(model)
    if table is None or target == current:
        return target
    if target not in table.get(current, ()):
        label = LABELS.get(model, model.__name__.lower())
        logger.warning('Rejected %s transition %s -> %s', label, current, target)
        raise InvalidStatusError(f'Cannot change {label} status from {current} to {target}')
    return target


def ensure_payment_mutable(payment):
    if payment.is_final:
        logger.warning('Rejected change to %s payment %s', payment.status, payment.id)
        raise ImmutableStateError(f'Cannot modify a {payment.status} payment')


def cascade_status(tracking_status):
    """Load status implied by a tracking event, or None"""
    return TRACKING_CASCADE.get(tracking_status)


def apply_tracking_cascade(load, tracking_status):
    """
    Move `load` to the status implied by a tracking event

    Applied whatever the load's current status is, since tracking reports
    what happened in the field.

    Returns:
        str: The new load status, or None when the event implies no change
    """
    target = cascade_status(tracking_status)
    if target is None or load.status == target:
        return None
    previous = load.status
    load.status = target
    logger.info('Load %s moved %s -> %s by tracking event %s', load.id, previous, target, tracking_status)
    return target
