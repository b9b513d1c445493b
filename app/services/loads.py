"""
Loads, driver assignments, field tracking and load documents
"""
import logging

from flask import current_app

from app import db
from app.errors import ConflictError, NotFoundError, ValidationError
from app.models import Driver, Load, LoadAssignment, LoadDocument, LoadTracking
from app.schemas import (
    CreateLoadInput,
    LoadDocumentInput,
    TrackingInput,
    UpdateLoadInput,
)
from app.services.base import atomic, apply_updates, reading
from app.services.query import paginate
from app.services.transitions import (
    apply_tracking_cascade,
    ensure_transition,
    ensure_valid_status,
)
from app.utils.helpers import parse_datetime, utcnow
from app.utils.validators import require_text

logger = logging.getLogger(__name__)


def _ensure_reference_available(scope, reference_number, load_id=None):
    query = scope.query(Load).filter(Load.reference_number == reference_number)
    if load_id:
        query = query.filter(Load.id != load_id)
    if query.first():
        raise ConflictError(f'Load reference {reference_number} already exists')


# ============ LOADS ============

def create_load(scope, data):
    """
    Create a pending load for the caller's company

    Reference numbers are unique within a company.
    """
    payload = CreateLoadInput.from_dict(data)

    with atomic():
        _ensure_reference_available(scope, payload.reference_number)
        load = Load(**scope.stamp(dict(
            vars(payload),
            status='pending',
            currency=current_app.config['DEFAULT_CURRENCY'],
            created_by=scope.user_id,
        )))
        db.session.add(load)

    logger.info('Load %s (%s) created', load.id, payload.reference_number)
    return load


def get_load(scope, load_id):
    with reading():
        return scope.get(Load, load_id, label='Load')


def list_loads(scope, params=None):
    with reading():
        return paginate(scope.query(Load), Load, params)


def update_load(scope, load_id, data):
    payload = UpdateLoadInput.from_dict(data)
    changes = payload.changes()

    with atomic():
        load = scope.get(Load, load_id, label='Load')
        if 'status' in changes:
            ensure_transition(Load, load.status, changes['status'])

        pickup = parse_datetime(changes.get('pickup_date', load.pickup_date))
        delivery = parse_datetime(changes.get('delivery_date', load.delivery_date))
        if delivery < pickup:
            raise ValidationError('delivery_date cannot be before pickup_date')

        changed = apply_updates(load, changes)

    if 'status' in changed:
        logger.info('Load %s status set to %s', load_id, changes['status'])
    return load


def delete_load(scope, load_id):
    """Delete a load with its assignments, tracking and documents"""
    with atomic():
        load = scope.get(Load, load_id, label='Load')
        db.session.delete(load)

    logger.info('Load %s deleted', load_id)


# ============ ASSIGNMENTS ============

def assign_driver(scope, load_id, data):
    """
    Assign a driver of the same company to a load

    Raises:
        NotFoundError: load or driver not in the caller's company
        ConflictError: the driver is already assigned to this load
    """
    driver_id = require_text(data or {}, 'driver_id', 'Driver ID')

    with atomic():
        load = scope.get(Load, load_id, label='Load', lock=True)
        driver = scope.get(Driver, driver_id, label='Driver')

        duplicate = load.assignments.filter(LoadAssignment.driver_id == driver.id).first()
        if duplicate:
            raise ConflictError('Driver is already assigned to this load')

        assignment = LoadAssignment(**scope.stamp({
            'load': load,
            'driver': driver,
            'assigned_by': scope.user_id,
            'status': 'pending',
        }))
        db.session.add(assignment)

    logger.info('Driver %s assigned to load %s', driver_id, load_id)
    return assignment


def list_assignments(scope, load_id, params=None):
    with reading():
        load = scope.get(Load, load_id, label='Load')
        return paginate(
            scope.query(LoadAssignment).filter(LoadAssignment.load_id == load.id),
            LoadAssignment,
            params,
        )


def update_assignment_status(scope, load_id, assignment_id, data):
    status = require_text(data or {}, 'status', 'status')

    with atomic():
        load = scope.get(Load, load_id, label='Load')
        assignment = scope.query(LoadAssignment).filter(
            LoadAssignment.id == assignment_id,
            LoadAssignment.load_id == load.id,
        ).first()
        if assignment is None:
            raise NotFoundError('Assignment not found')

        ensure_transition(LoadAssignment, assignment.status, status)
        assignment.status = status
        assignment.stamp_status_time()

    logger.info('Assignment %s on load %s set to %s', assignment_id, load_id, status)
    return assignment


# ============ TRACKING ============

def record_tracking(scope, load_id, data):
    """
    Append a tracking event and settle the load when the event calls for it

    The event and any resulting load status change commit together.

    Returns:
        LoadTracking: The stored event
    """
    payload = TrackingInput.from_dict(data)
    ensure_valid_status(LoadTracking, payload.status)

    with atomic():
        load = scope.get(Load, load_id, label='Load', lock=True)
        event = LoadTracking(**scope.stamp({
            'load': load,
            'status': payload.status,
            'latitude': payload.latitude,
            'longitude': payload.longitude,
            'notes': payload.notes,
            'timestamp': utcnow(),
        }))
        db.session.add(event)
        apply_tracking_cascade(load, payload.status)

    return event


def list_tracking(scope, load_id, params=None):
    with reading():
        load = scope.get(Load, load_id, label='Load')
        return paginate(
            scope.query(LoadTracking).filter(LoadTracking.load_id == load.id),
            LoadTracking,
            params,
            order_by=LoadTracking.timestamp.desc(),
        )


# ============ DOCUMENTS ============

def add_load_document(scope, load_id, data):
    payload = LoadDocumentInput.from_dict(data)

    with atomic():
        load = scope.get(Load, load_id, label='Load')
        document = LoadDocument(**scope.stamp({
            'load': load,
            'type': payload.type,
            'url': payload.url,
        }))
        db.session.add(document)

    return document


def list_load_documents(scope, load_id, params=None):
    with reading():
        load = scope.get(Load, load_id, label='Load')
        return paginate(
            scope.query(LoadDocument).filter(LoadDocument.load_id == load.id),
            LoadDocument,
            params,
        )
