"""
Driver profiles, documents, locations and ratings
"""
import logging

from app import db
from app.errors import ConflictError, NotFoundError
from app.models import Driver, DriverDocument, DriverLocation, DriverRating
from app.schemas import (
    CreateDriverInput,
    CreateDriverDocumentInput,
    LocationInput,
    UpdateDriverInput,
)
from app.services import reconciliation
from app.services.base import atomic, apply_updates, reading
from app.services.query import paginate
from app.services.transitions import ensure_transition, ensure_valid_status
from app.utils.validators import require_text

logger = logging.getLogger(__name__)


# ============ DRIVERS ============

def create_driver(scope, data):
    payload = CreateDriverInput.from_dict(data)
    ensure_valid_status(Driver, payload.status)

    with atomic():
        user = scope.get_user(payload.user_id)
        if Driver.query.filter(Driver.user_id == user.id).first():
            raise ConflictError('User already has a driver profile')

        driver = Driver(**scope.stamp({
            'user_id': user.id,
            'license_number': payload.license_number,
            'license_class': payload.license_class,
            'license_expiry': payload.license_expiry,
            'vehicle_type': payload.vehicle_type,
            'vehicle_vin': payload.vehicle_vin,
            'vehicle_plate': payload.vehicle_plate,
            'status': payload.status,
        }))
        db.session.add(driver)

    logger.info('Driver %s created for user %s', driver.id, payload.user_id)
    return driver


def get_driver(scope, driver_id):
    with reading():
        return scope.get(Driver, driver_id, label='Driver')


def list_drivers(scope, params=None):
    with reading():
        return paginate(scope.query(Driver), Driver, params)


def update_driver(scope, driver_id, data):
    payload = UpdateDriverInput.from_dict(data)
    changes = payload.changes()

    with atomic():
        driver = scope.get(Driver, driver_id, label='Driver')
        if 'status' in changes:
            ensure_transition(Driver, driver.status, changes['status'])
        apply_updates(driver, changes)

    return driver


def delete_driver(scope, driver_id):
    """Delete a driver with its documents, locations, ratings and assignments"""
    with atomic():
        driver = scope.get(Driver, driver_id, label='Driver')
        db.session.delete(driver)

    logger.info('Driver %s deleted', driver_id)


# ============ DOCUMENTS ============

def add_document(scope, driver_id, data):
    payload = CreateDriverDocumentInput.from_dict(data)

    with atomic():
        driver = scope.get(Driver, driver_id, label='Driver')
        document = DriverDocument(**scope.stamp({
            'driver': driver,
            'type': payload.type,
            'document_url': payload.document_url,
            'expiry_date': payload.expiry_date,
        }))
        db.session.add(document)

    return document


def _driver_document(scope, driver_id, document_id):
    driver = scope.get(Driver, driver_id, label='Driver')
    document = scope.query(DriverDocument).filter(
        DriverDocument.id == document_id,
        DriverDocument.driver_id == driver.id,
    ).first()
    if document is None:
        raise NotFoundError('Document not found')
    return document


def list_documents(scope, driver_id, params=None):
    with reading():
        driver = scope.get(Driver, driver_id, label='Driver')
        return paginate(scope.query(DriverDocument).filter(DriverDocument.driver_id == driver.id), DriverDocument, params)


def get_document(scope, driver_id, document_id):
    with reading():
        return _driver_document(scope, driver_id, document_id)


def update_document_status(scope, driver_id, document_id, data):
    status = require_text(data or {}, 'status', 'status')

    with atomic():
        document = _driver_document(scope, driver_id, document_id)
        ensure_transition(DriverDocument, document.status, status)
        document.status = status

    logger.info('Document %s of driver %s marked %s', document_id, driver_id, status)
    return document


def delete_document(scope, driver_id, document_id):
    with atomic():
        document = _driver_document(scope, driver_id, document_id)
        db.session.delete(document)


# ============ LOCATIONS ============

def record_location(scope, driver_id, data):
    payload = LocationInput.from_dict(data)

    with atomic():
        driver = scope.get(Driver, driver_id, label='Driver')
        location = DriverLocation(**scope.stamp({
            'driver': driver,
            'latitude': payload.latitude,
            'longitude': payload.longitude,
            'accuracy': payload.accuracy,
        }))
        db.session.add(location)

    return location


def list_locations(scope, driver_id, params=None):
    with reading():
        driver = scope.get(Driver, driver_id, label='Driver')
        return paginate(
            scope.query(DriverLocation).filter(DriverLocation.driver_id == driver.id),
            DriverLocation,
            params,
            order_by=DriverLocation.timestamp.desc(),
        )


# ============ RATINGS ============

def rate_driver(scope, driver_id, data):
    return reconciliation.record_rating(scope, driver_id, data)


def list_ratings(scope, driver_id, params=None):
    with reading():
        driver = scope.get(Driver, driver_id, label='Driver')
        return paginate(scope.query(DriverRating).filter(DriverRating.driver_id == driver.id), DriverRating, params)
