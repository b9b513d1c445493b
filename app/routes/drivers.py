from flask import Blueprint, request, jsonify
from app.middleware import tenant_required, get_current_scope
from app.services import drivers
from app.services.query import ListParams

drivers_bp = Blueprint('drivers', __name__)


@drivers_bp.route('', methods=['GET'])
@tenant_required
def list_drivers():
    """
    List drivers of the company
    GET /api/v1/drivers?page=1&limit=20&search=ABC123&status=active
    """
    page = drivers.list_drivers(get_current_scope(), ListParams.from_args(request.args))
    return jsonify(page.to_dict(lambda d: d.to_dict(include_user=True))), 200


@drivers_bp.route('', methods=['POST'])
@tenant_required
def create_driver():
    """
    Create a driver profile for a company user
    POST /api/v1/drivers
    Body: {"user_id", "license_number", "license_class"?, "license_expiry"?,
           "vehicle_type"?, "vehicle_vin"?, "vehicle_plate"?}
    """
    driver = drivers.create_driver(get_current_scope(), request.get_json(silent=True))
    return jsonify(driver.to_dict()), 201


@drivers_bp.route('/<driver_id>', methods=['GET'])
@tenant_required
def get_driver(driver_id):
    driver = drivers.get_driver(get_current_scope(), driver_id)
    return jsonify(driver.to_dict(include_user=True)), 200


@drivers_bp.route('/<driver_id>', methods=['PATCH'])
@tenant_required
def update_driver(driver_id):
    driver = drivers.update_driver(get_current_scope(), driver_id, request.get_json(silent=True))
    return jsonify(driver.to_dict()), 200


@drivers_bp.route('/<driver_id>', methods=['DELETE'])
@tenant_required
def delete_driver(driver_id):
    drivers.delete_driver(get_current_scope(), driver_id)
    return jsonify({'message': 'Driver deleted'}), 200


# ============ DOCUMENTS ============

@drivers_bp.route('/<driver_id>/documents', methods=['GET'])
@tenant_required
def list_documents(driver_id):
    page = drivers.list_documents(get_current_scope(), driver_id, ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@drivers_bp.route('/<driver_id>/documents', methods=['POST'])
@tenant_required
def add_document(driver_id):
    """
    Attach a document to a driver
    POST /api/v1/drivers/:id/documents
    Body: {"type": "license", "document_url": "https://...", "expiry_date"?}
    """
    document = drivers.add_document(get_current_scope(), driver_id, request.get_json(silent=True))
    return jsonify(document.to_dict()), 201


@drivers_bp.route('/<driver_id>/documents/<document_id>', methods=['GET'])
@tenant_required
def get_document(driver_id, document_id):
    document = drivers.get_document(get_current_scope(), driver_id, document_id)
    return jsonify(document.to_dict()), 200


@drivers_bp.route('/<driver_id>/documents/<document_id>', methods=['PATCH'])
@tenant_required
def update_document_status(driver_id, document_id):
    document = drivers.update_document_status(
        get_current_scope(), driver_id, document_id, request.get_json(silent=True)
    )
    return jsonify(document.to_dict()), 200


@drivers_bp.route('/<driver_id>/documents/<document_id>', methods=['DELETE'])
@tenant_required
def delete_document(driver_id, document_id):
    drivers.delete_document(get_current_scope(), driver_id, document_id)
    return jsonify({'message': 'Document deleted'}), 200


# ============ LOCATIONS & RATINGS ============

@drivers_bp.route('/<driver_id>/locations', methods=['GET'])
@tenant_required
def list_locations(driver_id):
    page = drivers.list_locations(get_current_scope(), driver_id, ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@drivers_bp.route('/<driver_id>/locations', methods=['POST'])
@tenant_required
def record_location(driver_id):
    """
    Record a GPS fix
    POST /api/v1/drivers/:id/locations
    Body: {"latitude": 40.7, "longitude": -74.0, "accuracy"?: 5.0}
    """
    location = drivers.record_location(get_current_scope(), driver_id, request.get_json(silent=True))
    return jsonify(location.to_dict()), 201


@drivers_bp.route('/<driver_id>/ratings', methods=['GET'])
@tenant_required
def list_ratings(driver_id):
    page = drivers.list_ratings(get_current_scope(), driver_id, ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@drivers_bp.route('/<driver_id>/ratings', methods=['POST'])
@tenant_required
def rate_driver(driver_id):
    """
    Rate a driver and return the refreshed average
    POST /api/v1/drivers/:id/ratings
    Body: {"rating": 1-5, "comment"?, "load_id"?}
    """
    scope = get_current_scope()
    rating = drivers.rate_driver(scope, driver_id, request.get_json(silent=True))
    driver = drivers.get_driver(scope, driver_id)
    return jsonify({
        'rating': rating.to_dict(),
        'driver_rating': float(driver.rating),
    }), 201
