from flask import Blueprint, request, jsonify
from app.middleware import tenant_required, get_current_scope
from app.services import loads
from app.services.query import ListParams

loads_bp = Blueprint('loads', __name__)


@loads_bp.route('', methods=['GET'])
@tenant_required
def list_loads():
    """
    List loads of the company
    GET /api/v1/loads?page=1&limit=20&search=steel&status=pending
        &date_from=2024-01-01&date_to=2024-01-31

    The date range applies to pickup_date.
    """
    page = loads.list_loads(get_current_scope(), ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@loads_bp.route('', methods=['POST'])
@tenant_required
def create_load():
    """
    Create a load
    POST /api/v1/loads
    Body: {
        "reference_number": "LD-1001",
        "pickup_address", "pickup_city", "pickup_state", "pickup_zip", "pickup_date",
        "delivery_address", "delivery_city", "delivery_state", "delivery_zip", "delivery_date",
        "rate": 1500.00,
        "commodity"?, "weight"?, "dimensions"?, "hazmat"?, "special_handling"?
    }
    """
    load = loads.create_load(get_current_scope(), request.get_json(silent=True))
    return jsonify(load.to_dict()), 201


@loads_bp.route('/<load_id>', methods=['GET'])
@tenant_required
def get_load(load_id):
    load = loads.get_load(get_current_scope(), load_id)
    return jsonify(load.to_dict()), 200


@loads_bp.route('/<load_id>', methods=['PATCH'])
@tenant_required
def update_load(load_id):
    """
    Update a load
    PATCH /api/v1/loads/:id

    Allowed transitions:
    - pending -> accepted, cancelled
    - accepted -> in_transit, cancelled
    - in_transit -> delivered, cancelled
    """
    load = loads.update_load(get_current_scope(), load_id, request.get_json(silent=True))
    return jsonify(load.to_dict()), 200


@loads_bp.route('/<load_id>', methods=['DELETE'])
@tenant_required
def delete_load(load_id):
    loads.delete_load(get_current_scope(), load_id)
    return jsonify({'message': 'Load deleted'}), 200


# ============ ASSIGNMENTS ============

@loads_bp.route('/<load_id>/assignments', methods=['GET'])
@tenant_required
def list_assignments(load_id):
    page = loads.list_assignments(get_current_scope(), load_id, ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@loads_bp.route('/<load_id>/assignments', methods=['POST'])
@tenant_required
def assign_driver(load_id):
    """
    Assign a driver to a load
    POST /api/v1/loads/:id/assignments
    Body: {"driver_id": "uuid"}
    """
    assignment = loads.assign_driver(get_current_scope(), load_id, request.get_json(silent=True))
    return jsonify(assignment.to_dict()), 201


@loads_bp.route('/<load_id>/assignments/<assignment_id>', methods=['PATCH'])
@tenant_required
def update_assignment(load_id, assignment_id):
    assignment = loads.update_assignment_status(
        get_current_scope(), load_id, assignment_id, request.get_json(silent=True)
    )
    return jsonify(assignment.to_dict()), 200


# ============ TRACKING & DOCUMENTS ============

@loads_bp.route('/<load_id>/tracking', methods=['GET'])
@tenant_required
def list_tracking(load_id):
    page = loads.list_tracking(get_current_scope(), load_id, ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@loads_bp.route('/<load_id>/tracking', methods=['POST'])
@tenant_required
def record_tracking(load_id):
    """
    Record a tracking event
    POST /api/v1/loads/:id/tracking
    Body: {"status": "delivered", "latitude"?, "longitude"?, "notes"?}

    "delivered" marks the load delivered, "failed" cancels it.
    """
    scope = get_current_scope()
    event = loads.record_tracking(scope, load_id, request.get_json(silent=True))
    load = loads.get_load(scope, load_id)
    return jsonify({'tracking': event.to_dict(), 'load_status': load.status}), 201


@loads_bp.route('/<load_id>/documents', methods=['GET'])
@tenant_required
def list_documents(load_id):
    page = loads.list_load_documents(get_current_scope(), load_id, ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@loads_bp.route('/<load_id>/documents', methods=['POST'])
@tenant_required
def add_document(load_id):
    document = loads.add_load_document(get_current_scope(), load_id, request.get_json(silent=True))
    return jsonify(document.to_dict()), 201
