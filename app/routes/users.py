from flask import Blueprint, request, jsonify
from app.middleware import tenant_required, get_current_scope
from app.services import users
from app.services.query import ListParams

users_bp = Blueprint('users', __name__)


@users_bp.route('', methods=['GET'])
@tenant_required
def list_users():
    """
    List users of the company
    GET /api/v1/users?page=1&limit=20&search=smith&status=active
    """
    page = users.list_users(get_current_scope(), ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@users_bp.route('', methods=['POST'])
@tenant_required
def create_user():
    """
    Create a user in the company
    POST /api/v1/users
    Body: {"email", "first_name", "last_name", "role_id", "phone"?, "password"?}
    """
    user = users.create_user(get_current_scope(), request.get_json(silent=True))
    return jsonify(user.to_dict()), 201


@users_bp.route('/<user_id>', methods=['GET'])
@tenant_required
def get_user(user_id):
    scope = get_current_scope()
    data = users.get_user(scope, user_id).to_dict()
    data['roles'] = users.roles_for_user(scope, user_id)
    return jsonify(data), 200


@users_bp.route('/<user_id>', methods=['PATCH'])
@tenant_required
def update_user(user_id):
    user = users.update_user(get_current_scope(), user_id, request.get_json(silent=True))
    return jsonify(user.to_dict()), 200


@users_bp.route('/<user_id>', methods=['DELETE'])
@tenant_required
def delete_user(user_id):
    users.delete_user(get_current_scope(), user_id)
    return jsonify({'message': 'User deleted'}), 200
