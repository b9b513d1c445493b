from flask import Blueprint, request, jsonify
from app.middleware import tenant_required, get_current_scope
from app.services import notifications
from app.services.query import ListParams

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('', methods=['GET'])
@tenant_required
def list_notifications():
    """
    Notifications of the acting user
    GET /api/v1/notifications?page=1&limit=20&unread=true
    """
    unread_only = request.args.get('unread', '').lower() in ('1', 'true', 'yes')
    page, unread = notifications.list_notifications(
        get_current_scope(), ListParams.from_args(request.args), unread_only=unread_only
    )
    result = page.to_dict()
    result['unread'] = unread
    return jsonify(result), 200


@notifications_bp.route('', methods=['POST'])
@tenant_required
def create_notification():
    """
    Notify a company user
    POST /api/v1/notifications
    Body: {"user_id", "type", "title", "message", "link"?, "data"?}
    """
    notification = notifications.create_notification(get_current_scope(), request.get_json(silent=True))
    return jsonify(notification.to_dict()), 201


@notifications_bp.route('/read-all', methods=['POST'])
@tenant_required
def mark_all_read():
    updated = notifications.mark_all_read(get_current_scope())
    return jsonify({'updated': updated}), 200


@notifications_bp.route('/<notification_id>', methods=['GET'])
@tenant_required
def get_notification(notification_id):
    notification = notifications.get_notification(get_current_scope(), notification_id)
    return jsonify(notification.to_dict()), 200


@notifications_bp.route('/<notification_id>/read', methods=['POST'])
@tenant_required
def mark_read(notification_id):
    notification = notifications.mark_read(get_current_scope(), notification_id)
    return jsonify(notification.to_dict()), 200


@notifications_bp.route('/<notification_id>/unread', methods=['POST'])
@tenant_required
def mark_unread(notification_id):
    notification = notifications.mark_unread(get_current_scope(), notification_id)
    return jsonify(notification.to_dict()), 200


@notifications_bp.route('/<notification_id>', methods=['DELETE'])
@tenant_required
def delete_notification(notification_id):
    notifications.delete_notification(get_current_scope(), notification_id)
    return jsonify({'message': 'Notification deleted'}), 200
