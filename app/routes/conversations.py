from flask import Blueprint, request, jsonify
from app.middleware import tenant_required, get_current_scope
from app.services import conversations
from app.services.query import ListParams

conversations_bp = Blueprint('conversations', __name__)


@conversations_bp.route('', methods=['GET'])
@tenant_required
def list_conversations():
    """
    Conversations the acting user takes part in
    GET /api/v1/conversations?page=1&limit=20&search=dispatch
    """
    page = conversations.list_conversations(get_current_scope(), ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@conversations_bp.route('', methods=['POST'])
@tenant_required
def create_conversation():
    """
    Start a conversation
    POST /api/v1/conversations
    Body: {"participant_ids": ["uuid", ...], "name"?, "is_group"?}
    """
    conversation = conversations.create_conversation(get_current_scope(), request.get_json(silent=True))
    return jsonify(conversation.to_dict()), 201


@conversations_bp.route('/<conversation_id>', methods=['GET'])
@tenant_required
def get_conversation(conversation_id):
    scope = get_current_scope()
    data = conversations.get_conversation(scope, conversation_id).to_dict()
    data['unread'] = conversations.unread_count(scope, conversation_id)
    return jsonify(data), 200


@conversations_bp.route('/<conversation_id>', methods=['PATCH'])
@tenant_required
def rename_conversation(conversation_id):
    conversation = conversations.rename_conversation(
        get_current_scope(), conversation_id, request.get_json(silent=True)
    )
    return jsonify(conversation.to_dict()), 200


@conversations_bp.route('/<conversation_id>', methods=['DELETE'])
@tenant_required
def delete_conversation(conversation_id):
    conversations.delete_conversation(get_current_scope(), conversation_id)
    return jsonify({'message': 'Conversation deleted'}), 200


@conversations_bp.route('/<conversation_id>/messages', methods=['GET'])
@tenant_required
def list_messages(conversation_id):
    page = conversations.list_messages(get_current_scope(), conversation_id, ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@conversations_bp.route('/<conversation_id>/messages', methods=['POST'])
@tenant_required
def send_message(conversation_id):
    """
    Send a message
    POST /api/v1/conversations/:id/messages
    Body: {"content", "recipient_id"?, "message_type"?, "attachment_url"?}
    """
    message = conversations.send_message(get_current_scope(), conversation_id, request.get_json(silent=True))
    return jsonify(message.to_dict()), 201


@conversations_bp.route('/<conversation_id>/read', methods=['POST'])
@tenant_required
def mark_read(conversation_id):
    conversations.mark_conversation_read(get_current_scope(), conversation_id)
    return jsonify({'unread': 0}), 200
