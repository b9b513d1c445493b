"""
Conversations between users of one company

Only participants can see a conversation or its messages; anyone else gets
the same NotFoundError as for a conversation that does not exist.
"""
import logging

from sqlalchemy import or_

from app import db
from app.errors import NotFoundError, ValidationError
from app.models import Conversation, ConversationParticipant, Message
from app.schemas import CreateConversationInput, SendMessageInput
from app.services.base import atomic, reading
from app.services.query import paginate
from app.utils.helpers import utcnow
from app.utils.validators import require_text

logger = logging.getLogger(__name__)


def _participation(scope, conversation_id):
    """(conversation, participant row) for the acting user"""
    conversation = scope.query(Conversation).filter(
        Conversation.id == conversation_id,
        Conversation.participants.any(ConversationParticipant.user_id == scope.user_id),
    ).first() if conversation_id else None
    if conversation is None:
        raise NotFoundError('Conversation not found')
    participant = conversation.participants.filter(
        ConversationParticipant.user_id == scope.user_id
    ).first()
    return conversation, participant


def _unread_messages(conversation, participant):
    query = conversation.messages.filter(
        or_(Message.sender_id.is_(None), Message.sender_id != participant.user_id)
    )
    if participant.last_read_at is not None:
        query = query.filter(Message.sent_at > participant.last_read_at)
    return query


def create_conversation(scope, data):
    """
    Start a conversation; the acting user always takes part

    Every participant must be a user of the caller's company.
    """
    payload = CreateConversationInput.from_dict(data)
    member_ids = list(dict.fromkeys([scope.user_id] + payload.participant_ids))
    if len(member_ids) < 2:
        raise ValidationError('A conversation needs at least one other participant')

    with atomic():
        for user_id in member_ids:
            scope.get_user(user_id)

        conversation = Conversation(**scope.stamp({
            'name': payload.name,
            'is_group': payload.is_group or len(member_ids) > 2,
            'created_by': scope.user_id,
        }))
        db.session.add(conversation)
        db.session.flush()

        for user_id in member_ids:
            db.session.add(ConversationParticipant(**scope.stamp({
                'conversation': conversation,
                'user_id': user_id,
            })))

    logger.info('Conversation %s created with %d participants', conversation.id, len(member_ids))
    return conversation


def list_conversations(scope, params=None):
    with reading():
        query = scope.query(Conversation).filter(
            Conversation.participants.any(ConversationParticipant.user_id == scope.user_id)
        )
        return paginate(query, Conversation, params, order_by=Conversation.updated_at.desc())


def get_conversation(scope, conversation_id):
    with reading():
        conversation, _ = _participation(scope, conversation_id)
        return conversation


def rename_conversation(scope, conversation_id, data):
    name = require_text(data or {}, 'name', 'Name')

    with atomic():
        conversation, _ = _participation(scope, conversation_id)
        conversation.name = name
    return conversation


def delete_conversation(scope, conversation_id):
    with atomic():
        conversation, _ = _participation(scope, conversation_id)
        db.session.delete(conversation)

    logger.info('Conversation %s deleted', conversation_id)


def send_message(scope, conversation_id, data):
    payload = SendMessageInput.from_dict(data)

    with atomic():
        conversation, participant = _participation(scope, conversation_id)
        if payload.recipient_id and payload.recipient_id not in conversation.participant_ids():
            raise ValidationError('Recipient is not part of this conversation')

        now = utcnow()
        message = Message(**scope.stamp({
            'conversation': conversation,
            'sender_id': scope.user_id,
            'recipient_id': payload.recipient_id,
            'content': payload.content,
            'message_type': payload.message_type,
            'attachment_url': payload.attachment_url,
            'sent_at': now,
        }))
        db.session.add(message)
        conversation.updated_at = now
        participant.last_read_at = now

    return message


def list_messages(scope, conversation_id, params=None):
    with reading():
        conversation, _ = _participation(scope, conversation_id)
        return paginate(
            scope.query(Message).filter(Message.conversation_id == conversation.id),
            Message,
            params,
            order_by=Message.sent_at.desc(),
        )


def mark_conversation_read(scope, conversation_id):
    with atomic():
        _, participant = _participation(scope, conversation_id)
        participant.last_read_at = utcnow()
    return participant


def unread_count(scope, conversation_id):
    """Messages from other participants since the acting user last read"""
    with reading():
        conversation, participant = _participation(scope, conversation_id)
        return _unread_messages(conversation, participant).count()
