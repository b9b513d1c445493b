"""Conversation models"""
from app import db
from app.utils.helpers import utcnow
from .base import BaseModel, TenantMixin


class Conversation(BaseModel, TenantMixin):
    """
    Conversation model - direct or group chat between company users
    """
    __tablename__ = 'conversations'
    __searchable__ = ('name',)
    __date_field__ = 'updated_at'

    name = db.Column(db.String(255))
    is_group = db.Column(db.Boolean, nullable=False, default=False)
    created_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))

    # Relationships
    participants = db.relationship('ConversationParticipant', backref='conversation', lazy='dynamic',
                                   cascade='all, delete-orphan')
    messages = db.relationship('Message', backref='conversation', lazy='dynamic', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Conversation {self.name or self.id}>'

    def participant_ids(self):
        return [p.user_id for p in self.participants]

    def to_dict(self):
        data = super().to_dict()
        data['participant_ids'] = self.participant_ids()
        return data


class ConversationParticipant(BaseModel, TenantMixin):
    """
    Membership of a user in a conversation, with a read marker
    """
    __tablename__ = 'conversation_participants'

    conversation_id = db.Column(db.String(36), db.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    last_read_at = db.Column(db.DateTime(timezone=True))

    __table_args__ = (
        db.UniqueConstraint('conversation_id', 'user_id', name='unique_participant_per_conversation'),
        db.Index('idx_conversation_participants_user_id', 'user_id'),
    )

    def __repr__(self):
        return f'<ConversationParticipant conversation={self.conversation_id} user={self.user_id}>'


class Message(BaseModel, TenantMixin):
    """
    Message model - a single chat message
    """
    __tablename__ = 'messages'

    TYPES = ('text', 'image', 'file', 'system')

    conversation_id = db.Column(db.String(36), db.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    sender_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))
    recipient_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))

    content = db.Column(db.Text, nullable=False)
    message_type = db.Column(db.String(20), nullable=False, default='text')
    attachment_url = db.Column(db.String(500))
    sent_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        db.Index('idx_messages_conversation_id', 'conversation_id', 'sent_at'),
    )

    def __repr__(self):
        return f'<Message conversation={self.conversation_id} sender={self.sender_id}>'
