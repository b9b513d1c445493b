"""Notification model"""
from app import db
from app.utils.helpers import utcnow
from .base import BaseModel, TenantMixin


class Notification(BaseModel, TenantMixin):
    """
    Notification model - in-app notifications for users
    Delivery (push/email/SMS) happens elsewhere
    """
    __tablename__ = 'notifications'
    __searchable__ = ('title', 'message')

    TYPES = ('assignment', 'payment', 'document', 'system', 'message')

    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    link = db.Column(db.String(500))
    data = db.Column(db.JSON)

    read_at = db.Column(db.DateTime(timezone=True))

    __table_args__ = (
        db.Index('idx_notifications_user_id', 'user_id', 'created_at'),
        db.Index('idx_notifications_unread', 'user_id', 'read_at'),
    )

    def __repr__(self):
        return f'<Notification {self.type} - user={self.user_id}>'

    @property
    def read(self):
        return self.read_at is not None

    def mark_read(self):
        """Mark notification as read"""
        if not self.read_at:
            self.read_at = utcnow()

    def mark_unread(self):
        self.read_at = None

    def to_dict(self):
        data = super().to_dict()
        data['read'] = self.read
        return data
