"""SQLAlchemy models package"""
from .company import Company, Role
from .user import User, UserCompanyRole
from .driver import Driver, DriverDocument, DriverLocation, DriverRating
from .load import Load, LoadAssignment, LoadTracking, LoadDocument
from .invoice import Invoice
from .payment import Payment
from .notification import Notification
from .conversation import Conversation, ConversationParticipant, Message

__all__ = [
    'Company',
    'Role',
    'User',
    'UserCompanyRole',
    'Driver',
    'DriverDocument',
    'DriverLocation',
    'DriverRating',
    'Load',
    'LoadAssignment',
    'LoadTracking',
    'LoadDocument',
    'Invoice',
    'Payment',
    'Notification',
    'Conversation',
    'ConversationParticipant',
    'Message',
]
