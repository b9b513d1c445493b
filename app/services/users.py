"""
User management within a company
"""
import logging

from sqlalchemy import func

from app import db
from app.errors import ConflictError, NotFoundError
from app.models import (
    ConversationParticipant,
    Driver,
    Notification,
    Role,
    User,
    UserCompanyRole,
)
from app.schemas import CreateUserInput, UpdateUserInput
from app.services.base import atomic, apply_updates, reading
from app.services.query import paginate
from app.services.transitions import ensure_transition

logger = logging.getLogger(__name__)


def _ensure_email_available(email, user_id=None):
    query = User.query.filter(func.lower(User.email) == email.lower())
    if user_id:
        query = query.filter(User.id != user_id)
    if query.first():
        raise ConflictError('Email already registered')


def create_user(scope, data):
    """
    Create a user holding `role_id` in the caller's company

    Emails are unique across all companies.
    """
    payload = CreateUserInput.from_dict(data)

    with atomic():
        _ensure_email_available(payload.email)
        role = db.session.get(Role, payload.role_id)
        if role is None:
            raise NotFoundError('Role not found')

        user = User(
            email=payload.email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
        )
        if payload.password:
            user.set_password(payload.password)
        db.session.add(user)
        db.session.flush()

        db.session.add(UserCompanyRole(**scope.stamp({'user_id': user.id, 'role_id': role.id})))

    logger.info('User %s created in company %s as %s', user.id, scope.company_id, role.name)
    return user


def get_user(scope, user_id):
    with reading():
        return scope.get_user(user_id)


def list_users(scope, params=None):
    with reading():
        return paginate(scope.users(), User, params)


def update_user(scope, user_id, data):
    payload = UpdateUserInput.from_dict(data)
    changes = payload.changes()

    with atomic():
        user = scope.get_user(user_id)
        if 'email' in changes:
            _ensure_email_available(changes['email'], user.id)
        if 'status' in changes:
            ensure_transition(User, user.status, changes['status'])
        apply_updates(user, changes)

    return user


def roles_for_user(scope, user_id):
    """Role names the user holds in the caller's company"""
    with reading():
        user = scope.get_user(user_id)
        memberships = user.company_roles.filter(UserCompanyRole.company_id == scope.company_id).all()
        return sorted(m.role.name for m in memberships)


def delete_user(scope, user_id):
    """
    Delete a user and everything hanging off it

    Role memberships go first, then the driver profile, notifications and
    conversation memberships, then the user row, all in one transaction.
    """
    with atomic():
        user = scope.get_user(user_id)

        removed_roles = UserCompanyRole.query.filter(
            UserCompanyRole.user_id == user.id
        ).delete(synchronize_session=False)

        for driver in Driver.query.filter(Driver.user_id == user.id).all():
            db.session.delete(driver)
        Notification.query.filter(Notification.user_id == user.id).delete(synchronize_session=False)
        ConversationParticipant.query.filter(
            ConversationParticipant.user_id == user.id
        ).delete(synchronize_session=False)
        db.session.flush()
        db.session.expire(user)

        db.session.delete(user)

    logger.info('User %s deleted with %d role memberships', user_id, removed_roles)
