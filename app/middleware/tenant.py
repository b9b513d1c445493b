"""
Multi-tenancy guard for Haulbase

Every data access in the service layer goes through a TenantScope, which
injects the requesting company into queries and new rows. Rows belonging to
another company are reported exactly like rows that do not exist.
"""
from dataclasses import dataclass
from functools import wraps

import jwt
from flask import current_app, g, jsonify, request

from app.errors import NotFoundError


@dataclass(frozen=True)
class Principal:
    """Resolved identity of a request: the tenant and the acting user"""
    company_id: str
    user_id: str


class TenantScope:
    """
    Tenant-scoped access to the entity store

    Args:
        principal (Principal): Identity the scope is bound to
    """

    def __init__(self, principal):
        if not principal or not principal.company_id:
            raise ValueError('TenantScope requires a principal with a company_id')
        self.principal = principal

    @property
    def company_id(self):
        return self.principal.company_id

    @property
    def user_id(self):
        return self.principal.user_id

    def query(self, model):
        """Query over `model` restricted to this company"""
        return model.query.filter(model.company_id == self.company_id)

    def users(self):
        """Users holding at least one role in this company"""
        from app.models import User, UserCompanyRole

        return User.query.filter(
            User.company_roles.any(UserCompanyRole.company_id == self.company_id)
        )

    def get(self, model, entity_id, label=None, lock=False):
        """
        Fetch one row of this company by id

        Args:
            model: Tenant-owned model class
            entity_id: Primary key
            label (str): Name used in the not-found message
            lock (bool): Take a row lock (SELECT ... FOR UPDATE)

        Returns:
            The model instance

        Raises:
            NotFoundError: if absent or owned by another company
        """
        query = self.query(model).filter(model.id == entity_id)
        if lock:
            query = query.with_for_update()
        entity = query.first() if entity_id else None
        if entity is None:
            raise NotFoundError(f'{label or model.__name__} not found')
        return entity

    def get_user(self, user_id):
        from app.models import User

        user = self.users().filter(User.id == user_id).first() if user_id else None
        if user is None:
            raise NotFoundError('User not found')
        return user

    def stamp(self, values):
        """Return a copy of `values` owned by this company"""
        data = dict(values)
        data['company_id'] = self.company_id
        return data

    def __repr__(self):
        return f'<TenantScope company={self.company_id} user={self.user_id}>'


def resolve_principal(auth_header):
    """
    Decode a bearer token issued by the auth service into a Principal

    Raises:
        ValueError: if the token is missing, expired or malformed
    """
    if not auth_header:
        raise ValueError('Missing authorization header')

    token = auth_header.split(' ')[1] if ' ' in auth_header else auth_header
    try:
        payload = jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.ExpiredSignatureError:
        raise ValueError('Token has expired')
    except jwt.InvalidTokenError:
        raise ValueError('Invalid token')

    company_id = payload.get('company_id')
    user_id = payload.get('user_id')
    if not company_id or not user_id:
        raise ValueError('Token carries no company context')
    return Principal(company_id=str(company_id), user_id=str(user_id))


def tenant_required(f):
    """
    Decorator to ensure a resolved principal is present
    Stores the TenantScope in g for use in views
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            principal = resolve_principal(request.headers.get('Authorization'))
        except ValueError as e:
            return jsonify({'error': str(e), 'code': 'UNAUTHORIZED'}), 401

        g.principal = principal
        g.scope = TenantScope(principal)

        return f(*args, **kwargs)

    return decorated_function


def get_current_scope():
    """
    Helper function to get the tenant scope of the current request

    Returns:
        TenantScope: Current scope or None
    """
    return g.get('scope')
