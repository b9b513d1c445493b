"""User models"""
from app import db
from app.utils.helpers import hash_password, check_password
from .base import BaseModel, TenantMixin


class User(BaseModel):
    """
    User model - admins, dispatchers and drivers
    A user is global; membership in a company is expressed by role rows
    """
    __tablename__ = 'users'
    __searchable__ = ('email', 'first_name', 'last_name')
    __status_field__ = 'status'

    STATUSES = ('active', 'inactive', 'suspended')

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255))

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(50))
    avatar_url = db.Column(db.String(500))

    status = db.Column(db.String(50), nullable=False, default='active')

    # Relationships
    company_roles = db.relationship('UserCompanyRole', backref='user', lazy='dynamic')

    def __repr__(self):
        return f'<User {self.email}>'

    @property
    def full_name(self):
        """Get full name"""
        return f'{self.first_name} {self.last_name}'

    def set_password(self, password):
        self.password_hash = hash_password(password)

    def check_password(self, password):
        return check_password(password, self.password_hash)

    def to_dict(self):
        """Convert to dictionary without credentials"""
        data = super().to_dict(exclude=['password_hash'])
        data['full_name'] = self.full_name
        return data


class UserCompanyRole(BaseModel, TenantMixin):
    """
    Membership of a user in a company with a given role
    """
    __tablename__ = 'user_company_roles'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    role_id = db.Column(db.String(36), db.ForeignKey('roles.id'), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'company_id', 'role_id', name='unique_user_role_per_company'),
        db.Index('idx_user_company_roles_user_id', 'user_id'),
    )

    role = db.relationship('Role')

    def __repr__(self):
        return f'<UserCompanyRole user={self.user_id} company={self.company_id}>'
