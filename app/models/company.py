"""Company and role models"""
from app import db
from .base import BaseModel


class Company(BaseModel):
    """
    Company model - the tenant boundary
    Every business record belongs to exactly one company
    """
    __tablename__ = 'companies'

    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(100), unique=True, nullable=False, index=True)
    status = db.Column(db.String(50), nullable=False, default='active')

    contact_email = db.Column(db.String(255))
    contact_phone = db.Column(db.String(50))

    def __repr__(self):
        return f'<Company {self.name} ({self.slug})>'


class Role(BaseModel):
    """
    Role model - global catalogue of roles (admin, dispatcher, driver, ...)
    Users receive roles per company through UserCompanyRole
    """
    __tablename__ = 'roles'

    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.String(255))

    def __repr__(self):
        return f'<Role {self.name}>'
