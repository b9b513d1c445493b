"""Driver models"""
from app import db
from app.utils.helpers import utcnow
from .base import BaseModel, TenantMixin


class Driver(BaseModel, TenantMixin):
    """
    Driver model - driving profile of a company user
    `rating` is a materialized average of DriverRating rows and is never
    edited directly
    """
    __tablename__ = 'drivers'
    __searchable__ = ('license_number', 'vehicle_plate', 'vehicle_vin')
    __status_field__ = 'status'

    STATUSES = ('active', 'inactive', 'on_leave', 'suspended')

    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, unique=True)

    license_number = db.Column(db.String(100), nullable=False)
    license_class = db.Column(db.String(20))
    license_expiry = db.Column(db.DateTime(timezone=True))

    vehicle_type = db.Column(db.String(100))
    vehicle_vin = db.Column(db.String(17))
    vehicle_plate = db.Column(db.String(20))

    status = db.Column(db.String(50), nullable=False, default='active')
    rating = db.Column(db.Numeric(3, 2), nullable=False, default=5)

    __table_args__ = (
        db.Index('idx_drivers_status', 'company_id', 'status'),
    )

    # Relationships
    user = db.relationship('User', backref=db.backref('driver_profile', uselist=False))
    documents = db.relationship('DriverDocument', backref='driver', lazy='dynamic', cascade='all, delete-orphan')
    locations = db.relationship('DriverLocation', backref='driver', lazy='dynamic', cascade='all, delete-orphan')
    ratings = db.relationship('DriverRating', backref='driver', lazy='dynamic', cascade='all, delete-orphan')
    assignments = db.relationship('LoadAssignment', backref='driver', lazy='dynamic', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Driver {self.license_number} - {self.status}>'

    def to_dict(self, include_user=False):
        data = super().to_dict()
        if include_user and self.user:
            data['user'] = {
                'id': self.user.id,
                'email': self.user.email,
                'first_name': self.user.first_name,
                'last_name': self.user.last_name,
                'phone': self.user.phone,
            }
        return data


class DriverDocument(BaseModel, TenantMixin):
    """
    Driver Document model - compliance paperwork stored by URL
    """
    __tablename__ = 'driver_documents'
    __status_field__ = 'status'
    __date_field__ = 'uploaded_at'

    TYPES = ('license', 'insurance', 'medical_cert', 'background_check')
    STATUSES = ('pending', 'approved', 'rejected', 'expired')

    driver_id = db.Column(db.String(36), db.ForeignKey('drivers.id', ondelete='CASCADE'), nullable=False, index=True)

    type = db.Column(db.String(50), nullable=False)
    document_url = db.Column(db.String(500), nullable=False)
    expiry_date = db.Column(db.DateTime(timezone=True))
    status = db.Column(db.String(50), nullable=False, default='pending')
    uploaded_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f'<DriverDocument {self.type} driver={self.driver_id}>'


class DriverLocation(BaseModel, TenantMixin):
    """
    Driver Location model - append-only position history
    """
    __tablename__ = 'driver_locations'
    __date_field__ = 'timestamp'

    driver_id = db.Column(db.String(36), db.ForeignKey('drivers.id', ondelete='CASCADE'), nullable=False)

    latitude = db.Column(db.Numeric(10, 8), nullable=False)
    longitude = db.Column(db.Numeric(11, 8), nullable=False)
    accuracy = db.Column(db.Float)
    timestamp = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        db.Index('idx_driver_locations_driver_id', 'driver_id', 'timestamp'),
    )

    def __repr__(self):
        return f'<DriverLocation driver={self.driver_id} ({self.latitude}, {self.longitude})>'


class DriverRating(BaseModel, TenantMixin):
    """
    Driver Rating model - append-only, feeds Driver.rating
    """
    __tablename__ = 'driver_ratings'

    driver_id = db.Column(db.String(36), db.ForeignKey('drivers.id', ondelete='CASCADE'), nullable=False, index=True)
    load_id = db.Column(db.String(36), db.ForeignKey('loads.id', ondelete='SET NULL'))

    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text)

    def __repr__(self):
        return f'<DriverRating driver={self.driver_id} {self.rating}>'
