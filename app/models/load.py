"""Load models"""
from app import db
from app.utils.helpers import utcnow
from .base import BaseModel, TenantMixin


class Load(BaseModel, TenantMixin):
    """
    Load model - core entity representing a freight shipment
    """
    __tablename__ = 'loads'
    __searchable__ = ('reference_number', 'commodity', 'pickup_address', 'delivery_address')
    __status_field__ = 'status'
    __date_field__ = 'pickup_date'

    STATUSES = ('pending', 'accepted', 'in_transit', 'delivered', 'cancelled')

    reference_number = db.Column(db.String(100), nullable=False)
    status = db.Column(db.String(50), nullable=False, default='pending')

    # Pickup
    pickup_address = db.Column(db.String(255), nullable=False)
    pickup_city = db.Column(db.String(100), nullable=False)
    pickup_state = db.Column(db.String(50), nullable=False)
    pickup_zip = db.Column(db.String(20), nullable=False)
    pickup_date = db.Column(db.DateTime(timezone=True), nullable=False)

    # Delivery
    delivery_address = db.Column(db.String(255), nullable=False)
    delivery_city = db.Column(db.String(100), nullable=False)
    delivery_state = db.Column(db.String(50), nullable=False)
    delivery_zip = db.Column(db.String(20), nullable=False)
    delivery_date = db.Column(db.DateTime(timezone=True), nullable=False)

    # Freight details
    commodity = db.Column(db.String(255))
    weight = db.Column(db.Float)
    dimensions = db.Column(db.String(100))
    hazmat = db.Column(db.Boolean, nullable=False, default=False)
    special_handling = db.Column(db.Text)

    rate = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default='USD')

    created_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))

    __table_args__ = (
        db.UniqueConstraint('company_id', 'reference_number', name='unique_reference_number_per_company'),
        db.Index('idx_loads_status', 'company_id', 'status'),
        db.Index('idx_loads_pickup_date', 'company_id', 'pickup_date'),
    )

    # Relationships
    assignments = db.relationship('LoadAssignment', backref='load', lazy='dynamic', cascade='all, delete-orphan')
    tracking = db.relationship('LoadTracking', backref='load', lazy='dynamic', cascade='all, delete-orphan')
    documents = db.relationship('LoadDocument', backref='load', lazy='dynamic', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Load {self.reference_number} - {self.status}>'


class LoadAssignment(BaseModel, TenantMixin):
    """
    Load Assignment model - links loads to drivers
    """
    __tablename__ = 'load_assignments'
    __status_field__ = 'status'
    __date_field__ = 'assigned_at'

    STATUSES = ('pending', 'accepted', 'rejected', 'completed')

    load_id = db.Column(db.String(36), db.ForeignKey('loads.id', ondelete='CASCADE'), nullable=False)
    driver_id = db.Column(db.String(36), db.ForeignKey('drivers.id', ondelete='CASCADE'), nullable=False)
    assigned_by = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='SET NULL'))

    status = db.Column(db.String(50), nullable=False, default='pending')

    assigned_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    accepted_at = db.Column(db.DateTime(timezone=True))
    rejected_at = db.Column(db.DateTime(timezone=True))
    completed_at = db.Column(db.DateTime(timezone=True))

    __table_args__ = (
        db.Index('idx_load_assignments_load_id', 'load_id'),
        db.Index('idx_load_assignments_driver_id', 'company_id', 'driver_id'),
    )

    def __repr__(self):
        return f'<LoadAssignment load={self.load_id} driver={self.driver_id} status={self.status}>'

    def stamp_status_time(self):
        """Record when the assignment reached its current status"""
        field = {
            'accepted': 'accepted_at',
            'rejected': 'rejected_at',
            'completed': 'completed_at',
        }.get(self.status)
        if field and getattr(self, field) is None:
            setattr(self, field, utcnow())


class LoadTracking(BaseModel, TenantMixin):
    """
    Load Tracking model - append-only audit trail of field events
    """
    __tablename__ = 'load_tracking'
    __status_field__ = 'status'
    __date_field__ = 'timestamp'

    STATUSES = ('pickup_arrived', 'pickup_completed', 'in_transit', 'delivery_arrived', 'delivered', 'failed')

    load_id = db.Column(db.String(36), db.ForeignKey('loads.id', ondelete='CASCADE'), nullable=False)

    status = db.Column(db.String(50), nullable=False)
    latitude = db.Column(db.Numeric(10, 8))
    longitude = db.Column(db.Numeric(11, 8))
    notes = db.Column(db.Text)
    timestamp = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        db.Index('idx_load_tracking_load_id', 'load_id', 'timestamp'),
    )

    def __repr__(self):
        return f'<LoadTracking load={self.load_id} {self.status}>'


class LoadDocument(BaseModel, TenantMixin):
    """
    Load Document model - BOL, POD, rate confirmations stored by URL
    """
    __tablename__ = 'load_documents'
    __date_field__ = 'uploaded_at'

    load_id = db.Column(db.String(36), db.ForeignKey('loads.id', ondelete='CASCADE'), nullable=False, index=True)

    type = db.Column(db.String(50), nullable=False)
    url = db.Column(db.String(500), nullable=False)
    uploaded_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f'<LoadDocument {self.type} load={self.load_id}>'
