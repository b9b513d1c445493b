"""Invoice model"""
from app import db
from app.utils.helpers import utcnow
from .base import BaseModel, TenantMixin


class Invoice(BaseModel, TenantMixin):
    """
    Invoice model - bills raised for loads or drivers
    The paid total is always derived from completed payments; it is not
    stored on the invoice
    """
    __tablename__ = 'invoices'
    __searchable__ = ('invoice_number',)
    __status_field__ = 'status'
    __date_field__ = 'issued_date'

    STATUSES = ('draft', 'pending', 'sent', 'partial', 'paid', 'overdue', 'cancelled')

    driver_id = db.Column(db.String(36), db.ForeignKey('drivers.id', ondelete='SET NULL'))
    load_id = db.Column(db.String(36), db.ForeignKey('loads.id', ondelete='SET NULL'))

    invoice_number = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(50), nullable=False, default='pending')

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default='USD')

    issued_date = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    due_date = db.Column(db.DateTime(timezone=True), nullable=False)

    description = db.Column(db.Text)
    notes = db.Column(db.Text)

    __table_args__ = (
        db.UniqueConstraint('company_id', 'invoice_number', name='unique_invoice_number_per_company'),
        db.Index('idx_invoices_status', 'company_id', 'status'),
        db.Index('idx_invoices_due_date', 'company_id', 'due_date'),
    )

    # Relationships
    payments = db.relationship('Payment', backref='invoice', lazy='dynamic')

    def __repr__(self):
        return f'<Invoice {self.invoice_number} - ${self.amount}>'
