"""Payment model"""
from app import db
from app.utils.helpers import utcnow
from .base import BaseModel, TenantMixin


class Payment(BaseModel, TenantMixin):
    """
    Payment model - money received against an invoice
    Completed and refunded payments are frozen
    """
    __tablename__ = 'payments'
    __searchable__ = ('transaction_id',)
    __status_field__ = 'status'

    STATUSES = ('pending', 'completed', 'failed', 'refunded')
    METHODS = ('card', 'ach', 'wire', 'check', 'cash')
    FINAL_STATUSES = ('completed', 'refunded')

    invoice_id = db.Column(db.String(36), db.ForeignKey('invoices.id', ondelete='RESTRICT'))

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default='USD')
    status = db.Column(db.String(50), nullable=False, default='pending')
    method = db.Column(db.String(20), nullable=False)

    transaction_id = db.Column(db.String(255))
    paid_at = db.Column(db.DateTime(timezone=True))

    __table_args__ = (
        db.Index('idx_payments_invoice_id', 'invoice_id'),
        db.Index('idx_payments_status', 'company_id', 'status'),
    )

    def __repr__(self):
        return f'<Payment {self.method} - ${self.amount} ({self.status})>'

    @property
    def is_final(self):
        return self.status in self.FINAL_STATUSES

    def mark_completed(self):
        """Mark payment as completed"""
        self.status = 'completed'
        if not self.paid_at:
            self.paid_at = utcnow()
