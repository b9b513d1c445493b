"""
Dashboard summaries

Aggregated, tenant-scoped figures handed to the report generator.
"""
from sqlalchemy import func, select

from app import db
from app.errors import ValidationError
from app.models import Invoice, Load, Payment
from app.services.base import reading
from app.utils.helpers import to_decimal


def _bounded(query, column, date_from=None, date_to=None):
    if date_from and date_to and date_from > date_to:
        raise ValidationError('date_from cannot be after date_to')
    if date_from:
        query = query.filter(column >= date_from)
    if date_to:
        query = query.filter(column <= date_to)
    return query


def load_summary(scope, date_from=None, date_to=None):
    """Load counts per status (every status present, zero if unused)"""
    with reading():
        query = db.session.query(Load.status, func.count(Load.id)).filter(
            Load.company_id == scope.company_id
        )
        query = _bounded(query, Load.pickup_date, date_from, date_to)
        counts = dict(query.group_by(Load.status).all())

    by_status = {status: counts.get(status, 0) for status in Load.STATUSES}
    return {'total': sum(by_status.values()), 'by_status': by_status}


def invoice_summary(scope, date_from=None, date_to=None):
    """Billed, collected and outstanding totals over invoices issued in range"""
    with reading():
        invoices = db.session.query(Invoice.id).filter(
            Invoice.company_id == scope.company_id,
            Invoice.status != 'cancelled',
        )
        invoices = _bounded(invoices, Invoice.issued_date, date_from, date_to)
        invoice_ids = invoices.subquery()

        billed = db.session.query(func.coalesce(func.sum(Invoice.amount), 0)).filter(
            Invoice.id.in_(select(invoice_ids.c.id))
        ).scalar()
        collected = db.session.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
            Payment.company_id == scope.company_id,
            Payment.status == 'completed',
            Payment.invoice_id.in_(select(invoice_ids.c.id)),
        ).scalar()
        count = db.session.query(func.count()).select_from(invoice_ids).scalar()

    billed = to_decimal(billed)
    collected = to_decimal(collected)
    return {
        'count': count,
        'billed': float(billed),
        'collected': float(collected),
        'outstanding': float(billed - collected),
    }


def dashboard(scope, date_from=None, date_to=None):
    return {
        'loads': load_summary(scope, date_from, date_to),
        'invoices': invoice_summary(scope, date_from, date_to),
    }
