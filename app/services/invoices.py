"""
Invoices and the payments recorded against them
"""
import logging

from flask import current_app

from app import db
from app.errors import ConflictError, ImmutableStateError
from app.models import Driver, Invoice, Load, Payment
from app.schemas import CreateInvoiceInput, UpdateInvoiceInput, UpdatePaymentInput
from app.services import reconciliation
from app.services.base import atomic, apply_updates, reading
from app.services.query import paginate
from app.services.transitions import ensure_payment_mutable, ensure_transition, ensure_valid_status
from app.utils.helpers import to_decimal, utcnow

logger = logging.getLogger(__name__)


def _ensure_number_available(scope, invoice_number):
    if scope.query(Invoice).filter(Invoice.invoice_number == invoice_number).first():
        raise ConflictError(f'Invoice number {invoice_number} already exists')


# ============ INVOICES ============

def create_invoice(scope, data):
    payload = CreateInvoiceInput.from_dict(data)
    ensure_valid_status(Invoice, payload.status)

    with atomic():
        _ensure_number_available(scope, payload.invoice_number)
        if payload.driver_id:
            scope.get(Driver, payload.driver_id, label='Driver')
        if payload.load_id:
            scope.get(Load, payload.load_id, label='Load')

        invoice = Invoice(**scope.stamp({
            'invoice_number': payload.invoice_number,
            'driver_id': payload.driver_id,
            'load_id': payload.load_id,
            'amount': payload.amount,
            'currency': payload.currency or current_app.config['DEFAULT_CURRENCY'],
            'status': payload.status,
            'issued_date': utcnow(),
            'due_date': payload.due_date,
            'description': payload.description,
            'notes': payload.notes,
        }))
        db.session.add(invoice)

    logger.info('Invoice %s created for %s', payload.invoice_number, payload.amount)
    return invoice


def get_invoice(scope, invoice_id):
    with reading():
        return scope.get(Invoice, invoice_id, label='Invoice')


def invoice_details(scope, invoice_id):
    """Invoice fields plus total_paid and remaining_balance"""
    with reading():
        invoice = scope.get(Invoice, invoice_id, label='Invoice')
        data = invoice.to_dict()
        data.update(reconciliation.balance_summary(invoice))
        return data


def list_invoices(scope, params=None):
    with reading():
        return paginate(scope.query(Invoice), Invoice, params)


def update_invoice(scope, invoice_id, data):
    payload = UpdateInvoiceInput.from_dict(data)
    changes = payload.changes()

    with atomic():
        invoice = scope.get(Invoice, invoice_id, label='Invoice', lock='amount' in changes)
        if 'status' in changes:
            ensure_transition(Invoice, invoice.status, changes['status'])
        if 'amount' in changes:
            reconciliation.ensure_amount_covers_payments(invoice, changes['amount'])
        apply_updates(invoice, changes)

    return invoice


def delete_invoice(scope, invoice_id):
    """
    Delete an invoice and its open payments

    Invoices with completed or refunded payments are kept as the record of
    money that moved.
    """
    with atomic():
        invoice = scope.get(Invoice, invoice_id, label='Invoice', lock=True)
        settled = invoice.payments.filter(Payment.status.in_(Payment.FINAL_STATUSES)).count()
        if settled:
            logger.warning('Refused to delete invoice %s with %d settled payments', invoice_id, settled)
            raise ImmutableStateError('Cannot delete an invoice with completed or refunded payments')

        removed = Payment.query.filter(Payment.invoice_id == invoice.id).delete(synchronize_session=False)
        db.session.delete(invoice)

    logger.info('Invoice %s deleted with %d open payments', invoice_id, removed)


# ============ PAYMENTS ============

def create_payment(scope, data):
    return reconciliation.record_payment(scope, data)


def get_payment(scope, payment_id):
    with reading():
        return scope.get(Payment, payment_id, label='Payment')


def list_payments(scope, params=None, invoice_id=None):
    with reading():
        query = scope.query(Payment)
        if invoice_id:
            query = query.filter(Payment.invoice_id == invoice_id)
        return paginate(query, Payment, params)


def update_payment(scope, payment_id, data):
    """
    Partially update a pending or failed payment

    Changing the amount or completing the payment re-checks the invoice
    balance under the invoice row lock.
    """
    payload = UpdatePaymentInput.from_dict(data)
    changes = payload.changes()

    with atomic():
        payment = scope.get(Payment, payment_id, label='Payment')
        ensure_payment_mutable(payment)

        target = changes.get('status', payment.status)
        if 'status' in changes:
            ensure_transition(Payment, payment.status, target)

        amount = changes.get('amount', to_decimal(payment.amount))
        amount_changed = 'amount' in changes and amount != to_decimal(payment.amount)
        if payment.invoice_id and (amount_changed or target == 'completed'):
            invoice = scope.get(Invoice, payment.invoice_id, label='Invoice', lock=True)
            reconciliation.ensure_within_balance(invoice, amount, exclude_payment_id=payment.id)

        apply_updates(payment, changes)
        if target == 'completed':
            payment.mark_completed()

    if target == 'completed':
        logger.info('Payment %s completed for %s', payment_id, amount)
    return payment


def delete_payment(scope, payment_id):
    with atomic():
        payment = scope.get(Payment, payment_id, label='Payment')
        ensure_payment_mutable(payment)
        db.session.delete(payment)

    logger.info('Payment %s deleted', payment_id)
