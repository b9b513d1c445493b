"""
Derived money and rating values

Invoice balances are always computed from completed payments and a driver's
rating from its rating rows; neither is ever edited directly. Both are
recomputed inside the transaction that changes their inputs, with the parent
row locked so concurrent writers queue behind each other.
"""
import logging

from flask import current_app
from sqlalchemy import func

from app import db
from app.errors import OverpaymentError
from app.models import Driver, DriverRating, Invoice, Load, Payment
from app.schemas import CreatePaymentInput, RatingInput
from app.services.base import atomic
from app.services.transitions import ensure_transition
from app.utils.helpers import average, format_currency, to_decimal, utcnow

logger = logging.getLogger(__name__)


def completed_total(invoice, exclude_payment_id=None):
    """Sum of the invoice's completed payments"""
    query = db.session.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
        Payment.invoice_id == invoice.id,
        Payment.company_id == invoice.company_id,
        Payment.status == 'completed',
    )
    if exclude_payment_id:
        query = query.filter(Payment.id != exclude_payment_id)
    return to_decimal(query.scalar())


def remaining_balance(invoice):
    return to_decimal(invoice.amount) - completed_total(invoice)


def ensure_within_balance(invoice, amount, exclude_payment_id=None):
    """
    Raise OverpaymentError if `amount` on top of the completed payments would
    exceed the invoice amount

    The caller must hold the invoice row lock.
    """
    paid = completed_total(invoice, exclude_payment_id)
    amount = to_decimal(amount)
    if paid + amount > to_decimal(invoice.amount):
        remaining = to_decimal(invoice.amount) - paid
        logger.warning(
            'Overpayment rejected on invoice %s: amount=%s remaining=%s',
            invoice.id, amount, remaining
        )
        raise OverpaymentError(
            f'Payment of {format_currency(amount, invoice.currency)} exceeds the remaining balance '
            f'of {format_currency(remaining, invoice.currency)} '
            f'on invoice {invoice.invoice_number}'
        )


def ensure_amount_covers_payments(invoice, new_amount):
    """An invoice may not be lowered below what has already been collected"""
    paid = completed_total(invoice)
    if to_decimal(new_amount) < paid:
        logger.warning('Invoice %s amount %s below completed total %s', invoice.id, new_amount, paid)
        raise OverpaymentError(
            f'Invoice amount cannot be lower than the {format_currency(paid, invoice.currency)} already paid'
        )


def balance_summary(invoice):
    total_paid = completed_total(invoice)
    return {
        'total_paid': float(total_paid),
        'remaining_balance': float(to_decimal(invoice.amount) - total_paid),
    }


def record_payment(scope, data):
    """
    Record a payment against an invoice of the caller's company

    The invoice row is locked before the completed sum is read, so two
    concurrent payments cannot both pass the balance check.

    Args:
        scope (TenantScope): Caller's tenant scope
        data (dict): invoice_id, amount, method, and optionally status,
            transaction_id, currency

    Returns:
        Payment: The stored payment

    Raises:
        ValidationError, NotFoundError, InvalidStatusError, OverpaymentError
    """
    payload = CreatePaymentInput.from_dict(data)
    ensure_transition(Payment, None, payload.status)

    with atomic():
        invoice = scope.get(Invoice, payload.invoice_id, label='Invoice', lock=True)
        ensure_within_balance(invoice, payload.amount)

        payment = Payment(**scope.stamp({
            'invoice_id': invoice.id,
            'amount': payload.amount,
            'method': payload.method,
            'status': payload.status,
            'transaction_id': payload.transaction_id,
            'currency': payload.currency or invoice.currency,
        }))
        if payment.status == 'completed':
            payment.paid_at = utcnow()
        db.session.add(payment)

    logger.info(
        'Payment %s recorded on invoice %s: %s %s (%s)',
        payment.id, payload.invoice_id, payload.amount, payment.currency, payment.status
    )
    return payment


def recompute_driver_rating(driver):
    """Average of all the driver's ratings, or the configured default"""
    count, total = db.session.query(
        func.count(DriverRating.id),
        func.coalesce(func.sum(DriverRating.rating), 0)
    ).filter(DriverRating.driver_id == driver.id).one()
    return average(total, count, current_app.config['DEFAULT_DRIVER_RATING'])


def record_rating(scope, driver_id, data):
    """
    Store a rating for a driver and refresh the driver's average

    The insert and the new average are committed together; the driver row
    is locked so concurrent ratings are averaged one after another.

    Returns:
        DriverRating: The stored rating (driver.rating is already updated)
    """
    payload = RatingInput.from_dict(data)

    with atomic():
        driver = scope.get(Driver, driver_id, label='Driver', lock=True)
        if payload.load_id:
            scope.get(Load, payload.load_id, label='Load')

        entry = DriverRating(**scope.stamp({
            'driver': driver,
            'load_id': payload.load_id,
            'rating': payload.rating,
            'comment': payload.comment,
        }))
        db.session.add(entry)
        db.session.flush()

        driver.rating = recompute_driver_rating(driver)

    logger.info('Driver %s rated %s, average now %s', driver.id, payload.rating, driver.rating)
    return entry
