from flask import Blueprint, request, jsonify
from app.middleware import tenant_required, get_current_scope
from app.services import invoices
from app.services.query import ListParams

invoices_bp = Blueprint('invoices', __name__)
payments_bp = Blueprint('payments', __name__)


# ============ INVOICES ============

@invoices_bp.route('', methods=['GET'])
@tenant_required
def list_invoices():
    """
    List invoices of the company
    GET /api/v1/invoices?page=1&limit=20&search=INV-&status=pending
        &date_from=2024-01-01&date_to=2024-01-31
    """
    page = invoices.list_invoices(get_current_scope(), ListParams.from_args(request.args))
    return jsonify(page.to_dict()), 200


@invoices_bp.route('', methods=['POST'])
@tenant_required
def create_invoice():
    """
    Create an invoice
    POST /api/v1/invoices
    Body: {"invoice_number", "amount", "due_date", "driver_id"?, "load_id"?,
           "description"?, "notes"?}
    """
    invoice = invoices.create_invoice(get_current_scope(), request.get_json(silent=True))
    return jsonify(invoice.to_dict()), 201


@invoices_bp.route('/<invoice_id>', methods=['GET'])
@tenant_required
def get_invoice(invoice_id):
    """Invoice with total_paid and remaining_balance"""
    return jsonify(invoices.invoice_details(get_current_scope(), invoice_id)), 200


@invoices_bp.route('/<invoice_id>', methods=['PATCH'])
@tenant_required
def update_invoice(invoice_id):
    invoice = invoices.update_invoice(get_current_scope(), invoice_id, request.get_json(silent=True))
    return jsonify(invoice.to_dict()), 200


@invoices_bp.route('/<invoice_id>', methods=['DELETE'])
@tenant_required
def delete_invoice(invoice_id):
    invoices.delete_invoice(get_current_scope(), invoice_id)
    return jsonify({'message': 'Invoice deleted'}), 200


@invoices_bp.route('/<invoice_id>/payments', methods=['GET'])
@tenant_required
def list_invoice_payments(invoice_id):
    scope = get_current_scope()
    invoices.get_invoice(scope, invoice_id)
    page = invoices.list_payments(scope, ListParams.from_args(request.args), invoice_id=invoice_id)
    return jsonify(page.to_dict()), 200


# ============ PAYMENTS ============

@payments_bp.route('', methods=['GET'])
@tenant_required
def list_payments():
    """
    List payments of the company
    GET /api/v1/payments?page=1&limit=20&status=completed&invoice_id=uuid
    """
    page = invoices.list_payments(
        get_current_scope(),
        ListParams.from_args(request.args),
        invoice_id=request.args.get('invoice_id'),
    )
    return jsonify(page.to_dict()), 200


@payments_bp.route('', methods=['POST'])
@tenant_required
def create_payment():
    """
    Record a payment against an invoice
    POST /api/v1/payments
    Body: {"invoice_id", "amount", "method", "status"?, "transaction_id"?}

    Rejected with 422 when completed payments would exceed the invoice amount.
    """
    payment = invoices.create_payment(get_current_scope(), request.get_json(silent=True))
    return jsonify(payment.to_dict()), 201


@payments_bp.route('/<payment_id>', methods=['GET'])
@tenant_required
def get_payment(payment_id):
    payment = invoices.get_payment(get_current_scope(), payment_id)
    return jsonify(payment.to_dict()), 200


@payments_bp.route('/<payment_id>', methods=['PATCH'])
@tenant_required
def update_payment(payment_id):
    payment = invoices.update_payment(get_current_scope(), payment_id, request.get_json(silent=True))
    return jsonify(payment.to_dict()), 200


@payments_bp.route('/<payment_id>', methods=['DELETE'])
@tenant_required
def delete_payment(payment_id):
    invoices.delete_payment(get_current_scope(), payment_id)
    return jsonify({'message': 'Payment deleted'}), 200
