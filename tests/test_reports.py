"""
Tests for dashboard summaries
"""
from app.services import invoices, loads, reports


def test_load_summary_counts_every_status(scope_a, scope_b, make_load):
    make_load(scope_a)
    accepted = make_load(scope_a)
    loads.update_load(scope_a, accepted.id, {'status': 'accepted'})
    make_load(scope_b)

    summary = reports.load_summary(scope_a)
    assert summary['total'] == 2
    assert summary['by_status'] == {
        'pending': 1,
        'accepted': 1,
        'in_transit': 0,
        'delivered': 0,
        'cancelled': 0,
    }


def test_invoice_summary(scope_a, scope_b, make_invoice):
    first = make_invoice(scope_a, amount='1000.00')
    make_invoice(scope_a, amount='500.00')
    make_invoice(scope_b, amount='9999.00')
    invoices.create_payment(scope_a, {'invoice_id': first.id, 'amount': '400.00', 'method': 'wire', 'status': 'completed'})
    invoices.create_payment(scope_a, {'invoice_id': first.id, 'amount': '100.00', 'method': 'wire'})

    summary = reports.invoice_summary(scope_a)
    assert summary == {'count': 2, 'billed': 1500.0, 'collected': 400.0, 'outstanding': 1100.0}


def test_dashboard_empty_company(scope_a):
    data = reports.dashboard(scope_a)
    assert data['loads']['total'] == 0
    assert data['invoices']['billed'] == 0.0
