"""
Tests for tenant isolation
"""
from datetime import timedelta

import pytest

from app.errors import NotFoundError
from app.middleware import Principal, TenantScope, resolve_principal
from app.models import Invoice, Load
from app.services import invoices, loads
from app.services.query import ListParams


class TestTenantScope:
    """Test the scope every service goes through"""

    def test_requires_company(self):
        with pytest.raises(ValueError):
            TenantScope(Principal(company_id='', user_id='u1'))

    def test_query_sees_only_own_rows(self, scope_a, scope_b, make_load):
        make_load(scope_a)
        make_load(scope_a)
        make_load(scope_b)

        assert scope_a.query(Load).count() == 2
        assert scope_b.query(Load).count() == 1

    def test_foreign_row_looks_absent(self, scope_a, scope_b, make_load):
        foreign = make_load(scope_b)

        with pytest.raises(NotFoundError) as foreign_exc:
            scope_a.get(Load, foreign.id, label='Load')
        with pytest.raises(NotFoundError) as missing_exc:
            scope_a.get(Load, 'does-not-exist', label='Load')
        assert str(foreign_exc.value) == str(missing_exc.value) == 'Load not found'

    def test_stamp_overrides_company(self, scope_a, scope_b):
        stamped = scope_a.stamp({'company_id': scope_b.company_id, 'name': 'x'})
        assert stamped == {'company_id': scope_a.company_id, 'name': 'x'}

    def test_users_scoped_by_role_membership(self, scope_a, scope_b):
        ids = {u.id for u in scope_a.users()}
        assert scope_a.user_id in ids
        assert scope_b.user_id not in ids

    def test_user_in_two_companies_visible_to_both(self, scope_a, scope_b, company_b, make_user, roles):
        from app import db
        from app.models import UserCompanyRole

        shared = make_user(company_b)
        db.session.add(UserCompanyRole(user_id=shared.id, company_id=scope_a.company_id, role_id=roles['driver'].id))
        db.session.commit()

        assert scope_a.get_user(shared.id).id == shared.id
        assert scope_b.get_user(shared.id).id == shared.id


class TestServicesAcrossTenants:
    """Cross-tenant access through the services never leaks or mutates"""

    def test_update_and_delete_foreign_load(self, scope_a, scope_b, make_load):
        foreign = make_load(scope_b)

        with pytest.raises(NotFoundError):
            loads.update_load(scope_a, foreign.id, {'status': 'cancelled'})
        with pytest.raises(NotFoundError):
            loads.delete_load(scope_a, foreign.id)
        assert loads.get_load(scope_b, foreign.id).status == 'pending'

    def test_search_cannot_widen_scope(self, scope_a, scope_b, make_load):
        make_load(scope_a, commodity='Lumber')
        make_load(scope_b, commodity='Lumber')

        page = loads.list_loads(scope_a, ListParams(search='lumber', status='all'))
        assert page.total == 1
        assert page.items[0].company_id == scope_a.company_id

    def test_status_filter_stays_in_company(self, scope_a, scope_b, make_driver):
        from app.services import drivers

        make_driver(scope_a)
        make_driver(scope_b)
        page = drivers.list_drivers(scope_a, ListParams(status='active'))
        assert page.total == 1
        assert all(d.company_id == scope_a.company_id for d in page.items)

    def test_foreign_invoice_delete(self, scope_a, scope_b, make_invoice):
        foreign = make_invoice(scope_b)
        with pytest.raises(NotFoundError):
            invoices.delete_invoice(scope_a, foreign.id)
        assert Invoice.query.count() == 1


class TestResolvePrincipal:
    """Test bearer token decoding"""

    def test_valid_token(self, app, auth_headers):
        header = auth_headers('c1', 'u1')['Authorization']
        assert resolve_principal(header) == Principal(company_id='c1', user_id='u1')

    def test_missing_header(self, app):
        with pytest.raises(ValueError):
            resolve_principal(None)

    def test_expired_token(self, app, auth_headers):
        header = auth_headers('c1', 'u1', expires_in=timedelta(seconds=-10))['Authorization']
        with pytest.raises(ValueError, match='expired'):
            resolve_principal(header)

    def test_garbage_token(self, app):
        with pytest.raises(ValueError):
            resolve_principal('Bearer not.a.token')
