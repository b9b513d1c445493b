"""
Pytest configuration and fixtures for Haulbase backend tests
"""
import itertools
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app import create_app, db
from app.middleware import Principal, TenantScope
from app.models import Company, Role, User, UserCompanyRole
from app.services import drivers, invoices, loads

_sequence = itertools.count(1)


@pytest.fixture(scope='function')
def app():
    """Create application instance with a fresh database per test"""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def roles(app):
    """Role catalogue"""
    created = {}
    for name in ('admin', 'dispatcher', 'driver'):
        role = Role(name=name, description=f'{name.title()} role')
        db.session.add(role)
        created[name] = role
    db.session.commit()
    return created


def _company(name, slug):
    company = Company(name=name, slug=slug, contact_email=f'ops@{slug}.example.com')
    db.session.add(company)
    db.session.commit()
    return company


@pytest.fixture
def company_a(app):
    return _company('Acme Freight', 'acme')


@pytest.fixture
def company_b(app):
    return _company('Bolt Logistics', 'bolt')


@pytest.fixture
def make_user(roles):
    """Factory: a user holding `role` in `company`"""
    def factory(company, role='dispatcher', **fields):
        n = next(_sequence)
        user = User(
            email=fields.pop('email', f'user{n}@example.com'),
            first_name=fields.pop('first_name', 'Test'),
            last_name=fields.pop('last_name', f'User{n}'),
            **fields
        )
        db.session.add(user)
        db.session.flush()
        db.session.add(UserCompanyRole(user_id=user.id, company_id=company.id, role_id=roles[role].id))
        db.session.commit()
        return user
    return factory


@pytest.fixture
def admin_a(company_a, make_user):
    return make_user(company_a, 'admin', first_name='Alice', last_name='Admin')


@pytest.fixture
def admin_b(company_b, make_user):
    return make_user(company_b, 'admin', first_name='Bob', last_name='Boss')


@pytest.fixture
def scope_a(company_a, admin_a):
    return TenantScope(Principal(company_id=company_a.id, user_id=admin_a.id))


@pytest.fixture
def scope_b(company_b, admin_b):
    return TenantScope(Principal(company_id=company_b.id, user_id=admin_b.id))


@pytest.fixture
def auth_headers(app):
    """Factory: bearer headers for a principal"""
    def factory(company_id, user_id, expires_in=timedelta(hours=1)):
        token = jwt.encode(
            {
                'company_id': company_id,
                'user_id': user_id,
                'exp': datetime.now(timezone.utc) + expires_in,
            },
            app.config['JWT_SECRET_KEY'],
            algorithm=app.config['JWT_ALGORITHM']
        )
        return {'Authorization': f'Bearer {token}'}
    return factory


@pytest.fixture
def headers_a(auth_headers, company_a, admin_a):
    return auth_headers(company_a.id, admin_a.id)


@pytest.fixture
def headers_b(auth_headers, company_b, admin_b):
    return auth_headers(company_b.id, admin_b.id)


@pytest.fixture
def make_driver(make_user):
    """Factory: a driver profile for a new user of the scope's company"""
    def factory(scope, **fields):
        company = db.session.get(Company, scope.company_id)
        user = make_user(company, 'driver')
        data = {'user_id': user.id, 'license_number': f'DL-{next(_sequence):05d}', 'vehicle_plate': 'TRK-100'}
        data.update(fields)
        return drivers.create_driver(scope, data)
    return factory


@pytest.fixture
def load_data():
    def factory(**overrides):
        pickup = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
        data = {
            'reference_number': f'LD-{next(_sequence):05d}',
            'pickup_address': '100 Dock St',
            'pickup_city': 'Newark',
            'pickup_state': 'NJ',
            'pickup_zip': '07102',
            'pickup_date': pickup.isoformat(),
            'delivery_address': '200 Warehouse Ave',
            'delivery_city': 'Columbus',
            'delivery_state': 'OH',
            'delivery_zip': '43004',
            'delivery_date': (pickup + timedelta(days=2)).isoformat(),
            'commodity': 'Steel coils',
            'weight': 42000,
            'rate': '2450.00',
        }
        data.update(overrides)
        return data
    return factory


@pytest.fixture
def make_load(load_data):
    def factory(scope, **overrides):
        return loads.create_load(scope, load_data(**overrides))
    return factory


@pytest.fixture
def make_invoice():
    def factory(scope, amount='1000.00', **overrides):
        data = {
            'invoice_number': f'INV-{next(_sequence):05d}',
            'amount': amount,
            'due_date': '2024-04-30T00:00:00Z',
        }
        data.update(overrides)
        return invoices.create_invoice(scope, data)
    return factory
