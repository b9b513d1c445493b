"""
Tests for drivers, their documents, locations and ratings
"""
from decimal import Decimal

import pytest

from app.errors import ConflictError, InvalidStatusError, NotFoundError, ValidationError
from app.models import Driver, DriverRating
from app.services import drivers


class TestRatings:
    """Test the derived driver rating"""

    def test_new_driver_has_default_rating(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        assert driver.rating == Decimal('5.00')

    def test_average_is_recomputed(self, scope_a, make_driver):
        driver = make_driver(scope_a)

        drivers.rate_driver(scope_a, driver.id, {'rating': 5})
        drivers.rate_driver(scope_a, driver.id, {'rating': 4})
        assert drivers.get_driver(scope_a, driver.id).rating == Decimal('4.50')

        drivers.rate_driver(scope_a, driver.id, {'rating': 5, 'comment': 'On time'})
        assert drivers.get_driver(scope_a, driver.id).rating == Decimal('4.67')

    def test_rating_rounds_half_up(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        for value in (1, 2, 2, 2, 2, 2, 2, 2):
            drivers.rate_driver(scope_a, driver.id, {'rating': value})
        # 15 / 8 = 1.875
        assert drivers.get_driver(scope_a, driver.id).rating == Decimal('1.88')

    @pytest.mark.parametrize('value', [0, 6, 4.5, 'five', True, float('nan'), float('inf'), float('-inf')])
    def test_out_of_range_rating_rejected(self, scope_a, make_driver, value):
        driver = make_driver(scope_a)
        with pytest.raises(ValidationError):
            drivers.rate_driver(scope_a, driver.id, {'rating': value})
        assert DriverRating.query.count() == 0
        assert drivers.get_driver(scope_a, driver.id).rating == Decimal('5.00')

    def test_rating_cannot_be_set_directly(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        with pytest.raises(ValidationError):
            drivers.update_driver(scope_a, driver.id, {'rating': 1})

    def test_rating_for_load_of_other_company_rejected(self, scope_a, scope_b, make_driver, make_load):
        driver = make_driver(scope_a)
        foreign = make_load(scope_b)
        with pytest.raises(NotFoundError):
            drivers.rate_driver(scope_a, driver.id, {'rating': 3, 'load_id': foreign.id})
        assert DriverRating.query.count() == 0

    def test_ratings_are_listed(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        drivers.rate_driver(scope_a, driver.id, {'rating': 3})
        drivers.rate_driver(scope_a, driver.id, {'rating': 4})
        assert drivers.list_ratings(scope_a, driver.id).total == 2


class TestDrivers:
    """Test driver profiles"""

    def test_user_must_belong_to_company(self, scope_a, company_b, make_user):
        outsider = make_user(company_b, 'driver')
        with pytest.raises(NotFoundError):
            drivers.create_driver(scope_a, {'user_id': outsider.id, 'license_number': 'X1'})

    def test_one_profile_per_user(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        with pytest.raises(ConflictError):
            drivers.create_driver(scope_a, {'user_id': driver.user_id, 'license_number': 'X2'})

    def test_license_number_required(self, scope_a, company_a, make_user):
        user = make_user(company_a, 'driver')
        with pytest.raises(ValidationError):
            drivers.create_driver(scope_a, {'user_id': user.id, 'license_number': '  '})

    def test_status_enum(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        with pytest.raises(InvalidStatusError):
            drivers.update_driver(scope_a, driver.id, {'status': 'retired'})
        assert drivers.update_driver(scope_a, driver.id, {'status': 'on_leave'}).status == 'on_leave'

    def test_partial_update(self, scope_a, make_driver):
        driver = make_driver(scope_a, vehicle_type='Reefer')
        updated = drivers.update_driver(scope_a, driver.id, {'vehicle_plate': 'NEW-1'})
        assert updated.vehicle_plate == 'NEW-1'
        assert updated.vehicle_type == 'Reefer'

    def test_search(self, scope_a, make_driver):
        from app.services.query import ListParams

        make_driver(scope_a, vehicle_plate='ABC-123')
        make_driver(scope_a, vehicle_plate='XYZ-999')
        page = drivers.list_drivers(scope_a, ListParams(search='abc'))
        assert [d.vehicle_plate for d in page.items] == ['ABC-123']

    def test_delete_removes_children(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        drivers.rate_driver(scope_a, driver.id, {'rating': 4})
        drivers.record_location(scope_a, driver.id, {'latitude': 40.0, 'longitude': -74.0})

        drivers.delete_driver(scope_a, driver.id)
        assert Driver.query.count() == 0
        assert DriverRating.query.count() == 0


class TestDocumentsAndLocations:
    """Test driver documents and GPS fixes"""

    def test_document_lifecycle(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        document = drivers.add_document(scope_a, driver.id, {
            'type': 'license',
            'document_url': 'https://files.example.com/license.pdf',
        })
        assert document.status == 'pending'

        approved = drivers.update_document_status(scope_a, driver.id, document.id, {'status': 'approved'})
        assert approved.status == 'approved'

        with pytest.raises(InvalidStatusError):
            drivers.update_document_status(scope_a, driver.id, document.id, {'status': 'shredded'})

        drivers.delete_document(scope_a, driver.id, document.id)
        with pytest.raises(NotFoundError):
            drivers.get_document(scope_a, driver.id, document.id)

    def test_document_type_and_url_validated(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        with pytest.raises(ValidationError):
            drivers.add_document(scope_a, driver.id, {'type': 'passport', 'document_url': 'https://x.io/a'})
        with pytest.raises(ValidationError):
            drivers.add_document(scope_a, driver.id, {'type': 'license', 'document_url': 'not a url'})

    def test_document_of_another_driver_not_found(self, scope_a, make_driver):
        first = make_driver(scope_a)
        second = make_driver(scope_a)
        document = drivers.add_document(scope_a, first.id, {
            'type': 'insurance',
            'document_url': 'https://files.example.com/ins.pdf',
        })
        with pytest.raises(NotFoundError):
            drivers.get_document(scope_a, second.id, document.id)

    @pytest.mark.parametrize('lat, lon', [(91, 0), (-91, 0), (0, 181), (0, -181)])
    def test_coordinates_out_of_range(self, scope_a, make_driver, lat, lon):
        driver = make_driver(scope_a)
        with pytest.raises(ValidationError):
            drivers.record_location(scope_a, driver.id, {'latitude': lat, 'longitude': lon})

    def test_boundary_coordinates_accepted(self, scope_a, make_driver):
        driver = make_driver(scope_a)
        drivers.record_location(scope_a, driver.id, {'latitude': 90, 'longitude': -180})
        assert drivers.list_locations(scope_a, driver.id).total == 1

    @pytest.mark.parametrize('lat, lon', [
        (float('nan'), 0),
        (0, float('nan')),
        (float('inf'), 0),
        (0, float('-inf')),
    ])
    def test_non_finite_coordinates_rejected(self, scope_a, make_driver, lat, lon):
        driver = make_driver(scope_a)
        with pytest.raises(ValidationError, match='finite'):
            drivers.record_location(scope_a, driver.id, {'latitude': lat, 'longitude': lon})
        assert drivers.list_locations(scope_a, driver.id).total == 0

    @pytest.mark.parametrize('accuracy', [float('nan'), float('inf')])
    def test_non_finite_accuracy_rejected(self, scope_a, make_driver, accuracy):
        driver = make_driver(scope_a)
        with pytest.raises(ValidationError):
            drivers.record_location(scope_a, driver.id, {'latitude': 40.7, 'longitude': -74.0, 'accuracy': accuracy})
