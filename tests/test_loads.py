"""
Tests for loads, assignments and tracking
"""
import pytest

from app.errors import ConflictError, InvalidStatusError, NotFoundError, ValidationError
from app.models import Load, LoadAssignment, LoadTracking
from app.services import loads
from app.services.transitions import LOAD_TRANSITIONS, cascade_status


def move(scope, load, *statuses):
    for status in statuses:
        load = loads.update_load(scope, load.id, {'status': status})
    return load


class TestLoadCreation:
    """Test load validation"""

    def test_created_pending(self, scope_a, make_load):
        load = make_load(scope_a)
        assert load.status == 'pending'
        assert load.company_id == scope_a.company_id
        assert load.created_by == scope_a.user_id

    def test_rate_must_be_positive(self, scope_a, load_data):
        with pytest.raises(ValidationError):
            loads.create_load(scope_a, load_data(rate=0))

    @pytest.mark.parametrize('rate', ['100000000.00', 1e30, float('nan'), 'Infinity'])
    def test_rate_must_fit_the_column(self, scope_a, load_data, rate):
        with pytest.raises(ValidationError, match='rate'):
            loads.create_load(scope_a, load_data(rate=rate))
        assert Load.query.count() == 0

    def test_largest_rate_accepted(self, scope_a, load_data):
        load = loads.create_load(scope_a, load_data(rate='99999999.99'))
        assert str(load.rate) == '99999999.99'

    @pytest.mark.parametrize('weight', [float('nan'), float('inf'), -1])
    def test_weight_must_be_finite_and_non_negative(self, scope_a, load_data, weight):
        with pytest.raises(ValidationError, match='weight'):
            loads.create_load(scope_a, load_data(weight=weight))

    @pytest.mark.parametrize('field', ['pickup_address', 'delivery_city', 'reference_number'])
    def test_required_fields(self, scope_a, load_data, field):
        with pytest.raises(ValidationError):
            loads.create_load(scope_a, load_data(**{field: ''}))
        assert Load.query.count() == 0

    def test_delivery_not_before_pickup(self, scope_a, load_data):
        with pytest.raises(ValidationError):
            loads.create_load(scope_a, load_data(
                pickup_date='2024-03-05T00:00:00Z',
                delivery_date='2024-03-01T00:00:00Z',
            ))

    def test_reference_unique_per_company(self, scope_a, scope_b, make_load):
        make_load(scope_a, reference_number='REF-1')
        with pytest.raises(ConflictError):
            make_load(scope_a, reference_number='REF-1')
        assert make_load(scope_b, reference_number='REF-1').reference_number == 'REF-1'

    def test_company_id_in_payload_is_ignored(self, scope_a, scope_b, load_data):
        data = load_data()
        data['company_id'] = scope_b.company_id
        assert loads.create_load(scope_a, data).company_id == scope_a.company_id


class TestLoadTransitions:
    """Test load status rules"""

    def test_happy_path(self, scope_a, make_load):
        load = move(scope_a, make_load(scope_a), 'accepted', 'in_transit', 'delivered')
        assert load.status == 'delivered'

    def test_skipping_a_step_is_rejected(self, scope_a, make_load):
        load = make_load(scope_a)
        with pytest.raises(InvalidStatusError):
            move(scope_a, load, 'delivered')
        assert loads.get_load(scope_a, load.id).status == 'pending'

    def test_terminal_states(self, scope_a, make_load):
        load = move(scope_a, make_load(scope_a), 'cancelled')
        with pytest.raises(InvalidStatusError):
            move(scope_a, load, 'pending')

    def test_same_status_is_a_noop(self, scope_a, make_load):
        load = move(scope_a, make_load(scope_a), 'accepted', 'accepted')
        assert load.status == 'accepted'

    def test_unknown_status(self, scope_a, make_load):
        with pytest.raises(InvalidStatusError):
            move(scope_a, make_load(scope_a), 'lost')

    def test_every_state_in_table(self):
        assert set(LOAD_TRANSITIONS) == set(Load.STATUSES)

    def test_date_update_checked_against_stored_pickup(self, scope_a, make_load):
        load = make_load(scope_a)
        with pytest.raises(ValidationError):
            loads.update_load(scope_a, load.id, {'delivery_date': '2024-02-01T00:00:00Z'})


class TestTracking:
    """Test tracking events and their effect on the load"""

    def test_cascade_table(self):
        assert cascade_status('delivered') == 'delivered'
        assert cascade_status('failed') == 'cancelled'
        assert cascade_status('in_transit') is None
        assert cascade_status('pickup_arrived') is None

    def test_delivered_event_delivers_load(self, scope_a, make_load):
        load = move(scope_a, make_load(scope_a), 'accepted', 'in_transit')
        loads.record_tracking(scope_a, load.id, {'status': 'delivered', 'latitude': 39.96, 'longitude': -83.0})
        assert loads.get_load(scope_a, load.id).status == 'delivered'

    def test_delivered_event_on_pending_load(self, scope_a, make_load):
        load = make_load(scope_a)
        loads.record_tracking(scope_a, load.id, {'status': 'delivered'})
        assert loads.get_load(scope_a, load.id).status == 'delivered'

    def test_failed_event_cancels_load(self, scope_a, make_load):
        load = make_load(scope_a)
        loads.record_tracking(scope_a, load.id, {'status': 'failed', 'notes': 'Consignee closed'})
        assert loads.get_load(scope_a, load.id).status == 'cancelled'

    def test_other_events_leave_load_alone(self, scope_a, make_load):
        load = make_load(scope_a)
        for status in ('pickup_arrived', 'pickup_completed', 'in_transit', 'delivery_arrived'):
            loads.record_tracking(scope_a, load.id, {'status': status})
        assert loads.get_load(scope_a, load.id).status == 'pending'
        assert loads.list_tracking(scope_a, load.id).total == 4

    def test_unknown_event_status_writes_nothing(self, scope_a, make_load):
        load = make_load(scope_a)
        with pytest.raises(InvalidStatusError):
            loads.record_tracking(scope_a, load.id, {'status': 'teleported'})
        assert LoadTracking.query.count() == 0

    def test_bad_coordinates_rejected(self, scope_a, make_load):
        load = make_load(scope_a)
        with pytest.raises(ValidationError):
            loads.record_tracking(scope_a, load.id, {'status': 'in_transit', 'latitude': 100})

    @pytest.mark.parametrize('field', ['latitude', 'longitude'])
    @pytest.mark.parametrize('value', [float('nan'), float('inf'), float('-inf')])
    def test_non_finite_coordinates_rejected(self, scope_a, make_load, field, value):
        load = make_load(scope_a)
        with pytest.raises(ValidationError, match='finite'):
            loads.record_tracking(scope_a, load.id, {'status': 'in_transit', field: value})
        assert LoadTracking.query.count() == 0


class TestAssignments:
    """Test driver assignment"""

    def test_assign_and_accept(self, scope_a, make_load, make_driver):
        load = make_load(scope_a)
        driver = make_driver(scope_a)

        assignment = loads.assign_driver(scope_a, load.id, {'driver_id': driver.id})
        assert assignment.status == 'pending'
        assert assignment.assigned_by == scope_a.user_id

        accepted = loads.update_assignment_status(scope_a, load.id, assignment.id, {'status': 'accepted'})
        assert accepted.status == 'accepted'
        assert accepted.accepted_at is not None

    def test_duplicate_assignment_rejected(self, scope_a, make_load, make_driver):
        load = make_load(scope_a)
        driver = make_driver(scope_a)
        loads.assign_driver(scope_a, load.id, {'driver_id': driver.id})

        with pytest.raises(ConflictError):
            loads.assign_driver(scope_a, load.id, {'driver_id': driver.id})
        assert LoadAssignment.query.count() == 1

    def test_driver_of_other_company_not_found(self, scope_a, scope_b, make_load, make_driver):
        load = make_load(scope_a)
        foreign = make_driver(scope_b)
        with pytest.raises(NotFoundError):
            loads.assign_driver(scope_a, load.id, {'driver_id': foreign.id})
        assert LoadAssignment.query.count() == 0

    def test_illegal_assignment_transition(self, scope_a, make_load, make_driver):
        load = make_load(scope_a)
        assignment = loads.assign_driver(scope_a, load.id, {'driver_id': make_driver(scope_a).id})
        with pytest.raises(InvalidStatusError):
            loads.update_assignment_status(scope_a, load.id, assignment.id, {'status': 'completed'})

        loads.update_assignment_status(scope_a, load.id, assignment.id, {'status': 'rejected'})
        with pytest.raises(InvalidStatusError):
            loads.update_assignment_status(scope_a, load.id, assignment.id, {'status': 'accepted'})

    def test_delete_load_removes_children(self, scope_a, make_load, make_driver):
        load = make_load(scope_a)
        loads.assign_driver(scope_a, load.id, {'driver_id': make_driver(scope_a).id})
        loads.record_tracking(scope_a, load.id, {'status': 'pickup_arrived'})
        loads.add_load_document(scope_a, load.id, {'type': 'bol', 'url': 'https://files.example.com/bol.pdf'})

        loads.delete_load(scope_a, load.id)
        assert Load.query.count() == 0
        assert LoadAssignment.query.count() == 0
        assert LoadTracking.query.count() == 0
