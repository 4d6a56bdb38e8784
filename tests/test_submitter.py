from unittest.mock import MagicMock

import pytest

from billboard_booking.errors import AvailabilityConflict, PersistenceError, ValidationError
from billboard_booking.models import Booking, Customer, DateSelection, Resource, StoreResult
from billboard_booking.submitter import BookingSubmitter, build_drafts, validate_customer

RESOURCE = Resource(id="bb-1", hourly_rate=20, impressions=1500)
CUSTOMER = Customer(name="Asha Rao", email="asha@example.com", phone="9876543210", notes="launch")


def _selections(dates):
    return {d: DateSelection(date=d, hours=frozenset(h)) for d, h in dates.items()}


def _store_echo():
    """A store whose create call succeeds and echoes the draft back with an id."""
    store = MagicMock()
    counter = iter(range(1, 100))

    def create(draft):
        return StoreResult(success=True, data=Booking(id=f"id-{next(counter)}", **draft.model_dump()))

    store.create_booking.side_effect = create
    return store


@pytest.mark.parametrize(
    "customer, field",
    [
        (Customer(name="", email="a@b.co", phone="1234567890"), "name"),
        (Customer(name="R2D2", email="a@b.co", phone="1234567890"), "name"),
        (Customer(name="Asha", email="not-an-email", phone="1234567890"), "email"),
        (Customer(name="Asha", email="a@b.co", phone="12345"), "phone"),
        (Customer(name="Asha", email="a@b.co", phone="12345abcde"), "phone"),
        (Customer(name="Asha", email="a@b.co", phone="123456789012"), "phone"),
        (Customer(name="Asha", email="a@b.co", phone="\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669\u0660"), "phone"),
    ],
)
def test_validate_customer_rejects(customer, field):
    with pytest.raises(ValidationError) as exc:
        validate_customer(customer)
    assert exc.value.field == field


def test_validate_customer_accepts():
    validate_customer(CUSTOMER)


def test_build_drafts_order_and_amounts():
    selections = _selections({"2025-01-02": {14}, "2025-01-01": {9, 10, 11, 14}})
    drafts = build_drafts(RESOURCE, selections, CUSTOMER)

    assert [(d.date, d.start_hour, d.end_hour, d.total_amount) for d in drafts] == [
        ("2025-01-01", 9, 12, 60),
        ("2025-01-01", 14, 15, 20),
        ("2025-01-02", 14, 15, 20),
    ]
    assert all(d.status == "confirmed" for d in drafts)
    assert all(d.end_hour > d.start_hour for d in drafts)


def test_cost_conservation():
    hours = {8, 9, 11, 13, 14, 15, 22}
    drafts = build_drafts(RESOURCE, _selections({"2025-01-01": hours}), CUSTOMER)
    assert sum(d.total_amount for d in drafts) == RESOURCE.hourly_rate * len(hours)


def test_submit_end_to_end_scenario():
    store = _store_echo()
    result = BookingSubmitter(store).submit(RESOURCE, _selections({"2025-01-01": {9, 10, 11, 14}}), CUSTOMER)

    assert result.success
    assert [(b.start_hour, b.end_hour, b.total_amount) for b in result.created_bookings] == [(9, 12, 60), (14, 15, 20)]
    assert result.total_amount == 80
    assert result.created_booking_ids == ["id-1", "id-2"]


def test_submit_validation_error_does_no_work():
    store = MagicMock()
    with pytest.raises(ValidationError):
        BookingSubmitter(store).submit(RESOURCE, _selections({"2025-01-01": {9}}), Customer(name="Asha"))
    store.create_booking.assert_not_called()


def test_submit_zero_hours_is_validation_error():
    store = MagicMock()
    with pytest.raises(ValidationError):
        BookingSubmitter(store).submit(RESOURCE, _selections({"2025-01-01": set()}), CUSTOMER)
    store.create_booking.assert_not_called()


def test_submit_partial_commit_on_persistence_error():
    store = MagicMock()
    store.create_booking.side_effect = [
        StoreResult(success=True, data=Booking(id="id-1", resource_id="bb-1", date="2025-01-01", start_hour=9, end_hour=10)),
        StoreResult(success=False, error="Booking failed: timeout"),
        StoreResult(success=True),
    ]
    selections = _selections({"2025-01-01": {9}, "2025-01-02": {10}, "2025-01-03": {11}})

    result = BookingSubmitter(store).submit(RESOURCE, selections, CUSTOMER)

    assert not result.success
    assert isinstance(result.error, PersistenceError)
    assert str(result.error) == "Booking failed: timeout"
    assert result.created_booking_ids == ["id-1"]
    assert result.failed_draft.date == "2025-01-02"
    # The third draft is never attempted
    assert store.create_booking.call_count == 2


def test_submit_conflict_reported_by_store():
    store = MagicMock()
    store.create_booking.return_value = StoreResult(success=False, error="overlap", conflict=True)

    result = BookingSubmitter(store).submit(RESOURCE, _selections({"2025-01-01": {9}}), CUSTOMER)

    assert isinstance(result.error, AvailabilityConflict)
    assert result.created_bookings == []


def test_submit_store_exception_is_persistence_error():
    store = MagicMock()
    store.create_booking.side_effect = Exception("connection reset")

    result = BookingSubmitter(store).submit(RESOURCE, _selections({"2025-01-01": {9}}), CUSTOMER)
    assert isinstance(result.error, PersistenceError)


def test_submit_revalidates_before_create():
    store = _store_echo()
    taken = Booking(id="x", resource_id="bb-1", date="2025-01-01", start_hour=10, end_hour=11)
    store.get_bookings.return_value = StoreResult(success=True, data=[taken])

    result = BookingSubmitter(store, revalidate=True).submit(RESOURCE, _selections({"2025-01-01": {9, 10}}), CUSTOMER)

    assert isinstance(result.error, AvailabilityConflict)
    store.create_booking.assert_not_called()


def test_submit_revalidation_fetch_failure_still_creates():
    store = _store_echo()
    store.get_bookings.return_value = StoreResult(success=False, error="down")

    result = BookingSubmitter(store, revalidate=True).submit(RESOURCE, _selections({"2025-01-01": {9}}), CUSTOMER)

    assert result.success
    store.create_booking.assert_called_once()


def test_submit_revalidation_fetch_exception_keeps_created_bookings():
    store = _store_echo()
    store.get_bookings.side_effect = [StoreResult(success=True, data=[]), Exception("connection reset")]
    selections = _selections({"2025-01-01": {9}, "2025-01-02": {10}})

    result = BookingSubmitter(store, revalidate=True).submit(RESOURCE, selections, CUSTOMER)

    assert result.success
    assert result.created_booking_ids == ["id-1", "id-2"]
    assert store.create_booking.call_count == 2
