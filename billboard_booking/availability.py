import logging
from typing import Iterable, List, Tuple

from billboard_booking import config
from billboard_booking.models import Booking, TimeSlot
from billboard_booking.store import BookingStore

logger = logging.getLogger(__name__)


def build_time_slots(bookings: Iterable[Booking] = ()) -> List[TimeSlot]:
    """Builds the fixed hourly grid, marking hours covered by a confirmed booking."""
    confirmed = [b for b in bookings if b.status == "confirmed"]
    slots = []
    for hour in config.OPERATING_HOURS:
        booking = next((b for b in confirmed if b.covers(hour)), None)
        slots.append(TimeSlot(hour=hour, is_booked=booking is not None, booking=booking))
    return slots


def fully_booked_slots() -> List[TimeSlot]:
    return [TimeSlot(hour=hour, is_booked=True) for hour in config.OPERATING_HOURS]


class AvailabilityResolver:
    """Resolves the hourly availability grid of one resource on one date.

    When the store cannot be read the resolver does not fail its caller. With
    ``fail_open`` (the default) every hour is reported free; otherwise every
    hour is reported booked.
    """

    def __init__(self, store: BookingStore, fail_open: bool = config.AVAILABILITY_FAIL_OPEN):
        self.store = store
        self.fail_open = fail_open

    def resolve(self, resource_id: str, date_str: str) -> List[TimeSlot]:
        slots, _ = self.resolve_day(resource_id, date_str)
        return slots

    def resolve_day(self, resource_id: str, date_str: str) -> Tuple[List[TimeSlot], bool]:
        """Returns the grid and whether it reflects data actually read from the store."""
        try:
            result = self.store.get_bookings(resource_id, date_str, date_str)
        except Exception as e:
            logger.warning(f"Error fetching bookings for {resource_id} on {date_str}: {e}")
            return self._fallback(), False

        if not result.success:
            logger.warning(f"Failed to fetch bookings for {resource_id} on {date_str}: {result.error}")
            return self._fallback(), False

        bookings = [b for b in result.data or [] if b.date == date_str]
        slots = build_time_slots(bookings)
        logger.debug(f"{resource_id} on {date_str}: {sum(s.is_booked for s in slots)} of {len(slots)} hours booked")
        return slots, True

    def _fallback(self) -> List[TimeSlot]:
        if self.fail_open:
            return build_time_slots([])
        return fully_booked_slots()
