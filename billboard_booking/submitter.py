import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from billboard_booking import config
from billboard_booking.errors import AvailabilityConflict, BookingError, PersistenceError, ValidationError
from billboard_booking.merger import merge_hours
from billboard_booking.models import Booking, BookingDraft, Customer, Resource, SelectionMap
from billboard_booking.selection import total_selected_hours

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[0-9]{10}$")


@dataclass
class SubmissionResult:
    created_bookings: List[Booking] = field(default_factory=list)
    error: Optional[BookingError] = None
    failed_draft: Optional[BookingDraft] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def created_booking_ids(self) -> List[str]:
        return [b.id for b in self.created_bookings if b.id]

    @property
    def total_amount(self) -> float:
        return sum(b.total_amount or 0 for b in self.created_bookings)


def validate_customer(customer: Customer):
    """Raises ValidationError for the first invalid contact field."""
    name = customer.name.strip()
    if not name:
        raise ValidationError("Name is required.", field="name")
    if any(ch.isdigit() for ch in name):
        raise ValidationError("Name must not contain digits.", field="name")

    if not EMAIL_RE.match(customer.email.strip()):
        raise ValidationError("Enter a valid email address.", field="email")

    if not PHONE_RE.match(customer.phone.strip()):
        raise ValidationError("Phone number must be exactly 10 digits.", field="phone")


def build_drafts(resource: Resource, selections: SelectionMap, customer: Customer) -> List[BookingDraft]:
    """One draft per merged interval, in date order then interval order."""
    drafts = []
    for date_str in sorted(selections):
        selection = selections[date_str]
        for interval in merge_hours(selection.hours):
            drafts.append(
                BookingDraft(
                    resource_id=resource.id,
                    date=date_str,
                    start_hour=interval.start,
                    end_hour=interval.end,
                    customer_name=customer.name.strip(),
                    customer_email=customer.email.strip(),
                    customer_phone=customer.phone.strip(),
                    status="confirmed",
                    total_amount=resource.hourly_rate * interval.duration,
                    notes=customer.notes,
                )
            )
    return drafts


class BookingSubmitter:
    """Turns a SelectionMap into persisted bookings, one create call at a time.

    Submission is not atomic: when a create call fails the loop stops, and the
    bookings created before it stay in the store. They are returned in the
    result so the caller can offer to cancel them.
    """

    def __init__(self, store, revalidate: bool = config.REVALIDATE_BEFORE_CREATE):
        self.store = store
        self.revalidate = revalidate

    def submit(self, resource: Resource, selections: SelectionMap, customer: Customer) -> SubmissionResult:
        validate_customer(customer)
        if total_selected_hours(selections) == 0:
            raise ValidationError("Select at least one hour to book.", field="hours")

        drafts = build_drafts(resource, selections, customer)
        logger.info(f"Submitting {len(drafts)} bookings for {resource.id} across {len(selections)} dates")

        result = SubmissionResult()
        for draft in drafts:
            error = self._create(draft, result)
            if error is not None:
                logger.error(
                    f"Submission stopped at {draft.date} {draft.start_hour}-{draft.end_hour}: {error}. "
                    f"{len(result.created_bookings)} bookings already created: {result.created_booking_ids}"
                )
                result.error = error
                result.failed_draft = draft
                return result

        logger.info(f"Created {len(result.created_bookings)} bookings, total amount {result.total_amount}")
        return result

    def _create(self, draft: BookingDraft, result: SubmissionResult) -> Optional[BookingError]:
        if self.revalidate:
            conflict = self._recheck(draft)
            if conflict is not None:
                return conflict

        try:
            response = self.store.create_booking(draft)
        except Exception as e:
            return PersistenceError(f"An unexpected error occurred while creating the booking: {e}")

        if not response.success:
            message = response.error or "Failed to create booking"
            if response.conflict:
                return AvailabilityConflict(message)
            return PersistenceError(message)

        booking = response.data if isinstance(response.data, Booking) else Booking(**draft.model_dump())
        result.created_bookings.append(booking)
        logger.info(f"Created booking {booking.id} for {draft.date} {draft.start_hour}:00-{draft.end_hour}:00")
        return None

    def _recheck(self, draft: BookingDraft) -> Optional[BookingError]:
        """Re-reads the date right before creating and reports an overlap as a conflict."""
        try:
            response = self.store.get_bookings(draft.resource_id, draft.date, draft.date)
        except Exception as e:
            logger.warning(f"Could not revalidate {draft.date} before creating: {e}")
            return None

        if not response.success:
            logger.warning(f"Could not revalidate {draft.date} before creating: {response.error}")
            return None

        for booking in response.data or []:
            if (
                booking.status == "confirmed"
                and booking.date == draft.date
                and booking.start_hour < draft.end_hour
                and draft.start_hour < booking.end_hour
            ):
                return AvailabilityConflict(
                    f"{draft.date} {booking.start_hour}:00-{booking.end_hour}:00 was booked in the meantime."
                )
        return None
