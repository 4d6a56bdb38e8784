import logging
import sys
from datetime import datetime, timedelta
from typing import List, Optional

from billboard_booking import persist
from billboard_booking.availability import AvailabilityResolver
from billboard_booking.errors import BookingError, ValidationError
from billboard_booking.models import CampaignSummary, CampaignType, Customer, Resource, TimeSlot
from billboard_booking.session import BookingSession
from billboard_booking.store import BookingStore, get_store
from billboard_booking.summary import format_hour, format_interval

logger = logging.getLogger(__name__)


def get_target_dates(start_date_arg: str | None, days_arg: int) -> List[str]:
    """Determines the list of consecutive dates to report on."""
    if start_date_arg:
        try:
            start_date = datetime.strptime(start_date_arg, "%Y-%m-%d")
        except ValueError:
            logger.error("Error: Start date must be in YYYY-MM-DD format.")
            sys.exit(1)
    else:
        start_date = datetime.now()

    return [(start_date + timedelta(days=i)).strftime("%Y-%m-%d") for i in range(days_arg)]


def print_availability_report(date_str: str, slots: List[TimeSlot]):
    """Prints the hourly grid of one date to stdout."""
    print(f"\n--- Availability Report for {date_str} ---")

    for slot in slots:
        prefix = "[BOOKED]   " if slot.is_booked else "[AVAILABLE]"
        print(f"{prefix} {format_hour(slot.hour)}")

    free = sum(1 for s in slots if not s.is_booked)
    print(f"Summary: {free} of {len(slots)} hours free on {date_str}.")


def print_summary(summary: CampaignSummary):
    print("\n--- Campaign Summary ---")
    for day in summary.days:
        ranges = ", ".join(format_interval(i) for i in day.intervals) or "NONE"
        print(f"{day.date}: {ranges} ({day.hours} h, {day.amount:.2f})")
    print(f"Total: {summary.total_hours} h, {summary.total_amount:.2f}, ~{summary.projected_impressions} impressions")


def show_availability(resource_id: str, start_date: str | None = None, days: int = 1, store: Optional[BookingStore] = None):
    """Resolves and prints availability for consecutive dates."""
    resolver = AvailabilityResolver(store or get_store())
    for date_str in get_target_dates(start_date, days):
        slots, confirmed = resolver.resolve_day(resource_id, date_str)
        if not confirmed:
            print(f"Warning: availability for {date_str} could not be read from the booking system.")
        print_availability_report(date_str, slots)


def book(
    resource: Resource,
    dates: List[str],
    hours: List[int],
    customer: Customer,
    template_date: str | None = None,
    store: Optional[BookingStore] = None,
) -> int:
    """Runs one booking session end to end. Returns a process exit code.

    The hours are selected on every date, or only on ``template_date`` whose
    pattern is then copied onto the other dates.
    """
    dates = sorted(set(dates))
    session = BookingSession(resource, store or get_store())
    campaign_type = CampaignType.MULTI_DAY if len(dates) > 1 else CampaignType.SINGLE_DAY

    try:
        session.open()
        session.choose_campaign_type(campaign_type)
        for date_str in dates:
            session.select_date(date_str)

        if template_date:
            session.select_hours(template_date, hours)
            session.apply_template(template_date)
        else:
            for date_str in dates:
                session.select_hours(date_str, hours)

        print_summary(session.summary())
        session.proceed_to_details()
        result = session.submit(customer)
    except ValidationError as e:
        field = f" ({e.field})" if e.field else ""
        print(f"Invalid input{field}: {e.message}")
        return 1
    except BookingError as e:
        print(f"Booking failed: {e}")
        return 1

    persist.save_submission_report(result)

    for booking in result.created_bookings:
        print(f"[CREATED] {booking.date} {format_hour(booking.start_hour)} - {format_hour(booking.end_hour)}: {booking.total_amount or 0:.2f}")

    if not result.success:
        print(f"\nError: {result.error}")
        if result.created_booking_ids:
            print(f"These bookings were created before the failure and remain: {', '.join(result.created_booking_ids)}")
        return 1

    print(f"\nBooking confirmed: {len(result.created_bookings)} bookings, total {result.total_amount:.2f}")
    return 0
