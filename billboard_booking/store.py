"""Contract for the external booking store and its Supabase (PostgREST) client.

The engine only ever needs three operations from the store: a health probe,
a range read of existing bookings for one resource and a single-record create.
Every operation answers with a ``StoreResult`` envelope and never raises, so
callers decide how to degrade.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List

import requests

from billboard_booking import config
from billboard_booking.models import Booking, BookingDraft, StoreResult

logger = logging.getLogger(__name__)

# Postgres unique_violation and exclusion_violation.
CONFLICT_CODES = {"23505", "23P01"}

SETUP_MISSING_MESSAGE = "Booking system not set up. Please run the database setup script first."


class BookingStore(ABC):
    """Abstract persistence layer consumed by the booking engine."""

    @abstractmethod
    def check_availability_system(self) -> StoreResult:
        """Health probe. Any unsuccessful result means scheduling must not start."""
        ...

    @abstractmethod
    def get_bookings(self, resource_id: str, date_from: str, date_to: str) -> StoreResult:
        """Returns all bookings of ``resource_id`` dated within [date_from, date_to].

        On success ``data`` is a list of ``Booking``.
        """
        ...

    @abstractmethod
    def create_booking(self, draft: BookingDraft) -> StoreResult:
        """Persists one booking. On success ``data`` is the stored ``Booking``.

        ``conflict`` is set when the store rejected the draft because it
        overlaps an existing booking.
        """
        ...


def draft_to_row(draft: BookingDraft) -> Dict:
    """Maps a draft onto the column names of the bookings table."""
    return {
        "billboard_id": draft.resource_id,
        "booking_date": draft.date,
        "start_hour": draft.start_hour,
        "end_hour": draft.end_hour,
        "customer_name": draft.customer_name,
        "customer_email": draft.customer_email,
        "customer_phone": draft.customer_phone,
        "booking_status": draft.status,
        "total_amount": draft.total_amount,
        "notes": draft.notes,
    }


def row_to_booking(row: Dict) -> Booking:
    return Booking(
        id=str(row["id"]) if row.get("id") is not None else None,
        resource_id=str(row["billboard_id"]),
        date=row["booking_date"],
        start_hour=row["start_hour"],
        end_hour=row["end_hour"],
        status=row.get("booking_status", "confirmed"),
        customer_name=row.get("customer_name"),
        customer_email=row.get("customer_email"),
        customer_phone=row.get("customer_phone"),
        total_amount=row.get("total_amount"),
        notes=row.get("notes"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _is_missing_table(message: str) -> bool:
    return "relation" in message or "does not exist" in message


def _error_result(response: requests.Response) -> StoreResult:
    """Translates a PostgREST error response into an unsuccessful result."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("message") or response.text or f"HTTP {response.status_code}"
    code = str(body.get("code", ""))

    if response.status_code == 409 or code in CONFLICT_CODES:
        return StoreResult(success=False, error=f"Booking failed: {message}", conflict=True)
    if _is_missing_table(message):
        return StoreResult(success=False, error=SETUP_MISSING_MESSAGE)
    return StoreResult(success=False, error=f"Booking failed: {message}")


class SupabaseBookingStore(BookingStore):
    """Talks to the ``bookings`` table through Supabase's REST endpoint."""

    def __init__(self, url: str, api_key: str, table: str = config.BOOKINGS_TABLE, timeout: int = config.REQUEST_TIMEOUT):
        self.base_url = f"{url.rstrip('/')}/rest/v1/{table}"
        self.timeout = timeout
        self.headers: Dict[str, str] = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def check_availability_system(self) -> StoreResult:
        try:
            response = requests.get(
                self.base_url, params={"select": "id", "limit": 1}, headers=self.headers, timeout=self.timeout
            )
            if not response.ok:
                result = _error_result(response)
                logger.warning(f"Bookings table check failed: {result.error}")
                return result
            return StoreResult(success=True, data=[])
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error checking bookings table: {e}")
            return StoreResult(success=False, error="Failed to reach the booking system.")

    def get_bookings(self, resource_id: str, date_from: str, date_to: str) -> StoreResult:
        params = [
            ("select", "*"),
            ("billboard_id", f"eq.{resource_id}"),
            ("booking_date", f"gte.{date_from}"),
            ("booking_date", f"lte.{date_to}"),
            ("booking_status", "in.(confirmed,pending)"),
        ]
        logger.debug(f"Fetching bookings for {resource_id} from {date_from} to {date_to}")

        try:
            response = requests.get(self.base_url, params=params, headers=self.headers, timeout=self.timeout)
            if not response.ok:
                return _error_result(response)
            rows: List[Dict] = response.json() or []
            return StoreResult(success=True, data=[row_to_booking(row) for row in rows])
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching bookings: {e}")
            return StoreResult(success=False, error=str(e))
        except (ValueError, KeyError) as e:
            logger.warning(f"Unexpected bookings payload: {e}")
            return StoreResult(success=False, error=f"Unexpected response from booking system: {e}")

    def create_booking(self, draft: BookingDraft) -> StoreResult:
        headers = dict(self.headers, Prefer="return=representation")

        try:
            response = requests.post(self.base_url, json=[draft_to_row(draft)], headers=headers, timeout=self.timeout)
            if not response.ok:
                result = _error_result(response)
                logger.error(f"Error creating booking: {result.error}")
                return result
            rows = response.json()
            booking = row_to_booking(rows[0]) if rows else None
            return StoreResult(success=True, data=booking)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error creating booking: {e}")
            return StoreResult(success=False, error="An unexpected error occurred while creating the booking.")
        except (ValueError, KeyError, IndexError) as e:
            logger.error(f"Unexpected create response: {e}")
            return StoreResult(success=False, error=f"Unexpected response from booking system: {e}")


def get_store() -> BookingStore:
    """Picks Supabase when it is configured, the local JSON ledger otherwise."""
    if config.SUPABASE_URL and config.SUPABASE_ANON_KEY:
        return SupabaseBookingStore(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)

    from billboard_booking.persist import JsonBookingStore

    return JsonBookingStore(config.LEDGER_FILE)
