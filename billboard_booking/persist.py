import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from billboard_booking import config
from billboard_booking.models import Booking, BookingDraft, StoreResult
from billboard_booking.store import BookingStore

logger = logging.getLogger(__name__)


def ensure_data_dir(path: str = config.DATA_DIR):
    """Ensures the data directory exists."""
    if path and not os.path.exists(path):
        os.makedirs(path)


def load_ledger(path: str) -> Optional[List[Dict]]:
    """Loads the booking ledger. Returns None when the file exists but cannot be read."""
    if not os.path.exists(path):
        logger.info("No ledger file found. Starting with an empty ledger.")
        return []
    try:
        with open(path, "r") as f:
            data: Dict = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Failed to load ledger {path}: {e}")
        return None

    if not isinstance(data, dict) or "bookings" not in data:
        logger.error(f"Ledger {path} has unexpected format.")
        return None
    return data["bookings"]


def save_ledger(path: str, bookings: List[Dict]):
    """Writes the ledger wrapped with a timestamp. Raises IOError on failure."""
    ensure_data_dir(os.path.dirname(path))
    data = {"last_updated": datetime.now(timezone.utc).isoformat(), "bookings": bookings}
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    logger.debug(f"Saved {len(bookings)} bookings to {path}")


class JsonBookingStore(BookingStore):
    """Local booking ledger kept in a single JSON file.

    Assigns ids and timestamps on create and refuses a confirmed booking that
    overlaps another confirmed booking of the same resource and date.
    """

    def __init__(self, path: str = config.LEDGER_FILE):
        self.path = path

    def check_availability_system(self) -> StoreResult:
        if load_ledger(self.path) is None:
            return StoreResult(success=False, error=f"Booking ledger {self.path} is unreadable.")
        return StoreResult(success=True, data=[])

    def get_bookings(self, resource_id: str, date_from: str, date_to: str) -> StoreResult:
        rows = load_ledger(self.path)
        if rows is None:
            return StoreResult(success=False, error=f"Booking ledger {self.path} is unreadable.")

        bookings = [
            Booking(**row)
            for row in rows
            if row["resource_id"] == resource_id
            and date_from <= row["date"] <= date_to
            and row.get("status") in ("confirmed", "pending")
        ]
        return StoreResult(success=True, data=bookings)

    def create_booking(self, draft: BookingDraft) -> StoreResult:
        rows = load_ledger(self.path)
        if rows is None:
            return StoreResult(success=False, error=f"Booking ledger {self.path} is unreadable.")

        for row in rows:
            if (
                row["resource_id"] == draft.resource_id
                and row["date"] == draft.date
                and row.get("status") == "confirmed"
                and row["start_hour"] < draft.end_hour
                and draft.start_hour < row["end_hour"]
            ):
                return StoreResult(
                    success=False,
                    error=f"Booking failed: {draft.date} {draft.start_hour}:00-{draft.end_hour}:00 overlaps an existing booking.",
                    conflict=True,
                )

        now = datetime.now(timezone.utc).isoformat()
        booking = Booking(id=uuid.uuid4().hex, created_at=now, updated_at=now, **draft.model_dump())

        try:
            save_ledger(self.path, rows + [booking.model_dump()])
        except IOError as e:
            logger.error(f"Failed to save ledger: {e}")
            return StoreResult(success=False, error=f"Booking failed: {e}")

        logger.info(f"Stored booking {booking.id} for {draft.resource_id} on {draft.date}")
        return StoreResult(success=True, data=booking)


def save_submission_report(result, path: str = config.REPORT_FILE):
    """Saves what a submission created (and where it stopped) to a JSON file.

    The created booking ids are the compensating-action log for a partial
    submission: they are what a caller would cancel to roll it back.
    """
    try:
        ensure_data_dir(os.path.dirname(path))
        data = {
            "last_updated": datetime.now(timezone.utc).isoformat(),
            "created_booking_ids": result.created_booking_ids,
            "created_bookings": [b.model_dump() for b in result.created_bookings],
            "error": str(result.error) if result.error else None,
            "failed_draft": result.failed_draft.model_dump() if result.failed_draft else None,
        }
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved submission report to {path}")
    except IOError as e:
        logger.error(f"Failed to save submission report: {e}")
