import logging
import os
from typing import List

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- File Paths ---
DATA_DIR = os.environ.get("BOOKING_DATA_DIR", "data")
LEDGER_FILE = os.path.join(DATA_DIR, "bookings.json")
REPORT_FILE = os.path.join(DATA_DIR, "submission_report.json")

# --- Backing store (Supabase / PostgREST) ---
SUPABASE_URL = os.environ.get("SUPABASE_URL")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY")
BOOKINGS_TABLE = os.environ.get("BOOKINGS_TABLE", "bookings")
REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "10"))

# --- Operating window ---
# Hourly slots 8:00 through 22:00, both inclusive.
OPERATING_START_HOUR = 8
OPERATING_END_HOUR = 22
OPERATING_HOURS: List[int] = list(range(OPERATING_START_HOUR, OPERATING_END_HOUR + 1))

# How far ahead a date may be picked.
BOOKING_HORIZON_DAYS = int(os.environ.get("BOOKING_HORIZON_DAYS", "90"))

# --- Availability / submission policy ---
AVAILABILITY_FAIL_OPEN = _env_flag("AVAILABILITY_FAIL_OPEN", True)
REVALIDATE_BEFORE_CREATE = _env_flag("REVALIDATE_BEFORE_CREATE", False)

if not SUPABASE_URL or not SUPABASE_ANON_KEY:
    logger.warning("Supabase configuration incomplete. Falling back to the local JSON ledger.")
