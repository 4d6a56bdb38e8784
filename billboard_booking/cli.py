import argparse
import logging
import sys
from typing import List

from billboard_booking import run
from billboard_booking.models import Customer, Resource

# --- Logging Setup ---

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    """Configures logging to stderr with local time."""
    import time

    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    formatter.converter = time.localtime
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


def parse_hours(value: str) -> List[int]:
    """Parses '9,10,11' or '9-11,14' into a sorted list of hours."""
    hours = set()
    try:
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            if "-" in part:
                first, last = part.split("-", 1)
                hours.update(range(int(first), int(last) + 1))
            else:
                hours.add(int(part))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid hours: {value}")
    return sorted(hours)


def parse_arguments(argv=None):
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(description="Book hourly billboard slots.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    availability = subparsers.add_parser("availability", help="Show the hourly grid of a billboard.")
    availability.add_argument("--resource", required=True, help="Billboard id.")
    availability.add_argument("--date", type=str, help="Start date in YYYY-MM-DD format. Defaults to today.")
    availability.add_argument("--days", type=int, default=1, help="Number of days to show. Defaults to 1.")

    book = subparsers.add_parser("book", help="Book hours on one or more dates.")
    book.add_argument("--resource", required=True, help="Billboard id.")
    book.add_argument("--rate", type=float, required=True, help="Hourly rate.")
    book.add_argument("--impressions", type=int, default=0, help="Impressions per day, for the reach projection.")
    book.add_argument("--date", dest="dates", action="append", required=True, help="Date in YYYY-MM-DD format. Repeat for a multi-day campaign.")
    book.add_argument("--hours", type=parse_hours, required=True, help="Hours to book, e.g. 9,10,11 or 9-11,14.")
    book.add_argument("--template-from", type=str, help="Select the hours on this date only and copy the pattern to the others.")
    book.add_argument("--name", required=True)
    book.add_argument("--email", required=True)
    book.add_argument("--phone", required=True)
    book.add_argument("--notes", default="")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    if args.command == "availability":
        run.show_availability(args.resource, start_date=args.date, days=args.days)
        return

    resource = Resource(id=args.resource, hourly_rate=args.rate, impressions=args.impressions)
    customer = Customer(name=args.name, email=args.email, phone=args.phone, notes=args.notes)
    exit_code = run.book(resource, args.dates, args.hours, customer, template_date=args.template_from)
    sys.exit(exit_code)
