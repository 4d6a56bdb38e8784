from typing import Iterable, List

from billboard_booking.models import Interval


def merge_hours(hours: Iterable[int]) -> List[Interval]:
    """Coalesces selected hours into the minimal list of contiguous intervals.

    Hours are deduplicated and scanned in ascending order. The current interval
    is extended while the next hour equals its (exclusive) end, otherwise it is
    closed and a new one started.

    Example:
        merge_hours({8, 9, 10, 14, 15}) -> [Interval(8, 11), Interval(14, 16)]
    """
    intervals: List[Interval] = []
    start = end = None

    for hour in sorted(set(hours)):
        if start is not None and hour == end:
            end += 1
            continue
        if start is not None:
            intervals.append(Interval(start=start, end=end))
        start, end = hour, hour + 1

    if start is not None:
        intervals.append(Interval(start=start, end=end))

    return intervals


def flatten_intervals(intervals: Iterable[Interval]) -> List[int]:
    """Expands intervals back into the sorted list of hours they cover."""
    return sorted(hour for interval in intervals for hour in interval.hours())
