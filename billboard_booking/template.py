import logging
from typing import FrozenSet, Iterable

from billboard_booking import config
from billboard_booking.models import SelectionMap

logger = logging.getLogger(__name__)


def template_from(selections: SelectionMap, date_str: str) -> FrozenSet[int]:
    """Returns the hour pattern selected on ``date_str`` (empty when not selected)."""
    selection = selections.get(date_str)
    return selection.hours if selection else frozenset()


def apply_template(selections: SelectionMap, source_hours: Iterable[int], target_dates: Iterable[str]) -> SelectionMap:
    """Copies an hour pattern onto other dates and returns the new map.

    Each resolved target gets exactly the template hours that are free on it;
    hours booked there are dropped without notice. Targets that are not
    selected, or whose availability is still unknown, are left as they are.
    """
    template = frozenset(h for h in source_hours if h in config.OPERATING_HOURS)
    result = dict(selections)

    for date_str in target_dates:
        target = result.get(date_str)
        if target is None or not target.is_resolved:
            logger.debug(f"Skipping template for {date_str}: availability not resolved")
            continue
        hours = template - target.booked_hours()
        result[date_str] = target.model_copy(update={"hours": frozenset(hours)})

    return result
