"""Selection state machine.

The state is an immutable ``SelectionState`` tagged with its ``Stage``:

    campaign-type -> calendar -> details -> confirmation
                        ^           |
                        +-----------+  (back, or change of campaign type)

Every transition is a pure function returning a new state. Calling one from a
stage that does not allow it raises ``InvalidTransition``; the SelectionMap
inside a state is never mutated in place.
"""

from typing import Dict, Iterable, List, Optional

from billboard_booking import config
from billboard_booking.errors import InvalidTransition, ValidationError
from billboard_booking.models import CampaignType, DateSelection, SelectionMap, SelectionState, Stage, TimeSlot


def reset() -> SelectionState:
    return SelectionState()


def _require_stage(state: SelectionState, *stages: Stage, action: str):
    if state.stage not in stages:
        allowed = ", ".join(s.value for s in stages)
        raise InvalidTransition(f"Cannot {action} in stage '{state.stage.value}' (allowed: {allowed}).")


def _with_selections(state: SelectionState, selections: SelectionMap) -> SelectionState:
    return state.model_copy(update={"selections": selections, "error": None})


def total_selected_hours(selections: SelectionMap) -> int:
    return sum(len(s.hours) for s in selections.values())


def choose_campaign_type(state: SelectionState, campaign_type: CampaignType) -> SelectionState:
    """Enters the calendar with an empty SelectionMap. Changing type is a full reset."""
    _require_stage(state, Stage.CAMPAIGN_TYPE, Stage.CALENDAR, Stage.DETAILS, action="choose a campaign type")
    return SelectionState(stage=Stage.CALENDAR, campaign_type=CampaignType(campaign_type), selections={})


def select_date(state: SelectionState, date_str: str) -> SelectionState:
    """Picks a date on the calendar.

    Single-day campaigns replace the whole map with one fresh entry for the
    date. Multi-day campaigns toggle the date: adding creates an unresolved
    entry, removing deletes the entry with its hours.
    """
    _require_stage(state, Stage.CALENDAR, action="select a date")

    if state.campaign_type == CampaignType.SINGLE_DAY:
        if date_str in state.selections:
            return state
        return _with_selections(state, {date_str: DateSelection(date=date_str)})

    selections = dict(state.selections)
    if date_str in selections:
        del selections[date_str]
    else:
        selections[date_str] = DateSelection(date=date_str)
    return _with_selections(state, selections)


def set_availability(
    state: SelectionState, date_str: str, slots: List[TimeSlot], confirmed: bool = True
) -> SelectionState:
    """Attaches a resolved grid to a selected date.

    Hours already selected on that date which the grid reports booked are
    dropped. A grid for a date that is no longer selected is ignored.
    """
    current = state.selections.get(date_str)
    if current is None:
        return state

    booked = {s.hour for s in slots if s.is_booked}
    updated = current.model_copy(
        update={
            "slots": list(slots),
            "hours": frozenset(h for h in current.hours if h not in booked),
            "availability_confirmed": confirmed,
        }
    )
    selections = dict(state.selections)
    selections[date_str] = updated
    return state.model_copy(update={"selections": selections})


def toggle_hour(state: SelectionState, date_str: str, hour: int) -> SelectionState:
    """Flips one hour on one date. Booked hours are left untouched."""
    _require_stage(state, Stage.CALENDAR, action="toggle an hour")

    if hour not in config.OPERATING_HOURS:
        raise ValidationError(
            f"Hour {hour} is outside the operating window "
            f"({config.OPERATING_START_HOUR}-{config.OPERATING_END_HOUR}).",
            field="hour",
        )
    current = state.selections.get(date_str)
    if current is None:
        raise ValidationError(f"Date {date_str} is not selected.", field="date")
    if not current.is_resolved:
        raise InvalidTransition(f"Availability for {date_str} has not been resolved yet.")

    if hour in current.booked_hours():
        return state

    hours = current.hours ^ {hour}
    selections = dict(state.selections)
    selections[date_str] = current.model_copy(update={"hours": frozenset(hours)})
    return _with_selections(state, selections)


def set_hours(state: SelectionState, date_str: str, hours: Iterable[int]) -> SelectionState:
    """Toggles the given hours on for a date, skipping booked ones."""
    for hour in sorted(set(hours)):
        current = state.selections.get(date_str)
        if current is not None and hour in current.hours:
            continue
        state = toggle_hour(state, date_str, hour)
    return state


def clear_hours(state: SelectionState, date_str: Optional[str] = None) -> SelectionState:
    """Clears the hours of one date, or of every date. Dates stay selected."""
    _require_stage(state, Stage.CALENDAR, action="clear hours")

    selections: Dict[str, DateSelection] = dict(state.selections)
    targets = [date_str] if date_str is not None else list(selections)
    for key in targets:
        if key in selections:
            selections[key] = selections[key].model_copy(update={"hours": frozenset()})
    return _with_selections(state, selections)


def proceed_to_details(state: SelectionState) -> SelectionState:
    _require_stage(state, Stage.CALENDAR, action="continue to details")
    if total_selected_hours(state.selections) == 0:
        raise ValidationError("Select at least one hour before continuing.", field="hours")
    return state.model_copy(update={"stage": Stage.DETAILS, "error": None})


def back_to_calendar(state: SelectionState) -> SelectionState:
    _require_stage(state, Stage.DETAILS, action="go back to the calendar")
    return state.model_copy(update={"stage": Stage.CALENDAR, "error": None})


def confirm(state: SelectionState) -> SelectionState:
    _require_stage(state, Stage.DETAILS, action="confirm")
    return state.model_copy(update={"stage": Stage.CONFIRMATION, "error": None})


def with_error(state: SelectionState, message: str) -> SelectionState:
    return state.model_copy(update={"error": message})
