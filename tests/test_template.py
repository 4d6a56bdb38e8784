from billboard_booking import selection
from billboard_booking.availability import build_time_slots
from billboard_booking.models import Booking, CampaignType
from billboard_booking.template import apply_template, template_from


def _state():
    state = selection.choose_campaign_type(selection.reset(), CampaignType.MULTI_DAY)
    for date_str in ("2025-01-01", "2025-01-02", "2025-01-03"):
        state = selection.select_date(state, date_str)
    state = selection.set_availability(state, "2025-01-01", build_time_slots([]))
    booked = Booking(resource_id="bb-1", date="2025-01-02", start_hour=10, end_hour=11)
    state = selection.set_availability(state, "2025-01-02", build_time_slots([booked]))
    # 2025-01-03 stays unresolved
    return state


def test_template_intersects_with_availability():
    selections = apply_template(_state().selections, {9, 10, 11}, ["2025-01-02"])
    assert selections["2025-01-02"].hours == frozenset({9, 11})


def test_template_overwrites_existing_hours():
    state = selection.set_hours(_state(), "2025-01-01", [15, 16])
    selections = apply_template(state.selections, {9}, ["2025-01-01"])
    assert selections["2025-01-01"].hours == frozenset({9})


def test_template_skips_unresolved_and_unknown_dates():
    state = _state()
    selections = apply_template(state.selections, {9, 10}, ["2025-01-03", "2025-02-01"])

    assert selections["2025-01-03"] == state.selections["2025-01-03"]
    assert "2025-02-01" not in selections


def test_template_does_not_mutate_input():
    state = _state()
    apply_template(state.selections, {9}, ["2025-01-01"])
    assert state.selections["2025-01-01"].hours == frozenset()


def test_template_from():
    state = selection.set_hours(_state(), "2025-01-01", [9, 12])
    assert template_from(state.selections, "2025-01-01") == frozenset({9, 12})
    assert template_from(state.selections, "2025-03-01") == frozenset()
