from billboard_booking.models import DateSelection, Interval, Resource
from billboard_booking.summary import format_hour, format_interval, summarize


def test_format_hour():
    assert format_hour(8) == "8:00 AM"
    assert format_hour(12) == "12:00 PM"
    assert format_hour(14) == "2:00 PM"
    assert format_hour(22) == "10:00 PM"
    assert format_hour(0) == "12:00 AM"


def test_format_interval():
    assert format_interval(Interval(start=9, end=12)) == "9:00 AM - 12:00 PM"


def test_summarize():
    resource = Resource(id="bb-1", hourly_rate=20, impressions=1500)
    selections = {
        "2025-01-02": DateSelection(date="2025-01-02", hours=frozenset({14})),
        "2025-01-01": DateSelection(date="2025-01-01", hours=frozenset({9, 10, 11, 14})),
    }

    summary = summarize(resource, selections)

    assert [d.date for d in summary.days] == ["2025-01-01", "2025-01-02"]
    assert summary.days[0].intervals == [Interval(start=9, end=12), Interval(start=14, end=15)]
    assert summary.days[0].amount == 80
    assert summary.total_hours == 5
    assert summary.total_amount == 100
    # 1500 impressions over 15 operating hours -> 100 per hour
    assert summary.projected_impressions == 500


def test_summarize_empty():
    summary = summarize(Resource(id="bb-1", hourly_rate=20), {})
    assert summary.total_hours == 0
    assert summary.total_amount == 0
    assert summary.projected_impressions == 0
