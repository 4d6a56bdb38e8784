from typing import List

from billboard_booking import config
from billboard_booking.merger import merge_hours
from billboard_booking.models import CampaignSummary, DateSummary, Interval, Resource, SelectionMap


def format_hour(hour: int) -> str:
    """Formats an hour index as a 12-hour clock label, e.g. 14 -> '2:00 PM'."""
    period = "PM" if hour % 24 >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:00 {period}"


def format_interval(interval: Interval) -> str:
    return f"{format_hour(interval.start)} - {format_hour(interval.end)}"


def summarize(resource: Resource, selections: SelectionMap) -> CampaignSummary:
    """Totals a campaign: hours, amount and projected impressions.

    Reach is projected linearly from the resource's daily impressions over the
    operating window.
    """
    days: List[DateSummary] = []
    for date_str in sorted(selections):
        hours = len(selections[date_str].hours)
        days.append(
            DateSummary(
                date=date_str,
                intervals=merge_hours(selections[date_str].hours),
                hours=hours,
                amount=resource.hourly_rate * hours,
            )
        )

    total_hours = sum(d.hours for d in days)
    return CampaignSummary(
        days=days,
        total_hours=total_hours,
        total_amount=sum(d.amount for d in days),
        projected_impressions=round(resource.impressions * total_hours / len(config.OPERATING_HOURS)),
    )
