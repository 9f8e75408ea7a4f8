# Court/utils.py
from datetime import datetime, timedelta, date

from django.utils import timezone


def overlaps(a_start, a_end, b_start, b_end):
    # Half-open ranges: touching edges do not overlap
    return a_start < b_end and a_end > b_start


def duration_hours(start, end):
    return (end - start).total_seconds() / 3600


def js_day_of_week(value):
    """Day-of-week with 0 = Sunday .. 6 = Saturday."""
    return (value.weekday() + 1) % 7


def local_day_bounds(day):
    """Aware [start, end) datetimes covering a calendar day in the project timezone."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(day, datetime.min.time()), tz)
    return start, start + timedelta(days=1)


def combine_local(day, at):
    return timezone.make_aware(datetime.combine(day, at), timezone.get_current_timezone())


MIDNIGHT = datetime.min.time()


def ends_after(start, end):
    """An end of 00:00 is read as the following midnight."""
    return start < end or (end == MIDNIGHT and start != MIDNIGHT)


def slot_bounds(day, start, end):
    end_day = day + timedelta(days=1) if end == MIDNIGHT else day
    return combine_local(day, start), combine_local(end_day, end)


def generate_hour_slots(open_time, close_time):
    """
    Whole-hour (start, end) pairs from opening to closing. A closing time
    at or before the opening time means open until midnight.
    """
    slots = []

    base_date = date(2000, 1, 1)
    current = datetime.combine(base_date, open_time)
    end = datetime.combine(base_date, close_time)

    if end <= current:
        end = datetime.combine(base_date + timedelta(days=1), MIDNIGHT)

    while current + timedelta(hours=1) <= end:
        slots.append((current.time(), (current + timedelta(hours=1)).time()))
        current += timedelta(hours=1)

    return slots
