import logging

from django.db import transaction
from django.db.models import Max, Min
from django.shortcuts import get_object_or_404

from Court.constants import BookingStatus
from Court.exceptions import NotCourtOwner
from Court.models import Booking, Court
from Court.utils import generate_hour_slots, js_day_of_week, local_day_bounds, overlaps, slot_bounds
from .models import CourtTimeslot

logger = logging.getLogger(__name__)


def get_managed_court(user, court_id):
    court = get_object_or_404(Court, id=court_id)

    if not (user.is_platform_admin or court.owner_id == user.id):
        raise NotCourtOwner()

    return court


def template_for_day(court, day_of_week):
    return CourtTimeslot.objects.filter(
        court=court,
        day_of_week=day_of_week,
        specific_date__isnull=True,
    ).order_by("start_time")


def timeslots_for_date(court, day, only_available=False):
    """
    Dated timeslots for `day`, or the weekday template when none exist.
    Template rows come back flagged with is_default_timeslot=True.
    """
    dated = CourtTimeslot.objects.filter(court=court, specific_date=day).order_by("start_time")
    template = template_for_day(court, js_day_of_week(day))

    if only_available:
        dated = dated.filter(is_available=True)
        template = template.filter(is_available=True)

    dated = list(dated)
    if dated:
        for slot in dated:
            slot.is_default_timeslot = False
        return dated

    slots = list(template)
    for slot in slots:
        slot.is_default_timeslot = True
    return slots


def availability_for_date(court, day):
    slots = timeslots_for_date(court, day)

    day_start, day_end = local_day_bounds(day)
    bookings = list(
        Booking.objects
        .filter(court=court, start_time__lt=day_end, end_time__gt=day_start)
        .exclude(status=BookingStatus.CANCELLED)
        .values_list("start_time", "end_time")
    )

    availability = []
    for slot in slots:
        slot_start, slot_end = slot_bounds(day, slot.start_time, slot.end_time)

        booked = any(
            overlaps(slot_start, slot_end, b_start, b_end)
            for b_start, b_end in bookings
        )

        availability.append({
            "id": slot.id,
            "start_time": slot.start_time,
            "end_time": slot.end_time,
            "price": slot.price,
            "is_default_timeslot": slot.is_default_timeslot,
            "available": slot.is_available and not booked,
        })

    return availability


@transaction.atomic
def copy_template_to_date(court, day_of_week, day):
    """
    Materializes the weekday template onto `day`, replacing any dated rows.
    """
    CourtTimeslot.objects.filter(court=court, specific_date=day).delete()

    copies = [
        CourtTimeslot(
            court=court,
            day_of_week=js_day_of_week(day),
            specific_date=day,
            start_time=slot.start_time,
            end_time=slot.end_time,
            price=slot.price,
            is_available=slot.is_available,
        )
        for slot in template_for_day(court, day_of_week)
    ]

    created = CourtTimeslot.objects.bulk_create(copies)
    logger.info("Copied %s template slots to %s for court %s", len(created), day, court.id)
    return created


def delete_for_date(court, day):
    deleted, _ = CourtTimeslot.objects.filter(court=court, specific_date=day).delete()
    return deleted


@transaction.atomic
def generate_template(court, days_of_week, open_time, close_time, price, replace=False):
    """
    Builds one-hour template slots between open and close for each weekday.
    """
    hours = generate_hour_slots(open_time, close_time)
    created = []

    for day_of_week in days_of_week:
        if replace:
            template_for_day(court, day_of_week).delete()

        existing = set(template_for_day(court, day_of_week).values_list("start_time", flat=True))

        for start, end in hours:
            if start in existing:
                continue

            created.append(CourtTimeslot(
                court=court,
                day_of_week=day_of_week,
                start_time=start,
                end_time=end,
                price=price,
            ))

    return CourtTimeslot.objects.bulk_create(created)


def price_range(court, day=None):
    if day is not None:
        slots = CourtTimeslot.objects.filter(court=court, specific_date=day, is_available=True)
        if not slots.exists():
            slots = template_for_day(court, js_day_of_week(day)).filter(is_available=True)
    else:
        slots = CourtTimeslot.objects.filter(court=court, is_available=True)

    result = slots.aggregate(min_price=Min("price"), max_price=Max("price"))

    if result["min_price"] is None:
        return {"min_price": court.hourly_rate, "max_price": court.hourly_rate}

    return result
