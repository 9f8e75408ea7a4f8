# slots/models.py
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from Court.models import Court
from Court.utils import ends_after, js_day_of_week
from .constants import DayOfWeek


class CourtTimeslot(models.Model):
    """
    A priced opening window for a court.
    Rows without `specific_date` form the weekly template; dated rows
    replace the template for that one day.
    """

    court = models.ForeignKey(
        Court,
        on_delete=models.CASCADE,
        related_name="timeslots"
    )

    day_of_week = models.PositiveSmallIntegerField(
        choices=DayOfWeek.CHOICES,
        validators=[MinValueValidator(0), MaxValueValidator(6)]
    )
    specific_date = models.DateField(null=True, blank=True)

    start_time = models.TimeField()
    end_time = models.TimeField()

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0
    )
    is_available = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["day_of_week", "start_time"]
        indexes = [
            models.Index(fields=["court", "day_of_week"]),
            models.Index(fields=["court", "specific_date"]),
        ]

    def clean(self):
        if self.start_time and self.end_time and not ends_after(self.start_time, self.end_time):
            raise ValidationError("start_time must be before end_time")

        if self.specific_date and js_day_of_week(self.specific_date) != self.day_of_week:
            raise ValidationError("day_of_week does not match specific_date")

    def __str__(self):
        when = self.specific_date or self.get_day_of_week_display()
        return f"{self.court.name} | {when} | {self.start_time}-{self.end_time}"
