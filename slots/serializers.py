# slots/serializers.py
from rest_framework import serializers

from Court.utils import ends_after, js_day_of_week
from .constants import DayOfWeek
from .models import CourtTimeslot


class TimeslotSerializer(serializers.ModelSerializer):
    is_default_timeslot = serializers.SerializerMethodField()

    class Meta:
        model = CourtTimeslot
        fields = [
            "id",
            "court",
            "day_of_week",
            "specific_date",
            "start_time",
            "end_time",
            "price",
            "is_available",
            "is_default_timeslot",
        ]
        read_only_fields = ["court"]
        extra_kwargs = {"day_of_week": {"required": False}}

    def get_is_default_timeslot(self, obj):
        return getattr(obj, "is_default_timeslot", obj.specific_date is None)

    def validate(self, attrs):
        start = attrs.get("start_time", getattr(self.instance, "start_time", None))
        end = attrs.get("end_time", getattr(self.instance, "end_time", None))

        if start and end and not ends_after(start, end):
            raise serializers.ValidationError("start_time must be before end_time")

        specific_date = attrs.get("specific_date", getattr(self.instance, "specific_date", None))
        if specific_date is not None:
            # A dated slot always carries its own weekday
            attrs["day_of_week"] = js_day_of_week(specific_date)
        elif attrs.get("day_of_week", getattr(self.instance, "day_of_week", None)) is None:
            raise serializers.ValidationError({"day_of_week": "This field is required."})

        return attrs


class DateQuerySerializer(serializers.Serializer):
    date = serializers.DateField()


class CopyTemplateSerializer(serializers.Serializer):
    day_of_week = serializers.ChoiceField(choices=DayOfWeek.CHOICES, required=False)
    date = serializers.DateField()


class GenerateTemplateSerializer(serializers.Serializer):
    days_of_week = serializers.ListField(
        child=serializers.ChoiceField(choices=DayOfWeek.CHOICES),
        min_length=1,
    )
    open_time = serializers.TimeField()
    close_time = serializers.TimeField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    replace = serializers.BooleanField(default=False)

    def validate(self, attrs):
        # 00:00 closes at midnight
        if not ends_after(attrs["open_time"], attrs["close_time"]):
            raise serializers.ValidationError("open_time must be before close_time")
        return attrs
