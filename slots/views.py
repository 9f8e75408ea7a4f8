from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from Court.models import Court
from Court.utils import js_day_of_week
from .models import CourtTimeslot
from .serializers import (
    CopyTemplateSerializer,
    DateQuerySerializer,
    GenerateTemplateSerializer,
    TimeslotSerializer,
)
from .services import (
    availability_for_date,
    copy_template_to_date,
    delete_for_date,
    generate_template,
    get_managed_court,
    price_range,
    timeslots_for_date,
)


# -------------------------------------------------------------------
# TIMESLOT LIST / CREATE
# -------------------------------------------------------------------
class CourtTimeslotListView(APIView):
    """
    GET is public, POST is for the court owner
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request, court_id):
        court = get_object_or_404(Court, id=court_id)
        timeslots = court.timeslots.all()

        day_of_week = request.query_params.get("day_of_week")
        if day_of_week is not None:
            timeslots = timeslots.filter(day_of_week=day_of_week, specific_date__isnull=True)

        return Response({
            "status": "success",
            "data": TimeslotSerializer(timeslots, many=True).data
        })

    def post(self, request, court_id):
        court = get_managed_court(request.user, court_id)

        serializer = TimeslotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(court=court)

        return Response({
            "status": "success",
            "data": serializer.data
        }, status=status.HTTP_201_CREATED)


class TimeslotDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, timeslot_id):
        timeslot = get_object_or_404(CourtTimeslot, id=timeslot_id)
        get_managed_court(request.user, timeslot.court_id)

        serializer = TimeslotSerializer(timeslot, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response({
            "status": "success",
            "data": serializer.data
        })

    put = patch

    def delete(self, request, timeslot_id):
        timeslot = get_object_or_404(CourtTimeslot, id=timeslot_id)
        get_managed_court(request.user, timeslot.court_id)

        timeslot.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# -------------------------------------------------------------------
# DATE-BASED VIEWS
# -------------------------------------------------------------------
class TimeslotsForDateView(APIView):
    permission_classes = [AllowAny]
    only_available = False

    def get(self, request, court_id):
        query = DateQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        day = query.validated_data["date"]

        court = get_object_or_404(Court, id=court_id)
        timeslots = timeslots_for_date(court, day, only_available=self.only_available)

        return Response({
            "status": "success",
            "date": day,
            "day_of_week": js_day_of_week(day),
            "data": TimeslotSerializer(timeslots, many=True).data
        })


class AvailableTimeslotsForDateView(TimeslotsForDateView):
    only_available = True


class CourtAvailabilityView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, court_id):
        query = DateQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        day = query.validated_data["date"]

        court = get_object_or_404(Court, id=court_id)

        return Response({
            "status": "success",
            "date": day,
            "availability": availability_for_date(court, day)
        })


class CourtPriceRangeView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, court_id):
        court = get_object_or_404(Court, id=court_id)

        day = None
        if request.query_params.get("date"):
            query = DateQuerySerializer(data=request.query_params)
            query.is_valid(raise_exception=True)
            day = query.validated_data["date"]

        return Response({
            "status": "success",
            "data": price_range(court, day)
        })


# -------------------------------------------------------------------
# OWNER TEMPLATE TOOLS
# -------------------------------------------------------------------
class CopyTemplateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, court_id):
        court = get_managed_court(request.user, court_id)

        serializer = CopyTemplateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        day = serializer.validated_data["date"]
        day_of_week = serializer.validated_data.get("day_of_week", js_day_of_week(day))

        created = copy_template_to_date(court, day_of_week, day)

        return Response({
            "status": "success",
            "created_count": len(created),
            "data": TimeslotSerializer(created, many=True).data
        }, status=status.HTTP_201_CREATED)


class DeleteDateTimeslotsView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, court_id):
        court = get_managed_court(request.user, court_id)

        query = DateQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        deleted = delete_for_date(court, query.validated_data["date"])

        return Response({
            "status": "success",
            "deleted_count": deleted
        })


class GenerateTemplateView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, court_id):
        court = get_managed_court(request.user, court_id)

        serializer = GenerateTemplateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        created = generate_template(
            court,
            data["days_of_week"],
            data["open_time"],
            data["close_time"],
            data["price"],
            replace=data["replace"],
        )

        return Response({
            "status": "success",
            "created_count": len(created)
        }, status=status.HTTP_201_CREATED)
