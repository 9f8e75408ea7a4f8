from django.urls import path

from .views import (
    AvailableTimeslotsForDateView,
    CopyTemplateView,
    CourtAvailabilityView,
    CourtPriceRangeView,
    CourtTimeslotListView,
    DeleteDateTimeslotsView,
    GenerateTemplateView,
    TimeslotDetailView,
    TimeslotsForDateView,
)

urlpatterns = [
    path("courts/<int:court_id>/timeslots/", CourtTimeslotListView.as_view(), name="timeslot-list"),
    path("courts/<int:court_id>/timeslots/date/", TimeslotsForDateView.as_view(), name="timeslot-date"),
    path("courts/<int:court_id>/timeslots/available/", AvailableTimeslotsForDateView.as_view(), name="timeslot-available"),
    path("courts/<int:court_id>/timeslots/copy/", CopyTemplateView.as_view(), name="timeslot-copy"),
    path("courts/<int:court_id>/timeslots/by-date/", DeleteDateTimeslotsView.as_view(), name="timeslot-delete-date"),
    path("courts/<int:court_id>/timeslots/generate/", GenerateTemplateView.as_view(), name="timeslot-generate"),
    path("courts/<int:court_id>/availability/", CourtAvailabilityView.as_view(), name="court-availability"),
    path("courts/<int:court_id>/price-range/", CourtPriceRangeView.as_view(), name="court-price-range"),
    path("timeslots/<int:timeslot_id>/", TimeslotDetailView.as_view(), name="timeslot-detail"),
]
