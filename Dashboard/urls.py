# dashboard/urls.py
from django.urls import path

from .views import (
    AdminActivityReportView,
    AdminBookingDetailView,
    AdminBookingListView,
    AdminBookingNotesView,
    AdminBookingStatusView,
    AdminCourtListView,
    AdminCourtNotesView,
    AdminCourtStatusView,
    AdminDashboardView,
    AdminPaymentListView,
    AdminPaymentRefundView,
    AdminUserDetailView,
    AdminUserListView,
    AdminUserNotesView,
    AdminUserStatusView,
    BookingReportView,
    CourtOwnerDecisionView,
    CourtOwnerListView,
    PromotionReportView,
    RevenueReportView,
    RewardReportView,
    RunScheduledTasksView,
    RunSingleTaskView,
    ScheduledTaskListView,
    UserReportView,
)

urlpatterns = [
    path("dashboard/", AdminDashboardView.as_view(), name="admin-dashboard"),

    path("court-owners/", CourtOwnerListView.as_view(), name="admin-court-owners"),
    path("court-owners/<int:user_id>/decision/", CourtOwnerDecisionView.as_view(), name="admin-court-owner-decision"),

    path("users/", AdminUserListView.as_view(), name="admin-users"),
    path("users/<int:user_id>/", AdminUserDetailView.as_view(), name="admin-user-detail"),
    path("users/<int:user_id>/status/", AdminUserStatusView.as_view(), name="admin-user-status"),
    path("users/<int:user_id>/notes/", AdminUserNotesView.as_view(), name="admin-user-notes"),

    path("bookings/", AdminBookingListView.as_view(), name="admin-bookings"),
    path("bookings/<int:booking_id>/", AdminBookingDetailView.as_view(), name="admin-booking-detail"),
    path("bookings/<int:booking_id>/status/", AdminBookingStatusView.as_view(), name="admin-booking-status"),
    path("bookings/<int:booking_id>/notes/", AdminBookingNotesView.as_view(), name="admin-booking-notes"),

    path("courts/", AdminCourtListView.as_view(), name="admin-courts"),
    path("courts/<int:court_id>/status/", AdminCourtStatusView.as_view(), name="admin-court-status"),
    path("courts/<int:court_id>/notes/", AdminCourtNotesView.as_view(), name="admin-court-notes"),

    path("payments/", AdminPaymentListView.as_view(), name="admin-payments"),
    path("payments/<int:payment_id>/refund/", AdminPaymentRefundView.as_view(), name="admin-payment-refund"),

    path("reports/revenue/", RevenueReportView.as_view(), name="admin-report-revenue"),
    path("reports/bookings/", BookingReportView.as_view(), name="admin-report-bookings"),
    path("reports/users/", UserReportView.as_view(), name="admin-report-users"),
    path("reports/promotions/", PromotionReportView.as_view(), name="admin-report-promotions"),
    path("reports/rewards/", RewardReportView.as_view(), name="admin-report-rewards"),
    path("reports/admin-activity/", AdminActivityReportView.as_view(), name="admin-report-admin-activity"),

    path("tasks/", ScheduledTaskListView.as_view(), name="admin-tasks"),
    path("tasks/run/", RunSingleTaskView.as_view(), name="admin-task-run"),
    path("tasks/<str:period>/", RunScheduledTasksView.as_view(), name="admin-tasks-period"),
]
