from django.urls import path

from .views import (
    BookingCancelView,
    BookingDetailView,
    BookingJoinRequestView,
    BookingListCreateView,
    BookingStatusView,
    CourtBookingsView,
    CourtDetailView,
    CourtImageUploadView,
    CourtListView,
    CourtSearchView,
    JoinableBookingDetailView,
    JoinableBookingListView,
    JoinRequestCancelView,
    JoinRequestRespondView,
    MyCourtsView,
    MyJoinRequestsView,
    OwnerBookingsView,
    PaymentCancellationView,
    PaymentDetailView,
    PaymentGatewayListView,
    PaymentListCreateView,
    PaymentReceiptView,
)

urlpatterns = [
    # Courts
    path("courts/", CourtListView.as_view(), name="court-list"),
    path("courts/search/", CourtSearchView.as_view(), name="court-search"),
    path("courts/mine/", MyCourtsView.as_view(), name="court-mine"),
    path("courts/<int:court_id>/", CourtDetailView.as_view(), name="court-detail"),
    path("courts/<int:court_id>/image/", CourtImageUploadView.as_view(), name="court-image"),
    path("courts/<int:court_id>/bookings/", CourtBookingsView.as_view(), name="court-bookings"),

    # Bookings
    path("bookings/", BookingListCreateView.as_view(), name="booking-list"),
    path("bookings/owner/", OwnerBookingsView.as_view(), name="booking-owner"),
    path("bookings/joinable/", JoinableBookingListView.as_view(), name="booking-joinable"),
    path("bookings/joinable/<int:booking_id>/", JoinableBookingDetailView.as_view(), name="booking-joinable-detail"),
    path("bookings/<int:booking_id>/", BookingDetailView.as_view(), name="booking-detail"),
    path("bookings/<int:booking_id>/cancel/", BookingCancelView.as_view(), name="booking-cancel"),
    path("bookings/<int:booking_id>/status/", BookingStatusView.as_view(), name="booking-status"),
    path("bookings/<int:booking_id>/join-requests/", BookingJoinRequestView.as_view(), name="booking-join-requests"),

    # Join requests
    path("join-requests/mine/", MyJoinRequestsView.as_view(), name="join-request-mine"),
    path("join-requests/<int:request_id>/respond/", JoinRequestRespondView.as_view(), name="join-request-respond"),
    path("join-requests/<int:request_id>/cancel/", JoinRequestCancelView.as_view(), name="join-request-cancel"),

    # Payments
    path("payments/", PaymentListCreateView.as_view(), name="payment-list"),
    path("payments/gateways/", PaymentGatewayListView.as_view(), name="payment-gateways"),
    path("payments/<int:payment_id>/", PaymentDetailView.as_view(), name="payment-detail"),
    path("payments/<int:payment_id>/receipt/", PaymentReceiptView.as_view(), name="payment-receipt"),
    path("payments/<int:payment_id>/cancel-request/", PaymentCancellationView.as_view(), name="payment-cancel-request"),
]
