import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.generics import RetrieveAPIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from Accounts.permissions import IsApprovedCourtOwner, IsCourtOwner
from .constants import BookingStatus, CourtStatus, JoinRequestStatus
from .exceptions import NotCourtOwner
from .models import Booking, BookingJoinRequest, Court, Payment
from .serializers import (
    BookingCreateSerializer,
    BookingDetailSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    CancellationRequestSerializer,
    CourtDetailSerializer,
    CourtImageUploadSerializer,
    CourtSearchSerializer,
    CourtSerializer,
    JoinableBookingSerializer,
    JoinableQuerySerializer,
    JoinRequestCreateSerializer,
    JoinRequestSerializer,
    JoinRespondSerializer,
    PaymentSerializer,
    ProcessPaymentSerializer,
)
from .service import BookingService, JoinService, PaymentService, can_manage_booking

logger = logging.getLogger(__name__)


def get_owned_court(user, court_id):
    court = get_object_or_404(Court, id=court_id)
    if court.owner_id != user.id and not user.is_platform_admin:
        raise NotCourtOwner()
    return court


# -------------------------------------------------------------------
# COURT LIST / CREATE
# -------------------------------------------------------------------
class CourtListView(APIView):
    """
    GET: public list of bookable courts
    POST: approved court owners add a court
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsApprovedCourtOwner()]

    def get(self, request):
        courts = Court.objects.filter(
            is_available=True, status=CourtStatus.ACTIVE
        ).select_related("owner")

        return Response({
            "status": "success",
            "data": CourtSerializer(courts, many=True).data
        })

    def post(self, request):
        serializer = CourtSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        court = serializer.save(owner=request.user)

        logger.info("Court %s created by owner %s", court.id, request.user.id)

        return Response({
            "status": "success",
            "data": serializer.data
        }, status=status.HTTP_201_CREATED)


# -------------------------------------------------------------------
# COURT SEARCH
# -------------------------------------------------------------------
class CourtSearchView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = CourtSearchSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        filters = serializer.validated_data

        courts = Court.objects.filter(is_available=True, status=CourtStatus.ACTIVE)

        if filters.get("q"):
            courts = courts.filter(
                Q(name__icontains=filters["q"])
                | Q(description__icontains=filters["q"])
                | Q(location__icontains=filters["q"])
            )

        if filters.get("location"):
            courts = courts.filter(location__icontains=filters["location"])

        if filters.get("district"):
            courts = courts.filter(
                Q(district__iexact=filters["district"])
                | Q(district_name__icontains=filters["district"])
            )

        if filters.get("skill_level"):
            courts = courts.filter(skill_level=filters["skill_level"])

        if filters.get("min_price") is not None:
            courts = courts.filter(hourly_rate__gte=filters["min_price"])

        if filters.get("max_price") is not None:
            courts = courts.filter(hourly_rate__lte=filters["max_price"])

        return Response({
            "status": "success",
            "data": CourtSerializer(courts.select_related("owner"), many=True).data
        })


# -------------------------------------------------------------------
# COURT DETAIL / UPDATE / DELETE
# -------------------------------------------------------------------
class CourtDetailView(APIView):

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request, court_id):
        court = get_object_or_404(Court.objects.select_related("owner"), id=court_id)
        return Response({
            "status": "success",
            "data": CourtDetailSerializer(court).data
        })

    def patch(self, request, court_id):
        court = get_owned_court(request.user, court_id)

        serializer = CourtSerializer(court, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response({
            "status": "success",
            "data": serializer.data
        })

    put = patch

    def delete(self, request, court_id):
        court = get_owned_court(request.user, court_id)

        active = court.bookings.filter(
            status__in=[BookingStatus.PENDING, BookingStatus.CONFIRMED]
        ).exists()
        if active:
            return Response({
                "status": "failed",
                "message": "Court has active bookings and cannot be deleted"
            }, status=status.HTTP_400_BAD_REQUEST)

        court.delete()
        logger.info("Court %s deleted by user %s", court_id, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MyCourtsView(APIView):
    permission_classes = [IsCourtOwner]

    def get(self, request):
        courts = Court.objects.filter(owner=request.user)
        return Response({
            "status": "success",
            "data": CourtSerializer(courts, many=True).data
        })


# -------------------------------------------------------------------
# COURT IMAGE UPLOAD (COURT OWNER ONLY)
# -------------------------------------------------------------------
class CourtImageUploadView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, court_id):
        court = get_owned_court(request.user, court_id)

        serializer = CourtImageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        court.image = serializer.validated_data["image"]
        court.save(update_fields=["image", "updated_at"])

        return Response({
            "status": "success",
            "message": "Court image uploaded successfully",
            "image_url": request.build_absolute_uri(court.image.url)
        })

    post = patch


class CourtBookingsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, court_id):
        court = get_owned_court(request.user, court_id)
        bookings = court.bookings.select_related("user", "court", "promotion")

        booking_status = request.query_params.get("status")
        if booking_status:
            bookings = bookings.filter(status=booking_status)

        return Response({
            "status": "success",
            "data": BookingSerializer(bookings, many=True).data
        })


class OwnerBookingsView(APIView):
    """
    Bookings across every court the caller owns
    """
    permission_classes = [IsCourtOwner]

    def get(self, request):
        bookings = Booking.objects.filter(
            court__owner=request.user
        ).select_related("user", "court", "promotion")

        return Response({
            "status": "success",
            "data": BookingSerializer(bookings, many=True).data
        })


# -------------------------------------------------------------------
# BOOKINGS
# -------------------------------------------------------------------
class BookingListCreateView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "booking"

    def get(self, request):
        bookings = Booking.objects.filter(
            user=request.user
        ).select_related("court", "user", "promotion")

        booking_status = request.query_params.get("status")
        if booking_status:
            bookings = bookings.filter(status=booking_status)

        return Response({
            "status": "success",
            "data": BookingSerializer(bookings, many=True).data
        })

    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = BookingService.create_booking(
            request.user,
            data["court_id"],
            data["start_time"],
            data["end_time"],
            promotion_code=data.get("promotion_code") or None,
            allow_join=data["allow_join"],
            needed_players=data["needed_players"],
            current_players=data["current_players"],
            skill_level=data["skill_level"],
        )

        return Response({
            "status": "success",
            "message": "Booking created successfully",
            "data": BookingDetailSerializer(booking).data
        }, status=status.HTTP_201_CREATED)


class BookingDetailView(RetrieveAPIView):
    """
    Visible to the booker, the court owner and admins
    """
    permission_classes = [IsAuthenticated]
    serializer_class = BookingDetailSerializer
    queryset = Booking.objects.select_related("court", "user", "promotion").prefetch_related(
        "payments", "players__user"
    )
    lookup_url_kwarg = "booking_id"

    def get_object(self):
        booking = super().get_object()
        user = self.request.user

        if booking.user_id != user.id and not can_manage_booking(user, booking):
            raise PermissionDenied("You are not authorized to view this booking")

        return booking


class BookingCancelView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, booking_id):
        booking = get_object_or_404(Booking, id=booking_id)
        booking = BookingService.cancel_booking(booking, request.user)

        return Response({
            "status": "success",
            "message": "Booking cancelled successfully",
            "data": BookingSerializer(booking).data
        })

    post = put


class BookingStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, booking_id):
        booking = get_object_or_404(Booking.objects.select_related("court"), id=booking_id)

        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = BookingService.update_booking_status(
            booking,
            serializer.validated_data["status"],
            request.user,
            admin_notes=serializer.validated_data.get("admin_notes"),
        )

        return Response({
            "status": "success",
            "message": f"Booking status updated to {booking.status}",
            "data": BookingSerializer(booking).data
        })

    patch = put


# -------------------------------------------------------------------
# PAYMENTS
# -------------------------------------------------------------------
class PaymentGatewayListView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({
            "status": "success",
            "data": PaymentService.active_gateways()
        })


class PaymentListCreateView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "booking"

    def get(self, request):
        payments = Payment.objects.filter(user=request.user).select_related("booking")
        return Response({
            "status": "success",
            "data": PaymentSerializer(payments, many=True).data
        })

    def post(self, request):
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = get_object_or_404(Booking, id=data["booking_id"])
        payment = PaymentService.process_payment(
            booking,
            request.user,
            data["payment_method"],
            data.get("payment_gateway", ""),
        )

        return Response({
            "status": "success",
            "message": "Payment processed successfully",
            "data": PaymentSerializer(payment).data
        }, status=status.HTTP_201_CREATED)


def get_visible_payment(user, payment_id):
    payment = get_object_or_404(
        Payment.objects.select_related("booking__court", "user"), id=payment_id
    )
    if payment.user_id != user.id and not can_manage_booking(user, payment.booking):
        raise PermissionDenied("You are not authorized to view this payment")
    return payment


class PaymentDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, payment_id):
        payment = get_visible_payment(request.user, payment_id)
        return Response({
            "status": "success",
            "data": PaymentSerializer(payment).data
        })


class PaymentReceiptView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, payment_id):
        payment = get_visible_payment(request.user, payment_id)
        return Response({
            "status": "success",
            "data": PaymentService.receipt(payment)
        })


class PaymentCancellationView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, payment_id):
        payment = get_object_or_404(Payment.objects.select_related("booking__court"), id=payment_id)

        serializer = CancellationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = PaymentService.request_cancellation(
            payment, request.user, serializer.validated_data["reason"]
        )

        return Response({
            "status": "success",
            "message": "Cancellation request submitted",
            "data": PaymentSerializer(payment).data
        })


# -------------------------------------------------------------------
# OPEN PLAY (JOIN EXISTING BOOKINGS)
# -------------------------------------------------------------------
class JoinableBookingListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        query = JoinableQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        bookings = JoinService.joinable_bookings(
            query.validated_data, exclude_user=request.user
        ).prefetch_related("players__user")

        return Response({
            "status": "success",
            "data": JoinableBookingSerializer(bookings, many=True).data
        })


class JoinableBookingDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, booking_id):
        booking = get_object_or_404(
            Booking.objects.select_related("court", "user").prefetch_related("players__user"),
            id=booking_id,
            allow_join=True,
        )
        return Response({
            "status": "success",
            "data": JoinableBookingSerializer(booking).data
        })


class BookingJoinRequestView(APIView):
    """
    POST: ask to join a booking
    GET: the booker lists requests for their booking
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, booking_id):
        booking = get_object_or_404(Booking, id=booking_id)

        if booking.user_id != request.user.id:
            raise PermissionDenied("Only the booker can view join requests")

        join_requests = booking.join_requests.select_related("user", "booking__court")

        request_status = request.query_params.get("status")
        if request_status:
            join_requests = join_requests.filter(status=request_status)

        return Response({
            "status": "success",
            "data": JoinRequestSerializer(join_requests, many=True).data
        })

    def post(self, request, booking_id):
        booking = get_object_or_404(Booking.objects.select_related("court"), id=booking_id)

        serializer = JoinRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = JoinService.send_request(
            booking,
            request.user,
            players_count=serializer.validated_data["players_count"],
            message=serializer.validated_data["message"],
        )

        return Response({
            "status": "success",
            "message": "Join request sent",
            "data": JoinRequestSerializer(join_request).data
        }, status=status.HTTP_201_CREATED)


class MyJoinRequestsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        join_requests = BookingJoinRequest.objects.filter(
            user=request.user
        ).select_related("user", "booking__court")

        return Response({
            "status": "success",
            "data": JoinRequestSerializer(join_requests, many=True).data
        })


class JoinRequestRespondView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, request_id):
        join_request = get_object_or_404(
            BookingJoinRequest.objects.select_related("booking__court", "user"),
            id=request_id,
        )

        serializer = JoinRespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = JoinService.respond(
            join_request,
            request.user,
            approve=serializer.validated_data["action"] == "approve",
        )

        return Response({
            "status": "success",
            "message": f"Join request {join_request.status}",
            "data": JoinRequestSerializer(join_request).data
        })


class JoinRequestCancelView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, request_id):
        join_request = get_object_or_404(
            BookingJoinRequest.objects.select_related("booking__court", "user"),
            id=request_id,
            status=JoinRequestStatus.PENDING,
        )
        join_request = JoinService.cancel_request(join_request, request.user)

        return Response({
            "status": "success",
            "data": JoinRequestSerializer(join_request).data
        })
