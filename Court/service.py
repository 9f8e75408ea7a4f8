import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from Notifications.constants import NotificationType
from Notifications.services import NotificationService
from Promotions.services import PromotionService
from Rewards.services import RewardService
from .constants import (
    BookingStatus,
    DEFAULT_NEEDED_PLAYERS,
    JoinRequestStatus,
    PaymentGateway,
    PaymentMethod,
    PaymentStatus,
    RefundStatus,
    SkillLevel,
)
from .exceptions import (
    CourtUnavailable,
    InvalidStateTransition,
    JoinRequestError,
    NotCourtOwner,
    PaymentError,
    SlotAlreadyBooked,
)
from .models import Booking, BookingJoinRequest, BookingPlayer, Court, Payment
from .utils import duration_hours, local_day_bounds

logger = logging.getLogger(__name__)


# =========================
# PRICING
# =========================

def calculate_booking_price(court, start_time, end_time):
    hours = Decimal(str(duration_hours(start_time, end_time)))
    total = court.hourly_rate * hours
    return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def can_manage_booking(user, booking):
    return user.is_platform_admin or booking.court.owner_id == user.id


# =========================
# BOOKINGS
# =========================

class BookingService:

    @staticmethod
    def create_booking(user, court_id, start_time, end_time, promotion_code=None,
                       allow_join=False, needed_players=DEFAULT_NEEDED_PLAYERS,
                       current_players=1, skill_level=SkillLevel.ALL_LEVELS):
        """
        Creates a pending booking.
        The court row is locked for the whole check-and-insert so two
        requests for overlapping ranges cannot both pass the overlap check.
        """
        court = Court.objects.filter(pk=court_id).first()
        if court is None:
            raise NotFound("Court not found")

        if not court.is_bookable:
            raise CourtUnavailable()

        if start_time >= end_time:
            raise ValidationError({"end_time": "End time must be after start time"})

        if start_time <= timezone.now():
            raise ValidationError({"start_time": "Cannot book a time in the past"})

        if current_players > needed_players:
            raise ValidationError({"current_players": "Current players cannot exceed needed players"})

        base_price = calculate_booking_price(court, start_time, end_time)

        with transaction.atomic():
            Court.objects.select_for_update().get(pk=court.pk)

            promotion = None
            discount = Decimal("0.00")
            if promotion_code:
                promotion = PromotionService.verify_code(promotion_code, user, lock=True)
                discount = PromotionService.calculate_discount(base_price, promotion)

            conflict = (
                Booking.objects
                .filter(
                    court=court,
                    start_time__lt=end_time,
                    end_time__gt=start_time,
                )
                .exclude(status=BookingStatus.CANCELLED)
                .exists()
            )

            if conflict:
                logger.info(
                    "Booking conflict on court %s for %s - %s", court.id, start_time, end_time
                )
                raise SlotAlreadyBooked()

            try:
                with transaction.atomic():
                    booking = Booking.objects.create(
                        court=court,
                        user=user,
                        start_time=start_time,
                        end_time=end_time,
                        total_price=base_price - discount,
                        discount_amount=discount,
                        promotion=promotion,
                        status=BookingStatus.PENDING,
                        skill_level=skill_level,
                        current_players=current_players,
                        needed_players=needed_players,
                        allow_join=allow_join,
                    )
            except IntegrityError:
                # Identical range inserted by a concurrent request
                raise SlotAlreadyBooked()

            if allow_join:
                BookingPlayer.objects.create(
                    booking=booking,
                    user=user,
                    is_booker=True,
                    players_count=current_players,
                )

            if promotion is not None:
                PromotionService.record_usage(promotion, user, booking, discount)

        NotificationService.booking_created(booking)
        logger.info(
            "Booking %s created by user %s on court %s (%s)",
            booking.id, user.id, court.id, booking.total_price
        )
        return booking

    @staticmethod
    def _release(booking):
        """Refunds completed payments and closes pending join requests."""
        booking.payments.filter(status=PaymentStatus.COMPLETED).update(
            status=PaymentStatus.REFUNDED,
            refund_status=RefundStatus.REFUNDED,
        )
        booking.join_requests.filter(status=JoinRequestStatus.PENDING).update(
            status=JoinRequestStatus.CANCELLED,
        )

    @classmethod
    def cancel_booking(cls, booking, user):
        if booking.user_id != user.id:
            raise PermissionDenied("You are not authorized to cancel this booking")

        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(pk=booking.pk)

            if booking.status == BookingStatus.CANCELLED:
                raise InvalidStateTransition("Booking is already cancelled")

            if booking.status == BookingStatus.COMPLETED:
                raise InvalidStateTransition("Cannot cancel a completed booking")

            if booking.start_time <= timezone.now():
                raise InvalidStateTransition("Cannot cancel a booking that has already started")

            booking.status = BookingStatus.CANCELLED
            booking.save(update_fields=["status", "updated_at"])
            cls._release(booking)

        NotificationService.booking_cancelled(booking, booking.user)
        NotificationService.booking_cancelled(booking, booking.court.owner)
        logger.info("Booking %s cancelled by user %s", booking.id, user.id)
        return booking

    @classmethod
    def update_booking_status(cls, booking, new_status, actor, admin_notes=None):
        if not can_manage_booking(actor, booking):
            raise NotCourtOwner()

        with transaction.atomic():
            booking = Booking.objects.select_for_update().select_related("court").get(pk=booking.pk)

            if not booking.can_transition_to(new_status):
                raise InvalidStateTransition(
                    f"Cannot change booking from {booking.status} to {new_status}"
                )

            booking.status = new_status
            fields = ["status", "updated_at"]
            if admin_notes is not None:
                booking.admin_notes = admin_notes
                fields.append("admin_notes")
            booking.save(update_fields=fields)

            if new_status == BookingStatus.CANCELLED:
                cls._release(booking)

        cls._after_status_change(booking)
        logger.info("Booking %s moved to %s by user %s", booking.id, new_status, actor.id)
        return booking

    @staticmethod
    def _after_status_change(booking):
        if booking.status == BookingStatus.CONFIRMED:
            NotificationService.booking_confirmed(booking)
        elif booking.status == BookingStatus.COMPLETED:
            RewardService.process_booking_rewards(booking)
            NotificationService.booking_completed(booking)
        elif booking.status == BookingStatus.CANCELLED:
            NotificationService.booking_cancelled(booking, booking.user)

    @classmethod
    def complete_past_bookings(cls, now=None):
        now = now or timezone.now()
        finished = Booking.objects.filter(
            status=BookingStatus.CONFIRMED,
            end_time__lte=now,
        ).select_related("court", "user")

        completed = 0
        for booking in finished:
            updated = Booking.objects.filter(
                pk=booking.pk, status=BookingStatus.CONFIRMED
            ).update(status=BookingStatus.COMPLETED)

            if not updated:
                continue

            booking.status = BookingStatus.COMPLETED
            cls._after_status_change(booking)
            completed += 1

        logger.info("Marked %s past bookings as completed", completed)
        return completed


# =========================
# PAYMENTS
# =========================

class PaymentService:

    @staticmethod
    def active_gateways():
        labels = dict(PaymentGateway.CHOICES)
        return [
            {"code": code, "name": labels[code]}
            for code in settings.PAYMENT_GATEWAYS
            if code in labels
        ]

    @staticmethod
    def generate_transaction_id(gateway):
        prefix = (gateway or "bank").upper()
        return f"{prefix}-{uuid.uuid4().hex[:16].upper()}"

    @classmethod
    def process_payment(cls, booking, user, payment_method, payment_gateway=""):
        if booking.user_id != user.id:
            raise PermissionDenied("You can only pay for your own bookings")

        if payment_method == PaymentMethod.ONLINE:
            if payment_gateway not in settings.PAYMENT_GATEWAYS:
                raise PaymentError("Unsupported or inactive payment gateway")
        else:
            payment_gateway = ""

        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(pk=booking.pk)

            if booking.status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED):
                raise PaymentError(f"Cannot pay for a {booking.status} booking")

            if booking.payments.filter(status=PaymentStatus.COMPLETED).exists():
                raise PaymentError("Booking is already paid")

            payment = Payment.objects.create(
                booking=booking,
                user=user,
                amount=booking.total_price,
                payment_method=payment_method,
                payment_gateway=payment_gateway,
                transaction_id=cls.generate_transaction_id(payment_gateway),
                status=PaymentStatus.COMPLETED,
                paid_at=timezone.now(),
            )

            confirmed = booking.status == BookingStatus.PENDING
            if confirmed:
                booking.status = BookingStatus.CONFIRMED
                booking.save(update_fields=["status", "updated_at"])

        NotificationService.payment_confirmed(payment)
        if confirmed:
            NotificationService.booking_confirmed(booking)

        logger.info(
            "Payment %s recorded for booking %s (%s %s)",
            payment.transaction_id, booking.id, payment.amount, payment.currency
        )
        return payment

    @staticmethod
    def receipt(payment):
        if payment.status != PaymentStatus.COMPLETED:
            raise PaymentError("Receipt is only available for completed payments")

        booking = payment.booking
        return {
            "receipt_number": f"RCPT-{payment.id:06d}",
            "transaction_id": payment.transaction_id,
            "paid_at": payment.paid_at,
            "amount": payment.amount,
            "currency": payment.currency,
            "payment_method": payment.payment_method,
            "payment_gateway": payment.payment_gateway,
            "customer": {
                "name": payment.user.full_name,
                "email": payment.user.email,
            },
            "booking": {
                "id": booking.id,
                "court": booking.court.name,
                "location": booking.court.location,
                "start_time": booking.start_time,
                "end_time": booking.end_time,
                "original_price": booking.total_price + booking.discount_amount,
                "discount_amount": booking.discount_amount,
                "total_price": booking.total_price,
            },
        }

    @staticmethod
    def request_cancellation(payment, user, reason):
        if payment.user_id != user.id:
            raise PermissionDenied("You can only cancel your own payments")

        if not reason or not reason.strip():
            raise ValidationError({"reason": "A cancellation reason is required"})

        if payment.refund_status == RefundStatus.REFUNDED or payment.status == PaymentStatus.REFUNDED:
            raise PaymentError("Payment has already been refunded")

        if payment.status != PaymentStatus.COMPLETED:
            raise PaymentError("Only completed payments can be cancelled")

        if payment.refund_status == RefundStatus.REQUESTED:
            raise PaymentError("Cancellation has already been requested")

        payment.refund_status = RefundStatus.REQUESTED
        payment.refund_reason = reason.strip()
        payment.payment_data = {
            **payment.payment_data,
            "cancellation_request": {
                "reason": payment.refund_reason,
                "requested_at": timezone.now().isoformat(),
            },
        }
        payment.save(update_fields=["refund_status", "refund_reason", "payment_data", "updated_at"])

        NotificationService.send(
            payment.booking.court.owner,
            title="Payment Cancellation Requested",
            message=f"A refund was requested for booking #{payment.booking_id}: {payment.refund_reason}",
            notification_type=NotificationType.REFUND_REQUESTED,
            related=payment,
        )
        logger.info("Refund requested for payment %s", payment.id)
        return payment

    @staticmethod
    def refund(payment, actor, reason=""):
        if payment.status != PaymentStatus.COMPLETED:
            raise PaymentError("Only completed payments can be refunded")

        with transaction.atomic():
            payment.status = PaymentStatus.REFUNDED
            payment.refund_status = RefundStatus.REFUNDED
            if reason:
                payment.refund_reason = reason
            payment.payment_data = {
                **payment.payment_data,
                "refund": {
                    "refunded_by": actor.id,
                    "reason": reason,
                    "refunded_at": timezone.now().isoformat(),
                },
            }
            payment.save()

            booking = payment.booking
            if booking.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
                booking.status = BookingStatus.CANCELLED
                booking.save(update_fields=["status", "updated_at"])

        NotificationService.payment_refunded(payment)
        logger.info("Payment %s refunded by user %s", payment.id, actor.id)
        return payment


# =========================
# OPEN PLAY
# =========================

class JoinService:

    @staticmethod
    def joinable_bookings(filters=None, exclude_user=None):
        filters = filters or {}
        qs = (
            Booking.objects
            .filter(
                status=BookingStatus.CONFIRMED,
                allow_join=True,
                start_time__gt=timezone.now(),
                current_players__lt=F("needed_players"),
            )
            .select_related("court", "user")
            .order_by("start_time")
        )

        if exclude_user is not None:
            qs = qs.exclude(user=exclude_user)

        if filters.get("date"):
            day_start, day_end = local_day_bounds(filters["date"])
            qs = qs.filter(start_time__gte=day_start, start_time__lt=day_end)

        if filters.get("skill_level"):
            qs = qs.filter(skill_level=filters["skill_level"])

        if filters.get("location"):
            location = filters["location"]
            qs = qs.filter(
                Q(court__location__icontains=location)
                | Q(court__district_name__icontains=location)
            )

        if filters.get("min_price") is not None:
            qs = qs.filter(court__hourly_rate__gte=filters["min_price"])

        if filters.get("max_price") is not None:
            qs = qs.filter(court__hourly_rate__lte=filters["max_price"])

        if filters.get("players_needed"):
            qs = qs.filter(
                needed_players__gte=F("current_players") + filters["players_needed"]
            )

        return qs

    @staticmethod
    def send_request(booking, user, players_count=1, message=""):
        if booking.user_id == user.id:
            raise JoinRequestError("You cannot join your own booking")

        if booking.status != BookingStatus.CONFIRMED:
            raise JoinRequestError("Only confirmed bookings can be joined")

        if not booking.allow_join:
            raise JoinRequestError("This booking does not accept players")

        if booking.start_time <= timezone.now():
            raise JoinRequestError("This booking has already started")

        if booking.spots_available < players_count:
            raise JoinRequestError("Not enough spots available")

        if booking.players.filter(user=user).exists():
            raise JoinRequestError("You are already a player in this booking")

        if booking.join_requests.filter(user=user, status=JoinRequestStatus.PENDING).exists():
            raise JoinRequestError("You already have a pending request for this booking")

        try:
            with transaction.atomic():
                join_request = BookingJoinRequest.objects.create(
                    booking=booking,
                    user=user,
                    players_count=players_count,
                    message=message,
                )
        except IntegrityError:
            raise JoinRequestError("You already have a pending request for this booking")

        NotificationService.join_request_received(join_request)
        logger.info("Join request %s sent for booking %s", join_request.id, booking.id)
        return join_request

    @staticmethod
    def respond(join_request, user, approve):
        if join_request.booking.user_id != user.id:
            raise PermissionDenied("Only the booker can respond to join requests")

        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(pk=join_request.booking_id)
            join_request = BookingJoinRequest.objects.select_for_update().get(pk=join_request.pk)

            if join_request.status != JoinRequestStatus.PENDING:
                raise JoinRequestError(f"Join request is already {join_request.status}")

            if approve:
                if booking.status != BookingStatus.CONFIRMED:
                    raise JoinRequestError("Booking is no longer open for players")

                if booking.spots_available < join_request.players_count:
                    raise JoinRequestError("Not enough spots available")

                BookingPlayer.objects.create(
                    booking=booking,
                    user=join_request.user,
                    players_count=join_request.players_count,
                )
                Booking.objects.filter(pk=booking.pk).update(
                    current_players=F("current_players") + join_request.players_count
                )
                join_request.status = JoinRequestStatus.APPROVED
            else:
                join_request.status = JoinRequestStatus.REJECTED

            join_request.save(update_fields=["status", "updated_at"])

        NotificationService.join_request_answered(join_request)
        logger.info("Join request %s %s", join_request.id, join_request.status)
        return join_request

    @staticmethod
    def cancel_request(join_request, user):
        if join_request.user_id != user.id:
            raise PermissionDenied("You can only cancel your own join requests")

        if join_request.status != JoinRequestStatus.PENDING:
            raise JoinRequestError(f"Join request is already {join_request.status}")

        join_request.status = JoinRequestStatus.CANCELLED
        join_request.save(update_fields=["status", "updated_at"])
        return join_request
