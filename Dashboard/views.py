import csv
import logging

from django.db.models import Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from Accounts.models import User
from Accounts.permissions import IsPlatformAdmin
from Court.constants import RefundStatus
from Court.models import Booking, Court, Payment
from Court.serializers import BookingDetailSerializer, BookingSerializer, BookingStatusSerializer, PaymentSerializer
from Court.service import BookingService, PaymentService
from .models import AdminLog
from .serializers import (
    AdminActivityQuerySerializer,
    AdminCourtSerializer,
    AdminLogSerializer,
    AdminUserDetailSerializer,
    AdminUserSerializer,
    BookingQuerySerializer,
    CourtStatusSerializer,
    DashboardSerializer,
    NotesSerializer,
    OwnerDecisionSerializer,
    PaymentQuerySerializer,
    RefundSerializer,
    ReportQuerySerializer,
    RunTaskSerializer,
    UserQuerySerializer,
    UserStatusSerializer,
)
from .services import AdminDashboardService, OwnerApprovalService, ReportService
from .tasks import ScheduledTaskService

logger = logging.getLogger(__name__)

RECENT_LOG_LIMIT = 50


def csv_response(filename, rows):
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}_{timezone.localdate()}.csv"'

    # BOM so spreadsheet apps detect UTF-8
    response.write("\ufeff")

    writer = csv.writer(response)
    for row in rows:
        writer.writerow(row)

    return response


class AdminAPIView(APIView):
    permission_classes = [IsPlatformAdmin]


# -------------------------------------------------------------------
# DASHBOARD
# -------------------------------------------------------------------
class AdminDashboardView(AdminAPIView):

    def get(self, request):
        response_data = {
            "profile": AdminDashboardService.get_profile(request.user),
            "stats": AdminDashboardService.get_stats(),
            "recent_bookings": AdminDashboardService.get_recent_bookings(),
        }

        serializer = DashboardSerializer(response_data)

        return Response(
            {"status": "success", "data": serializer.data},
            status=200
        )


# -------------------------------------------------------------------
# COURT OWNER APPROVAL
# -------------------------------------------------------------------
class CourtOwnerListView(AdminAPIView):

    def get(self, request):
        owners = User.objects.filter(role=User.COURT_OWNER)

        approval_status = request.query_params.get("status")
        if approval_status:
            owners = owners.filter(approval_status=approval_status)

        return Response({
            "status": "success",
            "data": AdminUserSerializer(owners, many=True).data
        })


class CourtOwnerDecisionView(AdminAPIView):

    def put(self, request, user_id):
        owner = get_object_or_404(User, id=user_id, role=User.COURT_OWNER)

        serializer = OwnerDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        owner = OwnerApprovalService.decide(
            owner,
            approve=serializer.validated_data["action"] == "approve",
            admin_notes=serializer.validated_data["admin_notes"],
        )
        AdminLog.record(
            request.user,
            f"{serializer.validated_data['action']}_court_owner",
            owner,
            details={"admin_notes": owner.admin_notes},
        )

        return Response({
            "status": "success",
            "message": f"Court owner {owner.approval_status}",
            "data": AdminUserSerializer(owner).data
        })


# -------------------------------------------------------------------
# USERS
# -------------------------------------------------------------------
class AdminUserListView(AdminAPIView):

    def get(self, request):
        query = UserQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        filters = query.validated_data

        users = User.objects.all()

        if filters.get("role"):
            users = users.filter(role=filters["role"])
        if filters.get("is_active") is not None:
            users = users.filter(is_active=filters["is_active"])
        if filters.get("search"):
            term = filters["search"]
            users = users.filter(
                Q(email__icontains=term) | Q(full_name__icontains=term) | Q(phone_number__icontains=term)
            )

        return Response({
            "status": "success",
            "count": users.count(),
            "data": AdminUserSerializer(users, many=True).data
        })


class AdminUserDetailView(AdminAPIView):

    def get(self, request, user_id):
        user = get_object_or_404(User, id=user_id)
        return Response({
            "status": "success",
            "data": AdminUserDetailSerializer(user).data
        })


class AdminUserStatusView(AdminAPIView):

    def put(self, request, user_id):
        user = get_object_or_404(User, id=user_id)

        serializer = UserStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if user.id == request.user.id:
            raise ValidationError("You cannot change your own account status")

        user.is_active = serializer.validated_data["is_active"]
        user.save(update_fields=["is_active", "updated_at"])
        AdminLog.record(request.user, "activate_user" if user.is_active else "deactivate_user", user)

        return Response({
            "status": "success",
            "message": "User activated" if user.is_active else "User deactivated",
            "data": AdminUserSerializer(user).data
        })


class AdminUserNotesView(AdminAPIView):

    def put(self, request, user_id):
        user = get_object_or_404(User, id=user_id)

        serializer = NotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user.admin_notes = serializer.validated_data["admin_notes"]
        user.save(update_fields=["admin_notes", "updated_at"])
        AdminLog.record(request.user, "update_user_notes", user)

        return Response({
            "status": "success",
            "data": AdminUserSerializer(user).data
        })


# -------------------------------------------------------------------
# BOOKINGS
# -------------------------------------------------------------------
def filter_bookings(params):
    query = BookingQuerySerializer(data=params)
    query.is_valid(raise_exception=True)
    filters = query.validated_data

    bookings = Booking.objects.select_related("court", "user", "promotion").order_by("-start_time")

    if filters.get("status"):
        bookings = bookings.filter(status=filters["status"])
    if filters.get("court_id"):
        bookings = bookings.filter(court_id=filters["court_id"])
    if filters.get("user_id"):
        bookings = bookings.filter(user_id=filters["user_id"])
    if filters.get("start_date"):
        bookings = bookings.filter(start_time__date__gte=filters["start_date"])
    if filters.get("end_date"):
        bookings = bookings.filter(start_time__date__lte=filters["end_date"])

    return bookings


class AdminBookingListView(AdminAPIView):

    def get(self, request):
        bookings = filter_bookings(request.query_params)
        return Response({
            "status": "success",
            "count": bookings.count(),
            "data": BookingSerializer(bookings, many=True).data
        })


class AdminBookingDetailView(AdminAPIView):

    def get(self, request, booking_id):
        booking = get_object_or_404(Booking, id=booking_id)
        return Response({
            "status": "success",
            "data": BookingDetailSerializer(booking).data
        })


class AdminBookingStatusView(AdminAPIView):

    def put(self, request, booking_id):
        booking = get_object_or_404(Booking, id=booking_id)

        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = BookingService.update_booking_status(
            booking,
            serializer.validated_data["status"],
            request.user,
            admin_notes=serializer.validated_data.get("admin_notes"),
        )
        AdminLog.record(
            request.user, "update_booking_status", booking, details={"status": booking.status}
        )

        return Response({
            "status": "success",
            "message": f"Booking status updated to {booking.status}",
            "data": BookingSerializer(booking).data
        })


class AdminBookingNotesView(AdminAPIView):

    def put(self, request, booking_id):
        booking = get_object_or_404(Booking, id=booking_id)

        serializer = NotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking.admin_notes = serializer.validated_data["admin_notes"]
        booking.save(update_fields=["admin_notes", "updated_at"])
        AdminLog.record(request.user, "update_booking_notes", booking)

        return Response({
            "status": "success",
            "data": BookingDetailSerializer(booking).data
        })


# -------------------------------------------------------------------
# COURTS
# -------------------------------------------------------------------
class AdminCourtListView(AdminAPIView):

    def get(self, request):
        courts = Court.objects.select_related("owner")

        court_status = request.query_params.get("status")
        if court_status:
            courts = courts.filter(status=court_status)

        owner_id = request.query_params.get("owner_id")
        if owner_id:
            courts = courts.filter(owner_id=owner_id)

        return Response({
            "status": "success",
            "data": AdminCourtSerializer(courts, many=True).data
        })


class AdminCourtStatusView(AdminAPIView):

    def put(self, request, court_id):
        court = get_object_or_404(Court, id=court_id)

        serializer = CourtStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        court.status = serializer.validated_data["status"]
        update_fields = ["status", "updated_at"]
        if "admin_notes" in serializer.validated_data:
            court.admin_notes = serializer.validated_data["admin_notes"]
            update_fields.append("admin_notes")
        court.save(update_fields=update_fields)

        AdminLog.record(request.user, "update_court_status", court, details={"status": court.status})

        return Response({
            "status": "success",
            "data": AdminCourtSerializer(court).data
        })


class AdminCourtNotesView(AdminAPIView):

    def put(self, request, court_id):
        court = get_object_or_404(Court, id=court_id)

        serializer = NotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        court.admin_notes = serializer.validated_data["admin_notes"]
        court.save(update_fields=["admin_notes", "updated_at"])
        AdminLog.record(request.user, "update_court_notes", court)

        return Response({
            "status": "success",
            "data": AdminCourtSerializer(court).data
        })


# -------------------------------------------------------------------
# PAYMENTS
# -------------------------------------------------------------------
class AdminPaymentListView(AdminAPIView):

    def get(self, request):
        query = PaymentQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        payments = Payment.objects.select_related("booking", "user").order_by("-created_at")

        if query.validated_data.get("status"):
            payments = payments.filter(status=query.validated_data["status"])
        if query.validated_data["refund_requested"]:
            payments = payments.filter(refund_status=RefundStatus.REQUESTED)

        return Response({
            "status": "success",
            "data": PaymentSerializer(payments, many=True).data
        })


class AdminPaymentRefundView(AdminAPIView):

    def post(self, request, payment_id):
        payment = get_object_or_404(Payment.objects.select_related("booking"), id=payment_id)

        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = PaymentService.refund(payment, request.user, serializer.validated_data["reason"])
        AdminLog.record(
            request.user, "refund_payment", payment, details={"reason": serializer.validated_data["reason"]}
        )

        return Response({
            "status": "success",
            "message": "Payment refunded",
            "data": PaymentSerializer(payment).data
        })


# -------------------------------------------------------------------
# REPORTS
# -------------------------------------------------------------------
class ReportAPIView(AdminAPIView):
    """
    Reports take ?start_date=&end_date= (default: the last 30 days)
    and ?export=csv for a spreadsheet download.
    """

    query_serializer_class = ReportQuerySerializer
    report_name = None

    def get_params(self, request):
        query = self.query_serializer_class(data=request.query_params)
        query.is_valid(raise_exception=True)
        return query.validated_data

    def export(self, request, rows):
        response = csv_response(self.report_name, rows)
        AdminLog.record(
            request.user, "export_report", entity_type="report", details={"report": self.report_name}
        )
        return response


class RevenueReportView(ReportAPIView):
    report_name = "revenue"

    def get(self, request):
        params = self.get_params(request)

        rows = ReportService.revenue(
            params.get("start_date"), params.get("end_date"), params["group_by"]
        )

        if params["export"] == "csv":
            return self.export(request, ReportService.revenue_rows(rows))

        return Response({
            "status": "success",
            "data": {
                "rows": rows,
                "total_revenue": sum(row["revenue"] for row in rows),
                "courts": list(ReportService.court_performance(
                    params.get("start_date"), params.get("end_date")
                )),
            }
        })


class BookingReportView(ReportAPIView):
    report_name = "bookings"

    def get(self, request):
        params = self.get_params(request)

        bookings = ReportService.bookings(params.get("start_date"), params.get("end_date"))

        if params["export"] == "csv":
            return self.export(request, ReportService.booking_rows(bookings))

        return Response({
            "status": "success",
            "count": bookings.count(),
            "data": BookingSerializer(bookings, many=True).data
        })


class UserReportView(ReportAPIView):
    report_name = "users"

    def get(self, request):
        params = self.get_params(request)
        start_date, end_date = params.get("start_date"), params.get("end_date")

        if params["export"] == "csv":
            return self.export(
                request, ReportService.user_rows(ReportService.joined_users(start_date, end_date))
            )

        return Response({
            "status": "success",
            "data": ReportService.users(start_date, end_date, params["group_by"])
        })


class PromotionReportView(ReportAPIView):
    report_name = "promotions"

    def get(self, request):
        params = self.get_params(request)
        start_date, end_date = params.get("start_date"), params.get("end_date")

        promotions = ReportService.promotions(start_date, end_date)

        if params["export"] == "csv":
            return self.export(request, ReportService.promotion_rows(promotions))

        summary = ReportService.promotion_summary(promotions, start_date, end_date, params["group_by"])

        return Response({
            "status": "success",
            "data": {
                **summary,
                "promotions": list(promotions.values(
                    "id",
                    "code",
                    "promotion_type",
                    "discount_percent",
                    "is_active",
                    "uses",
                    "unique_users",
                    "total_discount",
                )),
            }
        })


class RewardReportView(ReportAPIView):
    report_name = "rewards"

    def get(self, request):
        params = self.get_params(request)

        history = ReportService.reward_history(params.get("start_date"), params.get("end_date"))

        if params["export"] == "csv":
            return self.export(request, ReportService.reward_rows(history))

        return Response({
            "status": "success",
            "data": ReportService.rewards(history, params["group_by"])
        })


class AdminActivityReportView(ReportAPIView):
    query_serializer_class = AdminActivityQuerySerializer
    report_name = "admin_activity"

    def get(self, request):
        params = self.get_params(request)

        logs = ReportService.admin_logs(
            params.get("start_date"), params.get("end_date"), params.get("admin_id")
        )

        if params["export"] == "csv":
            return self.export(request, ReportService.admin_log_rows(logs))

        return Response({
            "status": "success",
            "data": {
                **ReportService.admin_activity(logs, params["group_by"]),
                "recent": AdminLogSerializer(logs[:RECENT_LOG_LIMIT], many=True).data,
            }
        })


# -------------------------------------------------------------------
# SCHEDULED TASKS
# -------------------------------------------------------------------
class ScheduledTaskListView(AdminAPIView):

    def get(self, request):
        return Response({
            "status": "success",
            "data": sorted(ScheduledTaskService.task_map())
        })


class RunScheduledTasksView(AdminAPIView):
    """
    POST /admin/tasks/<daily|weekly|monthly>/
    """

    runners = {
        "daily": ScheduledTaskService.run_daily,
        "weekly": ScheduledTaskService.run_weekly,
        "monthly": ScheduledTaskService.run_monthly,
    }

    def post(self, request, period):
        if period not in self.runners:
            raise ValidationError({"period": f"Unknown period '{period}'"})

        results = self.runners[period]()
        AdminLog.record(request.user, "run_scheduled_tasks", entity_type="task", details={"period": period})

        return Response({
            "status": "success",
            "message": f"{period.capitalize()} tasks completed",
            "data": results
        })


class RunSingleTaskView(AdminAPIView):

    def post(self, request):
        serializer = RunTaskSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = serializer.validated_data["task"]

        if task not in ScheduledTaskService.task_map():
            raise ValidationError({"task": f"Unknown task '{task}'"})

        result = ScheduledTaskService.run(task)
        AdminLog.record(request.user, "run_scheduled_tasks", entity_type="task", details={"task": task})

        return Response({
            "status": "success",
            "message": f"Task {task} completed",
            "data": {task: result}
        })
