from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from Accounts.permissions import IsPlatformAdmin
from Dashboard.models import AdminLog
from .models import Notification
from .serializers import (
    BroadcastNotificationSerializer,
    NotificationSerializer,
    SendMultipleNotificationSerializer,
    SendNotificationSerializer,
)
from .services import NotificationService


class NotificationListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = Notification.objects.filter(user=request.user)

        if request.query_params.get("unread") == "true":
            qs = qs.filter(is_read=False)

        limit = min(int(request.query_params.get("limit", 50)), 200)

        return Response({
            "status": "success",
            "data": {
                "notifications": NotificationSerializer(qs[:limit], many=True).data,
                "unread_count": NotificationService.unread_count(request.user),
            }
        })


class UnreadCountView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            "status": "success",
            "unread_count": NotificationService.unread_count(request.user),
        })


class MarkReadView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, notification_id):
        # Scoped to the caller; another user's notification is a 404
        notification = get_object_or_404(
            Notification, id=notification_id, user=request.user
        )
        notification.is_read = True
        notification.save(update_fields=["is_read"])

        return Response({
            "status": "success",
            "data": NotificationSerializer(notification).data
        })


class MarkAllReadView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request):
        updated = NotificationService.mark_all_read(request.user)
        return Response({
            "status": "success",
            "updated_count": updated,
        })


class NotificationDeleteView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, notification_id):
        notification = get_object_or_404(
            Notification, id=notification_id, user=request.user
        )
        notification.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# -------------------------------------------------------------------
# ADMIN BROADCASTS
# -------------------------------------------------------------------
class AdminSendNotificationView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        serializer = SendNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        notification = NotificationService.send(
            data["user_id"],
            title=data["title"],
            message=data["message"],
            notification_type=data["type"],
        )
        AdminLog.record(request.user, "send_notification", notification, details={"title": data["title"]})

        return Response({
            "status": "success",
            "data": NotificationSerializer(notification).data
        }, status=status.HTTP_201_CREATED)


class AdminSendMultipleView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        serializer = SendMultipleNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        created = NotificationService.send_many(
            data["user_ids"], data["title"], data["message"]
        )
        AdminLog.record(
            request.user,
            "send_multiple_notifications",
            entity_type="notification",
            details={"title": data["title"], "user_ids": [user.id for user in data["user_ids"]]},
        )

        return Response({
            "status": "success",
            "sent_count": len(created),
        }, status=status.HTTP_201_CREATED)


class AdminBroadcastView(APIView):
    """
    System-wide broadcast, optionally limited to one role.
    """
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        serializer = BroadcastNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data.get("role"):
            created = NotificationService.send_to_role(
                data["role"], data["title"], data["message"]
            )
        else:
            created = NotificationService.send_system(data["title"], data["message"])

        AdminLog.record(
            request.user,
            "send_notification_by_role" if data.get("role") else "send_system_notification",
            entity_type="notification",
            details={"title": data["title"], "role": data.get("role") or "", "sent_count": len(created)},
        )

        return Response({
            "status": "success",
            "sent_count": len(created),
        }, status=status.HTTP_201_CREATED)
