from django.urls import path

from .views import (
    AdminBroadcastView,
    AdminSendMultipleView,
    AdminSendNotificationView,
    MarkAllReadView,
    MarkReadView,
    NotificationDeleteView,
    NotificationListView,
    UnreadCountView,
)

urlpatterns = [
    path("", NotificationListView.as_view(), name="notification-list"),
    path("unread-count/", UnreadCountView.as_view(), name="notification-unread-count"),
    path("read-all/", MarkAllReadView.as_view(), name="notification-read-all"),
    path("<int:notification_id>/read/", MarkReadView.as_view(), name="notification-read"),
    path("<int:notification_id>/", NotificationDeleteView.as_view(), name="notification-delete"),

    path("send/", AdminSendNotificationView.as_view(), name="notification-send"),
    path("send-multiple/", AdminSendMultipleView.as_view(), name="notification-send-multiple"),
    path("send-system/", AdminBroadcastView.as_view(), name="notification-send-system"),
]
