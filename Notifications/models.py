from django.conf import settings
from django.db import models


class Notification(models.Model):
    """
    In-app notification. Clients poll the list / unread count endpoints.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications"
    )

    title = models.CharField(max_length=200)
    message = models.TextField()

    # e.g. booking_confirmation, join_request, reward_points
    type = models.CharField(max_length=50, blank=True)

    # Generic pointer to the object the notification is about
    related_id = models.PositiveIntegerField(null=True, blank=True)
    related_type = models.CharField(max_length=50, blank=True)

    is_system = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read"]),
        ]

    def __str__(self):
        return f"{self.title} -> {self.user_id}"
