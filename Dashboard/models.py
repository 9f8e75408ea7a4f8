import logging

from django.conf import settings
from django.db import models

logger = logging.getLogger(__name__)


class AdminLog(models.Model):
    """
    Audit trail for actions taken through the admin API.
    """

    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="admin_logs"
    )

    # e.g. update_booking_status, create_promotion, send_system_notification
    action_type = models.CharField(max_length=50)

    # user, court, booking, payment, promotion, notification, report, task
    entity_type = models.CharField(max_length=50)
    entity_id = models.PositiveIntegerField(null=True, blank=True)

    details = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["admin", "created_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
        ]

    def __str__(self):
        return f"{self.action_type} {self.entity_type}#{self.entity_id} by {self.admin_id}"

    @classmethod
    def record(cls, admin, action_type, entity=None, entity_type=None, details=None):
        """
        `entity` may be a model instance; its model name becomes the entity type.
        """
        entity_id = None
        if entity is not None:
            entity_type = entity_type or entity._meta.model_name
            entity_id = entity.pk

        log = cls.objects.create(
            admin=admin,
            action_type=action_type,
            entity_type=entity_type or "",
            entity_id=entity_id,
            details=details or {},
        )
        logger.info("Admin %s: %s %s %s", admin.id, action_type, log.entity_type, entity_id or "")
        return log
