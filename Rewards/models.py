from django.conf import settings
from django.db import models

from .constants import ActionType, HistoryType


class Reward(models.Model):
    """Something a customer can redeem points for."""

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    points_required = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["points_required"]

    def __str__(self):
        return f"{self.name} ({self.points_required} pts)"


class RewardRule(models.Model):
    """
    How many points an action earns.
    Percentage rules award `points` percent of the amount involved.
    """

    action_type = models.CharField(max_length=50, unique=True, choices=ActionType.CHOICES)
    description = models.CharField(max_length=255, blank=True)
    points = models.PositiveIntegerField()
    is_percentage = models.BooleanField(default=False)
    min_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    max_points = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.action_type


class RewardHistory(models.Model):
    """
    Points ledger. Earnings are positive, everything else negative,
    except adjustments which may go either way.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reward_history"
    )
    points = models.IntegerField()
    type = models.CharField(max_length=20, choices=HistoryType.CHOICES)
    action_type = models.CharField(max_length=50, blank=True)
    description = models.CharField(max_length=255, blank=True)

    source_id = models.PositiveIntegerField(null=True, blank=True)
    source_type = models.CharField(max_length=50, blank=True)

    # Set on earnings once they have been written off
    expired = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "reward history"
        indexes = [
            models.Index(fields=["user", "type"]),
        ]

    def __str__(self):
        return f"{self.user} {self.points:+d} ({self.type})"
