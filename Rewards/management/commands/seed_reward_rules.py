from decimal import Decimal

from django.core.management.base import BaseCommand

from Rewards.constants import ActionType
from Rewards.models import RewardRule


DEFAULT_RULES = [
    {
        "action_type": ActionType.BOOKING_COMPLETED,
        "description": "Points per completed booking, 1% of the amount paid",
        "points": 1,
        "is_percentage": True,
        "min_amount": Decimal("0"),
        "max_points": 500,
    },
    {
        "action_type": ActionType.FIRST_BOOKING,
        "description": "One-off bonus for the first completed booking",
        "points": 100,
    },
    {
        "action_type": ActionType.OFF_PEAK_BOOKING,
        "description": "Bonus for playing before 9 AM or from 8 PM",
        "points": 20,
    },
    {
        "action_type": ActionType.CONSECUTIVE_BOOKINGS,
        "description": "Monthly bonus after 3 completed bookings in 30 days",
        "points": 50,
    },
    {
        "action_type": ActionType.REFERRAL,
        "description": "Referring a friend",
        "points": 50,
    },
    {
        "action_type": ActionType.BIRTHDAY,
        "description": "Birthday bonus",
        "points": 100,
    },
    {
        "action_type": ActionType.MONTHLY_LOYALTY,
        "description": "3 or more bookings in the previous month",
        "points": 30,
    },
]


class Command(BaseCommand):
    help = "Creates the default reward rules (existing rules are left untouched)"

    def handle(self, *args, **kwargs):
        created_count = 0

        for rule_data in DEFAULT_RULES:
            data = dict(rule_data)
            action_type = data.pop("action_type")

            rule, created = RewardRule.objects.get_or_create(
                action_type=action_type,
                defaults=data,
            )

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"Created rule: {rule.action_type}"))
            else:
                self.stdout.write(self.style.WARNING(f"Rule already exists: {rule.action_type}"))

        self.stdout.write(self.style.SUCCESS(f"Created {created_count} new reward rules"))
