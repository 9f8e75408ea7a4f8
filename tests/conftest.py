from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.core.management import call_command
from django.utils import timezone
from rest_framework.test import APIClient

from Accounts.models import User
from Court.constants import BookingStatus
from Court.models import Booking, Court

PASSWORD = "Dink!Shot2024"


@pytest.fixture(autouse=True)
def clear_cache():
    # Throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client


# ----------------------------------
# USERS
# ----------------------------------
@pytest.fixture
def customer(db):
    return User.objects.create_user(
        email="player@example.com",
        password=PASSWORD,
        full_name="Lan Nguyen",
        phone_number="0901234567",
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        email="partner@example.com",
        password=PASSWORD,
        full_name="Minh Tran",
    )


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email="owner@example.com",
        password=PASSWORD,
        full_name="Hoa Le",
        role=User.COURT_OWNER,
        approval_status=User.APPROVED,
        id_card="079123456789",
        tax_code="0312345678",
    )


@pytest.fixture
def pending_owner(db):
    return User.objects.create_user(
        email="newowner@example.com",
        password=PASSWORD,
        full_name="Quang Pham",
        role=User.COURT_OWNER,
        id_card="079987654321",
        tax_code="0319876543",
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@example.com",
        password=PASSWORD,
        full_name="Site Admin",
        role=User.ADMIN,
    )


# ----------------------------------
# COURTS / BOOKINGS
# ----------------------------------
@pytest.fixture
def court(owner):
    return Court.objects.create(
        owner=owner,
        name="Saigon Pickle Club",
        description="Four outdoor hard courts",
        location="12 Nguyen Hue, District 1",
        district="760",
        district_name="District 1",
        hourly_rate=Decimal("200000.00"),
    )


@pytest.fixture
def slot():
    """Builds an aware (start, end) pair `days` ahead at `hour` local time."""
    def _slot(days=2, hour=10, hours=1):
        start = timezone.localtime().replace(hour=hour, minute=0, second=0, microsecond=0)
        start += timedelta(days=days)
        return start, start + timedelta(hours=hours)
    return _slot


@pytest.fixture
def make_booking(court, customer, slot):
    def _make(user=None, status=BookingStatus.PENDING, days=2, hour=10, hours=1, **extra):
        start, end = slot(days=days, hour=hour, hours=hours)
        return Booking.objects.create(
            court=extra.pop("court", court),
            user=user or customer,
            start_time=start,
            end_time=end,
            total_price=extra.pop("total_price", Decimal("200000.00") * hours),
            status=status,
            **extra,
        )
    return _make


@pytest.fixture
def reward_rules(db):
    call_command("seed_reward_rules")
