# Accounts/models.py

from django.db import models
from django.contrib.auth.models import (
    AbstractBaseUser,
    PermissionsMixin,
    BaseUserManager,
)


# ----------------------------------
# CUSTOM USER MANAGER
# ----------------------------------
# Creates customers, court owners and platform admins.
# Email is the login identifier.
class UserManager(BaseUserManager):

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Email is required")

        email = self.normalize_email(email)
        extra_fields.setdefault("role", User.CUSTOMER)

        # Court owners must be approved by an admin before managing courts
        if extra_fields["role"] == User.COURT_OWNER:
            extra_fields.setdefault("approval_status", User.PENDING)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email, password, **extra_fields)


# ----------------------------------
# CUSTOM USER MODEL
# ----------------------------------
class User(AbstractBaseUser, PermissionsMixin):

    CUSTOMER = "customer"
    COURT_OWNER = "court_owner"
    ADMIN = "admin"

    ROLE_CHOICES = (
        (CUSTOMER, "Customer"),
        (COURT_OWNER, "Court Owner"),
        (ADMIN, "Admin"),
    )

    # Court owner approval lifecycle
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    APPROVAL_CHOICES = (
        (PENDING, "Pending"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
    )

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=20, blank=True)
    location = models.CharField(max_length=255, blank=True)
    profile_image_url = models.URLField(blank=True)
    birth_date = models.DateField(null=True, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=CUSTOMER)

    # Court owner verification documents
    id_card = models.CharField(max_length=50, blank=True)
    tax_code = models.CharField(max_length=50, blank=True)
    approval_status = models.CharField(
        max_length=20,
        choices=APPROVAL_CHOICES,
        blank=True,
    )
    admin_notes = models.TextField(blank=True)

    # Running balance; the ledger lives in Rewards.RewardHistory
    reward_points = models.IntegerField(default=0)

    # TOTP two-factor authentication
    two_factor_secret = models.CharField(max_length=64, blank=True)
    two_factor_enabled = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    objects = UserManager()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["full_name"]

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_court_owner(self):
        return self.role == self.COURT_OWNER

    @property
    def is_platform_admin(self):
        return self.role == self.ADMIN or self.is_staff

    @property
    def is_approved_owner(self):
        return self.is_court_owner and self.approval_status == self.APPROVED

    def __str__(self):
        return self.email
