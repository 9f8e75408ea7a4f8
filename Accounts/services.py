import base64
import io
import logging

import pyotp
import qrcode
from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User

logger = logging.getLogger(__name__)


def issue_tokens(user):
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    refresh["email"] = user.email
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }


def serialize_user_summary(user):
    return {
        "id": user.id,
        "full_name": user.full_name,
        "email": user.email,
        "role": user.role,
        "approval_status": user.approval_status or None,
        "two_factor_enabled": user.two_factor_enabled,
    }


# -------------------------------------------------------------------
# TWO-FACTOR AUTHENTICATION (TOTP)
# -------------------------------------------------------------------
class TwoFactorService:

    @staticmethod
    def start_setup(user):
        """
        Generate a fresh secret and QR code. 2FA stays disabled
        until the user proves possession with a valid code.
        """
        secret = pyotp.random_base32()
        uri = pyotp.TOTP(secret).provisioning_uri(
            name=user.email,
            issuer_name=settings.TWO_FACTOR_ISSUER,
        )

        qr = qrcode.QRCode(version=1, box_size=10, border=5)
        qr.add_data(uri)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        qr_base64 = base64.b64encode(buffer.getvalue()).decode()

        user.two_factor_secret = secret
        user.two_factor_enabled = False
        user.save(update_fields=["two_factor_secret", "two_factor_enabled", "updated_at"])

        return {
            "secret": secret,
            "otpauth_url": uri,
            "qr_code": f"data:image/png;base64,{qr_base64}",
        }

    @staticmethod
    def verify_code(user, code):
        if not user.two_factor_secret or not code:
            return False
        return pyotp.TOTP(user.two_factor_secret).verify(str(code), valid_window=1)

    @staticmethod
    def enable(user):
        user.two_factor_enabled = True
        user.save(update_fields=["two_factor_enabled", "updated_at"])
        logger.info("2FA enabled for user %s", user.id)

    @staticmethod
    def disable(user):
        user.two_factor_enabled = False
        user.two_factor_secret = ""
        user.save(update_fields=["two_factor_enabled", "two_factor_secret", "updated_at"])
        logger.info("2FA disabled for user %s", user.id)


# -------------------------------------------------------------------
# PASSWORD RESET
# -------------------------------------------------------------------
class PasswordResetService:

    @staticmethod
    def build_reset_link(user):
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        return uid, token, f"{settings.FRONTEND_URL}/reset-password?uid={uid}&token={token}"

    @classmethod
    def send_reset_email(cls, email):
        user = User.objects.filter(email__iexact=email, is_active=True).first()

        # Unknown emails are not revealed to the caller
        if not user:
            logger.info("Password reset requested for unknown email")
            return None

        _, _, link = cls.build_reset_link(user)
        send_mail(
            subject="Reset your password",
            message=(
                f"Hi {user.full_name},\n\n"
                f"Use the link below to reset your password:\n{link}\n\n"
                "If you did not request this, ignore this email."
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
        )
        logger.info("Password reset email sent to user %s", user.id)
        return user

    @staticmethod
    def resolve_user(uid, token):
        try:
            pk = force_str(urlsafe_base64_decode(uid))
            user = User.objects.get(pk=pk)
        except (TypeError, ValueError, OverflowError, User.DoesNotExist):
            return None

        if not default_token_generator.check_token(user, token):
            return None
        return user
