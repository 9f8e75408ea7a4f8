# Accounts/views.py
import logging

from django.db import transaction
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from Notifications.constants import NotificationType
from Notifications.services import NotificationService
from Promotions.services import PromotionService
from .models import User
from .serializers import (
    ChangePasswordSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    ProfileSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    TwoFactorCodeSerializer,
    TwoFactorLoginSerializer,
)
from .services import (
    PasswordResetService,
    TwoFactorService,
    issue_tokens,
    serialize_user_summary,
)

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "auth"

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            user = serializer.save()

            if user.role == User.CUSTOMER:
                PromotionService.create_welcome_promotion(user)
            else:
                NotificationService.send(
                    user,
                    title="Registration received",
                    message="Your court owner account is waiting for admin approval.",
                    notification_type=NotificationType.ACCOUNT,
                )

        logger.info("User %s registered as %s", user.id, user.role)

        return Response({
            "status": "success",
            "message": "User registered successfully",
            "data": {
                "user": serialize_user_summary(user),
                "tokens": issue_tokens(user),
                "created_at": user.created_at,
            }
        }, status=status.HTTP_201_CREATED)


class LoginView(TokenObtainPairView):
    permission_classes = [AllowAny]
    serializer_class = LoginSerializer
    throttle_scope = "auth"


class TwoFactorLoginView(TokenObtainPairView):
    permission_classes = [AllowAny]
    serializer_class = TwoFactorLoginSerializer
    throttle_scope = "auth"


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = ProfileSerializer(request.user)
        return Response({
            "status": "success",
            "data": serializer.data
        }, status=status.HTTP_200_OK)

    def patch(self, request):
        serializer = ProfileUpdateSerializer(
            request.user, data=request.data, partial=True
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()

        return Response({
            "status": "success",
            "message": "Profile updated successfully",
            "data": ProfileSerializer(request.user).data
        }, status=200)

    put = patch


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = ChangePasswordSerializer(
            data=request.data, context={"request": request}
        )
        serializer.is_valid(raise_exception=True)

        user = request.user
        user.set_password(serializer.validated_data["new_password"])
        user.save()

        return Response({
            "status": "success",
            "message": "Password updated successfully"
        })


class ForgotPasswordView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "auth"

    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        PasswordResetService.send_reset_email(serializer.validated_data["email"])

        return Response({
            "status": "success",
            "message": "If the email exists, a reset link has been sent"
        })


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "auth"

    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = PasswordResetService.resolve_user(
            serializer.validated_data["uid"],
            serializer.validated_data["token"],
        )
        if not user:
            raise ValidationError("Invalid or expired reset token")

        user.set_password(serializer.validated_data["new_password"])
        user.save()

        return Response({
            "status": "success",
            "message": "Password has been reset"
        })


class DeleteAccountView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request):
        user = request.user

        with transaction.atomic():
            user.delete()

        return Response(
            {"message": "Account deleted"},
            status=status.HTTP_204_NO_CONTENT
        )


# -------------------------------------------------------------------
# TWO-FACTOR AUTHENTICATION
# -------------------------------------------------------------------
class TwoFactorSetupView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        if request.user.two_factor_enabled:
            raise ValidationError("2FA is already enabled, disable it first")

        data = TwoFactorService.start_setup(request.user)
        return Response({
            "status": "success",
            "message": "2FA setup initiated",
            "data": data
        })


class TwoFactorVerifyView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = TwoFactorCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = request.user
        if not user.two_factor_secret:
            raise ValidationError("2FA not set up yet")

        if not TwoFactorService.verify_code(user, serializer.validated_data["code"]):
            raise AuthenticationFailed("Invalid verification code")

        TwoFactorService.enable(user)

        return Response({
            "status": "success",
            "message": "2FA enabled successfully"
        })


class TwoFactorDisableView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = TwoFactorCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = request.user
        if not user.two_factor_enabled:
            raise ValidationError("2FA is not enabled")

        if not TwoFactorService.verify_code(user, serializer.validated_data["code"]):
            raise AuthenticationFailed("Invalid verification code")

        TwoFactorService.disable(user)

        return Response({
            "status": "success",
            "message": "2FA disabled successfully"
        })
