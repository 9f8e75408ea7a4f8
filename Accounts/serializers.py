# Accounts/serializers.py
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from Court.presentors import build_owner_login_payload
from .services import TwoFactorService, serialize_user_summary

User = get_user_model()


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(
        choices=[User.CUSTOMER, User.COURT_OWNER],
        default=User.CUSTOMER,
    )

    class Meta:
        model = User
        fields = (
            "role",
            "full_name",
            "email",
            "password",
            "phone_number",
            "location",
            "birth_date",
            "id_card",
            "tax_code",
        )

    def validate_password(self, value):
        validate_password(value)
        return value

    def validate(self, attrs):
        # Court owners are verified by an admin using these documents
        if attrs.get("role") == User.COURT_OWNER:
            if not attrs.get("id_card") or not attrs.get("tax_code"):
                raise serializers.ValidationError(
                    "ID card and tax code are required for court owner registration"
                )
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "full_name",
            "phone_number",
            "location",
            "profile_image_url",
            "birth_date",
            "role",
            "approval_status",
            "reward_points",
            "two_factor_enabled",
            "is_active",
            "created_at",
        )


class ProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["full_name", "phone_number", "location", "profile_image_url", "birth_date"]

    def validate_phone_number(self, value):
        if value and len(value) < 10:
            raise serializers.ValidationError("Invalid phone number")
        return value


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField()
    new_password = serializers.CharField()

    def validate_current_password(self, value):
        user = self.context["request"].user
        if not user.check_password(value):
            raise AuthenticationFailed("Current password is incorrect")
        return value

    def validate_new_password(self, value):
        validate_password(value, user=self.context["request"].user)
        return value


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    new_password = serializers.CharField()

    def validate_new_password(self, value):
        validate_password(value)
        return value


class TwoFactorCodeSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=10)


# ----------------------------------
# LOGIN (JWT + OPTIONAL TOTP STEP)
# ----------------------------------
class LoginSerializer(TokenObtainPairSerializer):
    code = serializers.CharField(required=False, allow_blank=True, write_only=True)

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        token["email"] = user.email
        return token

    def validate(self, attrs):
        code = attrs.pop("code", "")
        data = super().validate(attrs)
        user = self.user

        # Password was correct but the second factor is still missing
        if user.two_factor_enabled:
            if not code:
                return {
                    "requires_2fa": True,
                    "message": "Two-factor verification code required",
                    "email": user.email,
                }
            if not TwoFactorService.verify_code(user, code):
                raise AuthenticationFailed("Invalid verification code")

        data["requires_2fa"] = False
        data["user"] = serialize_user_summary(user)

        if user.is_court_owner:
            data["business"] = build_owner_login_payload(user)

        return data


class TwoFactorLoginSerializer(LoginSerializer):
    code = serializers.CharField(write_only=True)
