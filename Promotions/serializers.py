from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Promotion, PromotionUsage

User = get_user_model()


class PromotionSerializer(serializers.ModelSerializer):
    specific_user_id = serializers.PrimaryKeyRelatedField(
        source="specific_user",
        queryset=User.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Promotion
        fields = [
            "id",
            "code",
            "description",
            "discount_percent",
            "start_date",
            "end_date",
            "is_active",
            "usage_limit",
            "usage_count",
            "view_count",
            "user_specific",
            "specific_user_id",
            "promotion_type",
            "created_at",
        ]
        read_only_fields = ["usage_count", "view_count", "created_at"]
        extra_kwargs = {"code": {"required": False}}

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))

        if start and end and end <= start:
            raise serializers.ValidationError("End date must be after start date")

        user_specific = attrs.get("user_specific", getattr(self.instance, "user_specific", False))
        specific_user = attrs.get("specific_user", getattr(self.instance, "specific_user", None))

        if user_specific and specific_user is None:
            raise serializers.ValidationError(
                {"specific_user_id": "Required for user-specific promotions"}
            )

        return attrs


class PublicPromotionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Promotion
        fields = ["id", "code", "description", "discount_percent", "end_date", "promotion_type"]


class PromotionUsageSerializer(serializers.ModelSerializer):
    code = serializers.CharField(source="promotion.code", read_only=True)

    class Meta:
        model = PromotionUsage
        fields = ["id", "code", "booking", "discount_amount", "used_at"]


class SeasonalPromotionSerializer(serializers.Serializer):
    season = serializers.CharField(max_length=40)
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=1, max_value=100)
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    off_peak = serializers.BooleanField(default=False)

    def validate(self, attrs):
        if attrs["end_date"] <= attrs["start_date"]:
            raise serializers.ValidationError("End date must be after start date")
        return attrs


class UserTargetSerializer(serializers.Serializer):
    user_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())


class ReferralPromotionSerializer(serializers.Serializer):
    referrer_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    referred_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())

    def validate(self, attrs):
        if attrs["referrer_id"] == attrs["referred_id"]:
            raise serializers.ValidationError("A user cannot refer themselves")
        return attrs

