from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Reward, RewardHistory, RewardRule

User = get_user_model()


class RewardSerializer(serializers.ModelSerializer):
    class Meta:
        model = Reward
        fields = ["id", "name", "description", "points_required", "is_active", "created_at"]
        read_only_fields = ["created_at"]


class RewardRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = RewardRule
        fields = [
            "id",
            "action_type",
            "description",
            "points",
            "is_percentage",
            "min_amount",
            "max_points",
            "is_active",
        ]

    def validate(self, attrs):
        is_percentage = attrs.get("is_percentage", getattr(self.instance, "is_percentage", False))
        points = attrs.get("points", getattr(self.instance, "points", 0))

        if is_percentage and points > 100:
            raise serializers.ValidationError({"points": "Percentage rules cannot exceed 100"})

        return attrs


class RewardHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = RewardHistory
        fields = [
            "id",
            "points",
            "type",
            "action_type",
            "description",
            "source_id",
            "source_type",
            "created_at",
        ]


class RewardSummarySerializer(serializers.Serializer):
    current_points = serializers.IntegerField()
    total_points_earned = serializers.IntegerField()
    total_points_redeemed = serializers.IntegerField()
    recent_history = RewardHistorySerializer(many=True)
    redeemable_rewards = RewardSerializer(many=True)
    next_rewards = RewardSerializer(many=True)
    next_reward = RewardSerializer(allow_null=True)
    points_to_next_reward = serializers.IntegerField(allow_null=True)


class PointsAdjustmentSerializer(serializers.Serializer):
    user_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    points = serializers.IntegerField(min_value=1)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
