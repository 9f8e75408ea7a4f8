from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from Accounts.permissions import IsPlatformAdmin
from .models import Reward, RewardHistory, RewardRule
from .serializers import (
    PointsAdjustmentSerializer,
    RewardHistorySerializer,
    RewardRuleSerializer,
    RewardSerializer,
    RewardSummarySerializer,
)
from .services import RewardService


# -------------------------------------------------------------------
# CUSTOMER
# -------------------------------------------------------------------
class RewardSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        summary = RewardService.summary(request.user)
        return Response({
            "status": "success",
            "data": RewardSummarySerializer(summary).data
        })


class RewardHistoryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        history = RewardHistory.objects.filter(user=request.user)

        entry_type = request.query_params.get("type")
        if entry_type:
            history = history.filter(type=entry_type)

        return Response({
            "status": "success",
            "data": RewardHistorySerializer(history, many=True).data
        })


class AvailableRewardsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        rewards = Reward.objects.filter(is_active=True)
        return Response({
            "status": "success",
            "current_points": request.user.reward_points,
            "data": RewardSerializer(rewards, many=True).data
        })


class RedeemRewardView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, reward_id):
        reward = get_object_or_404(Reward, id=reward_id)
        result = RewardService.redeem(request.user, reward)

        return Response({
            "status": "success",
            "message": f"Successfully redeemed {reward.name}",
            "data": {
                "redemption": RewardHistorySerializer(result["redemption"]).data,
                "reward": RewardSerializer(reward).data,
                "remaining_points": result["remaining_points"],
            }
        })


# -------------------------------------------------------------------
# ADMIN
# -------------------------------------------------------------------
class AdminRewardViewSet(viewsets.ModelViewSet):
    queryset = Reward.objects.all()
    serializer_class = RewardSerializer
    permission_classes = [IsPlatformAdmin]


class AdminRewardRuleViewSet(viewsets.ModelViewSet):
    queryset = RewardRule.objects.all().order_by("action_type")
    serializer_class = RewardRuleSerializer
    permission_classes = [IsPlatformAdmin]


class AdminAwardPointsView(APIView):
    permission_classes = [IsPlatformAdmin]
    sign = 1

    def post(self, request):
        serializer = PointsAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = data["user_id"]
        entry = RewardService.adjust_points(
            user,
            self.sign * data["points"],
            description=data.get("description", ""),
        )

        return Response({
            "status": "success",
            "data": {
                "entry": RewardHistorySerializer(entry).data,
                "current_points": user.reward_points,
            }
        }, status=status.HTTP_201_CREATED)


class AdminDeductPointsView(AdminAwardPointsView):
    sign = -1


class AdminUserRewardHistoryView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request, user_id):
        history = RewardHistory.objects.filter(user_id=user_id)
        return Response({
            "status": "success",
            "data": RewardHistorySerializer(history, many=True).data
        })
