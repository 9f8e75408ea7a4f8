from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from Accounts.permissions import IsPlatformAdmin
from Dashboard.models import AdminLog
from .constants import PromotionType
from .models import Promotion
from .serializers import (
    PromotionSerializer,
    PromotionUsageSerializer,
    PublicPromotionSerializer,
    ReferralPromotionSerializer,
    SeasonalPromotionSerializer,
    UserTargetSerializer,
)
from .services import PromotionService


# -------------------------------------------------------------------
# CUSTOMER
# -------------------------------------------------------------------
class ActivePromotionListView(APIView):
    """
    Promotions the caller can still use: public ones plus their personal codes.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        promotions = PromotionService.active_for_user(request.user)
        return Response({
            "status": "success",
            "data": PublicPromotionSerializer(promotions, many=True).data
        })


class VerifyPromotionView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, code):
        PromotionService.track_view(code)
        promotion = PromotionService.verify_code(code, request.user)

        return Response({
            "status": "success",
            "valid": True,
            "data": PublicPromotionSerializer(promotion).data
        })


class MyPromotionUsageView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        usages = request.user.promotion_usages.select_related("promotion")
        return Response({
            "status": "success",
            "data": PromotionUsageSerializer(usages, many=True).data
        })


# -------------------------------------------------------------------
# ADMIN
# -------------------------------------------------------------------
class AdminPromotionViewSet(viewsets.ModelViewSet):
    queryset = Promotion.objects.select_related("specific_user")
    serializer_class = PromotionSerializer
    permission_classes = [IsPlatformAdmin]

    def get_queryset(self):
        qs = super().get_queryset()

        promotion_type = self.request.query_params.get("type")
        if promotion_type:
            qs = qs.filter(promotion_type=promotion_type)

        is_active = self.request.query_params.get("is_active")
        if is_active in ("true", "false"):
            qs = qs.filter(is_active=is_active == "true")

        return qs

    def perform_create(self, serializer):
        if not serializer.validated_data.get("code"):
            serializer.validated_data["code"] = PromotionService.generate_code()
        promotion = serializer.save()
        AdminLog.record(self.request.user, "create_promotion", promotion, details={"code": promotion.code})

    def perform_update(self, serializer):
        promotion = serializer.save()
        AdminLog.record(
            self.request.user, "update_promotion", promotion, details={"fields": sorted(serializer.validated_data)}
        )

    def perform_destroy(self, instance):
        AdminLog.record(self.request.user, "delete_promotion", instance, details={"code": instance.code})
        instance.delete()

    @action(detail=True, methods=["get"])
    def statistics(self, request, pk=None):
        promotion = self.get_object()
        return Response({
            "status": "success",
            "data": {
                "promotion": PromotionSerializer(promotion).data,
                **PromotionService.statistics(promotion),
            }
        })


class GenerateWelcomePromotionView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        serializer = UserTargetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        promotion = PromotionService.create_welcome_promotion(serializer.validated_data["user_id"])
        AdminLog.record(request.user, "create_welcome_promotion", promotion)
        return Response({
            "status": "success",
            "data": PromotionSerializer(promotion).data
        }, status=status.HTTP_201_CREATED)


class GenerateBirthdayPromotionView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        serializer = UserTargetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        promotion = PromotionService.create_birthday_promotion(serializer.validated_data["user_id"])
        AdminLog.record(request.user, "create_birthday_promotion", promotion)
        return Response({
            "status": "success",
            "data": PromotionSerializer(promotion).data
        }, status=status.HTTP_201_CREATED)


class GenerateReferralPromotionView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        serializer = ReferralPromotionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        promotion = PromotionService.create_referral_promotion(
            data["referrer_id"], data["referred_id"]
        )
        AdminLog.record(request.user, "create_referral_promotion", promotion)
        return Response({
            "status": "success",
            "data": PromotionSerializer(promotion).data
        }, status=status.HTTP_201_CREATED)


class GenerateSeasonalPromotionView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        serializer = SeasonalPromotionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        promotion = PromotionService.create_seasonal_promotion(
            data["season"],
            data["discount_percent"],
            data["start_date"],
            data["end_date"],
            promotion_type=PromotionType.OFF_PEAK if data["off_peak"] else PromotionType.SEASONAL,
        )
        AdminLog.record(request.user, "create_seasonal_promotion", promotion, details={"season": data["season"]})
        return Response({
            "status": "success",
            "data": PromotionSerializer(promotion).data
        }, status=status.HTTP_201_CREATED)


class GenerateLoyaltyPromotionsView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request):
        promotions = PromotionService.process_loyalty_promotions()
        AdminLog.record(
            request.user,
            "create_loyalty_promotions",
            entity_type="promotion",
            details={"promotion_ids": [p.id for p in promotions]},
        )
        return Response({
            "status": "success",
            "created_count": len(promotions),
            "data": PromotionSerializer(promotions, many=True).data
        })


class UserPromotionUsageView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request, promotion_id):
        promotion = get_object_or_404(Promotion, id=promotion_id)
        usages = promotion.usages.select_related("promotion")
        return Response({
            "status": "success",
            "data": PromotionUsageSerializer(usages, many=True).data
        })
