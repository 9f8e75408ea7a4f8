from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    ActivePromotionListView,
    AdminPromotionViewSet,
    GenerateBirthdayPromotionView,
    GenerateLoyaltyPromotionsView,
    GenerateReferralPromotionView,
    GenerateSeasonalPromotionView,
    GenerateWelcomePromotionView,
    MyPromotionUsageView,
    UserPromotionUsageView,
    VerifyPromotionView,
)

router = DefaultRouter()
router.register("admin", AdminPromotionViewSet, basename="admin-promotion")

urlpatterns = [
    path("active/", ActivePromotionListView.as_view(), name="promotion-active"),
    path("verify/<str:code>/", VerifyPromotionView.as_view(), name="promotion-verify"),
    path("my-usage/", MyPromotionUsageView.as_view(), name="promotion-my-usage"),

    path("admin/generate/welcome/", GenerateWelcomePromotionView.as_view(), name="promotion-generate-welcome"),
    path("admin/generate/birthday/", GenerateBirthdayPromotionView.as_view(), name="promotion-generate-birthday"),
    path("admin/generate/referral/", GenerateReferralPromotionView.as_view(), name="promotion-generate-referral"),
    path("admin/generate/seasonal/", GenerateSeasonalPromotionView.as_view(), name="promotion-generate-seasonal"),
    path("admin/generate/loyalty/", GenerateLoyaltyPromotionsView.as_view(), name="promotion-generate-loyalty"),
    path("admin/<int:promotion_id>/usages/", UserPromotionUsageView.as_view(), name="promotion-usages"),

    path("", include(router.urls)),
]
