from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    AdminAwardPointsView,
    AdminDeductPointsView,
    AdminRewardRuleViewSet,
    AdminRewardViewSet,
    AdminUserRewardHistoryView,
    AvailableRewardsView,
    RedeemRewardView,
    RewardHistoryView,
    RewardSummaryView,
)

router = DefaultRouter()
router.register("admin/rewards", AdminRewardViewSet, basename="admin-reward")
router.register("admin/rules", AdminRewardRuleViewSet, basename="admin-reward-rule")

urlpatterns = [
    path("summary/", RewardSummaryView.as_view(), name="reward-summary"),
    path("history/", RewardHistoryView.as_view(), name="reward-history"),
    path("available/", AvailableRewardsView.as_view(), name="reward-available"),
    path("<int:reward_id>/redeem/", RedeemRewardView.as_view(), name="reward-redeem"),

    path("admin/award/", AdminAwardPointsView.as_view(), name="reward-admin-award"),
    path("admin/deduct/", AdminDeductPointsView.as_view(), name="reward-admin-deduct"),
    path("admin/users/<int:user_id>/history/", AdminUserRewardHistoryView.as_view(), name="reward-admin-user-history"),

    path("", include(router.urls)),
]
