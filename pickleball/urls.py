from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("django-admin/", admin.site.urls),

    path("api/auth/", include("Accounts.urls")),
    path("api/", include("Court.urls")),
    path("api/", include("slots.urls")),
    path("api/promotions/", include("Promotions.urls")),
    path("api/rewards/", include("Rewards.urls")),
    path("api/notifications/", include("Notifications.urls")),
    path("api/admin/", include("Dashboard.urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
