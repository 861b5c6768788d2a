from django.urls import include, path
from rest_framework import routers

from access_expiration.views import api, authentication, customization, timed_services, users

router = routers.DefaultRouter()
router.register(r"access_expirations", api.AccessExpirationViewSet, basename="access_expiration")

urlpatterns = [
    path("login/", authentication.login_user, name="login"),
    path("logout/", authentication.logout_user, name="logout"),
    path("api/", include(router.urls)),
    # Timed services, to be called by an external scheduler
    path(
        "send_access_expiration_notifications/",
        timed_services.send_access_expiration_notifications,
        name="send_access_expiration_notifications",
    ),
    path("user_access/<int:user_id>/", users.user_access, name="user_access"),
    # Access expiration customization:
    path("customization/", customization.customization, name="customization"),
    path("customization/<str:key>/", customization.customization, name="customization"),
    path("customize/<str:key>/", customization.customize, name="customize"),
]
