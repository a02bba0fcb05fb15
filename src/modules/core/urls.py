from django.urls import path

from modules.accounts.views import MeView
from modules.core.views import health_check

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("api/v1/me", MeView.as_view(), name="me"),
]
