"""Returns URL configuration."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.returns.views import ReturnViewSet

router = SimpleRouter(trailing_slash=True)
router.register("returns", ReturnViewSet, basename="return")

urlpatterns = router.urls
