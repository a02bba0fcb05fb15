"""Payout URL configuration."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.payouts.views import PayoutViewSet

router = SimpleRouter(trailing_slash=True)
router.register("payouts", PayoutViewSet, basename="payout")

urlpatterns = router.urls
