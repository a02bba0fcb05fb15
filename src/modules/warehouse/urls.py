"""Warehouse URL configuration."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter

from modules.warehouse.views import WarehouseViewSet

router = SimpleRouter(trailing_slash=True)
router.register("warehouse", WarehouseViewSet, basename="warehouse")

urlpatterns = router.urls
