"""Shipment URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.shipments.views import ManifestViewSet, ShipmentViewSet, StatusViewSet

router = DefaultRouter(trailing_slash=True)
router.register("shipments", ShipmentViewSet, basename="shipment")
router.register("statuses", StatusViewSet, basename="status")
router.register("manifests", ManifestViewSet, basename="manifest")

urlpatterns = router.urls
