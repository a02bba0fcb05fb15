"""Shipment domain constants.

Defines the canonical status vocabulary (in display order), the terminal
and hub state sets used by the workflows, and the choice enums stored on
shipments and manifests.
"""

from django.db import models


class ShipmentStatusName(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PENDING_APPROVAL = "PENDING_APPROVAL", "Pending approval"
    APPROVED = "APPROVED", "Approved"
    PICKED_UP = "PICKED_UP", "Picked up"
    RECEIVED_AT_HUB = "RECEIVED_AT_HUB", "Received at hub"
    READY_FOR_DISPATCH = "READY_FOR_DISPATCH", "Ready for dispatch"
    ASSIGNED_TO_COURIER = "ASSIGNED_TO_COURIER", "Assigned to courier"
    IN_TRANSIT = "IN_TRANSIT", "In transit"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY", "Out for delivery"
    DELIVERED = "DELIVERED", "Delivered"
    PARTIALLY_DELIVERED = "PARTIALLY_DELIVERED", "Partially delivered"
    FAILED_DELIVERY = "FAILED_DELIVERY", "Failed delivery"
    FAILED_ATTEMPT = "FAILED_ATTEMPT", "Failed attempt"
    POSTPONED = "POSTPONED", "Postponed"
    PENDING_UPDATE = "PENDING_UPDATE", "Pending update"
    PENDING_RETURN = "PENDING_RETURN", "Pending return"
    RETURNED_TO_HUB = "RETURNED_TO_HUB", "Returned to hub"
    RETURNED_TO_ORIGIN = "RETURNED_TO_ORIGIN", "Returned to origin"
    CANCELLED = "CANCELLED", "Cancelled"
    ON_HOLD = "ON_HOLD", "On hold"
    RESCHEDULED = "RESCHEDULED", "Rescheduled"


TERMINAL_STATES: frozenset[str] = frozenset(
    {
        ShipmentStatusName.DELIVERED.value,
        ShipmentStatusName.CANCELLED.value,
        ShipmentStatusName.RETURNED_TO_ORIGIN.value,
    }
)

HUB_STATES: frozenset[str] = frozenset(
    {
        ShipmentStatusName.RECEIVED_AT_HUB.value,
        ShipmentStatusName.RETURNED_TO_HUB.value,
    }
)

# Statuses the workflows look up by name; a missing one is a
# configuration error reported at startup.
REQUIRED_STATUSES: tuple[str, ...] = (
    ShipmentStatusName.PENDING.value,
    ShipmentStatusName.RECEIVED_AT_HUB.value,
    ShipmentStatusName.ASSIGNED_TO_COURIER.value,
    ShipmentStatusName.DELIVERED.value,
    ShipmentStatusName.POSTPONED.value,
    ShipmentStatusName.PENDING_UPDATE.value,
    ShipmentStatusName.PENDING_RETURN.value,
    ShipmentStatusName.RETURNED_TO_HUB.value,
    ShipmentStatusName.RETURNED_TO_ORIGIN.value,
)


class SourceType(models.TextChoices):
    MERCHANT = "MERCHANT", "Merchant"
    THIRD_PARTY = "3PL_PARTNER", "3PL partner"


class ShippingFeePaidBy(models.TextChoices):
    MERCHANT = "MERCHANT", "Merchant"
    RECIPIENT = "RECIPIENT", "Recipient"
    PREPAID = "PREPAID", "Prepaid"


class ManifestStatus(models.TextChoices):
    CREATED = "CREATED", "Created"
    IN_PROGRESS = "IN_PROGRESS", "In progress"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


MANIFEST_TRANSITIONS: dict[str, set[str]] = {
    ManifestStatus.CREATED.value: {
        ManifestStatus.IN_PROGRESS.value,
        ManifestStatus.CANCELLED.value,
    },
    ManifestStatus.IN_PROGRESS.value: {
        ManifestStatus.COMPLETED.value,
        ManifestStatus.CANCELLED.value,
    },
    ManifestStatus.COMPLETED.value: set(),
    ManifestStatus.CANCELLED.value: set(),
}

TRACKING_NUMBER_PREFIX = "TRK"
MANIFEST_NUMBER_PREFIX = "MAN"
