from decimal import Decimal

from django.db import models


class PayoutType(models.TextChoices):
    COURIER_SETTLEMENT = "COURIER_SETTLEMENT", "Courier settlement"
    MERCHANT_PAYOUT = "MERCHANT_PAYOUT", "Merchant payout"
    WAREHOUSE_SETTLEMENT = "WAREHOUSE_SETTLEMENT", "Warehouse settlement"


class PayoutStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PROCESSED = "PROCESSED", "Processed"
    COMPLETED = "COMPLETED", "Completed"
    FAILED = "FAILED", "Failed"
    CANCELLED = "CANCELLED", "Cancelled"


class PayoutItemSourceType(models.TextChoices):
    SHIPMENT = "SHIPMENT", "Shipment"
    ADJUSTMENT = "ADJUSTMENT", "Adjustment"
    BONUS = "BONUS", "Bonus"
    EXPENSE = "EXPENSE", "Expense"


# Courier keeps 70% of each delivery fee; merchants are credited the full fee.
COURIER_SHARE = Decimal("0.70")

PAID_STATUS = PayoutStatus.COMPLETED.value

LOCKED_STATES: frozenset[str] = frozenset(
    {PayoutStatus.COMPLETED.value, PayoutStatus.CANCELLED.value}
)

# Types with a settlement run here; warehouse settlements are recorded elsewhere.
CREATABLE_TYPES = (
    (PayoutType.COURIER_SETTLEMENT.value, PayoutType.COURIER_SETTLEMENT.label),
    (PayoutType.MERCHANT_PAYOUT.value, PayoutType.MERCHANT_PAYOUT.label),
)
