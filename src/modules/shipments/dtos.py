"""Shipment DTOs for the Service Layer.

Framework-agnostic, immutable (``frozen=True``) Pydantic v2 models that
carry validated input from the API layer into ``ShipmentService``.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.shipments.constants import ShippingFeePaidBy, SourceType


class CreateShipmentDTO(BaseModel):
    """Immutable DTO for shipment creation.

    ``delivery_fee`` is intentionally absent: the fee is resolved by
    the pricing resolver at creation time.
    """

    model_config = ConfigDict(frozen=True)

    merchant_id: UUID
    zone_id: UUID
    recipient_name: str
    recipient_phone: str
    recipient_address: str = ""
    item_value: Decimal = Decimal("0.00")
    cod_amount: Decimal = Decimal("0.00")
    source_type: SourceType = SourceType.MERCHANT
    shipping_fee_paid_by: ShippingFeePaidBy = ShippingFeePaidBy.MERCHANT

    @field_validator("recipient_name", "recipient_phone")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field must not be blank.")
        return v.strip()

    @field_validator("item_value", "cod_amount")
    @classmethod
    def amount_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Amount must not be negative.")
        return v
