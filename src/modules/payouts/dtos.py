"""Payout DTOs for the Service Layer."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CourierEarningsDTO(BaseModel):
    """Preview of what a courier settlement run would pay now."""

    model_config = ConfigDict(frozen=True)

    courier_id: UUID
    shipment_count: int
    total_fees: Decimal
    earnings: Decimal
