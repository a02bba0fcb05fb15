"""Warehouse batch DTOs."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class WarehouseBatchResult(BaseModel):
    """Outcome of a partial-success batch.

    ``errors`` keeps the order of the failing inputs.  ``manifest_id`` is
    only set by a dispatch that moved at least one shipment.
    """

    model_config = ConfigDict(frozen=True)

    processed: int = 0
    errors: List[str] = Field(default_factory=list)
    manifest_id: Optional[UUID] = None
    cash_confirmed: int = 0
    returned: int = 0
