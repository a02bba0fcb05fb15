"""ReturnShipment: the immutable link between an original and its RTO mirror.

This row is the only structural edge between the two shipments; the
shipments themselves carry no mutual reference.  Append-only.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import AppendOnlyModel
from shared.domain.events import DomainEventMixin


class ReturnShipment(DomainEventMixin, AppendOnlyModel):
    original_shipment = models.ForeignKey(
        "shipments.Shipment",
        on_delete=models.PROTECT,
        related_name="return_links",
    )
    return_shipment = models.OneToOneField(
        "shipments.Shipment",
        on_delete=models.PROTECT,
        related_name="return_origin_link",
    )
    reason = models.TextField()

    class Meta:
        db_table = "return_shipments"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.original_shipment_id} -> {self.return_shipment_id}"
