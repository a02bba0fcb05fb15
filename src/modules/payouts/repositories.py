"""Payout repository (interface + Django ORM implementation).

Eligibility queries exclude shipments that already have a SHIPMENT
ledger row for the same payout type.  The ``lock_`` variants run
``SELECT ... FOR UPDATE`` on the shipment rows they return.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from modules.core.outbox import write_domain_events
from modules.core.repositories.interfaces import IRepository
from modules.payouts.constants import PayoutItemSourceType, PayoutType
from modules.payouts.models import Payout, PayoutItem
from modules.shipments.constants import ShipmentStatusName
from modules.shipments.models import Shipment

logger = structlog.get_logger(__name__)


class IPayoutRepository(IRepository[Payout]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Payout:
        """Insert a payout row (events are written by ``save``)."""

    @abstractmethod
    def add_item(
        self, payout: Payout, shipment: Shipment, amount: Decimal, description: str
    ) -> PayoutItem:
        """Append one SHIPMENT ledger row to *payout*."""

    @abstractmethod
    def get_items(self, payout_id: UUID | str) -> List[PayoutItem]:
        """Items of a payout in insertion order."""

    @abstractmethod
    def link_shipments(self, payout: Payout, shipment_ids: List[UUID]) -> int:
        """Point ``Shipment.payout`` at *payout*."""

    @abstractmethod
    def unpaid_courier_shipments(
        self, courier_id: UUID | str, lock: bool = False
    ) -> List[Shipment]:
        """DELIVERED, not cash-reconciled, not yet courier-settled."""

    @abstractmethod
    def unpaid_merchant_shipments(
        self, merchant_id: UUID | str, lock: bool = False
    ) -> List[Shipment]:
        """DELIVERED and not yet on a merchant payout."""


class PayoutDjangoRepository(IPayoutRepository):
    # ------------------------------------------------------------------
    # Payouts
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Payout:
        payout = Payout.objects.create(**data)
        logger.info(
            "payout.persisted",
            payout_id=str(payout.id),
            payout_type=payout.payout_type,
            user_id=str(payout.user_id),
        )
        return payout

    def get_by_id(self, id: str) -> Optional[Payout]:
        try:
            return Payout.objects.select_related("user").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Payout]:
        try:
            return (
                Payout.objects.select_for_update(of=("self",))
                .select_related("user")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Payout.objects.select_related("user")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Payout) -> Payout:
        entity.save()
        rows = write_domain_events(entity, topic="payouts")
        logger.info(
            "payout.saved",
            payout_id=str(entity.id),
            status=entity.status,
            event_count=len(rows),
        )
        return entity

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def add_item(
        self, payout: Payout, shipment: Shipment, amount: Decimal, description: str
    ) -> PayoutItem:
        return PayoutItem.objects.create(
            payout=payout,
            payout_type=payout.payout_type,
            source_type=PayoutItemSourceType.SHIPMENT,
            source_id=shipment.id,
            amount=amount,
            description=description,
        )

    def get_items(self, payout_id: UUID | str) -> List[PayoutItem]:
        try:
            return list(PayoutItem.objects.filter(payout_id=payout_id))
        except (ValueError, ValidationError):
            return []

    def link_shipments(self, payout: Payout, shipment_ids: List[UUID]) -> int:
        return Shipment.objects.filter(id__in=shipment_ids).update(
            payout=payout, updated_at=timezone.now()
        )

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------

    def unpaid_courier_shipments(
        self, courier_id: UUID | str, lock: bool = False
    ) -> List[Shipment]:
        queryset = self._unpaid(PayoutType.COURIER_SETTLEMENT).filter(
            manifest__courier_id=courier_id, cash_reconciled=False
        )
        return self._fetch(queryset, lock)

    def unpaid_merchant_shipments(
        self, merchant_id: UUID | str, lock: bool = False
    ) -> List[Shipment]:
        queryset = self._unpaid(PayoutType.MERCHANT_PAYOUT).filter(
            merchant_id=merchant_id
        )
        return self._fetch(queryset, lock)

    @staticmethod
    def _unpaid(payout_type: str) -> QuerySet:
        settled = PayoutItem.objects.filter(
            payout_type=payout_type,
            source_type=PayoutItemSourceType.SHIPMENT,
        ).values("source_id")
        return Shipment.objects.filter(
            status__name=ShipmentStatusName.DELIVERED
        ).exclude(id__in=settled)

    @staticmethod
    def _fetch(queryset: QuerySet, lock: bool) -> List[Shipment]:
        queryset = queryset.order_by("created_at", "id")
        if lock:
            queryset = queryset.select_for_update(of=("self",))
        return list(queryset)
