"""Payout engine (Use Cases).

Rules enforced:
- Courier settlement: DELIVERED shipments on the courier's manifests,
  not cash-reconciled and without a COURIER_SETTLEMENT ledger row.
  Each earns ``fee x 0.70`` rounded half-up to cents.
- Merchant payout: the merchant's DELIVERED shipments without a
  MERCHANT_PAYOUT ledger row, credited at the full fee.
- ``net_amount`` is the sum of the item amounts.  A run with nothing to
  settle raises ``NoEligibleShipments`` and writes nothing.
- The payee account row is locked for the whole run, so two runs for
  the same payee serialize; the second one sees the first one's ledger
  rows and settles only what is left.
- COMPLETED is the paid state and stamps ``paid_at``; COMPLETED and
  CANCELLED payouts no longer change.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, List
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from modules.accounts.models import Role
from modules.core.money import to_money
from modules.payouts.constants import (
    COURIER_SHARE,
    PAID_STATUS,
    PayoutStatus,
    PayoutType,
)
from modules.payouts.dtos import CourierEarningsDTO
from modules.payouts.events import PayoutCreated, PayoutStatusChanged
from modules.payouts.exceptions import (
    InvalidPayoutPeriod,
    InvalidPayoutStatus,
    NoEligibleShipments,
    PayoutNotFound,
    PayoutStatusLocked,
)

if TYPE_CHECKING:
    from modules.accounts.models import Account
    from modules.accounts.services import AccountService
    from modules.payouts.models import Payout, PayoutItem
    from modules.payouts.repositories import IPayoutRepository
    from modules.shipments.models import Shipment

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")


def courier_earning(fee: Decimal) -> Decimal:
    return to_money(Decimal(fee) * COURIER_SHARE)


def merchant_credit(fee: Decimal) -> Decimal:
    return to_money(Decimal(fee))


class PayoutService:
    def __init__(
        self,
        payout_repository: IPayoutRepository,
        account_service: AccountService,
    ) -> None:
        self._payout_repo = payout_repository
        self._accounts = account_service

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_courier_payout(
        self, courier_id: UUID | str, period_start: date, period_end: date
    ) -> Payout:
        """Settle every unpaid delivery of *courier_id*.

        Raises:
            InvalidPayoutPeriod: *period_start* is after *period_end*.
            AccountNotFound / InactiveAccount / RoleMismatch: bad courier.
            NoEligibleShipments: nothing left to settle.
        """
        self._validate_period(period_start, period_end)
        courier = self._accounts.require_role(courier_id, Role.COURIER, lock=True)
        shipments = self._payout_repo.unpaid_courier_shipments(courier.id, lock=True)
        return self._settle(
            payee=courier,
            payout_type=PayoutType.COURIER_SETTLEMENT,
            shipments=shipments,
            amount_for=courier_earning,
            period_start=period_start,
            period_end=period_end,
            description=(
                f"Courier settlement for period {period_start} to {period_end}"
            ),
        )

    @transaction.atomic
    def create_merchant_payout(
        self, merchant_id: UUID | str, period_start: date, period_end: date
    ) -> Payout:
        """Credit *merchant_id* with the full fee of every unpaid delivery.

        Raises:
            InvalidPayoutPeriod: *period_start* is after *period_end*.
            AccountNotFound / InactiveAccount / RoleMismatch: bad merchant.
            NoEligibleShipments: nothing left to settle.
        """
        self._validate_period(period_start, period_end)
        merchant = self._accounts.require_role(merchant_id, Role.MERCHANT, lock=True)
        shipments = self._payout_repo.unpaid_merchant_shipments(
            merchant.id, lock=True
        )
        return self._settle(
            payee=merchant,
            payout_type=PayoutType.MERCHANT_PAYOUT,
            shipments=shipments,
            amount_for=merchant_credit,
            period_start=period_start,
            period_end=period_end,
            description=f"Merchant payout for period {period_start} to {period_end}",
        )

    def _settle(
        self,
        payee: Account,
        payout_type: str,
        shipments: List[Shipment],
        amount_for: Callable[[Decimal], Decimal],
        period_start: date,
        period_end: date,
        description: str,
    ) -> Payout:
        log = logger.bind(user_id=str(payee.id), payout_type=str(payout_type))
        if not shipments:
            log.info("payout.nothing_to_settle")
            raise NoEligibleShipments(
                f"No unpaid delivered shipments for {payee.name}."
            )

        amounts = [(s, amount_for(s.delivery_fee)) for s in shipments]
        net_amount = to_money(sum((amount for _, amount in amounts), ZERO))

        payout = self._payout_repo.create(
            {
                "user": payee,
                "payout_type": payout_type,
                "status": PayoutStatus.PENDING,
                "period_start": period_start,
                "period_end": period_end,
                "net_amount": net_amount,
                "description": description,
            }
        )
        for shipment, amount in amounts:
            self._payout_repo.add_item(
                payout,
                shipment,
                amount,
                f"Delivery fee for shipment {shipment.tracking_number}",
            )
        self._payout_repo.link_shipments(payout, [s.id for s in shipments])

        payout.add_domain_event(
            PayoutCreated(
                aggregate_id=payout.id,
                user_id=str(payee.id),
                payout_type=str(payout_type),
                net_amount=str(net_amount),
                item_count=len(amounts),
            )
        )
        self._payout_repo.save(payout)

        log.info(
            "payout.created",
            payout_id=str(payout.id),
            net_amount=str(net_amount),
            item_count=len(amounts),
        )
        return payout

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_payout_status(self, payout_id: UUID | str, status_name: str) -> Payout:
        """Raises:
        InvalidPayoutStatus: unknown status value.
        PayoutNotFound: payout does not exist.
        PayoutStatusLocked: the payout is COMPLETED or CANCELLED.
        """
        if status_name not in PayoutStatus.values:
            raise InvalidPayoutStatus(f"Invalid payout status: {status_name}")

        payout = self._payout_repo.get_for_update(str(payout_id))
        if payout is None:
            raise PayoutNotFound(f"Payout {payout_id} not found.")
        if payout.is_locked:
            raise PayoutStatusLocked(
                f"Payout {payout.id} is {payout.status} and cannot change."
            )

        old_status = payout.status
        payout.status = status_name
        if status_name == PAID_STATUS:
            payout.paid_at = timezone.now()
        payout.add_domain_event(
            PayoutStatusChanged(
                aggregate_id=payout.id,
                user_id=str(payout.user_id),
                old_status=str(old_status),
                new_status=status_name,
            )
        )
        self._payout_repo.save(payout)

        logger.info(
            "payout.status_updated",
            payout_id=str(payout.id),
            old_status=str(old_status),
            new_status=status_name,
        )
        return payout

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_payout(self, payout_id: UUID | str) -> Payout:
        payout = self._payout_repo.get_by_id(str(payout_id))
        if payout is None:
            raise PayoutNotFound(f"Payout {payout_id} not found.")
        return payout

    def get_payout_items(self, payout_id: UUID | str) -> List[PayoutItem]:
        payout = self.get_payout(payout_id)
        return self._payout_repo.get_items(payout.id)

    def list_payouts_for_user(self, user_id: UUID | str) -> QuerySet:
        return self._payout_repo.list({"user_id": user_id}).order_by(
            "-period_end", "-created_at"
        )

    def list_pending_payouts(self) -> QuerySet:
        return self._payout_repo.list({"status": PayoutStatus.PENDING})

    def calculate_courier_earnings(self, courier_id: UUID | str) -> CourierEarningsDTO:
        """What ``create_courier_payout`` would pay right now (no writes)."""
        courier = self._accounts.require_role(courier_id, Role.COURIER)
        shipments = self._payout_repo.unpaid_courier_shipments(courier.id)
        total_fees = to_money(sum((s.delivery_fee for s in shipments), ZERO))
        earnings = to_money(
            sum((courier_earning(s.delivery_fee) for s in shipments), ZERO)
        )
        return CourierEarningsDTO(
            courier_id=courier.id,
            shipment_count=len(shipments),
            total_fees=total_fees,
            earnings=earnings,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_period(period_start: date, period_end: date) -> None:
        if period_start > period_end:
            raise InvalidPayoutPeriod(
                f"Payout period start {period_start} is after end {period_end}."
            )
