"""Domain events for the Payouts bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class PayoutCreated(DomainEvent):
    user_id: str = ""
    payout_type: str = ""
    net_amount: str = "0.00"
    item_count: int = 0


@dataclass(frozen=True)
class PayoutStatusChanged(DomainEvent):
    user_id: str = ""
    old_status: str = ""
    new_status: str = ""
