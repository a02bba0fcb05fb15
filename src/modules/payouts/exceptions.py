"""Payout domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import ConflictError, InvalidRequest, NotFound


class PayoutNotFound(NotFound):
    """The requested payout does not exist."""


class InvalidPayoutStatus(InvalidRequest):
    """The requested payout status is not a known value."""


class InvalidPayoutPeriod(InvalidRequest):
    """The payout period starts after it ends."""


class PayoutStatusLocked(ConflictError):
    """COMPLETED and CANCELLED payouts can no longer change status."""


class NoEligibleShipments(ConflictError):
    """Nothing is left to settle for this payee and payout type."""
