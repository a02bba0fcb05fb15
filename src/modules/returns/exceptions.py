"""Return-to-origin domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import ConflictError, InvalidRequest, NotFound


class NotEligibleForReturn(ConflictError):
    """The shipment is DELIVERED, CANCELLED or already RETURNED_TO_ORIGIN."""


class MissingReturnReason(InvalidRequest):
    """A return was requested without reason text."""


class ReturnNotFound(NotFound):
    """The requested return link does not exist."""
