"""Shipment domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer translates the taxonomy category into an HTTP status;
warehouse batches record the message as a per-item error.
"""

from __future__ import annotations

from modules.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidRequest,
    NotFound,
)


class ShipmentNotFound(NotFound):
    """The requested shipment does not exist."""


class StatusNotFound(NotFound):
    """No status with the requested name exists in the registry."""


class DuplicateStatusName(ConflictError):
    """Another status already uses this name."""


class InvalidStatusName(InvalidRequest):
    """Status names must be non-blank."""


class StatusInUse(ConflictError):
    """The status is referenced by shipments or history and cannot be removed."""


class InvalidStatusTransition(ConflictError):
    """The shipment is in a terminal state and cannot move."""


class MissingFailureReason(InvalidRequest):
    """A failed-attempt outcome was reported without reason text."""


class ShipmentNotInWarehouse(ConflictError):
    """The shipment is not physically at the hub."""


class ShipmentNotOwnedByCourier(AuthorizationError):
    """The shipment's current manifest belongs to a different courier."""


class ManifestNotFound(NotFound):
    """The requested manifest does not exist."""


class InvalidManifestTransition(ConflictError):
    """The manifest status change is not allowed."""


class InvalidManifestStatus(InvalidRequest):
    """The requested manifest status is not a known value."""


class MissingRequiredStatus(RuntimeError):
    """A status the workflows depend on is absent from the registry.

    This is a deployment/configuration fault, not a domain error: it is
    never translated into a 4xx response.
    """
