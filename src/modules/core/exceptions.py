"""Domain error taxonomy shared by every bounded context.

Services raise subclasses of these four categories.  The API layer maps
each category to one HTTP status (see ``modules.core.api``) and the
warehouse batch operations record ``str(exc)`` as a per-item error.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for expected business-rule failures."""


class NotFound(DomainError):
    """A referenced status, shipment, zone, account or payout does not exist."""


class InvalidRequest(DomainError):
    """Input failed validation (missing reason text, unknown enum value)."""


class ConflictError(DomainError):
    """The request conflicts with the current state of the aggregate."""


class AuthorizationError(DomainError):
    """The actor has the wrong role or does not own the resource."""


class ImmutableRecord(ConflictError):
    """An append-only ledger row was asked to change or disappear."""
