"""Account domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import AuthorizationError, NotFound


class AccountNotFound(NotFound):
    """The referenced merchant/courier/user does not exist."""


class RoleMismatch(AuthorizationError):
    """The account exists but does not carry the role the operation needs."""


class InactiveAccount(AuthorizationError):
    """The account is deactivated or soft-deleted."""
