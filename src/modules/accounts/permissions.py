"""DRF permissions driven by the closed ``Role`` enum."""

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from modules.accounts.models import Account, Role


def account_for_request(request: Request) -> Optional[Account]:
    """Return the live, active account linked to the authenticated user."""
    user = request.user
    if not user or not user.is_authenticated:
        return None
    account = getattr(user, "account", None)
    if account is None or account.is_deleted or not account.is_active:
        return None
    return account


class HasRole(BasePermission):
    """Grants access when the caller's account role is in ``allowed_roles``.

    Superusers always pass.  Build concrete classes with ``HasRole.of``::

        permission_classes = [IsAuthenticated, HasRole.of(Role.COURIER)]
    """

    allowed_roles: frozenset[Role] = frozenset()
    message = "Your account role is not allowed to perform this action."

    @classmethod
    def of(cls, *roles: Role) -> type[HasRole]:
        name = "HasRole_" + "_".join(sorted(role.value for role in roles))
        return type(name, (cls,), {"allowed_roles": frozenset(roles)})

    def has_permission(self, request: Request, view) -> bool:
        user = request.user
        if user and user.is_authenticated and user.is_superuser:
            return True
        account = account_for_request(request)
        if account is None:
            return False
        return account.role_enum in self.allowed_roles
