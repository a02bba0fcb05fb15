"""Role verification used by every workflow that names an actor."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from modules.accounts.exceptions import AccountNotFound, InactiveAccount, RoleMismatch

if TYPE_CHECKING:
    from modules.accounts.models import Account, Role
    from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountService:
    def __init__(self, account_repository: IAccountRepository) -> None:
        self._account_repo = account_repository

    def require_role(
        self, account_id: UUID | str, role: Role, lock: bool = False
    ) -> Account:
        """Return the active account *account_id* if it carries *role*.

        With ``lock=True`` the account row stays locked until the
        surrounding transaction ends.

        Raises:
            AccountNotFound: no live account with that id.
            InactiveAccount: the account is deactivated.
            RoleMismatch: the account has a different role.
        """
        if lock:
            account = self._account_repo.get_for_update(str(account_id))
        else:
            account = self._account_repo.get_by_id(str(account_id))
        if account is None:
            raise AccountNotFound(f"{role.label} {account_id} not found.")
        if not account.is_active:
            raise InactiveAccount(f"{role.label} {account_id} is inactive.")
        if not account.has_role(role):
            logger.warning(
                "account.role_mismatch",
                account_id=str(account_id),
                expected=role.value,
                actual=account.role,
            )
            raise RoleMismatch(
                f"Account {account_id} has role {account.role}, expected {role.value}."
            )
        return account
