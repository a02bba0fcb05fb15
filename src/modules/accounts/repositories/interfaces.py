"""Account repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import Account


class IAccountRepository(IRepository["Account"]):
    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Account]:
        """Retrieve a live (not soft-deleted) account."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Account]:
        """Retrieve a live account and lock its row until commit.

        Payout runs lock the payee row to serialize settlement per
        (account, payout type).
        """

    @abstractmethod
    def get_by_user(self, user_id: Any) -> Optional[Account]:
        """Retrieve the account linked to a Django auth user."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Account]:
        """List live accounts with optional filters."""
