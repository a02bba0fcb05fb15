"""Django ORM implementation of the Account repository.

Methods return ``None`` for missing or malformed IDs; the Service Layer
decides how a missing account is reported.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.accounts.models import Account
from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountDjangoRepository(IAccountRepository):
    def get_by_id(self, id: str) -> Optional[Account]:
        try:
            return Account.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Account]:
        try:
            return Account.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_user(self, user_id: Any) -> Optional[Account]:
        return Account.objects.alive().filter(user_id=user_id).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Account]:
        queryset = Account.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Account) -> Account:
        is_new = entity._state.adding
        entity.save()
        logger.info(
            "account.saved",
            account_id=str(entity.id),
            role=entity.role,
            is_new=is_new,
        )
        return entity
