"""Account model: the identity facts the courier core consumes.

Business rules implemented:
- Roles are a closed enum; role checks compare ``Role`` members, never
  free-form strings.
- An account may be linked to a Django auth user (API access) or exist
  only as a business party (e.g. a courier without a login).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import SoftDeleteModel


class Role(models.TextChoices):
    OWNER = "OWNER", "Owner"
    ADMIN = "ADMIN", "Admin"
    MERCHANT = "MERCHANT", "Merchant"
    COURIER = "COURIER", "Courier"
    WAREHOUSE_MANAGER = "WAREHOUSE_MANAGER", "Warehouse manager"


STAFF_ROLES: frozenset[Role] = frozenset({Role.OWNER, Role.ADMIN})


class Account(SoftDeleteModel):
    """A merchant, courier, warehouse manager or back-office user."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="account",
    )
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, unique=True)
    role = models.CharField(max_length=20, choices=Role.choices)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "accounts"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["role"], name="accounts_role_idx"),
        ]

    @property
    def role_enum(self) -> Role:
        return Role(self.role)

    def has_role(self, *roles: Role) -> bool:
        return self.role_enum in roles

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"
