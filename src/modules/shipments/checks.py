"""Startup check: every status the workflows require must be seeded."""

from __future__ import annotations

from django.core import checks
from django.db import DatabaseError


@checks.register(checks.Tags.database)
def check_required_statuses(app_configs=None, databases=None, **kwargs):
    if not databases:
        return []

    from modules.shipments.registry import StatusRegistry
    from modules.shipments.repositories.django_repository import (
        StatusDjangoRepository,
    )

    try:
        missing = StatusRegistry(StatusDjangoRepository()).missing_required()
    except DatabaseError as exc:
        return [
            checks.Warning(
                f"Could not read shipment statuses: {exc}",
                hint="Run migrations before starting the workflows.",
                id="shipments.W001",
            )
        ]

    if not missing:
        return []
    return [
        checks.Error(
            f"Required shipment statuses are missing: {', '.join(missing)}.",
            hint="Run `python manage.py seed_data --statuses-only`.",
            id="shipments.E001",
        )
    ]
