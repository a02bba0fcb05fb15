"""Django ORM implementation of the settings store."""

from __future__ import annotations

from typing import Optional

import structlog

from modules.core.models import SystemSetting
from modules.core.repositories.interfaces import ISettingsRepository

logger = structlog.get_logger(__name__)


class SettingsDjangoRepository(ISettingsRepository):
    def get_value(self, key: str) -> Optional[str]:
        return (
            SystemSetting.objects.filter(key=key)
            .values_list("value", flat=True)
            .first()
        )

    def set_value(self, key: str, value: str, description: str = "") -> None:
        SystemSetting.objects.update_or_create(
            key=key,
            defaults={"value": value, "description": description},
        )
        logger.info("settings.updated", key=key)
