"""Pricing domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import InvalidRequest, NotFound


class ZoneNotFound(NotFound):
    """The referenced delivery zone does not exist."""


class InactiveZone(InvalidRequest):
    """The zone exists but is not accepting new shipments."""
