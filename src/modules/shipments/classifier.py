"""Failure-reason classification for failed delivery attempts.

A courier reporting a generic failed attempt supplies free text; the
classifier maps it onto the follow-up status.  Rules are checked in
order, each a case-insensitive substring test over its keywords, and the
first match wins.  Text matching no rule falls through to the default.

The rule set is data: pass a different ``rules`` tuple (or any object
with a ``classify(reason) -> str`` method) to ``ShipmentService`` to
change it without touching transition logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from modules.shipments.constants import ShipmentStatusName


class ReasonClassifier(Protocol):
    def classify(self, reason: str) -> str: ...


@dataclass(frozen=True)
class ReasonRule:
    keywords: tuple[str, ...]
    target: str

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


DEFAULT_REASON_RULES: tuple[ReasonRule, ...] = (
    ReasonRule(
        keywords=("reschedule", "postpone", "later", "tomorrow"),
        target=ShipmentStatusName.POSTPONED.value,
    ),
    ReasonRule(
        keywords=("address", "phone", "update", "wrong"),
        target=ShipmentStatusName.PENDING_UPDATE.value,
    ),
    ReasonRule(
        keywords=("return", "refuse", "reject", "back"),
        target=ShipmentStatusName.PENDING_RETURN.value,
    ),
)


class FailureReasonClassifier:
    def __init__(
        self,
        rules: Sequence[ReasonRule] = DEFAULT_REASON_RULES,
        default: str = ShipmentStatusName.POSTPONED.value,
    ) -> None:
        self._rules = tuple(
            ReasonRule(tuple(k.lower() for k in rule.keywords), rule.target)
            for rule in rules
        )
        self._default = default

    def classify(self, reason: str) -> str:
        text = (reason or "").lower()
        for rule in self._rules:
            if rule.matches(text):
                return rule.target
        return self._default
