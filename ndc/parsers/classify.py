"""Ancillary service classification.

Rules are evaluated in registration order and the first match wins, so the
order below is part of the behaviour: an RFIC of ``P`` beats any keyword,
seat-selling SSR codes beat the SEAT keyword, and so on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Protocol

from ndc.config import SERVICE_DATA
from ndc.models import ServiceCategory

_SEAT_SSR_CODES: frozenset[str] = frozenset(SERVICE_DATA.get("seat_ssr_codes", []))
_KEYWORDS: dict[str, list[str]] = SERVICE_DATA.get("keywords", {})
_BUNDLE_CODE = re.compile(SERVICE_DATA.get("bundle_code_pattern", r"^[PSMB]\d{3}$"))


@dataclass(frozen=True)
class ServiceSignals:
    """What a response tells us about a service."""

    code: str = ""
    name: str = ""
    rfic: Optional[str] = None

    @property
    def text(self) -> str:
        return f"{self.code} {self.name}".upper()


class ServiceRule(Protocol):
    """Protocol for classification rules."""

    rule_id: str
    category: ServiceCategory

    def matches(self, signals: ServiceSignals) -> bool: ...


# Global rule registry, in evaluation order
_RULE_REGISTRY: list[type] = []


def register_rule(cls: type) -> type:
    """Decorator to register a classification rule class."""
    _RULE_REGISTRY.append(cls)
    return cls


def get_registered_rules() -> list[type]:
    """Return all registered rule classes in evaluation order."""
    return list(_RULE_REGISTRY)


@register_rule
class RficSsrRule:
    rule_id = "rfic_ssr"
    category = ServiceCategory.SSR

    def matches(self, signals: ServiceSignals) -> bool:
        return (signals.rfic or "").upper() == "P"


@register_rule
class SeatSsrCodeRule:
    """Seat products the airline sells as SSRs (UPFX, LEGX, ...)."""

    rule_id = "seat_ssr_code"
    category = ServiceCategory.SSR

    def matches(self, signals: ServiceSignals) -> bool:
        return signals.code.upper() in _SEAT_SSR_CODES


class KeywordRule:
    """Match any configured keyword as a substring of code and name."""

    rule_id = "keyword"
    category = ServiceCategory.OTHER

    def matches(self, signals: ServiceSignals) -> bool:
        text = signals.text
        return any(keyword in text for keyword in _KEYWORDS.get(self.category.value, []))


@register_rule
class BaggageKeywordRule(KeywordRule):
    rule_id = "baggage_keyword"
    category = ServiceCategory.BAGGAGE


@register_rule
class SeatKeywordRule(KeywordRule):
    rule_id = "seat_keyword"
    category = ServiceCategory.SEAT


@register_rule
class MealKeywordRule(KeywordRule):
    rule_id = "meal_keyword"
    category = ServiceCategory.MEAL


@register_rule
class LoungeKeywordRule(KeywordRule):
    rule_id = "lounge_keyword"
    category = ServiceCategory.LOUNGE


@register_rule
class InsuranceKeywordRule(KeywordRule):
    rule_id = "insurance_keyword"
    category = ServiceCategory.INSURANCE


@register_rule
class BundleRule(KeywordRule):
    """Bundle codes as sent (P200, M202, ...) or bundle keywords."""

    rule_id = "bundle"
    category = ServiceCategory.BUNDLE

    def matches(self, signals: ServiceSignals) -> bool:
        return bool(_BUNDLE_CODE.match(signals.code.strip())) or super().matches(signals)


_RULES = [cls() for cls in get_registered_rules()]


def classify_service(code: str = "", name: str = "", rfic: Optional[str] = None) -> ServiceCategory:
    """Category for a service; OTHER when no rule matches."""
    signals = ServiceSignals(code=code or "", name=name or "", rfic=rfic)
    for rule in _RULES:
        if rule.matches(signals):
            return rule.category
    return ServiceCategory.OTHER
