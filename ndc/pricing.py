"""Price snapshots and estimate-vs-authoritative reconciliation.

A shopping-stage estimate is compared against the airline's OfferPrice
quote. Both sides are compared fare-only: bundle and service amounts are
carried on the snapshot but never enter the comparison. Differences under
ten cents are rounding noise and are not reported.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ndc.parsers.models import OfferPriceResult

logger = logging.getLogger(__name__)

TOLERANCE = 0.10


class SnapshotStage(str, Enum):
    """Where in the booking flow a price was captured."""

    SHOPPING = "shopping"
    PRICING = "pricing"


class PriceBreakdown(BaseModel):
    base: float = 0.0
    taxes: float = 0.0
    fees: float = 0.0
    bundle: float = 0.0
    services: float = 0.0


class PriceSnapshot(BaseModel):
    """A total price observed at one stage."""

    stage: SnapshotStage = SnapshotStage.SHOPPING
    total: float = Field(ge=0)
    currency: str = Field(default="AUD", min_length=3, max_length=3)
    breakdown: Optional[PriceBreakdown] = None

    @field_validator("currency", mode="before")
    @classmethod
    def uppercase_currency(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def fare_total(self) -> float:
        """Total with bundle and service amounts taken out."""
        if self.breakdown is None:
            return round(self.total, 2)
        return round(self.total - self.breakdown.bundle - self.breakdown.services, 2)


class PriceDifference(BaseModel):
    component: str
    estimate: float
    authoritative: float
    difference: float  # authoritative - estimate
    percentage: float  # relative to the estimate; 0 when the estimate is 0


class ReconciliationReport(BaseModel):
    currency: str
    estimate_total: float
    authoritative_total: float
    differences: list[PriceDifference] = Field(default_factory=list)

    @property
    def matches(self) -> bool:
        return not self.differences

    @property
    def warnings(self) -> list[str]:
        return [
            f"{d.component}: estimated {d.estimate:.2f}, quoted {d.authoritative:.2f} "
            f"({d.difference:+.2f} {self.currency}, {d.percentage:+.1f}%)"
            for d in self.differences
        ]


def _difference(component: str, estimate: float, authoritative: float) -> Optional[PriceDifference]:
    diff = round(authoritative - estimate, 2)
    if abs(diff) < TOLERANCE:
        return None
    percentage = round(diff / estimate * 100, 2) if estimate else 0.0
    return PriceDifference(
        component=component,
        estimate=round(estimate, 2),
        authoritative=round(authoritative, 2),
        difference=diff,
        percentage=percentage,
    )


def reconcile(estimate: PriceSnapshot, authoritative: PriceSnapshot) -> ReconciliationReport:
    """Compare an estimate against an authoritative quote.

    The fare totals are always compared; base, taxes, and fees are compared
    as well when both snapshots carry a breakdown.

    Raises:
        ValueError: the snapshots are in different currencies.
    """
    if estimate.currency != authoritative.currency:
        raise ValueError(f"cannot reconcile {estimate.currency} against {authoritative.currency}")

    candidates = [("fare_total", estimate.fare_total, authoritative.fare_total)]
    if estimate.breakdown is not None and authoritative.breakdown is not None:
        for component in ("base", "taxes", "fees"):
            candidates.append(
                (component, getattr(estimate.breakdown, component), getattr(authoritative.breakdown, component))
            )
    differences = [d for d in (_difference(*c) for c in candidates) if d is not None]

    report = ReconciliationReport(
        currency=estimate.currency,
        estimate_total=estimate.fare_total,
        authoritative_total=authoritative.fare_total,
        differences=differences,
    )
    for line in report.warnings:
        logger.warning("Price mismatch %s", line)
    return report


def snapshot_from_offer_price(result: OfferPriceResult) -> PriceSnapshot:
    """Pricing-stage snapshot of an OfferPrice response."""
    # Flight breakdowns already account for passenger counts.
    taxes_and_fees = fees = 0.0
    for flight in result.flight_breakdowns:
        for pb in flight.passenger_breakdown:
            taxes_and_fees += pb.total_taxes_fees
            fees += sum(t.amount for t in pb.fees)
    taxes = taxes_and_fees - fees
    breakdown = PriceBreakdown(
        base=round(sum(f.base_fare for f in result.flight_breakdowns), 2),
        taxes=round(taxes, 2),
        fees=round(fees, 2),
        bundle=result.bundle_total,
    )
    return PriceSnapshot(
        stage=SnapshotStage.PRICING,
        total=round(result.fare_total + result.bundle_total, 2),
        currency=result.currency,
        breakdown=breakdown,
    )
