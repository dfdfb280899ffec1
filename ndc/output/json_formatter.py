"""JSON output formatter -- valid JSON suitable for piping to jq."""

from __future__ import annotations

import json

from ndc.parsers.models import (
    GenericResult,
    OfferPriceResult,
    OrderResult,
    SeatAvailabilityResult,
    ServiceListResult,
)
from ndc.pricing import ReconciliationReport


def _dump(kind: str, model, **extra) -> str:
    data = {"type": kind, **extra, **model.model_dump(mode="json")}
    return json.dumps(data, indent=2)


class JsonFormatter:
    """Format parse results as pretty-printed JSON."""

    def format_service_list(self, result: ServiceListResult) -> str:
        return _dump("service_list", result)

    def format_seat_availability(self, result: SeatAvailabilityResult) -> str:
        return _dump("seat_availability", result)

    def format_offer_price(self, result: OfferPriceResult) -> str:
        """Include the derived fare and bundle totals."""
        summary = {
            "currency": result.currency,
            "fare_total": result.fare_total,
            "bundle_total": result.bundle_total,
        }
        return _dump("offer_price", result, summary=summary)

    def format_order(self, result: OrderResult) -> str:
        return _dump("order", result)

    def format_generic(self, result: GenericResult) -> str:
        return _dump("generic", result)

    def format_reconciliation(self, report: ReconciliationReport) -> str:
        return _dump("reconciliation", report, matches=report.matches)
