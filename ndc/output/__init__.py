"""Output formatters for parsed NDC responses.

Provides a Formatter protocol and three implementations:
- RichFormatter: colored Rich tables and panels
- PlainFormatter: plain text without ANSI escapes
- JsonFormatter: valid JSON for piping to jq
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ndc.parsers.models import (
        GenericResult,
        OfferPriceResult,
        OrderResult,
        SeatAvailabilityResult,
        ServiceListResult,
    )
    from ndc.pricing import ReconciliationReport


class Formatter(Protocol):
    """Protocol for formatting parse results."""

    def format_service_list(self, result: ServiceListResult) -> str:
        """Format a ServiceList result."""
        ...

    def format_seat_availability(self, result: SeatAvailabilityResult) -> str:
        """Format a SeatAvailability result."""
        ...

    def format_offer_price(self, result: OfferPriceResult) -> str:
        """Format an OfferPrice result."""
        ...

    def format_order(self, result: OrderResult) -> str:
        """Format an order result."""
        ...

    def format_generic(self, result: GenericResult) -> str:
        """Format a generic result."""
        ...

    def format_reconciliation(self, report: ReconciliationReport) -> str:
        """Format a price reconciliation report."""
        ...


def get_formatter(name: str = "rich") -> Formatter:
    """Get a formatter by name.

    Args:
        name: One of "rich", "plain", "json".

    Raises:
        ValueError: If the name is not recognized.
    """
    if name == "rich":
        from ndc.output.rich_formatter import RichFormatter

        return RichFormatter()
    elif name == "plain":
        from ndc.output.plain_formatter import PlainFormatter

        return PlainFormatter()
    elif name == "json":
        from ndc.output.json_formatter import JsonFormatter

        return JsonFormatter()
    else:
        raise ValueError(f"Unknown formatter: {name!r}. Use 'rich', 'plain', or 'json'.")
