"""Plain text output formatter -- no ANSI escapes."""

from __future__ import annotations

from ndc.models import NDCErrorItem
from ndc.parsers.models import (
    GenericResult,
    OfferPriceResult,
    OrderResult,
    ParseResult,
    SeatAvailabilityResult,
    ServiceListResult,
)
from ndc.pricing import ReconciliationReport


def _header(title: str) -> str:
    """Create a plain text section header."""
    return f"\n{'=' * 60}\n  {title}\n{'=' * 60}\n"


def _subheader(title: str) -> str:
    """Create a plain text sub-header."""
    return f"\n--- {title} ---\n"


def _issues(title: str, issues: list[NDCErrorItem]) -> list[str]:
    if not issues:
        return []
    lines = [_subheader(title)]
    lines.extend(f"  [{i.code}] {i.message}" for i in issues)
    return lines


def _outcome(result: ParseResult) -> list[str]:
    lines = [f"  Status:     {'OK' if result.success else 'FAILED'}"]
    if not result.success:
        lines.extend(_issues("Errors", result.errors))
    lines.extend(_issues("Warnings", result.warnings))
    return lines


class PlainFormatter:
    """Format parse results as plain text without ANSI escapes."""

    def format_service_list(self, result: ServiceListResult) -> str:
        lines = [_header("Service List")]
        lines.extend(_outcome(result))
        lines.append(f"  Services:   {len(result.services)}")
        lines.append(f"  Offers:     {len(result.ancillary_offers)}")

        if result.ancillary_offers:
            lines.append(_subheader("Ancillary Offers"))
            lines.append(f"  {'Item':<22} {'Code':<6} {'Category':<10} {'Price':>10} {'Scope':<8} Passengers")
            lines.append(f"  {'-' * 22} {'-' * 6} {'-' * 10} {'-' * 10} {'-' * 8} {'-' * 20}")
            for o in result.ancillary_offers:
                price = f"{o.price.value:.2f}"
                lines.append(
                    f"  {o.offer_item_id:<22} {o.service_code:<6} {o.category.value:<10} {price:>10} "
                    f"{o.association_type.value:<8} {', '.join(o.pax_ref_ids)}"
                )
        return "\n".join(lines)

    def format_seat_availability(self, result: SeatAvailabilityResult) -> str:
        lines = [_header("Seat Availability")]
        lines.extend(_outcome(result))
        lines.append(f"  Offer:      {result.a_la_carte_offer_id or '-'}")
        lines.append(f"  Products:   {len(result.offer_items)}")

        for seat_map in result.seat_maps:
            seats = seat_map.seats
            free = sum(1 for s in seats if s.available)
            lines.append(_subheader(f"Segment {seat_map.segment_ref_id}"))
            lines.append(f"  Seats: {len(seats)} ({free} available)")
            for seat in seats:
                if not seat.available:
                    continue
                price = f"{seat.price.value:.2f} {seat.price.currency}" if seat.price else "free"
                traits = ", ".join(seat.characteristics)
                lines.append(f"  {seat.seat_id:<5} {price:<14} {traits}")
        return "\n".join(lines)

    def format_offer_price(self, result: OfferPriceResult) -> str:
        lines = [_header("Offer Price")]
        lines.extend(_outcome(result))
        if result.expiration_datetime:
            lines.append(f"  Expires:    {result.expiration_datetime}")

        for flight in result.flight_breakdowns:
            lines.append(_subheader(f"Flight {flight.flight_number}: {flight.route}"))
            lines.append(f"  {'PTC':<4} {'Pax':>3} {'Base':>10} {'Taxes/Fees':>11} {'Total':>10}")
            for pb in flight.passenger_breakdown:
                lines.append(
                    f"  {pb.ptc:<4} {pb.pax_count:>3} {pb.base_fare:>10.2f} "
                    f"{pb.total_taxes_fees:>11.2f} {pb.total:>10.2f}"
                )
            for t in flight.fees_and_taxes:
                lines.append(f"       {t.code:<4} {t.name:<40} {t.amount:>10.2f}")
            lines.append(f"  Flight total: {flight.flight_total:.2f} {flight.currency}")

        lines.append(_subheader("Totals"))
        lines.append(f"  Fares:      {result.fare_total:.2f} {result.currency}")
        lines.append(f"  Bundles:    {result.bundle_total:.2f} {result.currency}")
        return "\n".join(lines)

    def format_order(self, result: OrderResult) -> str:
        lines = [_header("Order")]
        lines.extend(_outcome(result))
        order = result.order
        if order is None:
            return "\n".join(lines)
        lines.append(f"  Order:      {order.order_id} ({order.owner_code})")
        lines.append(f"  PNR:        {order.pnr or '-'}")
        lines.append(f"  State:      {order.status.value}")
        if order.total_price:
            lines.append(f"  Total:      {order.total_price.value:.2f} {order.total_price.currency}")
        lines.append(f"  Passengers: {len(order.passengers)}")
        lines.append(f"  Segments:   {len(order.segments)}")

        if order.service_items:
            lines.append(_subheader("Services"))
            for s in order.service_items:
                seat = f" seat {s.seat.row}{s.seat.column}" if s.seat else ""
                lines.append(f"  {s.order_item_id:<20} {s.category.value:<10} {s.service_code or '-':<6}{seat}")
        return "\n".join(lines)

    def format_generic(self, result: GenericResult) -> str:
        lines = [_header("Response")]
        lines.extend(_outcome(result))
        lines.append(f"  Response:   {result.response_id or '-'}")
        lines.append(f"  Order:      {result.order_id or '-'} ({result.owner_code or '-'})")
        for ref in result.booking_references:
            lines.append(f"  Booking:    {ref.booking_id} {ref.carrier or ''}".rstrip())
        return "\n".join(lines)

    def format_reconciliation(self, report: ReconciliationReport) -> str:
        lines = [_header("Price Reconciliation")]
        lines.append(f"  Estimate:   {report.estimate_total:.2f} {report.currency}")
        lines.append(f"  Quoted:     {report.authoritative_total:.2f} {report.currency}")
        lines.append(f"  Result:     {'MATCH' if report.matches else 'MISMATCH'}")
        if report.differences:
            lines.append(_subheader("Differences"))
            lines.extend(f"  {w}" for w in report.warnings)
        return "\n".join(lines)
