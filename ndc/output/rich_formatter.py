"""Rich-based output formatter with colored tables and panels."""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ndc.models import ServiceCategory
from ndc.parsers.models import (
    GenericResult,
    OfferPriceResult,
    OrderResult,
    ParseResult,
    SeatAvailabilityResult,
    ServiceListResult,
)
from ndc.pricing import ReconciliationReport

# Category -> Rich style mapping
_CATEGORY_STYLES = {
    ServiceCategory.BUNDLE: "bold magenta",
    ServiceCategory.BAGGAGE: "cyan",
    ServiceCategory.SEAT: "blue",
    ServiceCategory.SSR: "yellow",
}


def _render(renderable) -> str:
    """Render a Rich object to a string."""
    buf = StringIO()
    console = Console(file=buf, force_terminal=True, width=120)
    console.print(renderable)
    return buf.getvalue()


def _status(result: ParseResult) -> Text:
    if result.success:
        return Text("OK", style="bold green")
    return Text("FAILED", style="bold red")


def _summary(title: str, result: ParseResult, lines: list[str]) -> str:
    text = Text()
    text.append("Status: ")
    text.append_text(_status(result))
    text.append("\n")
    for line in lines:
        text.append(line + "\n")
    issues = result.errors if not result.success else result.warnings
    for issue in issues:
        style = "red" if not result.success else "yellow"
        text.append(f"[{issue.code}] {issue.message}\n", style=style)
    return _render(Panel(text, title=title, border_style="cyan"))


class RichFormatter:
    """Format parse results using Rich tables and panels."""

    def format_service_list(self, result: ServiceListResult) -> str:
        parts = [
            _summary(
                "Service List",
                result,
                [f"Services: {len(result.services)}", f"Offers:   {len(result.ancillary_offers)}"],
            )
        ]
        if result.ancillary_offers:
            table = Table(title="Ancillary Offers", show_lines=False)
            table.add_column("Item", style="dim")
            table.add_column("Code")
            table.add_column("Name")
            table.add_column("Category")
            table.add_column("Price", justify="right")
            table.add_column("Scope")
            table.add_column("Passengers")
            for o in result.ancillary_offers:
                table.add_row(
                    o.offer_item_id,
                    o.service_code,
                    o.service_name,
                    Text(o.category.value, style=_CATEGORY_STYLES.get(o.category, "")),
                    f"{o.price.value:.2f} {o.price.currency}",
                    o.association_type.value,
                    ", ".join(o.pax_ref_ids),
                )
            parts.append(_render(table))
        return "\n".join(parts)

    def format_seat_availability(self, result: SeatAvailabilityResult) -> str:
        parts = [
            _summary(
                "Seat Availability",
                result,
                [f"Offer:    {result.a_la_carte_offer_id or '-'}", f"Products: {len(result.offer_items)}"],
            )
        ]
        for seat_map in result.seat_maps:
            table = Table(title=f"Segment {seat_map.segment_ref_id}")
            table.add_column("Seat", style="cyan")
            table.add_column("Status")
            table.add_column("Price", justify="right")
            table.add_column("Features")
            for seat in seat_map.seats:
                status = Text("free", style="green") if seat.available else Text(seat.occupation_status, style="dim")
                price = f"{seat.price.value:.2f} {seat.price.currency}" if seat.price else ""
                table.add_row(seat.seat_id, status, price, ", ".join(seat.characteristics))
            parts.append(_render(table))
        return "\n".join(parts)

    def format_offer_price(self, result: OfferPriceResult) -> str:
        lines = [
            f"Fares:   {result.fare_total:.2f} {result.currency}",
            f"Bundles: {result.bundle_total:.2f} {result.currency}",
        ]
        if result.expiration_datetime:
            lines.append(f"Expires: {result.expiration_datetime}")
        parts = [_summary("Offer Price", result, lines)]
        for flight in result.flight_breakdowns:
            table = Table(title=f"Flight {flight.flight_number}: {flight.route}", show_lines=True)
            table.add_column("PTC", style="cyan")
            table.add_column("Pax", justify="right")
            table.add_column("Base", justify="right")
            table.add_column("Taxes/Fees", justify="right")
            table.add_column("Total", justify="right", style="bold")
            for pb in flight.passenger_breakdown:
                table.add_row(
                    pb.ptc,
                    str(pb.pax_count),
                    f"{pb.base_fare:.2f}",
                    f"{pb.total_taxes_fees:.2f}",
                    f"{pb.total:.2f}",
                )
            table.add_row("", "", "", "", f"{flight.flight_total:.2f} {flight.currency}")
            parts.append(_render(table))
        return "\n".join(parts)

    def format_order(self, result: OrderResult) -> str:
        order = result.order
        if order is None:
            return _summary("Order", result, [])
        lines = [
            f"Order:      {order.order_id} ({order.owner_code})",
            f"PNR:        {order.pnr or '-'}",
            f"State:      {order.status.value}",
            f"Passengers: {len(order.passengers)}",
        ]
        if order.total_price:
            lines.append(f"Total:      {order.total_price.value:.2f} {order.total_price.currency}")
        parts = [_summary("Order", result, lines)]
        if order.service_items:
            table = Table(title="Services")
            table.add_column("Order item", style="dim")
            table.add_column("Category")
            table.add_column("Code")
            table.add_column("Passengers")
            table.add_column("Seat")
            for s in order.service_items:
                table.add_row(
                    s.order_item_id,
                    Text(s.category.value, style=_CATEGORY_STYLES.get(s.category, "")),
                    s.service_code,
                    ", ".join(s.pax_ref_ids),
                    f"{s.seat.row}{s.seat.column}" if s.seat else "",
                )
            parts.append(_render(table))
        return "\n".join(parts)

    def format_generic(self, result: GenericResult) -> str:
        lines = [
            f"Response: {result.response_id or '-'}",
            f"Order:    {result.order_id or '-'} ({result.owner_code or '-'})",
        ]
        lines.extend(f"Booking:  {r.booking_id}" for r in result.booking_references)
        return _summary("Response", result, lines)

    def format_reconciliation(self, report: ReconciliationReport) -> str:
        verdict = Text("MATCH", style="bold green") if report.matches else Text("MISMATCH", style="bold red")
        text = Text()
        text.append(f"Estimate: {report.estimate_total:.2f} {report.currency}\n")
        text.append(f"Quoted:   {report.authoritative_total:.2f} {report.currency}\n")
        text.append("Result:   ")
        text.append_text(verdict)
        parts = [_render(Panel(text, title="Price Reconciliation", border_style="cyan"))]
        if report.differences:
            table = Table(title="Differences")
            table.add_column("Component", style="cyan")
            table.add_column("Estimate", justify="right")
            table.add_column("Quoted", justify="right")
            table.add_column("Diff", justify="right")
            table.add_column("%", justify="right")
            for d in report.differences:
                style = "red" if d.difference > 0 else "green"
                table.add_row(
                    d.component,
                    f"{d.estimate:.2f}",
                    f"{d.authoritative:.2f}",
                    Text(f"{d.difference:+.2f}", style=style),
                    f"{d.percentage:+.1f}",
                )
            parts.append(_render(table))
        return "\n".join(parts)
