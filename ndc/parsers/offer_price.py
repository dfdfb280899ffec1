"""OfferPrice response parser.

Offer items carry per-person amounts. Fare items are grouped into flights
by the set of journey/segment references they price, then summed per
passenger type (ADT, CHD, INF) and multiplied by the number of distinct
passengers in that type. Bundle and service lines are kept on the offer
but never counted into a flight total.
"""

import logging
from typing import Optional, Union

from lxml import etree

from ndc.config import SERVICE_DATA
from ndc.identifiers import normalize_segment_id, pax_type_from_ref
from ndc.models import PAX_TYPE_ORDER, Amount
from ndc.parsers.base import outcome
from ndc.parsers.models import (
    FlightPriceBreakdown,
    OfferPriceResult,
    PassengerPriceBreakdown,
    PricedOffer,
    PricedOfferItem,
    TaxFeeItem,
)
from ndc.xmlutil import (
    attr_or_text,
    child,
    child_text,
    children,
    find_all,
    find_first,
    find_text,
    parse_amount,
    parse_document,
    text_of,
    texts,
    to_float,
)

logger = logging.getLogger(__name__)

ROOT_TAGS = ("IATA_OfferPriceRS",)

TAX_FEE_NAMES: dict[str, str] = SERVICE_DATA.get("tax_fee_names", {})


def tax_fee_name(code: str) -> str:
    return TAX_FEE_NAMES.get(code, code)


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


def _tax_items(price_el: Optional[etree._Element], currency: str) -> list[TaxFeeItem]:
    items: list[TaxFeeItem] = []
    for tax in find_all(price_el, "Tax"):
        code = attr_or_text(tax, "TaxCode", "Code") or "TAX"
        amount_el = child(tax, "Amount")
        amount = parse_amount(amount_el if amount_el is not None else tax, currency)
        items.append(
            TaxFeeItem(
                code=code,
                name=find_text(tax, "TaxName", "DescText") or tax_fee_name(code),
                amount=amount.value if amount else 0.0,
                currency=amount.currency if amount else currency,
                kind="tax",
            )
        )
    for fee in find_all(price_el, "Fee"):
        code = find_text(fee, "DesigText", "FeeCode") or fee.get("Code") or "FEE"
        amount_el = child(fee, "Amount")
        amount = parse_amount(amount_el if amount_el is not None else fee, currency)
        items.append(
            TaxFeeItem(
                code=code,
                name=find_text(fee, "DescText") or tax_fee_name(code),
                amount=amount.value if amount else 0.0,
                currency=amount.currency if amount else currency,
                kind="fee",
            )
        )
    return items


def _sum_of(parent: Optional[etree._Element], block: str, value_tags: tuple[str, ...]) -> float:
    total = 0.0
    for el in find_all(parent, block):
        value_el = child(el, *value_tags)
        total += to_float(text_of(value_el if value_el is not None else el))
    return round(total, 2)


def _parse_item(item: etree._Element, currency: str) -> Optional[PricedOfferItem]:
    item_id = attr_or_text(item, "OfferItemID")
    if not item_id:
        return None
    price_el = child(item, "Price")
    if price_el is None:
        price_el = find_first(item, "Price", "UnitPrice")

    base_el = find_first(price_el, "BaseAmount")
    if base_el is None:
        base_el = find_first(item, "BaseAmount")
    base = parse_amount(base_el, currency)
    discounted = parse_amount(find_first(price_el, "DiscountedBaseAmount"), currency)
    tax_summary = find_first(price_el, "TaxSummary")
    tax_total = parse_amount(find_first(tax_summary, "TotalTaxAmount"), currency)
    total = parse_amount(price_el, currency) if price_el is not None else None

    fare_detail = find_first(item, "FareDetail")
    pax_refs = texts(fare_detail, "PaxRefID") or texts(item, "PaxRefID")
    service = find_first(item, "Service")
    flight_refs = texts(service, "PaxJourneyRefID") or texts(item, "PaxJourneyRefID")
    if not flight_refs:
        flight_refs = texts(fare_detail, "PaxSegmentRefID") or texts(item, "PaxSegmentRefID")

    tax_items = _tax_items(price_el, currency)
    if tax_total is None and tax_items:
        tax_total = Amount(value=round(sum(t.amount for t in tax_items if t.kind == "tax"), 2), currency=currency)

    return PricedOfferItem(
        offer_item_id=item_id,
        pax_ref_ids=pax_refs,
        base_amount=base,
        discounted_base_amount=discounted,
        surcharge_amount=_sum_of(price_el, "Surcharge", ("TotalAmount", "Amount")),
        adjustment_amount=-_sum_of(price_el, "Discount", ("DiscountAmount", "Amount")),
        tax_amount=tax_total,
        total_amount=total,
        fare_basis_code=find_text(item, "FareBasisCode"),
        flight_ref_ids=flight_refs,
        tax_items=tax_items,
    )


def _parse_offers(root: etree._Element) -> list[PricedOffer]:
    offers = []
    for offer_el in find_all(root, "PricedOffer") or find_all(root, "Offer"):
        offer_id_el = find_first(offer_el, "OfferID")
        total_el = child(offer_el, "TotalPrice")
        if total_el is None:
            total_el = find_first(offer_el, "TotalPrice")
        total = parse_amount(total_el)
        currency = total.currency if total else "AUD"
        item_els = children(offer_el, "OfferItem") or find_all(offer_el, "OfferItem")
        item_els = item_els or find_all(offer_el, "PricedOfferItem")
        items = [i for i in (_parse_item(el, currency) for el in item_els) if i is not None]
        owner = offer_id_el.get("Owner") if offer_id_el is not None else None
        offers.append(
            PricedOffer(
                offer_id=text_of(offer_id_el) or "",
                owner_code=owner or child_text(offer_el, "OwnerCode") or "JQ",
                total_price=total,
                offer_items=items,
            )
        )
    return offers


# ---------------------------------------------------------------------------
# Flight breakdowns
# ---------------------------------------------------------------------------


def _segment_routes(root: etree._Element) -> dict[str, tuple[str, str]]:
    """Clean segment id -> (origin, destination)."""
    routes: dict[str, tuple[str, str]] = {}
    for el in find_all(root, "DatedMarketingSegment"):
        seg_id = find_text(el, "DatedMarketingSegmentId")
        dep = find_first(el, "Dep")
        arr = find_first(el, "Arrival")
        origin = find_text(dep, "IATA_LocationCode")
        destination = find_text(arr, "IATA_LocationCode")
        if seg_id and origin and destination:
            routes[normalize_segment_id(seg_id).clean] = (origin, destination)
    for el in find_all(root, "PaxSegment"):
        seg_id = attr_or_text(el, "PaxSegmentID")
        origin = find_text(find_first(el, "Dep"), "IATA_LocationCode")
        destination = find_text(find_first(el, "Arrival"), "IATA_LocationCode")
        if not seg_id:
            continue
        if origin and destination:
            routes.setdefault(normalize_segment_id(seg_id).clean, (origin, destination))
        mkt_ref = find_text(el, "DatedMarketingSegmentRefId")
        if mkt_ref and normalize_segment_id(mkt_ref).clean in routes:
            routes.setdefault(normalize_segment_id(seg_id).clean, routes[normalize_segment_id(mkt_ref).clean])
    return routes


def _journey_segments(root: etree._Element) -> dict[str, list[str]]:
    journeys: dict[str, list[str]] = {}
    for el in find_all(root, "PaxJourney"):
        journey_id = attr_or_text(el, "PaxJourneyID")
        if journey_id:
            journeys[journey_id] = texts(el, "PaxSegmentRefID")
    return journeys


def _route_label(refs: list[str], journeys: dict[str, list[str]], routes: dict[str, tuple[str, str]]) -> Optional[str]:
    segment_ids: list[str] = []
    for ref in refs:
        segment_ids.extend(journeys.get(ref, [ref]))
    legs = [routes[normalize_segment_id(s).clean] for s in segment_ids if normalize_segment_id(s).clean in routes]
    if not legs:
        return None
    return f"{legs[0][0]} - {legs[-1][1]}"


def _group_fare_items(items: list[PricedOfferItem]) -> list[list[PricedOfferItem]]:
    """Group by reference set; items without references split positionally."""
    grouped: dict[tuple, list[PricedOfferItem]] = {}
    unreferenced: list[PricedOfferItem] = []
    for item in items:
        if item.flight_ref_ids:
            grouped.setdefault(tuple(sorted(item.flight_ref_ids)), []).append(item)
        else:
            unreferenced.append(item)
    groups = list(grouped.values())
    if unreferenced:
        # One fare item per passenger type per flight, in document order.
        per_type: dict[str, list[PricedOfferItem]] = {}
        for item in unreferenced:
            ptc = pax_type_from_ref(item.pax_ref_ids[0]) if item.pax_ref_ids else "ADT"
            per_type.setdefault(ptc, []).append(item)
        flights = max(len(v) for v in per_type.values())
        for n in range(flights):
            groups.append([v[n] for v in per_type.values() if n < len(v)])
    return groups


def _passenger_breakdown(ptc: str, items: list[PricedOfferItem]) -> PassengerPriceBreakdown:
    pax_ids: list[str] = []
    for item in items:
        pax_ids.extend(p for p in item.pax_ref_ids if p not in pax_ids)
    count = max(len(pax_ids), 1)

    # Per-person amounts; the last item seen for the type wins.
    last = items[-1]
    base = last.base_amount.value if last.base_amount else 0.0
    discounted = last.discounted_base_amount.value if last.discounted_base_amount else base
    taxes_total = last.tax_amount.value if last.tax_amount else 0.0
    total = last.total_amount.value if last.total_amount else 0.0

    taxes = [
        TaxFeeItem(code=t.code, name=t.name, amount=round(t.amount * count, 2), currency=t.currency, kind=t.kind)
        for t in last.tax_items
    ]
    fees_total = sum(t.amount for t in last.tax_items if t.kind == "fee")
    return PassengerPriceBreakdown(
        ptc=ptc,
        pax_count=count,
        base_fare=round(base * count, 2),
        discounted_base_fare=round(discounted * count, 2),
        surcharges=round(last.surcharge_amount * count, 2),
        adjustments=round(last.adjustment_amount * count, 2),
        taxes=[t for t in taxes if t.kind == "tax"],
        fees=[t for t in taxes if t.kind == "fee"],
        total_taxes_fees=round((taxes_total + fees_total) * count, 2),
        total=round(total * count, 2),
    )


def build_flight_breakdowns(root: etree._Element, offers: list[PricedOffer]) -> list[FlightPriceBreakdown]:
    """Per-flight fare breakdowns for every fare item in the response."""
    fare_items = [item for offer in offers for item in offer.offer_items if item.is_fare_item]
    if not fare_items:
        return []
    routes = _segment_routes(root)
    journeys = _journey_segments(root)

    flights = []
    for number, items in enumerate(_group_fare_items(fare_items), start=1):
        by_type: dict[str, list[PricedOfferItem]] = {}
        for item in items:
            ptc = pax_type_from_ref(item.pax_ref_ids[0]) if item.pax_ref_ids else "ADT"
            by_type.setdefault(ptc, []).append(item)
        currency = items[0].total_amount.currency if items[0].total_amount else "AUD"
        breakdowns = [
            _passenger_breakdown(ptc, by_type[ptc])
            for ptc in sorted(by_type, key=lambda p: PAX_TYPE_ORDER.get(p, 99))
        ]

        aggregated: dict[tuple[str, str], TaxFeeItem] = {}
        for pb in breakdowns:
            for t in pb.taxes + pb.fees:
                key = (t.kind, t.code)
                if key in aggregated:
                    aggregated[key].amount = round(aggregated[key].amount + t.amount, 2)
                else:
                    aggregated[key] = t.model_copy()
        total_fees_and_taxes = round(sum(pb.total_taxes_fees for pb in breakdowns), 2)
        itemized = round(sum(t.amount for t in aggregated.values()), 2)
        if aggregated and abs(itemized - total_fees_and_taxes) > 0.01:
            logger.warning(
                "Flight %d: itemized taxes/fees %.2f differ from reported %.2f",
                number,
                itemized,
                total_fees_and_taxes,
            )

        refs = list(dict.fromkeys(r for item in items for r in item.flight_ref_ids))
        flights.append(
            FlightPriceBreakdown(
                flight_number=number,
                route=_route_label(refs, journeys, routes) or f"Flight {number}",
                segment_ids=refs,
                currency=currency,
                base_fare=round(sum(pb.base_fare for pb in breakdowns), 2),
                discounted_base_fare=round(sum(pb.discounted_base_fare for pb in breakdowns), 2),
                surcharges=round(sum(pb.surcharges for pb in breakdowns), 2),
                adjustments=round(sum(pb.adjustments for pb in breakdowns), 2),
                fees_and_taxes=list(aggregated.values()),
                total_fees_and_taxes=total_fees_and_taxes,
                flight_total=round(sum(pb.total for pb in breakdowns), 2),
                passenger_breakdown=breakdowns,
            )
        )
    return flights


def parse_offer_price(xml: Union[str, bytes]) -> OfferPriceResult:
    """Parse an IATA_OfferPriceRS.

    Raises:
        ParseError: the text is not XML or not an OfferPrice response.
    """
    root = parse_document(xml, ROOT_TAGS)
    offers = _parse_offers(root)
    flights = build_flight_breakdowns(root, offers)

    success, errors, warnings = outcome(root, bool(offers), "OfferPrice")
    logger.debug("OfferPrice: %d priced offers, %d flights", len(offers), len(flights))
    return OfferPriceResult(
        success=success,
        errors=errors,
        warnings=warnings,
        response_id=find_text(root, "ShoppingResponseID", "ResponseID"),
        priced_offers=offers,
        flight_breakdowns=flights,
        expiration_datetime=find_text(root, "OfferExpirationDateTime", "OfferExpirationTimeLimitDateTime"),
    )
