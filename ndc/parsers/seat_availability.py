"""SeatAvailability response parser.

Two passes: priced seat products are read from the ALaCarteOffer first,
then every seat in every map is joined to them through OfferItemRefID.
A seat only lists offer items that resolve, keyed by passenger type.
"""

import logging
from typing import Optional, Union

from lxml import etree

from ndc.config import SERVICE_DATA
from ndc.identifiers import pax_type_from_ref
from ndc.models import Amount
from ndc.parsers.base import outcome
from ndc.parsers.models import (
    CabinCompartment,
    Seat,
    SeatAvailabilityResult,
    SeatMap,
    SeatOfferItem,
    SeatRow,
)
from ndc.xmlutil import (
    attr_or_text,
    child,
    child_text,
    find_all,
    find_first,
    find_text,
    parse_amount,
    parse_document,
    texts,
)

logger = logging.getLogger(__name__)

ROOT_TAGS = ("IATA_SeatAvailabilityRS",)

_CHARACTERISTICS: dict[str, str] = SERVICE_DATA.get("seat_characteristics", {})
_OCCUPATION: dict[str, str] = SERVICE_DATA.get("occupation_status", {})


def normalize_occupation(raw: Optional[str]) -> str:
    """F (free), O (occupied), or Z (blocked). Unknown codes count as occupied."""
    return _OCCUPATION.get((raw or "").strip().upper(), "O")


def characteristic_name(code: str) -> str:
    return _CHARACTERISTICS.get(code.strip().upper(), code.strip())


# ---------------------------------------------------------------------------
# Phase one: priced seat products
# ---------------------------------------------------------------------------


def _parse_offer_items(root: etree._Element) -> dict[str, SeatOfferItem]:
    items: dict[str, SeatOfferItem] = {}
    for offer in find_all(root, "ALaCarteOffer"):
        for item in find_all(offer, "ALaCarteOfferItem") or find_all(offer, "OfferItem"):
            item_id = attr_or_text(item, "OfferItemID")
            if not item_id or item_id in items:
                continue
            price_el = child(item, "UnitPrice", "Price")
            if price_el is None:
                price_el = find_first(item, "UnitPrice", "Price")
            pax_refs = texts(find_first(item, "Eligibility"), "PaxRefID") or texts(item, "PaxRefID")
            pax_types: list[str] = []
            for ref in pax_refs:
                pax_type = pax_type_from_ref(ref)
                if pax_type and pax_type not in pax_types:
                    pax_types.append(pax_type)
            items[item_id] = SeatOfferItem(
                offer_item_id=item_id,
                price=parse_amount(price_el) or Amount(),
                pax_ref_ids=pax_refs,
                pax_types=pax_types,
            )
    return items


# ---------------------------------------------------------------------------
# Phase two: seat maps
# ---------------------------------------------------------------------------


def _parse_seat(el: etree._Element, row_number: str, offer_items: dict[str, SeatOfferItem]) -> Seat:
    by_pax_type: dict[str, str] = {}
    price = None
    for ref in texts(el, "OfferItemRefID"):
        item = offer_items.get(ref)
        if item is None:
            continue
        if price is None:
            price = item.price
        for pax_type in item.pax_types or ["ADT"]:
            by_pax_type.setdefault(pax_type, ref)
    return Seat(
        row_number=row_number,
        column_id=attr_or_text(el, "ColumnID", "Column") or "",
        occupation_status=normalize_occupation(find_text(el, "OccupationStatusCode", "OccupationStatus")),
        characteristics=[characteristic_name(c) for c in texts(el, "SeatCharacteristicCode")],
        offer_item_ids_by_pax_type=by_pax_type,
        price=price,
    )


def _parse_rows(cabin_el: etree._Element, offer_items: dict[str, SeatOfferItem]) -> list[SeatRow]:
    rows = []
    for row_el in find_all(cabin_el, "SeatRow") or find_all(cabin_el, "Row"):
        row_number = child_text(row_el, "RowNumber", "Number") or row_el.get("Number") or ""
        seats = [_parse_seat(s, row_number, offer_items) for s in find_all(row_el, "Seat")]
        rows.append(SeatRow(row_number=row_number, seats=seats))
    return rows


def _parse_cabin(cabin_el: etree._Element, offer_items: dict[str, SeatOfferItem]) -> CabinCompartment:
    return CabinCompartment(
        cabin_type_code=find_text(cabin_el, "CabinTypeCode", default="M"),
        first_row=find_text(cabin_el, "FirstRowNumber", "FirstRow", default="1"),
        last_row=find_text(cabin_el, "LastRowNumber", "LastRow", default="30"),
        column_layout=find_text(cabin_el, "SeatColumnLayout", "ColumnLayout", default="ABC DEF"),
        rows=_parse_rows(cabin_el, offer_items),
    )


def _parse_seat_maps(root: etree._Element, offer_items: dict[str, SeatOfferItem]) -> list[SeatMap]:
    maps = []
    for map_el in find_all(root, "SeatMap"):
        segment_ref = child_text(map_el, "PaxSegmentRefID") or map_el.get("SegmentRef") or ""
        cabin_els = find_all(map_el, "CabinCompartment") or find_all(map_el, "Cabin")
        if cabin_els:
            cabins = [_parse_cabin(c, offer_items) for c in cabin_els]
        else:
            cabins = [CabinCompartment(rows=_parse_rows(map_el, offer_items))]
        maps.append(SeatMap(segment_ref_id=segment_ref, cabins=cabins))
    return maps


def parse_seat_availability(xml: Union[str, bytes]) -> SeatAvailabilityResult:
    """Parse an IATA_SeatAvailabilityRS.

    Raises:
        ParseError: the text is not XML or not a SeatAvailability response.
    """
    root = parse_document(xml, ROOT_TAGS)
    offer_items = _parse_offer_items(root)
    seat_maps = _parse_seat_maps(root, offer_items)

    offer_el = find_first(root, "ALaCarteOffer")
    success, errors, warnings = outcome(root, bool(seat_maps or offer_items), "SeatAvailability")
    logger.debug(
        "SeatAvailability: %d seat maps, %d seat products",
        len(seat_maps),
        len(offer_items),
    )
    return SeatAvailabilityResult(
        success=success,
        errors=errors,
        warnings=warnings,
        response_id=find_text(root, "ShoppingResponseID", "ResponseID"),
        a_la_carte_offer_id=attr_or_text(offer_el, "OfferID") if offer_el is not None else None,
        owner_code=find_text(offer_el, "OwnerCode") if offer_el is not None else None,
        offer_items=offer_items,
        seat_maps=seat_maps,
    )
