"""Long-sell OfferPrice request.

A long sell prices flights the airline has not offered in this session:
the whole itinerary travels in the request's DataLists, and priced
items refer to it through OriginDest, PaxJourney, and PaxSegment ids.
"""

import logging
from typing import Optional

from lxml import etree

from ndc.builders.base import check_pax_refs, new_message
from ndc.builders.models import LongSellBundle, LongSellRequest, LongSellSeat, LongSellSSR
from ndc.errors import BuildError, UnresolvedReferenceError
from ndc.identifiers import IdentitySource, resolve_identity
from ndc.models import Journey, Passenger, PartyConfig, PaxType, Segment, ServiceCategory
from ndc.xmlutil import common_block, sub, to_xml

logger = logging.getLogger(__name__)

LONG_SELL_VERSION = "8.000"


def _origin_dest_id(journey_index: int) -> str:
    return f"OriginDestID{journey_index + 1}"


def _segment_index(index: int, count: int, what: str) -> int:
    if index >= count:
        raise UnresolvedReferenceError(f"{what}: segment index {index} is out of range ({count} segments)")
    return index


def _render_data_lists(parent: etree._Element, req: LongSellRequest, identity: IdentitySource, cabin: str) -> None:
    data_lists = common_block(parent, "DataLists")

    mkt_list = sub(data_lists, "DatedMarketingSegmentList")
    for index, segment in enumerate(req.segments):
        ids = identity.segment(index)
        mkt = sub(mkt_list, "DatedMarketingSegment")
        arrival = sub(mkt, "Arrival")
        if segment.arrival is not None:
            sub(arrival, "AircraftScheduledDateTime", segment.arrival)
        sub(arrival, "IATA_LocationCode", segment.destination)
        sub(mkt, "DatedMarketingSegmentId", ids.marketing)
        sub(mkt, "DatedOperatingSegmentRefId", ids.operating)
        dep = sub(mkt, "Dep")
        sub(dep, "AircraftScheduledDateTime", segment.departure)
        sub(dep, "IATA_LocationCode", segment.origin)
        sub(mkt, "CarrierDesigCode", segment.marketing_carrier)
        sub(mkt, "MarketingCarrierFlightNumberText", segment.flight_number)

    od_list = sub(data_lists, "OriginDestList")
    for j, journey in enumerate(req.journeys):
        od = sub(od_list, "OriginDest")
        sub(od, "OriginDestID", _origin_dest_id(j))
        sub(od, "PaxJourneyRefID", identity.journey_ids[j])
        sub(od, "OriginCode", journey.origin)
        sub(od, "DestCode", journey.destination)

    journey_list = sub(data_lists, "PaxJourneyList")
    for j, journey in enumerate(req.journeys):
        pj = sub(journey_list, "PaxJourney")
        sub(pj, "PaxJourneyID", identity.journey_ids[j])
        for seg_ref in journey.segment_ids:
            index = identity.index_of(seg_ref)
            if index is None:
                raise UnresolvedReferenceError(f"journey {j + 1}: segment {seg_ref} is not in the request")
            sub(pj, "PaxSegmentRefID", identity.segment(index).clean)

    pax_list = sub(data_lists, "PaxList")
    for pax in req.passengers:
        el = sub(pax_list, "Pax")
        sub(el, "PaxID", pax.pax_id)
        sub(el, "PTC", pax.ptc)

    seg_list = sub(data_lists, "ShoppingRequestPaxSegmentList")
    for index, segment in enumerate(req.segments):
        ids = identity.segment(index)
        ps = sub(seg_list, "PaxSegment")
        choice = sub(ps, "CabinTypeAssociationChoice")
        cabin_el = sub(choice, "SegmentCabinType")
        sub(cabin_el, "CabinTypeCode", segment.cabin_code or cabin)
        sub(ps, "DatedMarketingSegmentRefId", ids.marketing)
        sub(ps, "PaxSegmentID", ids.clean)


def _render_items(
    parent: etree._Element,
    req: LongSellRequest,
    identity: IdentitySource,
    owner_code: str,
) -> int:
    priced = common_block(parent, "PricedOffer")
    items = sub(priced, "AcceptOrderItemList")
    count = 0

    for j in range(len(req.journeys)):
        item = sub(items, "CreateOrderItem")
        flight = sub(sub(item, "OfferItemType"), "FlightItem")
        sub(flight, "OriginDestRefID", _origin_dest_id(j))
        sub(item, "OwnerCode", owner_code)
        count += 1

    infants = {p.pax_id for p in req.passengers if p.ptc == PaxType.INF}
    for bundle in req.bundles:
        if bundle.journey_index >= len(req.journeys):
            raise UnresolvedReferenceError(
                f"bundle {bundle.bundle_code}: journey index {bundle.journey_index} is out of range"
            )
        pax_ids = [p for p in bundle.pax_ids if p not in infants]
        if not pax_ids:
            continue
        item = sub(items, "CreateOrderItem")
        other = sub(sub(item, "OfferItemType"), "OtherItem")
        sub(other, "OtherSvcCode", bundle.bundle_code)
        for pax_id in pax_ids:
            sub(item, "PaxRefID", pax_id)
        sub(item, "OwnerCode", owner_code)
        count += 1

    for ssr in req.ssrs:
        _segment_index(ssr.segment_index, len(req.segments), f"SSR {ssr.ssr_code}")
        item = sub(items, "CreateOrderItem")
        other = sub(sub(item, "OfferItemType"), "OtherItem")
        sub(other, "OtherSvcCode", ssr.ssr_code)
        sub(item, "PaxRefID", ssr.pax_id)
        sub(item, "OwnerCode", owner_code)
        count += 1

    for seat in req.seats:
        index = _segment_index(seat.segment_index, len(req.segments), f"seat {seat.row}{seat.column}")
        item = sub(items, "CreateOrderItem")
        seat_el = sub(sub(item, "OfferItemType"), "SeatItem")
        sub(seat_el, "DatedOperatingLegRefID", identity.segment(index).leg)
        sub(seat_el, "SeatRowNumber", seat.row)
        sub(seat_el, "ColumnID", seat.column)
        sub(item, "PaxRefID", seat.pax_id)
        sub(item, "OwnerCode", owner_code)
        count += 1
    return count


def build_long_sell(request: LongSellRequest, party: PartyConfig) -> str:
    """Build an IATA_OfferPriceRQ that long-sells the request's itinerary.

    Segment and journey ids are kept when they come from a prior order and
    synthesized positionally otherwise.

    Raises:
        DistributionChainError: the party has no usable chain.
        UnresolvedReferenceError: a bundle, SSR, or seat points at an
            undeclared passenger, segment, or journey.
    """
    declared = [p.pax_id for p in request.passengers]
    check_pax_refs([p for b in request.bundles for p in b.pax_ids], declared, "bundle")
    check_pax_refs([s.pax_id for s in request.ssrs], declared, "SSR")
    check_pax_refs([s.pax_id for s in request.seats], declared, "seat")

    identity = resolve_identity(
        [s.segment_id for s in request.segments],
        [j.journey_id for j in request.journeys],
    )
    logger.debug(
        "Long sell: %d segments, %d journeys, ids from %s",
        len(request.segments),
        len(request.journeys),
        identity.mode.value,
    )

    root, req_el = new_message("IATA_OfferPriceRQ", party, Version=LONG_SELL_VERSION)
    _render_data_lists(req_el, request, identity, party.cabin_type_code)
    item_count = _render_items(req_el, request, identity, party.owner_code)

    payment = common_block(req_el, "PaymentFunctions")
    criteria = sub(payment, "PaymentMethodCriteria")
    sub(criteria, "PaymentTypeCode", "CC")
    sub(criteria, "PaymentBrandCode", request.card_brand)

    params = common_block(req_el, "ResponseParameters")
    sub(sub(params, "CurParameter"), "CurCode", request.currency or party.currency)

    header = [
        "Long sell OfferPrice request",
        f"Segments: {len(request.segments)}, journeys: {len(request.journeys)}, "
        f"passengers: {len(request.passengers)}, items: {item_count}",
        f"Identity: {identity.mode.value}",
    ]
    return to_xml(root, header)


# ---------------------------------------------------------------------------
# From a retrieved order
# ---------------------------------------------------------------------------


def _order_extras(order, identity: IdentitySource, journeys: list[Journey]):
    """Bundles, SSRs, and seats already held on the order."""
    journey_of_segment: dict[int, int] = {}
    for j, journey in enumerate(journeys):
        for sid in journey.segment_ids:
            index = identity.index_of(sid)
            if index is not None:
                journey_of_segment.setdefault(index, j)
    journey_index_by_id = {j.journey_id: n for n, j in enumerate(journeys) if j.journey_id}

    bundles: dict[tuple[str, int], list[str]] = {}
    ssrs: list[LongSellSSR] = []
    seats: list[LongSellSeat] = []
    for item in order.service_items:
        if item.seat is not None:
            index = identity.index_of(item.seat.segment_ref_id or "")
            for pax_id in item.pax_ref_ids[:1]:
                seats.append(
                    LongSellSeat(segment_index=index or 0, pax_id=pax_id, row=item.seat.row, column=item.seat.column)
                )
        elif item.category == ServiceCategory.BUNDLE and item.service_code:
            journey_index = next(
                (journey_index_by_id[r] for r in item.journey_ref_ids if r in journey_index_by_id),
                None,
            )
            if journey_index is None:
                seg_index = next((identity.index_of(r) for r in item.segment_ref_ids), None)
                journey_index = journey_of_segment.get(seg_index, 0)
            bucket = bundles.setdefault((item.service_code, journey_index), [])
            bucket.extend(p for p in item.pax_ref_ids if p not in bucket)
        elif item.category == ServiceCategory.SSR and item.service_code:
            for seg_ref in item.segment_ref_ids or [""]:
                index = identity.index_of(seg_ref) if seg_ref else 0
                for pax_id in item.pax_ref_ids:
                    ssrs.append(LongSellSSR(ssr_code=item.service_code, segment_index=index or 0, pax_id=pax_id))

    bundle_items = [
        LongSellBundle(bundle_code=code, journey_index=j, pax_ids=pax_ids)
        for (code, j), pax_ids in bundles.items()
        if pax_ids
    ]
    return bundle_items, ssrs, seats


def long_sell_request_from_order(order, card_brand: str = "VI", currency: Optional[str] = None) -> LongSellRequest:
    """Rebuild a long-sell request from a parsed order.

    Args:
        order: ``ParsedOrder`` from the order parser.
        card_brand: Card brand used for the payment surcharge quote.
        currency: Response currency; the order's currency when omitted.

    Raises:
        BuildError: the order lacks segments or passengers, or its data
            does not form a valid itinerary.
    """
    if not order.segments or not order.passengers:
        raise BuildError(f"Order {order.order_id or '?'} has no flight segments or passengers to long-sell")

    try:
        segments = [
            Segment(
                segment_id=s.segment_id,
                origin=s.origin,
                destination=s.destination,
                departure=s.departure,
                arrival=s.arrival,
                marketing_carrier=s.carrier or "JQ",
                flight_number=s.flight_number or "0",
            )
            for s in order.segments
        ]
        identity = resolve_identity([s.segment_id for s in segments], [])
        journeys = []
        for parsed in order.journeys:
            indexes = [identity.index_of(r) for r in parsed.segment_ref_ids]
            members = [segments[i] for i in indexes if i is not None]
            if members:
                journeys.append(Journey.from_segments(parsed.journey_id, members))
        if not journeys:
            journeys = [Journey.from_segments("", segments)]
        passengers = [Passenger(pax_id=p.pax_id, ptc=p.ptc) for p in order.passengers]
        bundles, ssrs, seats = _order_extras(order, identity, journeys)
        return LongSellRequest(
            segments=segments,
            journeys=journeys,
            passengers=passengers,
            card_brand=card_brand,
            currency=currency or (order.total_price.currency if order.total_price else None),
            bundles=bundles,
            ssrs=ssrs,
            seats=seats,
        )
    except ValueError as exc:
        raise BuildError(f"Order {order.order_id or '?'} cannot be long-sold: {exc}") from exc
