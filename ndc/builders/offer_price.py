"""OfferPrice request for selected offers.

Flight items are referenced by id only. À-la-carte items repeat their
flight association: journey- and leg-scoped items go out once, while
segment-scoped items are split into one SelectedOfferItem per segment.
"""

import logging

from lxml import etree

from ndc.builders.base import new_message
from ndc.builders.models import OfferPriceRequest, PriceOfferItem
from ndc.identifiers import normalize_segment_id
from ndc.models import AssociationType, PartyConfig
from ndc.xmlutil import common_block, sub, to_xml

logger = logging.getLogger(__name__)


def _association(item: PriceOfferItem) -> AssociationType:
    if item.association_type != AssociationType.UNKNOWN:
        return item.association_type
    if item.journey_ref_ids:
        return AssociationType.JOURNEY
    if item.segment_ref_ids:
        return AssociationType.SEGMENT
    if item.leg_ref_ids:
        return AssociationType.LEG
    return AssociationType.UNKNOWN


def _selected_item(
    parent: etree._Element,
    item: PriceOfferItem,
    pax_ids: list[str],
    association: AssociationType,
    refs: list[str],
) -> None:
    el = sub(parent, "SelectedOfferItem")
    sub(el, "OfferItemRefID", item.offer_item_id)
    for pax_id in pax_ids:
        sub(el, "PaxRefID", pax_id)
    if item.a_la_carte:
        alc = sub(el, "SelectedALaCarteOfferItem")
        assoc = sub(alc, "OfferFlightAssociations")
        if association == AssociationType.JOURNEY:
            ref_el = sub(assoc, "PaxJourneyRef")
            for ref in refs:
                sub(ref_el, "PaxJourneyRefID", ref)
        elif association == AssociationType.SEGMENT:
            ref_el = sub(assoc, "PaxSegmentReferences")
            for ref in refs:
                sub(ref_el, "PaxSegmentRefID", ref)
        elif association == AssociationType.LEG:
            ref_el = sub(assoc, "DatedOperatingLegRef")
            for ref in refs:
                sub(ref_el, "DatedOperatingLegRefID", ref)
        sub(alc, "Qty", 1)
    if item.seat_row and item.seat_column:
        seat = sub(el, "SelectedSeat")
        sub(seat, "ColumnID", item.seat_column)
        sub(seat, "SeatRowNumber", item.seat_row)


def build_offer_price(request: OfferPriceRequest, party: PartyConfig) -> str:
    """Build an IATA_OfferPriceRQ for offers returned by earlier calls.

    Items without passenger references fall back to the offer's list, then
    to positional ids derived from ``passenger_counts``.
    """
    fallback_pax = request.passenger_counts.pax_ids() if request.passenger_counts else []

    root, req_el = new_message("IATA_OfferPriceRQ", party)
    priced = common_block(req_el, "PricedOffer")
    selected_list = sub(priced, "SelectedOfferList")

    emitted = 0
    for offer in request.offers:
        offer_el = sub(selected_list, "SelectedOffer")
        sub(offer_el, "OfferRefID", offer.offer_id)
        sub(offer_el, "OwnerCode", offer.owner_code or party.owner_code)
        for item in offer.offer_items:
            pax_ids = item.pax_ref_ids or offer.pax_ref_ids or fallback_pax
            association = _association(item)
            if item.a_la_carte and association == AssociationType.SEGMENT:
                for ref in item.segment_ref_ids:
                    _selected_item(offer_el, item, pax_ids, association, [normalize_segment_id(ref).clean])
                    emitted += 1
                continue
            if association == AssociationType.JOURNEY:
                refs = item.journey_ref_ids
            elif association == AssociationType.LEG:
                refs = item.leg_ref_ids
            else:
                refs = [normalize_segment_id(r).clean for r in item.segment_ref_ids]
            _selected_item(offer_el, item, pax_ids, association, refs)
            emitted += 1

    if request.card_brand:
        payment = common_block(req_el, "PaymentFunctions")
        criteria = sub(payment, "PaymentMethodCriteria")
        sub(criteria, "PaymentTypeCode", "CC")
        sub(criteria, "PaymentBrandCode", request.card_brand)
    if request.currency:
        params = common_block(req_el, "ResponseParameters")
        sub(sub(params, "CurParameter"), "CurCode", request.currency)

    logger.debug("OfferPrice request: %d offers, %d selected items", len(request.offers), emitted)
    return to_xml(root, [f"OfferPrice request: {len(request.offers)} offer(s), {emitted} item(s)"])
