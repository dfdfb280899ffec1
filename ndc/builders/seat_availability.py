"""SeatAvailability request."""

import logging

from ndc.builders.base import new_message
from ndc.builders.models import SeatAvailabilityRequest
from ndc.identifiers import normalize_segment_id
from ndc.models import PartyConfig
from ndc.xmlutil import common_block, sub, to_xml

logger = logging.getLogger(__name__)


def build_seat_availability(request: SeatAvailabilityRequest, party: PartyConfig) -> str:
    """Build an IATA_SeatAvailabilityRQ.

    With ``offers`` each previously obtained offer becomes its own Offer
    block. The single-offer form sends one Offer whose every OfferItem
    carries all requested segment references.
    """
    root, req_el = new_message("IATA_SeatAvailabilityRQ", party)
    core = common_block(req_el, "SeatAvailCoreRequest")
    offer_request = sub(core, "OfferRequest")

    if request.offers:
        for offer in request.offers:
            offer_el = sub(offer_request, "Offer")
            sub(offer_el, "OfferID", offer.offer_id)
            sub(offer_el, "OwnerCode", offer.owner_code or party.owner_code)
            for item_id in offer.offer_item_ids:
                sub(sub(offer_el, "OfferItem"), "OfferItemID", item_id)
        summary = f"SeatAvailability request: {len(request.offers)} offer(s)"
    else:
        segment_refs = [normalize_segment_id(s).clean for s in request.segment_ref_ids]
        offer_el = sub(offer_request, "Offer")
        sub(offer_el, "OfferID", request.offer_id)
        sub(offer_el, "OwnerCode", request.owner_code or party.owner_code)
        for item_id in request.offer_item_ids:
            item_el = sub(offer_el, "OfferItem")
            sub(item_el, "OfferItemID", item_id)
            for ref in segment_refs:
                sub(item_el, "PaxSegmentRefID", ref)
        summary = f"SeatAvailability request: 1 offer, {len(segment_refs)} segment(s)"

    logger.debug("%s", summary)
    return to_xml(root, [summary])
