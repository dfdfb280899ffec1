"""ServiceList request: ancillary catalogue for shopped offers."""

import logging

from ndc.builders.base import new_message
from ndc.builders.models import ServiceListRequest
from ndc.models import PartyConfig
from ndc.xmlutil import common_block, sub, to_xml

logger = logging.getLogger(__name__)


def build_service_list(request: ServiceListRequest, party: PartyConfig) -> str:
    """Build an IATA_ServiceListRQ.

    One Offer per offer reference, each OfferItem pointing at its service.
    Passenger and flight associations are left to the airline, which
    rejects them on this message.
    """
    root, req_el = new_message("IATA_ServiceListRQ", party)
    core = common_block(req_el, "ServiceListCoreRequest")
    offer_request = sub(core, "OfferRequest")

    item_count = 0
    for offer in request.offers:
        offer_el = sub(offer_request, "Offer")
        sub(offer_el, "OfferID", offer.offer_id)
        for item in offer.offer_items:
            item_el = sub(offer_el, "OfferItem")
            sub(item_el, "OfferItemID", item.offer_item_id)
            service = sub(item_el, "Service")
            sub(service, "ServiceID", item.service_id or item.offer_item_id)
            item_count += 1
        sub(offer_el, "OwnerCode", offer.owner_code or party.owner_code)

    logger.debug("ServiceList request: %d offers, %d items", len(request.offers), item_count)
    return to_xml(root, [f"ServiceList request: {len(request.offers)} offer(s), {item_count} item(s)"])
