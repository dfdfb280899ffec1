"""ServiceList response parser.

Reads the service catalogue and the à-la-carte offer items priced against
it. Bundles come back as one offer item per passenger type; they are
folded into a single ancillary per bundle code and journey.
"""

import logging
from typing import Optional, Union

from lxml import etree

from ndc.identifiers import normalize_segment_id
from ndc.models import Amount, AssociationType, ServiceCategory
from ndc.parsers.base import outcome
from ndc.parsers.classify import classify_service
from ndc.parsers.models import (
    AncillaryOffer,
    ListedJourney,
    ListedSegment,
    ServiceDefinition,
    ServiceListResult,
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

ROOT_TAGS = ("IATA_ServiceListRS",)

# Checked in this order; the first block present decides the association.
_ASSOCIATIONS = (
    (AssociationType.JOURNEY, ("PaxJourneyRef", "PaxJourneyReferences"), "PaxJourneyRefID"),
    (AssociationType.SEGMENT, ("PaxSegmentReferences", "PaxSegmentRef"), "PaxSegmentRefID"),
    (AssociationType.LEG, ("DatedOperatingLegRef", "DatedOperatingLegReferences"), "DatedOperatingLegRefID"),
)


def parse_service_definitions(root: etree._Element) -> list[ServiceDefinition]:
    """Catalogue entries from ServiceDefinition elements, classified."""
    services = []
    for el in find_all(root, "ServiceDefinition"):
        service_id = attr_or_text(el, "ServiceDefinitionID")
        if not service_id:
            continue
        code = child_text(el, "ServiceCode") or find_text(el, "ServiceCode", default="")
        name = child_text(el, "Name") or ""
        rfic = find_text(el, "RFIC")
        bundle = find_first(el, "ServiceBundle")
        services.append(
            ServiceDefinition(
                service_id=service_id,
                service_code=code,
                name=name,
                description=find_text(el, "DescText", "Description"),
                rfic=rfic,
                rfisc=find_text(el, "RFISC"),
                category=classify_service(code, name, rfic),
                included_service_ids=texts(bundle, "ServiceDefinitionRefID"),
            )
        )
    return services


def _flight_association(item: etree._Element) -> tuple[AssociationType, dict[AssociationType, list[str]]]:
    refs: dict[AssociationType, list[str]] = {}
    for assoc_type, block_tags, ref_tag in _ASSOCIATIONS:
        block = find_first(item, *block_tags)
        if block is not None:
            refs[assoc_type] = texts(block, ref_tag)
            return assoc_type, refs
    # Bare references without a wrapping block
    for assoc_type, _, ref_tag in _ASSOCIATIONS:
        found = texts(item, ref_tag)
        if found:
            refs[assoc_type] = found
            return assoc_type, refs
    return AssociationType.UNKNOWN, refs


def _parse_offer_items(
    offer_el: etree._Element,
    definitions: dict[str, ServiceDefinition],
) -> list[AncillaryOffer]:
    offer_id_el = find_first(offer_el, "OfferID")
    offer_id = attr_or_text(offer_el, "OfferID") or ""
    owner = offer_id_el.get("Owner") if offer_id_el is not None else None
    owner = owner or child_text(offer_el, "OwnerCode") or "JQ"

    items = find_all(offer_el, "ALaCarteOfferItem") or find_all(offer_el, "OfferItem")
    offers = []
    for item in items:
        item_id = attr_or_text(item, "OfferItemID")
        if not item_id:
            continue
        service_el = find_first(item, "Service")
        definition_ref = find_text(service_el, "ServiceDefinitionRefID") or find_text(item, "ServiceDefinitionRefID")
        definition: Optional[ServiceDefinition] = definitions.get(definition_ref) if definition_ref else None
        price_el = child(item, "UnitPrice", "Price")
        if price_el is None:
            price_el = find_first(item, "UnitPrice", "Price")
        price = parse_amount(price_el)
        eligibility = find_first(item, "Eligibility")
        scope = eligibility if eligibility is not None else item
        assoc_type, refs = _flight_association(scope)
        offers.append(
            AncillaryOffer(
                offer_id=offer_id,
                offer_item_id=item_id,
                owner_code=owner,
                service_id=find_text(service_el, "ServiceID"),
                service_code=definition.service_code if definition else "",
                service_name=definition.name if definition else "",
                category=definition.category if definition else ServiceCategory.OTHER,
                price=price if price is not None else Amount(),
                pax_ref_ids=texts(scope, "PaxRefID"),
                association_type=assoc_type,
                segment_ref_ids=refs.get(AssociationType.SEGMENT, []),
                journey_ref_ids=refs.get(AssociationType.JOURNEY, []),
                leg_ref_ids=refs.get(AssociationType.LEG, []),
                included_service_ids=definition.included_service_ids if definition else [],
            )
        )
    return offers


def group_bundles(offers: list[AncillaryOffer]) -> list[AncillaryOffer]:
    """Fold bundle items that share a code and journey set into one.

    The first item keeps its offer item id and price; passenger references
    from the rest are merged in. Non-bundle items pass through. Output
    follows the order in which each group first appears.
    """
    grouped: list[AncillaryOffer] = []
    by_key: dict[tuple, AncillaryOffer] = {}
    for offer in offers:
        if not offer.is_bundle:
            grouped.append(offer)
            continue
        key = (offer.offer_id, offer.service_code, tuple(sorted(offer.journey_ref_ids)))
        existing = by_key.get(key)
        if existing is None:
            first = offer.model_copy(deep=True)
            by_key[key] = first
            grouped.append(first)
            continue
        for pax_ref in offer.pax_ref_ids:
            if pax_ref not in existing.pax_ref_ids:
                existing.pax_ref_ids.append(pax_ref)
    return grouped


def _marketing_segments(root: etree._Element) -> dict[str, ListedSegment]:
    segments: dict[str, ListedSegment] = {}
    for el in find_all(root, "DatedMarketingSegment"):
        mkt_id = attr_or_text(el, "DatedMarketingSegmentId")
        if not mkt_id:
            continue
        dep = find_first(el, "Dep")
        arr = find_first(el, "Arrival")
        segments[mkt_id] = ListedSegment(
            segment_id=normalize_segment_id(mkt_id).clean,
            origin=find_text(dep, "IATA_LocationCode"),
            destination=find_text(arr, "IATA_LocationCode"),
            departure=find_text(dep, "AircraftScheduledDateTime"),
            arrival=find_text(arr, "AircraftScheduledDateTime"),
            carrier=find_text(el, "CarrierDesigCode"),
            flight_number=find_text(el, "MarketingCarrierFlightNumberText"),
            marketing_segment_id=mkt_id,
        )
    return segments


def parse_segments(root: etree._Element) -> list[ListedSegment]:
    """Flight segments from PaxSegment, completed from DatedMarketingSegment."""
    marketing = _marketing_segments(root)
    segments = []
    for el in find_all(root, "PaxSegment"):
        segment_id = attr_or_text(el, "PaxSegmentID")
        if not segment_id:
            continue
        dep = find_first(el, "Dep", "Departure")
        arr = find_first(el, "Arrival", "Arr")
        carrier = find_first(el, "MarketingCarrierInfo", "MarketingCarrier")
        mkt_id = find_text(el, "DatedMarketingSegmentRefId")
        mkt = marketing.get(mkt_id) if mkt_id else None
        segments.append(
            ListedSegment(
                segment_id=segment_id,
                origin=find_text(dep, "IATA_LocationCode", "AirportCode") or (mkt.origin if mkt else None),
                destination=find_text(arr, "IATA_LocationCode", "AirportCode") or (mkt.destination if mkt else None),
                departure=find_text(dep, "AircraftScheduledDateTime", "Date") or (mkt.departure if mkt else None),
                arrival=find_text(arr, "AircraftScheduledDateTime", "Date") or (mkt.arrival if mkt else None),
                carrier=find_text(carrier, "CarrierDesigCode", "AirlineID") or (mkt.carrier if mkt else None),
                flight_number=(
                    find_text(carrier, "MarketingCarrierFlightNumberText", "FlightNumber")
                    or (mkt.flight_number if mkt else None)
                ),
                marketing_segment_id=mkt_id,
            )
        )
    return segments or list(marketing.values())


def parse_journeys(root: etree._Element) -> list[ListedJourney]:
    journeys = []
    for el in find_all(root, "PaxJourney"):
        journey_id = attr_or_text(el, "PaxJourneyID")
        if journey_id:
            journeys.append(ListedJourney(journey_id=journey_id, segment_ref_ids=texts(el, "PaxSegmentRefID")))
    return journeys


def parse_service_list(xml: Union[str, bytes]) -> ServiceListResult:
    """Parse an IATA_ServiceListRS.

    Raises:
        ParseError: the text is not XML or not a ServiceList response.
    """
    root = parse_document(xml, ROOT_TAGS)
    services = parse_service_definitions(root)
    definitions = {s.service_id: s for s in services}

    offers: list[AncillaryOffer] = []
    for offer_el in find_all(root, "ALaCarteOffer"):
        offers.extend(group_bundles(_parse_offer_items(offer_el, definitions)))

    success, errors, warnings = outcome(root, bool(services or offers), "ServiceList")
    logger.debug("ServiceList: %d services, %d ancillary offers", len(services), len(offers))
    return ServiceListResult(
        success=success,
        errors=errors,
        warnings=warnings,
        response_id=find_text(root, "ShoppingResponseID", "ResponseID"),
        services=services,
        ancillary_offers=offers,
        segments=parse_segments(root),
        journeys=parse_journeys(root),
    )
