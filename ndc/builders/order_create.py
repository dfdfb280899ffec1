"""OrderCreate request.

Commits selected priced offer items for fully described passengers. The
airline also expects the flown segments back as passive DataLists: four
lists that stay index-aligned per segment (marketing, operating, journey,
pax segment).
"""

import logging

from lxml import etree

from ndc.builders.base import check_pax_refs, new_message
from ndc.builders.models import OrderCreateRequest, PassiveSegment, Payment
from ndc.config import IDENTITY_DOC_TYPES, PASSIVE_DEFAULTS
from ndc.identifiers import passive_segment_ids
from ndc.models import Contact, PartyConfig, Passenger, PaymentType
from ndc.xmlutil import common_block, sub, to_xml

logger = logging.getLogger(__name__)

CONTACT_INFO_ID = "CI1"


def _render_contact(data_lists: etree._Element, contact: Contact) -> None:
    info = sub(sub(data_lists, "ContactInfoList"), "ContactInfo")
    sub(info, "ContactInfoID", CONTACT_INFO_ID)
    sub(sub(info, "EmailAddress"), "EmailAddressText", contact.email)
    if contact.phone is not None:
        phone = sub(info, "Phone")
        if contact.phone.country_code:
            sub(phone, "CountryDialingCode", contact.phone.country_code)
        sub(phone, "PhoneNumber", contact.phone.number)
    if contact.address is not None:
        address = sub(info, "PostalAddress")
        if contact.address.street:
            sub(address, "StreetText", contact.address.street)
        if contact.address.city:
            sub(address, "CityName", contact.address.city)
        if contact.address.postal_code:
            sub(address, "PostalCode", contact.address.postal_code)
        if contact.address.country_code:
            sub(address, "CountryCode", contact.address.country_code)


def _render_pax(pax_list: etree._Element, pax: Passenger) -> None:
    el = sub(pax_list, "Pax")
    sub(el, "ContactInfoRefID", CONTACT_INFO_ID)
    gender = pax.gender or "U"

    doc_el = sub(el, "IdentityDoc")
    sub(doc_el, "Birthdate", pax.birthdate)
    doc = pax.identity_doc
    if doc is not None:
        if doc.nationality:
            sub(doc_el, "CitizenshipCountryCode", doc.nationality)
        if doc.expiry_date is not None:
            sub(doc_el, "ExpiryDate", doc.expiry_date)
        sub(doc_el, "GenderCode", gender)
        sub(doc_el, "GivenName", pax.given_name)
        sub(doc_el, "IdentityDocID", doc.number)
        sub(doc_el, "IdentityDocTypeCode", IDENTITY_DOC_TYPES.get(doc.doc_type, doc.doc_type))
        sub(doc_el, "IssuingCountryCode", doc.issuing_country)
        sub(doc_el, "Surname", pax.surname)
    else:
        sub(doc_el, "GenderCode", gender)
        sub(doc_el, "GivenName", pax.given_name)
        sub(doc_el, "Surname", pax.surname)

    individual = sub(el, "Individual")
    sub(individual, "Birthdate", pax.birthdate)
    sub(individual, "GenderCode", gender)
    sub(individual, "GivenName", pax.given_name)
    sub(individual, "Surname", pax.surname)

    if pax.loyalty is not None:
        account = sub(el, "LoyaltyProgramAccount")
        sub(account, "AccountNumber", pax.loyalty.account_number)
        carrier = sub(sub(account, "LoyaltyProgram"), "Carrier")
        sub(carrier, "AirlineDesigCode", pax.loyalty.program_owner)

    sub(el, "PaxID", pax.pax_id)
    if pax.accompanying_pax_id:
        sub(el, "PaxRefID", pax.accompanying_pax_id)
    sub(el, "PTC", pax.ptc)


def _render_passive_lists(data_lists: etree._Element, segments: list[PassiveSegment]) -> None:
    default_carrier = PASSIVE_DEFAULTS.get("carrier", "QF")
    ids = [passive_segment_ids(s.segment_id) for s in segments]

    mkt_list = sub(data_lists, "DatedMarketingSegmentList")
    for segment, seg_ids in zip(segments, ids):
        mkt = sub(mkt_list, "DatedMarketingSegment")
        arrival = sub(mkt, "Arrival")
        sub(arrival, "AircraftScheduledDateTime", segment.arrival)
        sub(arrival, "IATA_LocationCode", segment.destination)
        sub(mkt, "CarrierDesigCode", segment.marketing_carrier or default_carrier)
        sub(mkt, "DatedMarketingSegmentId", seg_ids.marketing)
        sub(mkt, "DatedOperatingSegmentRefId", seg_ids.operating)
        dep = sub(mkt, "Dep")
        sub(dep, "AircraftScheduledDateTime", segment.departure)
        sub(dep, "IATA_LocationCode", segment.origin)
        sub(mkt, "MarketingCarrierFlightNumberText", segment.flight_number)

    opr_list = sub(data_lists, "DatedOperatingSegmentList")
    for segment, seg_ids in zip(segments, ids):
        opr = sub(opr_list, "DatedOperatingSegment")
        sub(opr, "CarrierDesigCode", segment.operating_carrier or segment.marketing_carrier or default_carrier)
        sub(opr, "DatedOperatingSegmentId", seg_ids.operating)
        sub(opr, "OperatingCarrierFlightNumberText", segment.flight_number)
        sub(opr, "SegmentTypeCode", PASSIVE_DEFAULTS.get("segment_type_code", "2"))

    journeys: dict[str, list[str]] = {}
    for segment, seg_ids in zip(segments, ids):
        journey_id = segment.journey_id or PASSIVE_DEFAULTS.get("journey_id", "passive-journey-1")
        journeys.setdefault(journey_id, []).append(seg_ids.clean)
    journey_list = sub(data_lists, "PaxJourneyList")
    for journey_id, seg_refs in journeys.items():
        pj = sub(journey_list, "PaxJourney")
        sub(pj, "PaxJourneyID", journey_id)
        for ref in seg_refs:
            sub(pj, "PaxSegmentRefID", ref)

    seg_list = sub(data_lists, "PaxSegmentList")
    for segment, seg_ids in zip(segments, ids):
        ps = sub(seg_list, "PaxSegment")
        sub(ps, "DatedMarketingSegmentRefId", seg_ids.marketing)
        sub(ps, "MarketingCarrierRBD_Code", segment.rbd or PASSIVE_DEFAULTS.get("rbd", "O"))
        sub(ps, "PaxSegmentID", seg_ids.clean)


def _render_payment(req_el: etree._Element, payment: Payment) -> None:
    """Agency payments carry only the amount; card payments add the card.

    Other payment types are not sent at order creation.
    """
    if payment.type == PaymentType.CC and payment.card is not None:
        details = sub(common_block(req_el, "PaymentFunctions"), "PaymentProcessingDetails")
        sub(details, "Amount", payment.amount.value, CurCode=payment.amount.currency)
        card = sub(sub(details, "PaymentMethod"), "PaymentCard")
        sub(card, "CardBrandCode", payment.card.brand)
        sub(card, "CardNumber", payment.card.number)
        if payment.card.security_code:
            sub(card, "SeriesCode", payment.card.security_code)
        sub(card, "CardHolderName", payment.card.holder_name or "")
        sub(sub(card, "EffectiveExpireDate"), "Expiration", payment.card.expiry)
    elif payment.type == PaymentType.AGT:
        details = sub(common_block(req_el, "PaymentFunctions"), "PaymentProcessingDetails")
        sub(details, "Amount", payment.amount.value, CurCode=payment.amount.currency)
    else:
        logger.debug("OrderCreate: %s payment is settled after creation", payment.type.value)


def build_order_create(request: OrderCreateRequest, party: PartyConfig) -> str:
    """Build an IATA_OrderCreateRQ.

    Raises:
        DistributionChainError: the party has no usable chain.
        UnresolvedReferenceError: a selected item names an undeclared
            passenger.
    """
    declared = [p.pax_id for p in request.passengers]
    for offer in request.offers:
        for item in offer.offer_items:
            check_pax_refs(item.pax_ref_ids, declared, f"offer item {item.offer_item_id}")

    root, req_el = new_message("IATA_OrderCreateRQ", party)
    create = common_block(req_el, "CreateOrder")
    accepted = sub(create, "AcceptSelectedQuotedOfferList")
    for offer in request.offers:
        selected = sub(accepted, "SelectedPricedOffer")
        sub(selected, "OfferRefID", offer.offer_id)
        sub(selected, "OwnerCode", offer.owner_code or party.owner_code)
        for item in offer.offer_items:
            item_el = sub(selected, "SelectedOfferItem")
            sub(item_el, "OfferItemRefID", item.offer_item_id)
            for pax_ref in item.pax_ref_ids:
                sub(item_el, "PaxRefID", pax_ref)

    data_lists = common_block(req_el, "DataLists")
    _render_contact(data_lists, request.contact)
    pax_list = sub(data_lists, "PaxList")
    for pax in request.passengers:
        _render_pax(pax_list, pax)
    if request.passive_segments:
        _render_passive_lists(data_lists, request.passive_segments)

    if request.payment is not None:
        _render_payment(req_el, request.payment)

    logger.debug(
        "OrderCreate request: %d passengers, %d passive segments",
        len(request.passengers),
        len(request.passive_segments),
    )
    header = [
        "OrderCreate request",
        f"Passengers: {len(request.passengers)}, passive segments: {len(request.passive_segments)}",
    ]
    return to_xml(root, header)
