"""Order response parser (OrderCreate / OrderRetrieve replies).

The airline can return an Order alongside Error elements, for example when
payment is still pending. An Order element in the response means the
order exists; errors reported with it are surfaced as warnings.
"""

import logging
from typing import Optional, Union

from lxml import etree

from ndc.config import SERVICE_DATA
from ndc.models import NDCErrorItem, OrderStatus, ServiceCategory
from ndc.parsers.base import outcome
from ndc.parsers.generic import booking_references, order_owner
from ndc.parsers.models import (
    OrderItem,
    OrderPassenger,
    OrderResult,
    OrderServiceItem,
    ParsedOrder,
    PaymentInfo,
    SeatAssignment,
    ServiceDefinition,
)
from ndc.parsers.service_list import parse_journeys, parse_segments, parse_service_definitions
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
)

logger = logging.getLogger(__name__)

ROOT_TAGS = ("IATA_OrderViewRS", "IATA_OrderCreateRS", "IATA_OrderRetrieveRS")

_STATUS_MAP: dict[str, str] = SERVICE_DATA.get("order_status", {})


def normalize_order_status(raw: Optional[str]) -> OrderStatus:
    """Map airline status codes onto the order lifecycle; unknown means confirmed."""
    return OrderStatus(_STATUS_MAP.get((raw or "").strip().upper(), OrderStatus.CONFIRMED.value))


def _parse_passengers(root: etree._Element) -> list[OrderPassenger]:
    passengers = []
    for el in find_all(root, "Pax"):
        pax_id = child_text(el, "PaxID") or el.get("PaxID")
        if not pax_id:
            continue
        individual = find_first(el, "Individual")
        passengers.append(
            OrderPassenger(
                pax_id=pax_id,
                ptc=child_text(el, "PTC", "PassengerTypeCode") or "ADT",
                given_name=find_text(individual, "GivenName"),
                surname=find_text(individual, "Surname"),
                birthdate=find_text(individual, "Birthdate") or find_text(el, "Birthdate"),
            )
        )
    return passengers


def _parse_payments(root: etree._Element) -> list[PaymentInfo]:
    payments = []
    for el in find_all(root, "PaymentProcessingSummary") or find_all(root, "PaymentInfo"):
        amount_el = child(el, "Amount")
        if amount_el is None:
            amount_el = find_first(el, "Amount")
        surcharge_el = find_first(el, "PaymentSurcharge", "Surcharge")
        surcharge = None
        if surcharge_el is not None:
            surcharge_value = find_first(surcharge_el, "PreciseAmount", "Amount")
            surcharge = parse_amount(surcharge_value if surcharge_value is not None else surcharge_el)
        card = find_first(el, "PaymentCard")
        payments.append(
            PaymentInfo(
                payment_id=child_text(el, "PaymentID", "PaymentRefID"),
                status=child_text(el, "PaymentStatusCode", "StatusCode"),
                amount=parse_amount(amount_el),
                surcharge=surcharge,
                method_type=child_text(el, "TypeCode", "PaymentTypeCode") or find_text(el, "PaymentTypeCode"),
                card_brand=find_text(card, "CardBrandCode"),
                masked_card_number=find_text(card, "MaskedCardID", "CardNumber"),
            )
        )
    return payments


def _parse_service(
    order_item_id: str,
    service_el: etree._Element,
    definitions: dict[str, ServiceDefinition],
) -> OrderServiceItem:
    definition_ref = find_text(service_el, "ServiceDefinitionRefID")
    definition = definitions.get(definition_ref) if definition_ref else None

    seat = None
    assignment = find_first(service_el, "SeatAssignment")
    if assignment is not None:
        row = find_text(assignment, "RowNumber", "SeatRowNumber")
        column = find_text(assignment, "ColumnID")
        if row and column:
            seat = SeatAssignment(
                row=row,
                column=column,
                segment_ref_id=find_text(assignment, "DatedOperatingLegRefID", "PaxSegmentRefID")
                or find_text(service_el, "PaxSegmentRefID"),
            )

    if seat is not None:
        category = ServiceCategory.SEAT
    elif definition is not None:
        category = definition.category
    else:
        category = ServiceCategory.OTHER
    return OrderServiceItem(
        order_item_id=order_item_id,
        service_id=child_text(service_el, "ServiceID"),
        service_definition_ref_id=definition_ref,
        service_code=definition.service_code if definition else "",
        service_name=definition.name if definition else "",
        category=category,
        pax_ref_ids=texts(service_el, "PaxRefID"),
        segment_ref_ids=texts(service_el, "PaxSegmentRefID"),
        journey_ref_ids=texts(service_el, "PaxJourneyRefID"),
        seat=seat,
    )


def _parse_order(order_el: etree._Element, root: etree._Element) -> ParsedOrder:
    order_id_el = child(order_el, "OrderID")
    if order_id_el is None:
        order_id_el = find_first(order_el, "OrderID")
    definitions = {s.service_id: s for s in parse_service_definitions(root)}

    order_items: list[OrderItem] = []
    service_items: list[OrderServiceItem] = []
    for item_el in find_all(order_el, "OrderItem"):
        item_id = attr_or_text(item_el, "OrderItemID")
        if not item_id:
            continue
        price_el = child(item_el, "Price", "TotalPrice")
        services = children(item_el, "Service") or find_all(item_el, "Service")
        order_items.append(
            OrderItem(
                order_item_id=item_id,
                status_code=child_text(item_el, "StatusCode"),
                total_amount=parse_amount(price_el),
                pax_ref_ids=texts(item_el, "PaxRefID"),
                service_ids=[s for s in (child_text(el, "ServiceID") for el in services) if s],
            )
        )
        service_items.extend(_parse_service(item_id, el, definitions) for el in services)

    payments = _parse_payments(root)
    raw_status = child_text(order_el, "StatusCode", "OrderStatus") or find_text(order_el, "OrderStatusCode")
    status = normalize_order_status(raw_status)
    if status == OrderStatus.OPENED and any(p.succeeded for p in payments):
        status = OrderStatus.CONFIRMED

    total_el = child(order_el, "TotalPrice")
    if total_el is None:
        total_el = find_first(order_el, "TotalPrice")
    return ParsedOrder(
        order_id=text_of(order_id_el) or "",
        owner_code=order_owner(order_id_el) or child_text(order_el, "OwnerCode") or "JQ",
        status=status,
        raw_status=raw_status,
        creation_datetime=find_text(order_el, "CreationDateTime"),
        payment_time_limit=find_text(order_el, "PaymentTimeLimitDateTime"),
        total_price=parse_amount(total_el),
        booking_references=booking_references(root),
        order_items=order_items,
        passengers=_parse_passengers(root),
        journeys=parse_journeys(root),
        segments=parse_segments(root),
        service_items=service_items,
        payments=payments,
    )


def parse_order(xml: Union[str, bytes]) -> OrderResult:
    """Parse an order view (OrderCreate or OrderRetrieve response).

    Raises:
        ParseError: the text is not XML or not an order response.
    """
    root = parse_document(xml, ROOT_TAGS)
    order_el = find_first(root, "Order")
    order = _parse_order(order_el, root) if order_el is not None else None

    success, errors, warnings = outcome(root, order is not None, "Order")
    if order is None and not errors:
        errors = [NDCErrorItem(code="NO_ORDER", message="Response contains no Order")]
        success = False
        logger.warning("Order response contains neither an Order nor errors")
    if order is not None:
        logger.debug(
            "Order %s: status %s, %d items, %d passengers",
            order.order_id,
            order.status.value,
            len(order.order_items),
            len(order.passengers),
        )
    return OrderResult(
        success=success,
        errors=errors,
        warnings=warnings,
        response_id=find_text(root, "ResponseID"),
        order=order,
    )
