"""Fallback parser for any NDC response.

Pulls the identifiers every response family shares: response id, order
id with its owner, and booking references.
"""

import logging
from typing import Optional, Union

from lxml import etree

from ndc.parsers.base import outcome
from ndc.parsers.models import BookingReference, GenericResult
from ndc.xmlutil import child_text, find_all, find_first, find_text, local_name, parse_document, text_of

logger = logging.getLogger(__name__)


def order_owner(order_id_el: Optional[etree._Element]) -> Optional[str]:
    """Owner carried on the OrderID element, else its OwnerCode sibling."""
    if order_id_el is None:
        return None
    owner = order_id_el.get("Owner")
    if owner and owner.strip():
        return owner.strip()
    parent = order_id_el.getparent()
    return child_text(parent, "OwnerCode") if parent is not None else None


def booking_references(root: etree._Element) -> list[BookingReference]:
    """BookingRef elements, else a bare PNR element."""
    refs: list[BookingReference] = []
    ref_els = find_all(root, "BookingRef")
    if not ref_els:
        pnr = find_text(root, "PNR")
        return [BookingReference(booking_id=pnr, type_code="PNR")] if pnr else []
    for el in ref_els:
        booking_id = find_text(el, "BookingID") or text_of(el)
        if not booking_id or any(r.booking_id == booking_id for r in refs):
            continue
        refs.append(
            BookingReference(
                booking_id=booking_id,
                carrier=find_text(el, "AirlineDesigCode", "AirlineID"),
                type_code=find_text(el, "BookingRefTypeCode", "TypeCode"),
            )
        )
    return refs


def parse_generic(xml: Union[str, bytes]) -> GenericResult:
    """Parse any response into its shared identifiers.

    Raises:
        ParseError: the text is not well-formed XML.
    """
    root = parse_document(xml)
    order_id_el = find_first(root, "OrderID", "OrderRefID")
    order_id = text_of(order_id_el)
    owner = order_owner(order_id_el) or find_text(root, "OwnerCode")
    response_id = find_text(root, "ResponseID", "ShoppingResponseID")
    refs = booking_references(root)

    has_data = bool(order_id or response_id or refs)
    success, errors, warnings = outcome(root, has_data, local_name(root))
    logger.debug("Generic %s: order=%s response=%s", local_name(root), order_id, response_id)
    return GenericResult(
        success=success,
        errors=errors,
        warnings=warnings,
        response_id=response_id,
        order_id=order_id,
        owner_code=owner,
        booking_references=refs,
    )
