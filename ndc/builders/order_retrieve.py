"""OrderRetrieve request."""

from ndc.builders.base import new_message
from ndc.builders.models import OrderRetrieveRequest
from ndc.models import PartyConfig
from ndc.xmlutil import common_block, sub, to_xml


def build_order_retrieve(request: OrderRetrieveRequest, party: PartyConfig) -> str:
    """Build an IATA_OrderRetrieveRQ for one order."""
    root, req_el = new_message("IATA_OrderRetrieveRQ", party)
    criteria = common_block(req_el, "OrderValidationFilterCriteria")
    order_filter = sub(criteria, "OrderFilterCriteria")
    sub(order_filter, "OrderID", request.order_id)
    sub(order_filter, "OwnerCode", request.owner_code or party.owner_code)
    return to_xml(root, [f"OrderRetrieve request: {request.order_id}"])
