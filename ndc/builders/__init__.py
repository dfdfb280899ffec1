"""Request builders: one function per NDC request message."""

from ndc.builders.long_sell import build_long_sell, long_sell_request_from_order
from ndc.builders.offer_price import build_offer_price
from ndc.builders.order_change import build_order_change_payment
from ndc.builders.order_create import build_order_create
from ndc.builders.order_retrieve import build_order_retrieve
from ndc.builders.seat_availability import build_seat_availability
from ndc.builders.service_list import build_service_list

__all__ = [
    "build_long_sell",
    "build_offer_price",
    "build_order_change_payment",
    "build_order_create",
    "build_order_retrieve",
    "build_seat_availability",
    "build_service_list",
    "long_sell_request_from_order",
]
