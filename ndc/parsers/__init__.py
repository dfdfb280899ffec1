"""Response parsers: one function per NDC response family.

Parsers raise ``ParseError`` only for text that is not XML or is the wrong
message. Airline-reported business errors come back on the result.
"""

from ndc.parsers.generic import parse_generic
from ndc.parsers.offer_price import parse_offer_price
from ndc.parsers.order import parse_order
from ndc.parsers.seat_availability import parse_seat_availability
from ndc.parsers.service_list import parse_service_list

__all__ = [
    "parse_generic",
    "parse_offer_price",
    "parse_order",
    "parse_seat_availability",
    "parse_service_list",
]
