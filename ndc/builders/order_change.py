"""OrderChange request that settles payment on an existing order.

The payment sits in PaymentFunctions: the type code as a criterion, then
the amount, the payer and the method (a card, or a settlement plan for
agency and cash payments).
"""

import logging

from lxml import etree

from ndc.builders.base import new_message
from ndc.builders.models import OrderChangePaymentRequest
from ndc.models import PartyConfig, PaymentType
from ndc.xmlutil import common_block, sub, to_xml

logger = logging.getLogger(__name__)

# Card effective dates carry the expiry month with a fixed year.
CARD_EFFECTIVE_YEAR = "21"
DEFAULT_PAYER = ("AGENCY", "PAYMENT")


def payer_name(request: OrderChangePaymentRequest) -> tuple[str, str]:
    """Given name and surname for the payer.

    Falls back to the card holder name (first word given, the rest
    surname) and then to a fixed agency name.
    """
    payer = request.payer
    if payer is not None and payer.given_name and payer.surname:
        return payer.given_name, payer.surname
    card = request.payment.card
    words = (card.holder_name or "").split() if card is not None else []
    if words:
        return words[0], " ".join(words[1:]) or words[0]
    return DEFAULT_PAYER


def _render_method(details: etree._Element, request: OrderChangePaymentRequest) -> None:
    payment = request.payment
    if payment.type == PaymentType.CC and payment.card is not None:
        card = sub(sub(details, "PaymentMethod"), "PaymentCard")
        sub(card, "CardBrandCode", payment.card.brand)
        sub(card, "CardNumber", payment.card.number)
        if payment.card.security_code:
            sub(card, "CardSecurityCode", payment.card.security_code)
        sub(card, "EffectiveDate", payment.card.expiry[:2] + CARD_EFFECTIVE_YEAR)
        sub(card, "ExpirationDate", payment.card.expiry)
    elif payment.type == PaymentType.AGT:
        plan = sub(sub(details, "PaymentMethod"), "SettlementPlan")
        agency = request.agency
        if agency is not None and agency.iata_number:
            sub(plan, "IATA_Number", agency.iata_number)
        sub(plan, "PaymentTypeCode", PaymentType.AGT.value)
        if agency is not None and agency.account_number:
            sub(plan, "AccountNumber", agency.account_number)
    elif payment.type == PaymentType.CA:
        plan = sub(sub(details, "PaymentMethod"), "SettlementPlan")
        sub(plan, "PaymentTypeCode", PaymentType.CA.value)


def build_order_change_payment(request: OrderChangePaymentRequest, party: PartyConfig) -> str:
    """Build an IATA_OrderChangeRQ that pays for an order.

    Raises:
        DistributionChainError: the party has no usable chain.
    """
    payment = request.payment
    root, req_el = new_message("IATA_OrderChangeRQ", party)
    order = common_block(req_el, "Order")
    sub(order, "OrderID", request.order_id)
    sub(order, "OwnerCode", request.owner_code or party.owner_code)

    functions = common_block(req_el, "PaymentFunctions")
    sub(sub(functions, "PaymentMethodCriteria"), "PaymentTypeCode", payment.type.value)
    details = sub(functions, "PaymentProcessingDetails")
    sub(details, "Amount", payment.amount.value, CurCode=payment.amount.currency)

    given_name, surname = payer_name(request)
    payer_el = sub(details, "Payer")
    individual = sub(sub(payer_el, "PayerName"), "IndividualName")
    sub(individual, "GivenName", given_name)
    sub(individual, "Surname", surname)
    if request.payer is not None and request.payer.email:
        sub(sub(payer_el, "PayerEmailAddress"), "EmailAddressText", request.payer.email)

    _render_method(details, request)

    logger.debug("OrderChange payment: order=%s type=%s", request.order_id, payment.type.value)
    header = [
        f"OrderChange payment request: {request.order_id}",
        f"Payment: {payment.type.value} {payment.amount.value:.2f} {payment.amount.currency}",
    ]
    return to_xml(root, header)
