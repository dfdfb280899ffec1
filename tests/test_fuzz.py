"""Property-based fuzz tests for the response parsers using Hypothesis.

These tests feed the parsers random text and random NDC-shaped documents
and verify that a parser either rejects the input with ParseError or
returns a well-formed result, never anything else.
"""

import pytest
from hypothesis import HealthCheck, given, settings
import hypothesis.strategies as st

from ndc.errors import ParseError
from ndc.parsers import (
    parse_generic,
    parse_offer_price,
    parse_order,
    parse_seat_availability,
    parse_service_list,
)
from ndc.parsers.models import ParseResult

PARSERS = {
    "IATA_ServiceListRS": parse_service_list,
    "IATA_SeatAvailabilityRS": parse_seat_availability,
    "IATA_OfferPriceRS": parse_offer_price,
    "IATA_OrderViewRS": parse_order,
}

# Element names the parsers look for, mixed with noise
TAGS = [
    "ALaCarteOffer",
    "ALaCarteOfferItem",
    "OfferItem",
    "OfferItemID",
    "OfferID",
    "OwnerCode",
    "Eligibility",
    "PaxRefID",
    "PaxJourneyRef",
    "PaxJourneyRefID",
    "PaxSegmentReferences",
    "PaxSegmentRefID",
    "DatedOperatingLegRef",
    "DatedOperatingLegRefID",
    "Service",
    "ServiceDefinition",
    "ServiceDefinitionID",
    "ServiceDefinitionRefID",
    "ServiceCode",
    "Name",
    "RFIC",
    "UnitPrice",
    "Price",
    "TotalAmount",
    "BaseAmount",
    "Tax",
    "Fee",
    "TaxCode",
    "Amount",
    "FareBasisCode",
    "FareDetail",
    "PricedOffer",
    "TotalPrice",
    "SeatMap",
    "CabinCompartment",
    "SeatRow",
    "RowNumber",
    "Seat",
    "ColumnID",
    "OccupationStatusCode",
    "OfferItemRefID",
    "SeatCharacteristicCode",
    "Order",
    "OrderID",
    "OrderItem",
    "OrderItemID",
    "StatusCode",
    "Pax",
    "PaxID",
    "PTC",
    "PaxJourney",
    "PaxJourneyID",
    "PaxSegment",
    "PaxSegmentID",
    "DatedMarketingSegment",
    "DatedMarketingSegmentId",
    "SeatAssignment",
    "PaymentProcessingSummary",
    "BookingRef",
    "BookingID",
    "Error",
    "Warning",
    "Code",
    "DescText",
    "Junk",
]

_TEXT = st.text(
    alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd", "Zs", "Pd")),
    max_size=12,
)


@st.composite
def ndc_element(draw, depth: int = 0) -> str:
    tag = draw(st.sampled_from(TAGS))
    attrs = ""
    if draw(st.booleans()):
        attrs = ' CurCode="%s"' % draw(st.sampled_from(["AUD", "NZD", ""]))
    if depth >= 3 or draw(st.booleans()):
        return "<%s%s>%s</%s>" % (tag, attrs, draw(_TEXT), tag)
    kids = draw(st.lists(ndc_element(depth=depth + 1), max_size=4))
    return "<%s%s>%s</%s>" % (tag, attrs, "".join(kids), tag)


@st.composite
def ndc_document(draw) -> tuple[str, str]:
    root = draw(st.sampled_from(sorted(PARSERS)))
    body = "".join(draw(st.lists(ndc_element(), max_size=6)))
    return root, "<%s><Response>%s</Response></%s>" % (root, body, root)


_SETTINGS = dict(max_examples=200, suppress_health_check=[HealthCheck.too_slow], deadline=None)


@pytest.mark.slow
class TestParsersNeverCrash:
    """Any input yields a ParseError or a result, never another exception."""

    @given(text=st.text(max_size=200))
    @settings(**_SETTINGS)
    def test_random_text(self, text):
        for parser in list(PARSERS.values()) + [parse_generic]:
            try:
                result = parser(text)
            except ParseError:
                continue
            assert isinstance(result, ParseResult)

    @given(doc=ndc_document())
    @settings(**_SETTINGS)
    def test_ndc_shaped_documents(self, doc):
        root, xml = doc
        result = PARSERS[root](xml)
        assert isinstance(result, ParseResult)
        assert result.success or result.errors

    @given(doc=ndc_document())
    @settings(**_SETTINGS)
    def test_generic_accepts_any_document(self, doc):
        _, xml = doc
        assert isinstance(parse_generic(xml), ParseResult)


@pytest.mark.slow
class TestParserDeterminism:
    @given(doc=ndc_document())
    @settings(**_SETTINGS)
    def test_same_input_same_result(self, doc):
        root, xml = doc
        parser = PARSERS[root]
        assert parser(xml) == parser(xml)
