"""Tests for the OfferPrice request builder."""

import pytest

from ndc.builders import build_offer_price
from ndc.builders.models import OfferPriceRequest


def _all(root, tag):
    return list(root.iter("{*}%s" % tag))


def _texts(root, tag):
    return [el.text for el in _all(root, tag)]


@pytest.fixture
def offer_price(load_yaml):
    return OfferPriceRequest.model_validate(load_yaml("offer_price_request.yaml"))


def _single(party, parse_xml, **item):
    request = OfferPriceRequest(offers=[{"offer_id": "O1", "offer_items": [dict(offer_item_id="I1", **item)]}])
    return parse_xml(build_offer_price(request, party))


class TestBuildOfferPrice:
    def test_selected_offer(self, offer_price, party, parse_xml):
        root = parse_xml(build_offer_price(offer_price, party))
        assert _texts(root, "OfferRefID") == ["OP-1"]
        assert _texts(root, "OwnerCode") == ["JQ"]

    def test_segment_scoped_item_split_per_segment(self, offer_price, party, parse_xml):
        root = parse_xml(build_offer_price(offer_price, party))
        items = _all(root, "SelectedOfferItem")
        assert [_texts(i, "OfferItemRefID")[0] for i in items] == ["OP-1-FARE", "ALC-1-BG20", "ALC-1-BG20"]
        assert _texts(items[1], "PaxSegmentRefID") == ["seg963657718"]
        assert _texts(items[2], "PaxSegmentRefID") == ["seg963657719"]
        assert _texts(items[1], "Qty") == ["1"]

    def test_pax_fallback_to_counts(self, offer_price, party, parse_xml):
        root = parse_xml(build_offer_price(offer_price, party))
        fare, bag, _ = _all(root, "SelectedOfferItem")
        assert _texts(fare, "PaxRefID") == ["ADT0", "ADT1", "CHD0"]
        assert _texts(bag, "PaxRefID") == ["ADT0"]

    def test_flight_item_has_no_association(self, offer_price, party, parse_xml):
        root = parse_xml(build_offer_price(offer_price, party))
        fare = _all(root, "SelectedOfferItem")[0]
        assert _all(fare, "SelectedALaCarteOfferItem") == []

    def test_payment_and_currency(self, offer_price, party, parse_xml):
        root = parse_xml(build_offer_price(offer_price, party))
        assert _texts(root, "PaymentBrandCode") == ["VI"]
        assert _texts(root, "CurCode") == ["AUD"]

    def test_no_payment_or_currency_when_absent(self, party, parse_xml):
        root = _single(party, parse_xml)
        assert _all(root, "PaymentFunctions") == []
        assert _all(root, "ResponseParameters") == []

    def test_journey_item_sent_once(self, party, parse_xml):
        root = _single(party, parse_xml, a_la_carte=True, pax_ref_ids=["ADT0"], journey_ref_ids=["fl1", "fl2"])
        items = _all(root, "SelectedOfferItem")
        assert len(items) == 1
        assert _texts(items[0], "PaxJourneyRefID") == ["fl1", "fl2"]

    def test_leg_item(self, party, parse_xml):
        root = _single(party, parse_xml, a_la_carte=True, pax_ref_ids=["ADT0"], leg_ref_ids=["seg1-leg0"])
        assert _texts(root, "DatedOperatingLegRefID") == ["seg1-leg0"]

    def test_explicit_association_wins(self, party, parse_xml):
        root = _single(
            party,
            parse_xml,
            a_la_carte=True,
            pax_ref_ids=["ADT0"],
            association_type="leg",
            journey_ref_ids=["fl1"],
            leg_ref_ids=["seg1-leg0"],
        )
        assert _texts(root, "PaxJourneyRefID") == []
        assert _texts(root, "DatedOperatingLegRefID") == ["seg1-leg0"]

    def test_offer_pax_list_used(self, party, parse_xml):
        request = OfferPriceRequest(
            offers=[{"offer_id": "O1", "pax_ref_ids": ["ADT0", "INF0"], "offer_items": [{"offer_item_id": "I1"}]}]
        )
        root = parse_xml(build_offer_price(request, party))
        assert _texts(root, "PaxRefID") == ["ADT0", "INF0"]

    def test_seat_selection(self, party, parse_xml):
        root = _single(party, parse_xml, pax_ref_ids=["ADT0"], seat_row=12, seat_column="C")
        seat = _all(root, "SelectedSeat")[0]
        assert _texts(seat, "SeatRowNumber") == ["12"]
        assert _texts(seat, "ColumnID") == ["C"]
