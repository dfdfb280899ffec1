"""Tests for NDC domain models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from ndc.models import (
    Amount,
    DistributionChainLink,
    Journey,
    OrgRole,
    PartyConfig,
    Passenger,
    PaxType,
    Segment,
)


# --- Segment Tests ---


class TestSegment:
    def test_codes_uppercase(self):
        s = Segment(origin="mel", destination="syd", departure="2026-12-01T10:00:00", flight_number="501")
        assert s.origin == "MEL"
        assert s.destination == "SYD"
        assert s.marketing_carrier == "JQ"

    def test_flight_number_from_int(self):
        s = Segment(origin="MEL", destination="SYD", departure=datetime(2026, 12, 1, 10), flight_number=501)
        assert s.flight_number == "501"

    def test_invalid_airport_length(self):
        with pytest.raises(ValidationError):
            Segment(origin="ME", destination="SYD", departure=datetime(2026, 12, 1), flight_number="1")


# --- Journey Tests ---


class TestJourney:
    def test_requires_segments(self):
        with pytest.raises(ValidationError):
            Journey(journey_id="J1", segment_ids=[], origin="MEL", destination="SYD")

    def test_from_segments(self):
        segments = [
            Segment(segment_id="S1", origin="MEL", destination="SYD", departure=datetime(2026, 12, 1, 10), flight_number="501"),
            Segment(segment_id="S2", origin="SYD", destination="OOL", departure=datetime(2026, 12, 1, 13), flight_number="430"),
        ]
        journey = Journey.from_segments("J1", segments)
        assert journey.segment_ids == ["S1", "S2"]
        assert journey.origin == "MEL"
        assert journey.destination == "OOL"

    def test_from_no_segments(self):
        with pytest.raises(ValueError):
            Journey.from_segments("J1", [])


# --- Passenger Tests ---


class TestPassenger:
    def test_default_adult(self):
        assert Passenger(pax_id="ADT0").ptc == PaxType.ADT

    def test_infant_may_have_accompanying_adult(self):
        p = Passenger(pax_id="INF0", ptc="INF", accompanying_pax_id="ADT0")
        assert p.accompanying_pax_id == "ADT0"

    def test_only_infants_accompanied(self):
        with pytest.raises(ValidationError):
            Passenger(pax_id="CHD0", ptc="CHD", accompanying_pax_id="ADT0")

    def test_unknown_ptc(self):
        with pytest.raises(ValidationError):
            Passenger(pax_id="X0", ptc="SNR")


# --- Distribution Chain Tests ---


class TestDistributionChain:
    def test_ordinal_must_be_positive(self):
        with pytest.raises(ValidationError):
            DistributionChainLink(ordinal=0, org_role=OrgRole.SELLER, org_id="1")

    def test_link_is_frozen(self):
        link = DistributionChainLink(ordinal=1, org_role="Seller", org_id="1")
        with pytest.raises(ValidationError):
            link.org_id = "2"

    def test_party_config_is_frozen(self, party):
        with pytest.raises(ValidationError):
            party.owner_code = "QF"

    def test_party_codes_uppercase(self):
        p = PartyConfig(owner_code="jq", currency="aud")
        assert p.owner_code == "JQ"
        assert p.currency == "AUD"


class TestAmount:
    def test_currency_uppercase(self):
        assert Amount(value=1, currency="nzd").currency == "NZD"
