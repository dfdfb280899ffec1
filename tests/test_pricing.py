"""Tests for price snapshots and reconciliation."""

import pytest
from hypothesis import given
import hypothesis.strategies as st

from ndc.parsers import parse_offer_price
from ndc.pricing import (
    PriceBreakdown,
    PriceSnapshot,
    SnapshotStage,
    reconcile,
    snapshot_from_offer_price,
)


def _snap(total, currency="AUD", **breakdown) -> PriceSnapshot:
    return PriceSnapshot(
        total=total,
        currency=currency,
        breakdown=PriceBreakdown(**breakdown) if breakdown else None,
    )


class TestPriceSnapshot:
    def test_fare_total_without_breakdown(self):
        assert _snap(100.0).fare_total == 100.0

    def test_fare_total_excludes_bundle_and_services(self):
        snap = _snap(150.0, base=80.0, taxes=15.0, bundle=45.0, services=10.0)
        assert snap.fare_total == 95.0

    def test_negative_total_rejected(self):
        with pytest.raises(ValueError):
            PriceSnapshot(total=-1)

    def test_currency_uppercase(self):
        assert _snap(1.0, currency="aud").currency == "AUD"


class TestReconcile:
    def test_exact_match(self):
        report = reconcile(_snap(550.0), _snap(550.0))
        assert report.matches
        assert report.warnings == []

    def test_difference_below_tolerance_is_ignored(self):
        report = reconcile(_snap(550.0), _snap(550.09))
        assert report.matches

    def test_difference_at_tolerance_is_reported(self):
        report = reconcile(_snap(550.0), _snap(550.10))
        assert not report.matches
        assert report.differences[0].difference == pytest.approx(0.10)

    def test_mismatch_details(self):
        report = reconcile(_snap(500.0), _snap(550.0))
        diff = report.differences[0]
        assert diff.component == "fare_total"
        assert diff.difference == 50.0
        assert diff.percentage == 10.0
        assert "+50.00 AUD" in report.warnings[0]

    def test_lower_quote(self):
        diff = reconcile(_snap(200.0), _snap(150.0)).differences[0]
        assert diff.difference == -50.0
        assert diff.percentage == -25.0

    def test_zero_estimate_percentage(self):
        diff = reconcile(_snap(0.0), _snap(10.0)).differences[0]
        assert diff.percentage == 0.0

    def test_bundles_do_not_count(self):
        # Estimate has no bundle, quote includes a 45.00 bundle.
        report = reconcile(_snap(550.0), _snap(595.0, base=470.0, taxes=65.0, fees=15.0, bundle=45.0))
        assert report.matches
        assert report.authoritative_total == 550.0

    def test_components_compared_when_both_have_breakdown(self):
        estimate = _snap(100.0, base=80.0, taxes=20.0)
        quote = _snap(100.0, base=70.0, taxes=30.0)
        report = reconcile(estimate, quote)
        assert [d.component for d in report.differences] == ["base", "taxes"]

    def test_currency_mismatch(self):
        with pytest.raises(ValueError):
            reconcile(_snap(100.0, currency="AUD"), _snap(100.0, currency="NZD"))

    @given(
        st.floats(min_value=0, max_value=100_000, allow_nan=False),
        st.floats(min_value=0, max_value=100_000, allow_nan=False),
    )
    def test_match_is_symmetric(self, a, b):
        forward = reconcile(_snap(a), _snap(b))
        backward = reconcile(_snap(b), _snap(a))
        assert forward.matches == backward.matches

    @given(st.floats(min_value=0, max_value=100_000, allow_nan=False))
    def test_snapshot_matches_itself(self, total):
        assert reconcile(_snap(total), _snap(total)).matches


class TestSnapshotFromOfferPrice:
    def test_snapshot(self, load_xml):
        result = parse_offer_price(load_xml("offer_price.xml"))
        snap = snapshot_from_offer_price(result)
        assert snap.stage == SnapshotStage.PRICING
        assert snap.currency == "AUD"
        assert snap.total == 595.0
        assert snap.fare_total == 550.0
        assert snap.breakdown.base == 470.0
        assert snap.breakdown.taxes == 65.0
        assert snap.breakdown.fees == 15.0
        assert snap.breakdown.bundle == 45.0

    def test_estimate_against_quote(self, load_xml):
        quote = snapshot_from_offer_price(parse_offer_price(load_xml("offer_price.xml")))
        assert reconcile(_snap(550.0), quote).matches
        assert not reconcile(_snap(520.0), quote).matches
