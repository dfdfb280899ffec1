"""Tests for ancillary service classification rules."""

import pytest

from ndc.models import ServiceCategory
from ndc.parsers.classify import classify_service, get_registered_rules


class TestRuleRegistry:
    def test_rules_registered_in_order(self):
        rule_ids = [cls.rule_id for cls in get_registered_rules()]
        assert rule_ids[:2] == ["rfic_ssr", "seat_ssr_code"]
        assert rule_ids[-1] == "bundle"

    def test_registry_is_a_copy(self):
        rules = get_registered_rules()
        rules.clear()
        assert get_registered_rules()


class TestClassifyService:
    @pytest.mark.parametrize(
        "code,name,expected",
        [
            ("BG20", "Checked baggage 20kg", ServiceCategory.BAGGAGE),
            ("XBAG", "", ServiceCategory.BAGGAGE),
            ("STSE", "Standard seat", ServiceCategory.SEAT),
            ("ML01", "Hot meal", ServiceCategory.MEAL),
            ("SNCK", "Snack pack", ServiceCategory.MEAL),
            ("LNGE", "Lounge pass", ServiceCategory.LOUNGE),
            ("TINS", "Travel insurance", ServiceCategory.INSURANCE),
            ("P200", "", ServiceCategory.BUNDLE),
            ("M202", "Max", ServiceCategory.BUNDLE),
            ("FLEX", "Starter Plus", ServiceCategory.BUNDLE),
            ("ZZZZ", "Mystery product", ServiceCategory.OTHER),
        ],
    )
    def test_keywords_and_codes(self, code, name, expected):
        assert classify_service(code, name) == expected

    def test_rfic_p_is_ssr(self):
        assert classify_service("BG20", "Checked baggage", rfic="P") == ServiceCategory.SSR

    def test_rfic_case_insensitive(self):
        assert classify_service("X", "", rfic="p") == ServiceCategory.SSR

    @pytest.mark.parametrize("code", ["UPFX", "LEGX", "JLSF", "upfx"])
    def test_seat_ssr_codes_beat_seat_keyword(self, code):
        assert classify_service(code, "Upfront seat") == ServiceCategory.SSR

    def test_baggage_beats_bundle_keyword(self):
        assert classify_service("BAGP", "Bag plus") == ServiceCategory.BAGGAGE

    def test_empty(self):
        assert classify_service() == ServiceCategory.OTHER
        assert classify_service(None, None) == ServiceCategory.OTHER

    def test_bundle_code_needs_three_digits(self):
        assert classify_service("P20", "") == ServiceCategory.OTHER

    def test_bundle_code_is_case_sensitive(self):
        assert classify_service("P200", "") == ServiceCategory.BUNDLE
        assert classify_service("p200", "") == ServiceCategory.OTHER
        assert classify_service("p200", "Starter Plus") == ServiceCategory.BUNDLE
