"""Tests for the fallback response parser."""

from ndc.parsers import parse_generic


class TestParseGeneric:
    def test_order_view(self, load_xml):
        result = parse_generic(load_xml("order_view.xml"))
        assert result.success
        assert result.order_id == "ORD123"
        assert result.owner_code == "JQ"
        assert [r.booking_id for r in result.booking_references] == ["ABC123"]

    def test_any_root_accepted(self, load_xml):
        result = parse_generic(load_xml("service_list.xml"))
        assert result.success
        assert result.response_id == "SR-42"
        assert result.order_id is None

    def test_owner_attribute(self):
        result = parse_generic(b'<IATA_OrderCancelRS><Response><OrderRefID Owner="JQ">ORD7</OrderRefID></Response></IATA_OrderCancelRS>')
        assert result.order_id == "ORD7"
        assert result.owner_code == "JQ"

    def test_errors_only(self, load_xml):
        result = parse_generic(load_xml("order_create_error.xml"))
        assert not result.success
        assert result.errors[0].code == "PAYMENT_DECLINED"

    def test_nothing_at_all_is_success(self):
        result = parse_generic(b"<IATA_AckRS/>")
        assert result.success
        assert result.errors == []

    def test_pnr_fallback(self):
        result = parse_generic(b"<IATA_OrderViewRS><Response><Order><OrderID>O1</OrderID><PNR>ABC123</PNR></Order></Response></IATA_OrderViewRS>")
        assert [(r.booking_id, r.type_code) for r in result.booking_references] == [("ABC123", "PNR")]
