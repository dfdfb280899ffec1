"""Tests for the OrderRetrieve request builder."""

import pytest

from ndc.builders import build_order_retrieve
from ndc.builders.models import OrderRetrieveRequest
from ndc.errors import DistributionChainError
from ndc.models import PartyConfig
from ndc.xmlutil import COMMON_NS, MESSAGE_NS


def _texts(root, tag):
    return [el.text for el in root.iter("{*}%s" % tag)]


class TestBuildOrderRetrieve:
    def test_order(self, party, parse_xml):
        root = parse_xml(build_order_retrieve(OrderRetrieveRequest(order_id="ORD123", owner_code="JQ"), party))
        assert root.tag == "{%s}IATA_OrderRetrieveRQ" % MESSAGE_NS
        assert _texts(root, "OrderID") == ["ORD123"]
        assert _texts(root, "OwnerCode") == ["JQ"]

    def test_single_chain_link(self, party, parse_xml):
        root = parse_xml(build_order_retrieve(OrderRetrieveRequest(order_id="ORD123"), party))
        links = list(root.iter("{%s}DistributionChainLink" % COMMON_NS))
        assert len(links) == 1
        assert _texts(links[0], "Ordinal") == ["1"]
        assert _texts(links[0], "OrgRole") == ["Seller"]
        assert _texts(links[0], "Name") == ["Travel Agency"]
        assert _texts(links[0], "OrgID") == ["55778878"]

    def test_layout(self, party, parse_xml):
        root = parse_xml(build_order_retrieve(OrderRetrieveRequest(order_id="ORD123"), party))
        assert [child.tag.split("}")[1] for child in root] == ["DistributionChain", "PayloadAttributes", "Request"]
        version = root[1][0]
        assert version.tag == "{%s}VersionNumber" % COMMON_NS
        assert version.text == "21.3"

    def test_owner_defaults_to_party(self, two_link_party, parse_xml):
        root = parse_xml(build_order_retrieve(OrderRetrieveRequest(order_id="ORD1"), two_link_party))
        assert _texts(root, "OwnerCode") == ["JQ"]

    def test_order_id_escaped(self, party, parse_xml):
        root = parse_xml(build_order_retrieve(OrderRetrieveRequest(order_id="A<B&C"), party))
        assert _texts(root, "OrderID") == ["A<B&C"]

    def test_empty_order_id(self):
        with pytest.raises(ValueError):
            OrderRetrieveRequest(order_id="")

    def test_empty_chain(self):
        with pytest.raises(DistributionChainError):
            build_order_retrieve(OrderRetrieveRequest(order_id="ORD1"), PartyConfig())
