"""End-to-end CLI tests using typer.testing.CliRunner.

Tests all ndc CLI commands against real fixtures -- no mocks.
"""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from ndc.cli import app

runner = CliRunner()

FIXTURES_DIR = Path(__file__).parent / "fixtures"
LONG_SELL = str(FIXTURES_DIR / "long_sell.yaml")
PARTY = str(FIXTURES_DIR / "party.yaml")
EMPTY_CHAIN = str(FIXTURES_DIR / "party_empty_chain.yaml")
OFFER_PRICE_RS = str(FIXTURES_DIR / "offer_price.xml")

_ENV_KEYS = (
    "NDC_ORG_ID",
    "NDC_ORG_NAME",
    "NDC_ORG_ROLE",
    "NDC_DISTRIBUTOR_ORG_ID",
    "NDC_DISTRIBUTOR_ORG_NAME",
    "NDC_OWNER_CODE",
    "NDC_CURRENCY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Help
# ---------------------------------------------------------------------------


class TestHelp:
    def test_root_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Jetstar" in result.output
        assert "build" in result.output
        assert "parse" in result.output
        assert "reconcile" in result.output
        assert "config" in result.output

    def test_build_help(self):
        result = runner.invoke(app, ["build", "--help"])
        assert result.exit_code == 0
        assert "long-sell" in result.output
        assert "order-create" in result.output
        assert "order-change-payment" in result.output

    def test_parse_help(self):
        result = runner.invoke(app, ["parse", "--help"])
        assert result.exit_code == 0
        assert "seat-availability" in result.output


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


class TestBuild:
    def test_long_sell(self):
        result = runner.invoke(app, ["build", "long-sell", LONG_SELL])
        assert result.exit_code == 0
        assert result.output.startswith("<?xml")
        assert "seg000000001" in result.output
        assert "IATA_OfferPriceRQ" in result.output

    def test_long_sell_with_party(self):
        result = runner.invoke(app, ["build", "long-sell", LONG_SELL, "--party", PARTY])
        assert result.exit_code == 0
        assert "99887766" in result.output
        assert "NZD" in result.output

    def test_env_seller(self, monkeypatch):
        monkeypatch.setenv("NDC_ORG_ID", "31337")
        result = runner.invoke(app, ["build", "order-retrieve", "ORD123"])
        assert result.exit_code == 0
        assert "31337" in result.output

    def test_service_list(self):
        result = runner.invoke(app, ["build", "service-list", str(FIXTURES_DIR / "service_list_request.yaml")])
        assert result.exit_code == 0
        assert "IATA_ServiceListRQ" in result.output
        assert "SRV-9" in result.output

    def test_seat_availability(self):
        result = runner.invoke(
            app, ["build", "seat-availability", str(FIXTURES_DIR / "seat_availability_request.yaml")]
        )
        assert result.exit_code == 0
        assert "seg963657719" in result.output

    def test_seat_availability_rejects_shopping_id(self):
        result = runner.invoke(
            app, ["build", "seat-availability", str(FIXTURES_DIR / "seat_availability_shopping_id.yaml")]
        )
        assert result.exit_code == 2

    def test_offer_price(self):
        result = runner.invoke(app, ["build", "offer-price", str(FIXTURES_DIR / "offer_price_request.yaml")])
        assert result.exit_code == 0
        assert "SelectedOfferItem" in result.output

    def test_order_create(self):
        result = runner.invoke(app, ["build", "order-create", str(FIXTURES_DIR / "order_create_request.yaml")])
        assert result.exit_code == 0
        assert "IATA_OrderCreateRQ" in result.output
        assert "Opr-seg963657718" in result.output

    def test_order_change_payment(self):
        result = runner.invoke(
            app, ["build", "order-change-payment", str(FIXTURES_DIR / "order_change_payment_request.yaml")]
        )
        assert result.exit_code == 0
        assert "IATA_OrderChangeRQ" in result.output
        assert "<OrderID>ORD123</OrderID>" in result.output

    def test_order_retrieve(self):
        result = runner.invoke(app, ["build", "order-retrieve", "ORD123", "--owner", "JQ"])
        assert result.exit_code == 0
        assert "<OrderID>ORD123</OrderID>" in result.output
        assert "55778878" in result.output

    def test_empty_chain(self):
        result = runner.invoke(app, ["build", "long-sell", LONG_SELL, "--party", EMPTY_CHAIN])
        assert result.exit_code == 2

    def test_missing_file(self):
        result = runner.invoke(app, ["build", "long-sell", "no_such_file.yaml"])
        assert result.exit_code == 2

    def test_invalid_yaml(self, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("segments: [\n")
        result = runner.invoke(app, ["build", "long-sell", str(bad)])
        assert result.exit_code == 2

    def test_unresolved_reference(self, tmp_path, load_yaml):
        data = load_yaml("long_sell.yaml")
        data["seats"][0]["pax_id"] = "ADT7"
        path = tmp_path / "long_sell.yaml"
        path.write_text(yaml.safe_dump(data))
        result = runner.invoke(app, ["build", "long-sell", str(path)])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------


class TestParse:
    def test_service_list_json(self):
        result = runner.invoke(app, ["parse", "service-list", str(FIXTURES_DIR / "service_list.xml"), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        assert len(data["ancillary_offers"]) == 3

    def test_service_list_plain(self):
        result = runner.invoke(app, ["parse", "service-list", str(FIXTURES_DIR / "service_list.xml"), "--plain"])
        assert result.exit_code == 0
        assert "ALC-1-BG20" in result.output

    def test_error_response_exits_1(self):
        result = runner.invoke(
            app, ["parse", "service-list", str(FIXTURES_DIR / "service_list_error.xml"), "--plain"]
        )
        assert result.exit_code == 1
        assert "Offer has expired" in result.output

    def test_seat_availability(self):
        result = runner.invoke(
            app, ["parse", "seat-availability", str(FIXTURES_DIR / "seat_availability.xml"), "--plain"]
        )
        assert result.exit_code == 0
        assert "12C" in result.output

    def test_offer_price(self):
        result = runner.invoke(app, ["parse", "offer-price", OFFER_PRICE_RS, "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["summary"]["fare_total"] == 550.0

    def test_order(self):
        result = runner.invoke(app, ["parse", "order", str(FIXTURES_DIR / "order_view.xml"), "--plain"])
        assert result.exit_code == 0
        assert "ABC123" in result.output

    def test_generic(self):
        result = runner.invoke(app, ["parse", "generic", str(FIXTURES_DIR / "order_view.xml"), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["order_id"] == "ORD123"

    def test_wrong_message(self):
        result = runner.invoke(app, ["parse", "order", OFFER_PRICE_RS, "--plain"])
        assert result.exit_code == 2

    def test_malformed(self, tmp_path):
        bad = tmp_path / "bad.xml"
        bad.write_text("<IATA_ServiceListRS>")
        result = runner.invoke(app, ["parse", "service-list", str(bad)])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Reconcile
# ---------------------------------------------------------------------------


class TestReconcile:
    def test_match_against_offer_price(self):
        result = runner.invoke(app, ["reconcile", "550", OFFER_PRICE_RS, "--plain"])
        assert result.exit_code == 0
        assert "MATCH" in result.output

    def test_mismatch_exits_1(self):
        result = runner.invoke(app, ["reconcile", "500", OFFER_PRICE_RS, "--plain"])
        assert result.exit_code == 1
        assert "MISMATCH" in result.output

    def test_numbers(self):
        result = runner.invoke(app, ["reconcile", "100", "100.05", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["matches"] is True

    def test_currency_mismatch(self):
        result = runner.invoke(app, ["reconcile", "550", OFFER_PRICE_RS, "--currency", "NZD"])
        assert result.exit_code == 2

    def test_failed_offer_price(self):
        result = runner.invoke(app, ["reconcile", "550", str(FIXTURES_DIR / "order_create_error.xml")])
        assert result.exit_code == 2

    def test_not_a_number(self):
        result = runner.invoke(app, ["reconcile", "550", "lots"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


class TestConfigShow:
    def test_yaml(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "owner_code: JQ" in result.output
        assert "55778878" in result.output

    def test_json_with_party(self):
        result = runner.invoke(app, ["config", "show", "--party", PARTY, "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["currency"] == "NZD"
        assert [link["org_id"] for link in data["links"]] == ["11223344", "99887766"]
