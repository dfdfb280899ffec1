"""Tests for party configuration loading."""

from pathlib import Path

import pytest

from ndc.config import DEFAULTS, IDENTITY_DOC_TYPES, PASSIVE_DEFAULTS, SERVICE_DATA, load_party_config
from ndc.models import OrgRole

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestBundledData:
    def test_defaults(self):
        assert DEFAULTS["owner_code"] == "JQ"
        assert DEFAULTS["currency"] == "AUD"
        assert PASSIVE_DEFAULTS["rbd"] == "O"
        assert PASSIVE_DEFAULTS["carrier"] == "QF"
        assert IDENTITY_DOC_TYPES["PP"] == "PT"

    def test_service_data(self):
        assert set(SERVICE_DATA["seat_ssr_codes"]) == {"UPFX", "LEGX", "JLSF"}
        assert SERVICE_DATA["tax_fee_names"]["YQ"] == "Carrier Surcharge"


class TestLoadPartyConfig:
    def test_bundled_defaults(self):
        party = load_party_config(env={})
        assert party.owner_code == "JQ"
        assert party.currency == "AUD"
        assert party.cabin_type_code == "5"
        assert len(party.links) == 1
        assert party.links[0].org_id == "55778878"
        assert party.links[0].org_role == OrgRole.SELLER

    def test_yaml_override(self):
        party = load_party_config(FIXTURES_DIR / "party.yaml", env={})
        assert party.currency == "NZD"
        assert [link.org_id for link in party.links] == ["11223344", "99887766"]
        assert party.links[1].org_role == OrgRole.DISTRIBUTOR

    def test_env_overrides_seller(self):
        party = load_party_config(env={"NDC_ORG_ID": "42", "NDC_ORG_NAME": "Env Agency"})
        assert party.links[0].org_id == "42"
        assert party.links[0].org_name == "Env Agency"
        assert party.links[0].ordinal == 1

    def test_env_keeps_seller_id_when_only_name_given(self):
        party = load_party_config(env={"NDC_ORG_NAME": "Renamed"})
        assert party.links[0].org_id == "55778878"
        assert party.links[0].org_name == "Renamed"

    def test_env_adds_distributor(self):
        party = load_party_config(env={"NDC_DISTRIBUTOR_ORG_ID": "777", "NDC_DISTRIBUTOR_ORG_NAME": "Hub"})
        assert len(party.links) == 2
        assert party.links[1].ordinal == 2
        assert party.links[1].org_role == OrgRole.DISTRIBUTOR
        assert party.links[1].org_name == "Hub"

    def test_env_owner_and_currency(self):
        party = load_party_config(env={"NDC_OWNER_CODE": "qf", "NDC_CURRENCY": "nzd"})
        assert party.owner_code == "QF"
        assert party.currency == "NZD"

    def test_empty_chain_loads(self):
        # Loading succeeds; the builders reject the chain.
        party = load_party_config(FIXTURES_DIR / "party_empty_chain.yaml", env={})
        assert party.links == ()

    def test_env_org_id_required_without_chain(self):
        with pytest.raises(ValueError):
            load_party_config(FIXTURES_DIR / "party_empty_chain.yaml", env={"NDC_ORG_NAME": "Nameless"})

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_party_config(path, env={})
