"""Shared test fixtures for the NDC correlator."""

import yaml
import pytest
from lxml import etree
from pathlib import Path

from ndc.models import DistributionChainLink, OrgRole, PartyConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def load_yaml():
    """Return a function that loads a YAML fixture file."""

    def _load(name: str) -> dict:
        path = FIXTURES_DIR / name
        with open(path) as f:
            return yaml.safe_load(f)

    return _load


@pytest.fixture
def load_xml():
    """Return a function that reads an XML fixture file as bytes."""

    def _load(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()

    return _load


@pytest.fixture
def party() -> PartyConfig:
    """A single-link chain, independent of the bundled defaults."""
    return PartyConfig(
        links=(
            DistributionChainLink(
                ordinal=1,
                org_role=OrgRole.SELLER,
                org_id="55778878",
                org_name="Travel Agency",
            ),
        ),
        owner_code="JQ",
        currency="AUD",
    )


@pytest.fixture
def two_link_party() -> PartyConfig:
    return PartyConfig(
        links=(
            DistributionChainLink(ordinal=1, org_role=OrgRole.SELLER, org_id="11223344", org_name="Test Agency"),
            DistributionChainLink(ordinal=2, org_role=OrgRole.DISTRIBUTOR, org_id="99887766"),
        ),
    )


@pytest.fixture
def parse_xml():
    """Return a function that re-parses builder output with lxml."""

    def _parse(xml: str) -> etree._Element:
        return etree.fromstring(xml.encode("utf-8"))

    return _parse
