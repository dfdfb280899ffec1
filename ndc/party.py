"""Distribution chain rendering.

Every request opens with the sender's DistributionChain. The airline
rejects a message without one, so an empty or inconsistent chain fails the
build instead of producing a message.
"""

from typing import Sequence

from lxml import etree

from ndc.errors import DistributionChainError
from ndc.models import DistributionChainLink, PartyConfig
from ndc.xmlutil import common_block, sub


def validate_chain(links: Sequence[DistributionChainLink]) -> None:
    """Check that ordinals run 1..n in order and every org has an id."""
    if not links:
        raise DistributionChainError()
    ordinals = [link.ordinal for link in links]
    if ordinals != list(range(1, len(links) + 1)):
        raise DistributionChainError(
            f"Distribution chain ordinals must be unique and ascend from 1, got {ordinals}"
        )
    for link in links:
        if not link.org_id.strip():
            raise DistributionChainError(f"Distribution chain link {link.ordinal} has no organisation id")


def render_distribution_chain(root: etree._Element, party: PartyConfig) -> etree._Element:
    """Append the DistributionChain block to a message root."""
    validate_chain(party.links)
    chain = sub(root, "DistributionChain")
    for link in party.links:
        el = common_block(chain, "DistributionChainLink")
        sub(el, "Ordinal", link.ordinal)
        sub(el, "OrgRole", link.org_role)
        org = sub(el, "ParticipatingOrg")
        if link.org_name:
            sub(org, "Name", link.org_name)
        sub(org, "OrgID", link.org_id)
    return chain
