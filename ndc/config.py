"""Party configuration and protocol defaults.

Defaults ship in ``ndc/data/defaults.yaml``. A deployment may point at its
own YAML file and override individual values from the environment:

    NDC_ORG_ID, NDC_ORG_NAME, NDC_ORG_ROLE      seller link (ordinal 1)
    NDC_DISTRIBUTOR_ORG_ID, NDC_DISTRIBUTOR_ORG_NAME   optional second link
    NDC_OWNER_CODE, NDC_CURRENCY
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

from ndc.models import DistributionChainLink, OrgRole, PartyConfig

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent / "data"

with open(_DATA_DIR / "defaults.yaml") as f:
    DEFAULTS: dict = yaml.safe_load(f)

with open(_DATA_DIR / "services.yaml") as f:
    SERVICE_DATA: dict = yaml.safe_load(f)

PASSIVE_DEFAULTS: dict = DEFAULTS.get("passive", {})
IDENTITY_DOC_TYPES: dict[str, str] = DEFAULTS.get("identity_doc_types", {})


def _links_from(raw_links: list[dict]) -> list[DistributionChainLink]:
    return [DistributionChainLink(**link) for link in raw_links or []]


def _apply_env(links: list[DistributionChainLink], env: Mapping[str, str]) -> list[DistributionChainLink]:
    seller = links[0] if links else None
    org_id = env.get("NDC_ORG_ID")
    org_name = env.get("NDC_ORG_NAME")
    org_role = env.get("NDC_ORG_ROLE")
    if org_id or org_name or org_role:
        if seller is None and not org_id:
            raise ValueError("NDC_ORG_ID is required when no distribution chain is configured")
        seller = DistributionChainLink(
            ordinal=1,
            org_role=OrgRole(org_role) if org_role else (seller.org_role if seller else OrgRole.SELLER),
            org_id=org_id or seller.org_id,
            org_name=org_name if org_name is not None else (seller.org_name if seller else None),
        )
        links = [seller] + links[1:]

    distributor_id = env.get("NDC_DISTRIBUTOR_ORG_ID")
    if distributor_id:
        distributor = DistributionChainLink(
            ordinal=len(links) + 1,
            org_role=OrgRole.DISTRIBUTOR,
            org_id=distributor_id,
            org_name=env.get("NDC_DISTRIBUTOR_ORG_NAME"),
        )
        links = links + [distributor]
    return links


def load_party_config(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> PartyConfig:
    """Load the sender identity used to stamp outgoing requests.

    Args:
        path: YAML file with the same keys as the bundled defaults. Keys it
            omits fall back to the defaults.
        env: Environment mapping; ``os.environ`` when omitted.
    """
    data = dict(DEFAULTS)
    if path is not None:
        with open(path) as f:
            override = yaml.safe_load(f) or {}
        if not isinstance(override, dict):
            raise ValueError(f"{path}: expected a mapping at the top level")
        data.update(override)
        logger.debug("Loaded party config from %s", path)

    env = os.environ if env is None else env
    links = _apply_env(_links_from(data.get("distribution_chain", [])), env)

    return PartyConfig(
        links=tuple(links),
        owner_code=env.get("NDC_OWNER_CODE") or data.get("owner_code", "JQ"),
        currency=env.get("NDC_CURRENCY") or data.get("currency", "AUD"),
        cabin_type_code=str(data.get("cabin_type_code", "5")),
    )
