"""Shared message scaffolding for request builders."""

import logging
from typing import Iterable

from lxml import etree

from ndc.errors import UnresolvedReferenceError
from ndc.models import PartyConfig
from ndc.party import render_distribution_chain
from ndc.xmlutil import VERSION_NUMBER, common_block, message_root, sub

logger = logging.getLogger(__name__)


def new_message(tag: str, party: PartyConfig, **attrs: str) -> tuple[etree._Element, etree._Element]:
    """Create a message root with chain and payload attributes.

    Returns:
        (root, request) where ``request`` is the empty Request element.
    """
    logger.debug("New %s, %d chain link(s)", tag, len(party.links))
    root = message_root(tag, **attrs)
    render_distribution_chain(root, party)
    payload = sub(root, "PayloadAttributes")
    version = common_block(payload, "VersionNumber")
    version.text = VERSION_NUMBER
    request = sub(root, "Request")
    return root, request


def check_pax_refs(refs: Iterable[str], declared: Iterable[str], context: str) -> None:
    """Every passenger reference must resolve to a declared passenger."""
    known = set(declared)
    missing = [ref for ref in refs if ref not in known]
    if missing:
        raise UnresolvedReferenceError(
            f"{context}: passenger reference(s) {', '.join(missing)} not declared in the message"
        )
