"""Error extraction and outcome rules shared by every parser."""

import logging

from lxml import etree

from ndc.models import NDCErrorItem
from ndc.xmlutil import child_text, find_all, find_text, text_of

logger = logging.getLogger(__name__)

_CODE_TAGS = ("Code", "TypeCode")
_MESSAGE_TAGS = ("DescText", "Description", "ShortText", "Message")


def _issue(el: etree._Element) -> NDCErrorItem:
    code = el.get("Code") or child_text(el, *_CODE_TAGS) or "UNKNOWN"
    message = find_text(el, *_MESSAGE_TAGS)
    if message is None and len(el) == 0:
        message = text_of(el)
    return NDCErrorItem(code=code, message=message or "Unknown error")


def extract_errors(root: etree._Element) -> list[NDCErrorItem]:
    """Every Error element in the document, in order."""
    return [_issue(el) for el in find_all(root, "Error")]


def extract_warnings(root: etree._Element) -> list[NDCErrorItem]:
    return [_issue(el) for el in find_all(root, "Warning")]


def outcome(
    root: etree._Element,
    has_data: bool,
    message_name: str,
) -> tuple[bool, list[NDCErrorItem], list[NDCErrorItem]]:
    """Decide success and collect errors and warnings for a response.

    A response fails only when it reports errors and nothing usable was
    recovered. Errors alongside data are also surfaced as warnings.
    """
    errors = extract_errors(root)
    warnings = extract_warnings(root)
    success = has_data or not errors
    if errors and has_data:
        warnings = warnings + errors
        logger.warning("%s: %d error(s) reported alongside usable data", message_name, len(errors))
    elif errors:
        logger.warning("%s failed: %s", message_name, "; ".join(f"{e.code} {e.message}" for e in errors))
    return success, errors, warnings
