"""XML helpers shared by builders and parsers.

Builders emit the message root in the OffersAndOrders message namespace
and nested blocks in the common-types namespace. Parsers look elements up
by local name only, because airline responses are inconsistent about
namespace prefixes.
"""

import math
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Union

from lxml import etree

from ndc.errors import BuildError, ParseError
from ndc.models import Amount

MESSAGE_NS = "http://www.iata.org/IATA/2015/EASD/00/IATA_OffersAndOrdersMessage"
COMMON_NS = "http://www.iata.org/IATA/2015/EASD/00/IATA_OffersAndOrdersCommonTypes"
VERSION_NUMBER = "21.3"


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def message_root(tag: str, **attrs: str) -> etree._Element:
    """Root element of a request message."""
    return etree.Element("{%s}%s" % (MESSAGE_NS, tag), attrib=attrs, nsmap={None: MESSAGE_NS})


def common_block(parent: etree._Element, tag: str) -> etree._Element:
    """Child element that switches to the common-types namespace."""
    return etree.SubElement(parent, "{%s}%s" % (COMMON_NS, tag), nsmap={None: COMMON_NS})


def format_value(value) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def sub(parent: etree._Element, tag: str, text=None, **attrs: str) -> etree._Element:
    """Child element in the parent's namespace. Text is escaped by lxml."""
    ns = etree.QName(parent).namespace
    el = etree.SubElement(parent, "{%s}%s" % (ns, tag) if ns else tag, attrib=attrs)
    if text is not None:
        try:
            el.text = format_value(text)
        except ValueError as exc:
            raise BuildError(f"{tag}: value is not representable in XML: {text!r}") from exc
    return el


def to_xml(root: etree._Element, header: Iterable[str] = ()) -> str:
    """Serialize a message with declaration and leading comment lines.

    Output is deterministic for identical input.
    """
    body = etree.tostring(root, pretty_print=True, encoding="unicode").rstrip("\n")
    comments = "".join(
        "<!-- %s -->\n" % line.replace("--", "- -") for line in header if line
    )
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + comments + body + "\n"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


_PARSER_OPTIONS = dict(resolve_entities=False, no_network=True, remove_comments=True, huge_tree=False)


def parse_document(
    xml: Union[str, bytes],
    expected_roots: tuple[str, ...] = (),
) -> etree._Element:
    """Parse response text into an element tree.

    Raises:
        ParseError: MALFORMED_XML if the text is not well-formed XML,
            UNEXPECTED_ROOT if the root is not one of ``expected_roots``.
    """
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    if not xml or not xml.strip():
        raise ParseError("Response body is empty")
    try:
        root = etree.fromstring(xml, parser=etree.XMLParser(**_PARSER_OPTIONS))
    except etree.XMLSyntaxError as exc:
        raise ParseError(f"Response is not well-formed XML: {exc}") from exc
    if expected_roots and local_name(root) not in expected_roots:
        raise ParseError(
            f"Expected {' or '.join(expected_roots)}, got {local_name(root)}",
            error_type="UNEXPECTED_ROOT",
        )
    return root


def local_name(el: etree._Element) -> str:
    return etree.QName(el).localname


def find_all(parent: Optional[etree._Element], tag: str) -> list[etree._Element]:
    """All descendants with the given local name, in document order."""
    if parent is None:
        return []
    return list(parent.iterdescendants("{*}%s" % tag))


def find_first(parent: Optional[etree._Element], *tags: str) -> Optional[etree._Element]:
    """First descendant matching the first of ``tags`` that is present."""
    for tag in tags:
        found = find_all(parent, tag)
        if found:
            return found[0]
    return None


def children(parent: Optional[etree._Element], tag: str) -> list[etree._Element]:
    """Direct children with the given local name."""
    if parent is None:
        return []
    return [c for c in parent if isinstance(c.tag, str) and local_name(c) == tag]


def child(parent: Optional[etree._Element], *tags: str) -> Optional[etree._Element]:
    for tag in tags:
        found = children(parent, tag)
        if found:
            return found[0]
    return None


def text_of(el: Optional[etree._Element]) -> Optional[str]:
    if el is None or el.text is None:
        return None
    value = el.text.strip()
    return value or None


def find_text(parent: Optional[etree._Element], *tags: str, default: Optional[str] = None) -> Optional[str]:
    """Text of the first non-empty descendant among alternate names."""
    for tag in tags:
        for el in find_all(parent, tag):
            value = text_of(el)
            if value:
                return value
    return default


def child_text(parent: Optional[etree._Element], *tags: str, default: Optional[str] = None) -> Optional[str]:
    for tag in tags:
        for el in children(parent, tag):
            value = text_of(el)
            if value:
                return value
    return default


def texts(parent: Optional[etree._Element], tag: str) -> list[str]:
    """Non-empty texts of all matching descendants, duplicates removed."""
    seen: list[str] = []
    for el in find_all(parent, tag):
        value = text_of(el)
        if value and value not in seen:
            seen.append(value)
    return seen


def attr_or_text(el: Optional[etree._Element], name: str, *alternates: str) -> Optional[str]:
    """Value carried either as an attribute or as a child element."""
    if el is None:
        return None
    for key in (name,) + alternates:
        value = el.get(key)
        if value and value.strip():
            return value.strip()
    return find_text(el, name, *alternates)


def to_float(value: Optional[str]) -> float:
    """Numeric text as a float; missing, malformed, or non-finite values are 0."""
    try:
        number = float(value) if value is not None else 0.0
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_amount(el: Optional[etree._Element], default_currency: str = "AUD") -> Optional[Amount]:
    """Amount from an element carrying a value and a currency.

    Accepts ``<X CurCode="AUD">10</X>``, ``<X><TotalAmount CurCode="AUD">10</TotalAmount></X>``
    and ``<X><Amount>10</Amount><CurCode>AUD</CurCode></X>``.
    """
    if el is None:
        return None
    value_el = child(el, "TotalAmount", "Amount")
    if value_el is None:
        value_el = find_first(el, "TotalAmount", "Amount")
    source = value_el if value_el is not None else el
    raw = text_of(source)
    if raw is None:
        return None
    currency = (
        source.get("CurCode")
        or el.get("CurCode")
        or child_text(el, "CurCode")
        or default_currency
    )
    return Amount(value=to_float(raw), currency=currency)
