"""Segment and journey identifier correlation.

The airline refers to the same flight segment in three forms:

- clean: ``seg963657718`` (PaxSegmentID, seat leg references)
- marketing: ``Mkt-seg963657718`` (DatedMarketingSegmentId)
- operating: ``Opr-seg963657718`` (DatedOperatingSegmentRefId)

Ids taken from a prior order keep their original values; ids for a
standalone request are synthesized positionally (``seg000000001``,
``fl000000001``).
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

MARKETING_PREFIX = "Mkt-"
OPERATING_PREFIX = "Opr-"
SEGMENT_STEM = "seg"

_LEG_SUFFIX = re.compile(r"-leg\d+$")
_PAX_REF_SUFFIX = re.compile(r"\d+$")


class SyntheticKind(str, Enum):
    """Prefixes for positionally synthesized ids."""

    SEGMENT = "seg"
    JOURNEY = "fl"


class IdentityMode(str, Enum):
    """Where a message's segment and journey ids come from."""

    ORDER = "order"  # ids carried over from a prior order
    SYNTHETIC = "synthetic"  # ids generated from position


@dataclass(frozen=True)
class SegmentIds:
    """The three correlated forms of one segment id."""

    clean: str
    marketing: str
    operating: str
    recognized: bool = True

    @property
    def leg(self) -> str:
        """Reference to the segment's first (only) operating leg."""
        return leg_ref_id(self.clean)


def _strip_prefix(raw: str) -> Optional[str]:
    for prefix in (MARKETING_PREFIX, OPERATING_PREFIX):
        if raw.startswith(prefix) and len(raw) > len(prefix):
            return raw[len(prefix):]
    return None


def is_recognized_segment_id(raw: str) -> bool:
    """True if *raw* is in one of the airline's segment id forms."""
    if not raw:
        return False
    return _strip_prefix(raw) is not None or raw.startswith(SEGMENT_STEM)


def normalize_segment_id(raw: str) -> SegmentIds:
    """Derive the clean, marketing, and operating forms of a segment id.

    A ``Mkt-``/``Opr-`` prefixed input is canonical and the other forms are
    derived from it. A bare ``seg...`` id is the clean form. Anything else
    passes through unchanged in all three forms.
    """
    raw = (raw or "").strip()
    stripped = _strip_prefix(raw)
    if stripped is not None:
        clean = stripped
    elif raw.startswith(SEGMENT_STEM):
        clean = raw
    else:
        return SegmentIds(clean=raw, marketing=raw, operating=raw, recognized=False)
    return SegmentIds(
        clean=clean,
        marketing=MARKETING_PREFIX + clean,
        operating=OPERATING_PREFIX + clean,
    )


def passive_segment_ids(raw: str) -> SegmentIds:
    """Segment forms for a manually added (passive) segment.

    Passive ids are caller-chosen, so the marketing and operating prefixes
    are always applied to the bare id, whatever its shape.
    """
    raw = (raw or "").strip()
    clean = _strip_prefix(raw) or raw
    return SegmentIds(
        clean=clean,
        marketing=MARKETING_PREFIX + clean,
        operating=OPERATING_PREFIX + clean,
        recognized=is_recognized_segment_id(raw),
    )


def leg_ref_id(clean_segment_id: str) -> str:
    return f"{clean_segment_id}-leg0"


def segment_id_from_leg(leg_ref: str) -> str:
    """``seg123-leg0`` -> ``seg123``; other values unchanged."""
    return _LEG_SUFFIX.sub("", leg_ref or "")


def synthetic_id(kind: SyntheticKind, ordinal: int) -> str:
    """Zero-padded positional id, e.g. ``seg000000001`` for ordinal 1."""
    if ordinal < 1 or ordinal > 999_999_999:
        raise ValueError(f"ordinal out of range: {ordinal}")
    return f"{SyntheticKind(kind).value}{ordinal:09d}"


def pax_type_from_ref(pax_ref: str) -> str:
    """Passenger type encoded in a pax reference: ``ADT0`` -> ``ADT``."""
    return _PAX_REF_SUFFIX.sub("", pax_ref or "").upper()


@dataclass(frozen=True)
class IdentitySource:
    """Resolved ids for every segment and journey of one message.

    Exactly one mode applies to the whole message; segments and journeys
    are index-aligned with the caller's lists.
    """

    mode: IdentityMode
    segments: tuple[SegmentIds, ...] = ()
    journey_ids: tuple[str, ...] = ()
    _by_clean: dict = field(default_factory=dict, compare=False, repr=False)

    def segment(self, index: int) -> SegmentIds:
        return self.segments[index]

    def index_of(self, segment_ref: str) -> Optional[int]:
        """Position of the segment referenced in any of its forms."""
        clean = normalize_segment_id(segment_id_from_leg(segment_ref)).clean
        return self._by_clean.get(clean)


def resolve_identity(segment_ids: Sequence[str], journey_ids: Sequence[str]) -> IdentitySource:
    """Pick the identity mode for a message and resolve every id.

    Order mode applies only when every segment id is already in an airline
    form; otherwise all ids are synthesized so the message never mixes
    sources.
    """
    originals = [normalize_segment_id(s) for s in segment_ids]
    if originals and all(ids.recognized for ids in originals):
        mode = IdentityMode.ORDER
        segments = tuple(originals)
        journeys = tuple(
            j if j else synthetic_id(SyntheticKind.JOURNEY, n)
            for n, j in enumerate(journey_ids, start=1)
        )
    else:
        mode = IdentityMode.SYNTHETIC
        segments = tuple(
            normalize_segment_id(synthetic_id(SyntheticKind.SEGMENT, n))
            for n in range(1, len(segment_ids) + 1)
        )
        journeys = tuple(
            synthetic_id(SyntheticKind.JOURNEY, n) for n in range(1, len(journey_ids) + 1)
        )

    # Caller ids resolve by position even in synthetic mode.
    by_clean: dict[str, int] = {}
    for index, (original, resolved) in enumerate(zip(originals, segments)):
        by_clean.setdefault(original.clean, index)
        by_clean.setdefault(resolved.clean, index)
    return IdentitySource(mode=mode, segments=segments, journey_ids=journeys, _by_clean=by_clean)
