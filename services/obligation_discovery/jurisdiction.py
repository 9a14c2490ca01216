"""
Jurisdiction Resolver
=====================

Maps an Australian postcode to its state or territory.

The canonical table is coarse (numeric ranges, first match wins) and stands
in for a proper ABS ASGS postcode-to-area join.

Version: 0.1.0
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class PostcodeRange:
    """An inclusive numeric postcode range belonging to one state."""

    low: int
    high: int
    state: str

    def __contains__(self, postcode: int) -> bool:
        return self.low <= postcode <= self.high

    def overlaps(self, other: "PostcodeRange") -> bool:
        return self.low <= other.high and other.low <= self.high


POSTCODE_RANGES: tuple[PostcodeRange, ...] = (
    PostcodeRange(200, 299, "ACT"),
    PostcodeRange(2600, 2618, "ACT"),
    PostcodeRange(2900, 2999, "ACT"),
    PostcodeRange(800, 899, "NT"),
    PostcodeRange(1000, 2599, "NSW"),
    PostcodeRange(2619, 2898, "NSW"),
    PostcodeRange(3000, 3999, "VIC"),
    PostcodeRange(4000, 4999, "QLD"),
    PostcodeRange(5000, 5799, "SA"),
    PostcodeRange(6000, 6799, "WA"),
    PostcodeRange(7000, 7799, "TAS"),
)


_DIGITS = re.compile(r"[0-9]+")


def find_overlaps(
    ranges: Sequence[PostcodeRange],
) -> list[tuple[PostcodeRange, PostcodeRange]]:
    """Return every pair of ranges in the table that share a postcode."""
    clashes = []
    for i, first in enumerate(ranges):
        for second in ranges[i + 1 :]:
            if first.overlaps(second):
                clashes.append((first, second))
    return clashes


def resolve_state(
    postcode: str | int | None,
    ranges: Iterable[PostcodeRange] = POSTCODE_RANGES,
) -> str | None:
    """
    Resolve a postcode to a state/territory code.

    Args:
        postcode: Postcode as entered (``"3066"``, ``"0800"`` or an int)
        ranges: Ordered range table; the first containing range wins

    Returns:
        State code such as ``"VIC"``, or None when the postcode is not
        numeric or falls outside every range
    """
    if postcode is None:
        return None
    text = str(postcode).strip()
    if not _DIGITS.fullmatch(text):
        return None
    number = int(text)

    for postcode_range in ranges:
        if number in postcode_range:
            return postcode_range.state
    return None
