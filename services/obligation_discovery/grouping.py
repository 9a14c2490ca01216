"""
Deduplication and Jurisdiction Grouping
=======================================

Pure functions over obligation records: collapse duplicates found by
different queries, partition by jurisdiction tier and guess the local
government area from regulator names.

Version: 0.1.0
"""

from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

from services.obligation_discovery.models import (
    GroupedObligations,
    ObligationLevel,
    ObligationRecord,
)


T = TypeVar("T")

LGA_MARKERS: tuple[str, ...] = ("council", "city of", "shire")


def dedupe_by(items: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    """Keep the first item for each key, preserving order."""
    seen: set[Hashable] = set()
    out: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return out


def dedupe(records: Iterable[ObligationRecord]) -> list[ObligationRecord]:
    """
    Collapse records sharing (obligation, regulator, source_url).

    First occurrence wins; ``activity`` and other fields do not take part
    in identity, so the same obligation surfaced by two queries keeps the
    provenance of the earlier one.
    """
    return dedupe_by(records, lambda r: r.identity)


def classify_level(level: str | None) -> ObligationLevel:
    """Map a free-text level label onto a tier by substring."""
    low = (level or "").lower()
    if "local" in low:
        return ObligationLevel.LOCAL
    if "state" in low:
        return ObligationLevel.STATE
    if "federal" in low or "commonwealth" in low:
        return ObligationLevel.FEDERAL
    return ObligationLevel.UNKNOWN


def group_by_level(records: Iterable[ObligationRecord]) -> GroupedObligations:
    """Partition records into local, state, federal and unknown buckets."""
    buckets: dict[ObligationLevel, list[ObligationRecord]] = {lvl: [] for lvl in ObligationLevel}
    for record in records:
        buckets[classify_level(record.level)].append(record)

    return GroupedObligations(
        local=buckets[ObligationLevel.LOCAL],
        state=buckets[ObligationLevel.STATE],
        federal=buckets[ObligationLevel.FEDERAL],
        unknown=buckets[ObligationLevel.UNKNOWN],
    )


def infer_lga(records: Iterable[ObligationRecord]) -> str | None:
    """
    Return the first regulator that reads like a council.

    Matches names such as "City of Yarra" or "Yarra City Council". The first
    hit in input order is returned, not the most common one.
    """
    for record in records:
        regulator = (record.regulator or "").lower()
        if any(marker in regulator for marker in LGA_MARKERS):
            return record.regulator
    return None
