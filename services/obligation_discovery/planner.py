"""
Supplemental Query Planner
==========================

Derives narrow follow-up searches from regulated-substance declarations.

A broad activity search rarely surfaces liquor, poisons or dangerous goods
regimes, so each declared category adds a few fixed search phrases that are
run in the same browser session as the primary query.

Version: 0.1.0
"""

from dataclasses import dataclass

from services.obligation_discovery.grouping import dedupe_by
from services.obligation_discovery.models import ControlledSubstances


@dataclass(frozen=True)
class SupplementalPhrases:
    """Search phrases contributed by each regulated category."""

    alcohol: tuple[str, ...] = ("liquor licence", "responsible service of alcohol")
    medicines: tuple[str, ...] = ("scheduled medicines", "pharmacy")
    medicine_schedules: tuple[str, ...] = ("poisons permit",)
    chemicals: tuple[str, ...] = ("hazardous chemicals", "dangerous goods")


DEFAULT_PHRASES = SupplementalPhrases()


def plan_supplemental_queries(
    substances: ControlledSubstances,
    phrases: SupplementalPhrases = DEFAULT_PHRASES,
) -> list[str]:
    """
    Plan supplemental search phrases for declared substances.

    Callers only invoke this when ``uses_controlled`` is set.

    Args:
        substances: Declared substance flags
        phrases: Phrase table per category

    Returns:
        Ordered, deduplicated search phrases
    """
    wanted: list[str] = []

    if substances.alcohol and substances.alcohol.declared:
        wanted.extend(phrases.alcohol)

    if substances.medicines and substances.medicines.declared:
        wanted.extend(phrases.medicines)
        if substances.medicine_schedules:
            wanted.extend(phrases.medicine_schedules)

    if substances.chemicals and substances.chemicals.declared:
        wanted.extend(phrases.chemicals)

    return dedupe_by(wanted, lambda phrase: phrase)
