"""
Result Extractor
================

Turns a raw ABLIS results page into obligation records.

The results markup is not a stable contract, so every field is read with an
ordered list of patterns and the first one that matches wins. Nothing here
depends on a full DOM: the page is cut into card segments and each segment
is read with regular expressions.

Version: 0.1.0
"""

import html
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import urljoin

from services.obligation_discovery.grouping import dedupe
from services.obligation_discovery.models import ObligationLevel, ObligationRecord


ABLIS_ORIGIN = "https://ablis.business.gov.au"

_FLAGS = re.IGNORECASE


def _class_pattern(*names: str) -> re.Pattern[str]:
    """Match an element carrying any of ``names`` as a class token and capture its body."""
    tokens = "|".join(re.escape(n) for n in names)
    return re.compile(
        rf'class="[^"]*?(?<![\w-])(?:{tokens})(?![\w-])[^"]*"[^>]*>([\s\S]*?)</[^>]+>',
        _FLAGS,
    )


@dataclass(frozen=True)
class ExtractionRules:
    """Patterns used to read one results page."""

    # Card boundaries; text before the first marker is page chrome
    card_markers: tuple[str, ...] = (
        "<article",
        '<li class="search-result',
        '<div class="result-card',
        '<div class="result"',
    )
    title_patterns: tuple[re.Pattern[str], ...] = (
        re.compile(r"<h3[^>]*>([\s\S]*?)</h3>", _FLAGS),
        re.compile(r"<h2[^>]*>([\s\S]*?)</h2>", _FLAGS),
        re.compile(r'<a[^>]*class="[^"]*title[^"]*"[^>]*>([\s\S]*?)</a>', _FLAGS),
    )
    regulator_patterns: tuple[re.Pattern[str], ...] = (
        _class_pattern("agency", "provider", "organisation", "regulator", "agency-name"),
    )
    level_patterns: tuple[re.Pattern[str], ...] = (
        _class_pattern("jurisdiction", "level", "gov-level"),
    )
    link_pattern: re.Pattern[str] = re.compile(r'<a[^>]+href="([^"]+)"', _FLAGS)
    origin: str = ABLIS_ORIGIN

    local_markers: tuple[str, ...] = ("council", "shire", "city of")
    state_markers: tuple[str, ...] = ("state",)
    federal_markers: tuple[str, ...] = ("commonwealth", "federal")

    _splitter: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        splitter = re.compile("|".join(re.escape(m) for m in self.card_markers), _FLAGS)
        object.__setattr__(self, "_splitter", splitter)

    @property
    def home_url(self) -> str:
        return self.origin.rstrip("/") + "/"

    def split_cards(self, markup: str) -> list[str]:
        """Cut a page into card segments."""
        pieces = self._splitter.split(markup)
        if len(pieces) == 1:
            return pieces
        return pieces[1:]


DEFAULT_RULES = ExtractionRules()


def first_match(patterns: Sequence[re.Pattern[str]], text: str) -> str | None:
    """Return the first capture of the first pattern that matches ``text``."""
    for pattern in patterns:
        match = pattern.search(text)
        if match is None:
            continue
        captured = next((g for g in match.groups() if g), None)
        if captured is not None:
            return captured
    return None


def clean_text(value: str | None) -> str | None:
    """Strip tags, decode entities and collapse whitespace; empty becomes None."""
    if not value:
        return None
    text = re.sub(r"<[^>]+>", " ", value)
    text = html.unescape(text)
    text = re.sub(r"\s+", " ", text).strip()
    return text or None


def infer_level(
    regulator: str | None,
    title: str | None,
    rules: ExtractionRules = DEFAULT_RULES,
) -> str | None:
    """
    Guess a jurisdiction tier from naming when the card has no level label.

    Council-style regulators are local; otherwise a title mentioning "state"
    is state and one mentioning the commonwealth is federal. This is a
    keyword heuristic and will misfile titles that use those words loosely.
    """
    if regulator:
        low = regulator.lower()
        if any(m in low for m in rules.local_markers):
            return ObligationLevel.LOCAL.value
    if title:
        low = title.lower()
        if any(m in low for m in rules.state_markers):
            return ObligationLevel.STATE.value
        if any(m in low for m in rules.federal_markers):
            return ObligationLevel.FEDERAL.value
    return None


class ResultExtractor:
    """
    Layout-agnostic reader for ABLIS results pages.

    Example:
        >>> extractor = ResultExtractor()
        >>> records = extractor.extract(page_html, "Café / Restaurant", "3066")
    """

    def __init__(self, rules: ExtractionRules | None = None) -> None:
        self.rules = rules or DEFAULT_RULES

    def extract(self, markup: str, activity: str, postcode: str) -> list[ObligationRecord]:
        """
        Extract obligation records from a results page.

        Args:
            markup: Page source returned by the query session
            activity: Query text that produced the page
            postcode: Postcode the query was scoped to

        Returns:
            Deduplicated records in page order
        """
        if not markup:
            return []

        records: list[ObligationRecord] = []
        for segment in self.rules.split_cards(markup):
            record = self._read_card(segment, activity, postcode)
            if record is not None:
                records.append(record)

        return dedupe(records)

    def _read_card(self, segment: str, activity: str, postcode: str) -> ObligationRecord | None:
        title = clean_text(first_match(self.rules.title_patterns, segment))
        regulator = clean_text(first_match(self.rules.regulator_patterns, segment))
        link = self._resolve_link(segment)

        # Blank or tag-only captures count as missing
        if not title and not regulator and not link:
            return None

        level = clean_text(first_match(self.rules.level_patterns, segment))
        if not level:
            level = infer_level(regulator, title, self.rules)

        return ObligationRecord(
            level=level,
            regulator=regulator,
            obligation=title,
            source_url=link or self.rules.home_url,
            activity=activity,
            postcode=postcode,
        )

    def _resolve_link(self, segment: str) -> str | None:
        match = self.rules.link_pattern.search(segment)
        if match is None:
            return None
        href = html.unescape(match.group(1)).strip()
        if not href:
            return None
        return urljoin(self.rules.home_url, href)
