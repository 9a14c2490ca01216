"""
Base Session Module
===================

Configuration and abstract interface for browser-driven search sessions.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import get_args

from shared.config import BrowserEngine, Settings


@dataclass(frozen=True)
class SelectorTable:
    """
    Candidate CSS selectors per logical control, most specific first.

    The first candidate present on the page is used for each control.
    """

    keyword: tuple[str, ...] = (
        "input#keyword",
        "input[name='keyword']",
        "input[type='search']",
    )
    location: tuple[str, ...] = (
        "input#location",
        "input[name='location']",
        "input[placeholder*='postcode']",
    )
    submit: tuple[str, ...] = (
        "button[type='submit']",
        "button#search",
        "button[class*='search']",
    )
    # Any of these appearing means the results have rendered
    results_indicators: tuple[str, ...] = (
        ".search-result",
        ".result",
        ".result-card",
        ".results",
        ".content",
    )


DEFAULT_SELECTORS = SelectorTable()


@dataclass
class SessionConfig:
    """Configuration for a search session."""

    search_url: str = "https://ablis.business.gov.au/search/activity"

    # Browser
    engine: BrowserEngine = "chromium"
    headless: bool = True
    window_width: int = 1280
    window_height: int = 1024
    user_agent: str | None = None

    # Timeouts (milliseconds)
    navigation_timeout_ms: int = 30_000
    results_timeout_ms: int = 10_000

    selectors: SelectorTable = DEFAULT_SELECTORS

    def __post_init__(self) -> None:
        if self.engine not in get_args(BrowserEngine):
            raise ValueError(
                f"Unsupported browser engine {self.engine!r}; "
                f"expected one of {', '.join(get_args(BrowserEngine))}"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionConfig":
        """Build a session config from application settings."""
        browser = settings.browser
        return cls(
            search_url=settings.ablis.activity_search_url,
            engine=browser.engine,
            headless=browser.headless,
            window_width=browser.window_width,
            window_height=browser.window_height,
            user_agent=browser.user_agent,
            navigation_timeout_ms=browser.navigation_timeout_ms,
            results_timeout_ms=browser.results_timeout_ms,
        )


class QuerySession(ABC):
    """
    One live search session.

    Queries on a session run one at a time; a session is never shared
    between discovery runs.
    """

    @abstractmethod
    async def query(self, keywords: str, postcode: str) -> str:
        """
        Run one search and return the resulting page markup.

        Raises:
            QueryError: The search could not be performed
            SessionError: The session itself is no longer usable
        """
        ...
