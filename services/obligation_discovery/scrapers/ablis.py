"""
ABLIS Search Session
====================

Drives the ABLIS activity search (ablis.business.gov.au) through a headless
browser with Playwright.

ABLIS has no public API and its markup changes without notice, so every
control is located through a list of selector variants (see
``SelectorTable``). A session is opened once per discovery run and closed on
every exit path.

Version: 0.1.0
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

from playwright.async_api import Browser, Locator, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from services.obligation_discovery.errors import (
    ControlsNotFound,
    QueryError,
    QueryTimeout,
    SessionError,
)
from services.obligation_discovery.scrapers.base import QuerySession, SessionConfig
from shared.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

BROWSER_ARGS = ["--no-sandbox", "--disable-dev-shm-usage"]


@dataclass
class SearchControls:
    """The three controls a search needs."""

    keyword: Locator
    location: Locator
    submit: Locator


class AblisSession(QuerySession):
    """
    Search session bound to one browser page.

    Example:
        >>> async with open_session(config) as session:
        ...     markup = await session.query("Café / Restaurant", "3066")
    """

    def __init__(self, page: Page, config: SessionConfig | None = None) -> None:
        self.page = page
        self.config = config or SessionConfig()
        self._query_count = 0

    @property
    def query_count(self) -> int:
        """Number of queries attempted on this session."""
        return self._query_count

    async def query(self, keywords: str, postcode: str) -> str:
        """
        Submit a keyword + location search and return the page source.

        A missing results indicator is tolerated: the page is returned as-is
        after the wait budget runs out.

        Args:
            keywords: Activity or phrase to search for
            postcode: Location to scope the search to

        Returns:
            Page markup after submission

        Raises:
            ControlsNotFound: No selector matched a required control
            QueryError: Navigation or interaction failed
            SessionError: The page has been closed or crashed
        """
        if self.page.is_closed():
            raise SessionError("Browser page is closed")

        self._query_count += 1
        try:
            await self.page.goto(
                self.config.search_url,
                wait_until="domcontentloaded",
                timeout=self.config.navigation_timeout_ms,
            )

            controls = await self._locate_controls()
            await controls.keyword.fill(keywords)
            await controls.location.fill(str(postcode))
            await controls.submit.click()

            logger.debug("ablis_query_submitted", keywords=keywords, postcode=postcode)

            try:
                await self._await_results()
            except QueryTimeout as e:
                logger.warning(
                    "ablis_results_wait_timeout",
                    keywords=keywords,
                    timeout_ms=self.config.results_timeout_ms,
                    error=str(e),
                )

            return await self.page.content()

        except PlaywrightError as e:
            if self.page.is_closed():
                raise SessionError(f"Browser page closed during query: {e}") from e
            raise QueryError(f"ABLIS query failed for {keywords!r}: {e}") from e

    async def _locate_controls(self) -> SearchControls:
        selectors = self.config.selectors
        keyword = await self._first_present(selectors.keyword)
        location = await self._first_present(selectors.location)
        submit = await self._first_present(selectors.submit)

        missing = [
            name
            for name, found in (("keyword", keyword), ("location", location), ("submit", submit))
            if found is None
        ]
        if missing:
            logger.warning("ablis_controls_not_found", missing=missing, url=self.page.url)
            raise ControlsNotFound(missing)

        return SearchControls(keyword=keyword, location=location, submit=submit)

    async def _first_present(self, candidates: tuple[str, ...]) -> Locator | None:
        """Return the first element matched by the earliest candidate selector."""
        for selector in candidates:
            locator = self.page.locator(selector)
            if await locator.count() > 0:
                return locator.first
        return None

    async def _await_results(self) -> None:
        indicator = ", ".join(self.config.selectors.results_indicators)
        try:
            await self.page.wait_for_selector(
                indicator,
                state="attached",
                timeout=self.config.results_timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            raise QueryTimeout(
                f"No results indicator within {self.config.results_timeout_ms} ms"
            ) from e


async def _release(browser: Browser | None, playwright: Playwright | None) -> None:
    try:
        if browser is not None:
            await browser.close()
    finally:
        if playwright is not None:
            await playwright.stop()


@asynccontextmanager
async def open_session(config: SessionConfig | None = None) -> AsyncIterator[AblisSession]:
    """
    Launch a browser, yield a search session and always tear it down.

    Raises:
        SessionError: The browser could not be started
    """
    config = config or SessionConfig()
    playwright: Playwright | None = None
    browser: Browser | None = None

    try:
        playwright = await async_playwright().start()
        launcher = getattr(playwright, config.engine)
        browser = await launcher.launch(headless=config.headless, args=BROWSER_ARGS)

        context_options: dict[str, Any] = {
            "viewport": {"width": config.window_width, "height": config.window_height},
        }
        if config.user_agent:
            context_options["user_agent"] = config.user_agent
        context = await browser.new_context(**context_options)
        page = await context.new_page()
    except Exception as e:
        logger.error(
            "browser_session_failed",
            engine=config.engine,
            error=str(e),
            error_type=type(e).__name__,
        )
        await _release(browser, playwright)
        raise SessionError(f"Could not start {config.engine} session: {e}") from e
    except BaseException:
        # Cancellation still tears down whatever was started
        await _release(browser, playwright)
        raise

    logger.debug("browser_session_opened", engine=config.engine, headless=config.headless)
    session = AblisSession(page, config)
    try:
        yield session
    finally:
        await _release(browser, playwright)
        logger.debug("browser_session_closed", queries=session.query_count)


async def with_session(
    fn: Callable[[AblisSession], Awaitable[T]],
    config: SessionConfig | None = None,
) -> T:
    """Run ``fn`` inside a fresh session and return its result."""
    async with open_session(config) as session:
        return await fn(session)
