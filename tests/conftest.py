"""
Test Configuration
==================

Pytest fixtures for obligation discovery tests.

The browser is never launched: sessions are replaced by in-memory fakes
that serve recorded ABLIS markup per search phrase.
"""

import os
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "testing"

from services.obligation_discovery.models import ObligationRecord  # noqa: E402
from services.obligation_discovery.pipeline import ObligationDiscoveryPipeline  # noqa: E402
from services.obligation_discovery.scrapers.base import QuerySession  # noqa: E402


FIXTURES_DIR = Path(__file__).parent / "services" / "obligation_discovery" / "fixtures"


class FakeSession(QuerySession):
    """Serves canned markup (or raises) per search phrase and records calls."""

    def __init__(self, pages: dict[str, str | Exception] | None = None, default: str = "") -> None:
        self.pages = pages or {}
        self.default = default
        self.calls: list[tuple[str, str]] = []

    async def query(self, keywords: str, postcode: str) -> str:
        self.calls.append((keywords, postcode))
        page = self.pages.get(keywords, self.default)
        if isinstance(page, Exception):
            raise page
        return page

    @property
    def keywords(self) -> list[str]:
        return [k for k, _ in self.calls]


class FakeSessionFactory:
    """Stands in for ``open_session``; counts acquisitions and releases."""

    def __init__(self, session: FakeSession, start_error: Exception | None = None) -> None:
        self.session = session
        self.start_error = start_error
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def __call__(self) -> AsyncIterator[FakeSession]:
        if self.start_error is not None:
            raise self.start_error
        self.opened += 1
        try:
            yield self.session
        finally:
            self.closed += 1


@pytest.fixture
def sample_results_html() -> str:
    """Recorded ABLIS results page for a café in 3066."""
    return (FIXTURES_DIR / "ablis_cafe_3066.html").read_text(encoding="utf-8")


@pytest.fixture
def make_pipeline() -> Callable[..., tuple[ObligationDiscoveryPipeline, FakeSession, FakeSessionFactory]]:
    """Build a pipeline backed by a fake session."""

    def _make(
        pages: dict[str, str | Exception] | None = None,
        default: str = "",
        start_error: Exception | None = None,
        **kwargs: Any,
    ) -> tuple[ObligationDiscoveryPipeline, FakeSession, FakeSessionFactory]:
        session = FakeSession(pages, default)
        factory = FakeSessionFactory(session, start_error)
        pipeline = ObligationDiscoveryPipeline(session_factory=factory, **kwargs)
        return pipeline, session, factory

    return _make


@pytest.fixture
def make_record() -> Callable[..., ObligationRecord]:
    """Build an obligation record with sensible defaults."""

    def _make(**overrides: Any) -> ObligationRecord:
        data: dict[str, Any] = {
            "level": None,
            "regulator": "Liquor Control Victoria",
            "obligation": "Liquor licence",
            "source_url": "https://ablis.business.gov.au/licence/liquor",
            "activity": "Café / Restaurant",
            "postcode": "3066",
        }
        data.update(overrides)
        return ObligationRecord(**data)

    return _make
