"""
Search Sessions
===============

Browser-driven sessions against obligation search sites.

Supported sources:
- ABLIS activity search (ablis.business.gov.au)

Version: 0.1.0
"""

from services.obligation_discovery.scrapers.ablis import (
    AblisSession,
    open_session,
    with_session,
)
from services.obligation_discovery.scrapers.base import (
    DEFAULT_SELECTORS,
    QuerySession,
    SelectorTable,
    SessionConfig,
)

__all__ = [
    # Base
    "DEFAULT_SELECTORS",
    "QuerySession",
    "SelectorTable",
    "SessionConfig",
    # Implementations
    "AblisSession",
    "open_session",
    "with_session",
]
