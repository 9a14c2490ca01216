"""
Obligation Discovery Pipeline
=============================

Runs one discovery: resolve the state from the postcode, open a single
browser session, issue the primary, ANZSIC and supplemental searches one
after another, then merge, deduplicate and group everything found.

Failure policy:
- a missing postcode or activity is rejected before any browser starts
- a failed search contributes no records and the run carries on
- a browser session that cannot start (or dies) aborts the run

Version: 0.1.0
"""

from collections.abc import Callable, Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from services.obligation_discovery.errors import QueryError, ValidationError
from services.obligation_discovery.extraction import ExtractionRules, ResultExtractor
from services.obligation_discovery.grouping import dedupe, group_by_level, infer_lga
from services.obligation_discovery.jurisdiction import POSTCODE_RANGES, PostcodeRange, resolve_state
from services.obligation_discovery.models import (
    DatasetReference,
    DiscoveryRequest,
    DiscoveryResult,
    Jurisdiction,
    ObligationRecord,
    QueryKind,
    QueryOutcome,
    RequestEcho,
)
from services.obligation_discovery.planner import (
    DEFAULT_PHRASES,
    SupplementalPhrases,
    plan_supplemental_queries,
)
from services.obligation_discovery.scrapers import QuerySession, SessionConfig, open_session
from shared.config import settings
from shared.logging import get_logger


logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[QuerySession]]


class JurisdictionConfidence(str, Enum):
    """Qualitative confidence in the location context of a result."""

    RESOLVED = "Jurisdiction resolved by postcode to state. LGA inferred from regulator text if present."
    UNRESOLVED = "Jurisdiction could not be resolved from postcode."


@dataclass(frozen=True)
class PlannedQuery:
    """A search to run within the session."""

    keywords: str
    kind: QueryKind


def default_datasets() -> list[DatasetReference]:
    """External sources consulted by every run."""
    return [
        DatasetReference(name="ABLIS Activity Search", url=settings.ablis.activity_search_url),
        DatasetReference(name="ABS ASGS LGA name criteria", url=settings.ablis.lga_reference_url),
    ]


def _default_session_factory() -> AbstractAsyncContextManager[QuerySession]:
    return open_session(SessionConfig.from_settings(settings))


class ObligationDiscoveryPipeline:
    """
    Orchestrates one obligation discovery run per call.

    The pipeline holds only immutable configuration, so one instance can
    serve concurrent runs; each run opens its own session.

    Example:
        >>> pipeline = ObligationDiscoveryPipeline()
        >>> result = await pipeline.discover(
        ...     {"postcode": "3066", "activityDescription": "Café / Restaurant"}
        ... )
        >>> result.jurisdiction.state
        'VIC'
    """

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        extractor: ResultExtractor | None = None,
        postcode_ranges: Sequence[PostcodeRange] = POSTCODE_RANGES,
        phrases: SupplementalPhrases = DEFAULT_PHRASES,
        datasets: Sequence[DatasetReference] | None = None,
    ) -> None:
        self.session_factory = session_factory or _default_session_factory
        self.extractor = extractor or ResultExtractor(ExtractionRules(origin=settings.ablis.origin))
        self.postcode_ranges = tuple(postcode_ranges)
        self.phrases = phrases
        self.datasets = list(datasets) if datasets is not None else default_datasets()

    async def discover(self, payload: DiscoveryRequest | Mapping[str, Any]) -> DiscoveryResult:
        """
        Discover obligations for a business location and activity.

        Args:
            payload: Request model, or its wire-format mapping

        Returns:
            Grouped result envelope

        Raises:
            ValidationError: postcode or activity description missing
            SessionError: the browser session could not be used
        """
        request = self.validate(payload)
        postcode = request.postcode or ""
        activity = request.activity_description or ""

        state = resolve_state(postcode, self.postcode_ranges)
        planned = self.plan_queries(request)

        logger.info(
            "discovery_started",
            postcode=postcode,
            state=state,
            queries=len(planned),
        )

        records: list[ObligationRecord] = []
        outcomes: list[QueryOutcome] = []
        async with self.session_factory() as session:
            for query in planned:
                found, outcome = await self._run_query(session, query, postcode)
                records.extend(found)
                outcomes.append(outcome)

        # Dedupe across queries, not per query, so repeats collapse in the output
        merged = dedupe(records)
        groups = group_by_level(merged)
        inferred_lga = infer_lga(merged)
        confidence = (
            JurisdictionConfidence.RESOLVED if state else JurisdictionConfidence.UNRESOLVED
        )

        logger.info(
            "discovery_completed",
            postcode=postcode,
            state=state,
            inferred_lga=inferred_lga,
            records=len(merged),
            failed_queries=sum(1 for o in outcomes if not o.ok),
        )

        return DiscoveryResult(
            input=RequestEcho(
                postcode=postcode,
                state=state,
                activity_description=activity,
                anzsic_code=request.anzsic_code,
                business_structure=request.business_structure,
                controlled_substances=request.controlled_substances,
            ),
            jurisdiction=Jurisdiction(state=state, inferred_lga=inferred_lga),
            datasets_used=self.datasets,
            results=groups,
            queries=outcomes,
            prompt_for_ai=self._build_prompt(request, state, inferred_lga),
            confidence=confidence.value,
        )

    def validate(self, payload: DiscoveryRequest | Mapping[str, Any]) -> DiscoveryRequest:
        """Coerce a payload into a request with its mandatory fields present."""
        if isinstance(payload, DiscoveryRequest):
            request = payload
        else:
            try:
                request = DiscoveryRequest.model_validate(payload or {})
            except PydanticValidationError as e:
                error = e.errors()[0]
                field = ".".join(str(part) for part in error["loc"]) or None
                raise ValidationError(f"{field or 'request'}: {error['msg']}", field=field) from e

        updates: dict[str, str] = {}
        for attr, wire_name in (("postcode", "postcode"), ("activity_description", "activityDescription")):
            value = (getattr(request, attr) or "").strip()
            if not value:
                raise ValidationError(f"{wire_name} is required", field=wire_name)
            updates[attr] = value

        return request.model_copy(update=updates)

    def plan_queries(self, request: DiscoveryRequest) -> list[PlannedQuery]:
        """List the searches a run will issue, in order."""
        activity = (request.activity_description or "").strip()
        planned = [PlannedQuery(activity, QueryKind.PRIMARY)]

        if request.anzsic_code:
            planned.append(PlannedQuery(f"{activity} {request.anzsic_code}", QueryKind.ANZSIC))

        substances = request.controlled_substances
        if substances and substances.uses_controlled:
            for phrase in plan_supplemental_queries(substances, self.phrases):
                planned.append(PlannedQuery(phrase, QueryKind.SUPPLEMENTAL))

        return planned

    async def _run_query(
        self,
        session: QuerySession,
        query: PlannedQuery,
        postcode: str,
    ) -> tuple[list[ObligationRecord], QueryOutcome]:
        try:
            markup = await session.query(query.keywords, postcode)
        except QueryError as e:
            logger.warning(
                "discovery_query_failed",
                keywords=query.keywords,
                kind=query.kind.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return [], QueryOutcome(
                keywords=query.keywords,
                kind=query.kind,
                ok=False,
                error=str(e),
            )

        found = self.extractor.extract(markup, query.keywords, postcode)
        logger.debug(
            "discovery_query_completed",
            keywords=query.keywords,
            kind=query.kind.value,
            records=len(found),
        )
        return found, QueryOutcome(
            keywords=query.keywords,
            kind=query.kind,
            record_count=len(found),
        )

    @staticmethod
    def _build_prompt(
        request: DiscoveryRequest,
        state: str | None,
        inferred_lga: str | None,
    ) -> dict[str, Any]:
        """Framing for a downstream summariser of the grouped obligations."""
        substances = request.controlled_substances
        return {
            "objective": (
                "Explain obligations grouped by jurisdiction. "
                "Flag overlaps and possible conflicts. Provide links."
            ),
            "context": {
                "location": {
                    "postcode": request.postcode,
                    "state": state,
                    "inferredLga": inferred_lga,
                },
                "activity": request.activity_description,
                "anzsicCode": request.anzsic_code,
                "businessStructure": (
                    request.business_structure.value if request.business_structure else None
                ),
                "controlledSubstances": (
                    substances.model_dump(by_alias=True) if substances else None
                ),
            },
            "dataShape": {
                "local": "Array of {regulator, obligation, sourceUrl}",
                "state": "Array of {regulator, obligation, sourceUrl}",
                "federal": "Array of {regulator, obligation, sourceUrl}",
            },
        }


@lru_cache
def get_pipeline() -> ObligationDiscoveryPipeline:
    """Shared pipeline instance configured from settings."""
    return ObligationDiscoveryPipeline()


async def discover(payload: DiscoveryRequest | Mapping[str, Any]) -> DiscoveryResult:
    """Run one discovery with the default pipeline."""
    return await get_pipeline().discover(payload)
