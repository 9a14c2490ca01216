"""
Obligation Discovery Models
===========================

Request, record and result models for obligation discovery.

Wire names are camelCase (``activityDescription``, ``sourceUrl``);
Python attributes are snake_case. Both spellings are accepted on input.

Version: 0.1.0
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanging camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class ObligationLevel(str, Enum):
    """Jurisdiction tier of an obligation."""

    LOCAL = "local"
    STATE = "state"
    FEDERAL = "federal"
    UNKNOWN = "unknown"


class BusinessStructure(str, Enum):
    """Legal structure of the business."""

    SOLE_TRADER = "sole-trader"
    PARTNERSHIP = "partnership"
    COMPANY = "company"
    NON_PROFIT = "non-profit"


class QueryKind(str, Enum):
    """Why a query was issued within a run."""

    PRIMARY = "primary"
    ANZSIC = "anzsic"
    SUPPLEMENTAL = "supplemental"


# ============================================================================
# Request
# ============================================================================


class AlcoholFlags(CamelModel):
    """Alcohol handling."""

    serve_on_premise: bool = False
    takeaway: bool = False
    brew_or_distil: bool = False

    @property
    def declared(self) -> bool:
        return self.serve_on_premise or self.takeaway or self.brew_or_distil


class MedicineFlags(CamelModel):
    """Scheduled medicine handling."""

    dispense: bool = False
    wholesale: bool = False
    store_only: bool = False
    schedules: list[str] = Field(default_factory=list)

    @property
    def declared(self) -> bool:
        return self.dispense or self.wholesale or self.store_only


class ChemicalFlags(CamelModel):
    """Hazardous chemical handling."""

    manufacture: bool = False
    import_or_export: bool = False
    transport: bool = False
    store: bool = False

    @property
    def declared(self) -> bool:
        return self.manufacture or self.import_or_export or self.transport or self.store


class ControlledSubstances(CamelModel):
    """
    Regulated-substance declarations.

    ``schedules`` at this level is accepted for older clients that sent the
    medicine schedules beside, rather than inside, ``medicines``.
    """

    uses_controlled: bool = False
    alcohol: AlcoholFlags | None = None
    medicines: MedicineFlags | None = None
    chemicals: ChemicalFlags | None = None
    schedules: list[str] = Field(default_factory=list)

    @property
    def medicine_schedules(self) -> list[str]:
        """Schedules declared for medicines, nested list first."""
        if self.medicines and self.medicines.schedules:
            return list(self.medicines.schedules)
        return list(self.schedules)


class DiscoveryRequest(CamelModel):
    """
    Input to one discovery run.

    ``postcode`` and ``activity_description`` are mandatory, but presence is
    checked by the pipeline so that absence is reported with the field name.
    """

    postcode: str | None = None
    activity_description: str | None = None
    anzsic_code: str | None = None
    business_structure: BusinessStructure | None = None
    controlled_substances: ControlledSubstances | None = None


# ============================================================================
# Records and results
# ============================================================================


class ObligationRecord(CamelModel):
    """One obligation reference found on a results page."""

    model_config = ConfigDict(frozen=True)

    level: str | None = None
    regulator: str | None = None
    obligation: str | None = None
    source_url: str | None = None
    activity: str
    postcode: str

    @property
    def identity(self) -> tuple[str | None, str | None, str | None]:
        """Deduplication key: (obligation, regulator, source_url)."""
        return (self.obligation, self.regulator, self.source_url)


class GroupedObligations(CamelModel):
    """Records partitioned by jurisdiction tier."""

    model_config = ConfigDict(frozen=True)

    local: list[ObligationRecord] = Field(default_factory=list)
    state: list[ObligationRecord] = Field(default_factory=list)
    federal: list[ObligationRecord] = Field(default_factory=list)
    unknown: list[ObligationRecord] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.local) + len(self.state) + len(self.federal) + len(self.unknown)


class Jurisdiction(CamelModel):
    """Resolved location context."""

    state: str | None = None
    inferred_lga: str | None = None


class DatasetReference(CamelModel):
    """An external source consulted during the run."""

    name: str
    url: str


class QueryOutcome(CamelModel):
    """Provenance of one query issued within the session."""

    keywords: str
    kind: QueryKind
    record_count: int = 0
    ok: bool = True
    error: str | None = None


class RequestEcho(CamelModel):
    """The request as understood by the pipeline."""

    postcode: str
    state: str | None = None
    activity_description: str
    anzsic_code: str | None = None
    business_structure: BusinessStructure | None = None
    controlled_substances: ControlledSubstances | None = None


class DiscoveryResult(CamelModel):
    """Response envelope of a completed discovery run."""

    model_config = ConfigDict(frozen=True)

    ok: bool = True
    input: RequestEcho
    jurisdiction: Jurisdiction
    datasets_used: list[DatasetReference]
    results: GroupedObligations
    queries: list[QueryOutcome] = Field(default_factory=list)
    prompt_for_ai: dict[str, Any] = Field(default_factory=dict)
    confidence: str
