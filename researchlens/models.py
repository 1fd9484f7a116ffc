"""
Records produced by the literature analyzer and the surrounding services.

Everything here is a plain frozen dataclass so results can be shared between
threads and handed to any presentation layer; `to_plain()` turns a record into
JSON-ready builtins.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class TherapeuticArea(str, Enum):
    """Therapeutic-area tag, in keyword-table iteration order."""

    CARDIOVASCULAR = "cardiovascular"
    ONCOLOGY = "oncology"
    NEUROLOGY = "neurology"
    DIABETES = "diabetes"
    ORTHOPEDIC = "orthopedic"
    RESPIRATORY = "respiratory"
    GASTROENTEROLOGY = "gastroenterology"
    INFECTIOUS = "infectious"
    DERMATOLOGY = "dermatology"
    OPHTHALMOLOGY = "ophthalmology"
    UROLOGY = "urology"
    PSYCHIATRY = "psychiatry"
    GENERAL = "general"


class ProductType(str, Enum):
    DEVICE = "device"
    DRUG = "drug"
    THERAPY = "therapy"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


PHASE_FILTERS = ("all", "phase1", "phase2", "phase3", "registry", "meta")
QUALITY_FILTERS = ("all", "high", "medium", "low")


def _normalise_option(value: Any) -> str:
    if value is None:
        return "all"
    text = str(value.value if isinstance(value, Enum) else value).strip().lower()
    return text or "all"


@dataclass(frozen=True)
class AnalysisFilters:
    """Optional constraints applied while synthesising studies.

    "all" (or an absent value) means no constraint for every option.
    """

    therapeutic: str = "all"
    phase: str = "all"
    quality: str = "all"

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "AnalysisFilters":
        if data is None:
            return cls()
        if isinstance(data, cls):
            return data
        therapeutic = data.get("therapeutic", data.get("therapeutic_hint", data.get("therapeuticHint")))
        return cls(
            therapeutic=_normalise_option(therapeutic),
            phase=_normalise_option(data.get("phase")),
            quality=_normalise_option(data.get("quality")),
        )

    @property
    def therapeutic_hint(self) -> Optional[TherapeuticArea]:
        if self.therapeutic == "all":
            return None
        try:
            return TherapeuticArea(self.therapeutic)
        except ValueError:
            return None

    def active_count(self) -> int:
        return sum(1 for value in (self.therapeutic, self.phase, self.quality) if value != "all")


@dataclass(frozen=True)
class Study:
    id: str
    title: str
    phase: str
    design: str
    sample_size: int
    endpoint_success: bool
    ich_gcp: bool
    confidence: int
    therapeutic: str = TherapeuticArea.GENERAL.value

    @property
    def evidence_strength(self) -> str:
        if self.confidence >= 80:
            return "strong"
        if self.confidence >= 60:
            return "moderate"
        return "limited"


@dataclass(frozen=True)
class RiskFactor:
    factor: str
    risk: RiskLevel
    rationale: str


@dataclass(frozen=True)
class Milestone:
    quarter: str
    probability: float
    milestone: str


@dataclass(frozen=True)
class MarketAnalysis:
    market_size: str
    growth_rate: str
    key_drivers: tuple[str, ...]
    competitive_landscape: str


@dataclass(frozen=True)
class CompetitiveIntelligence:
    market_leaders: tuple[str, ...]
    emerging_players: tuple[str, ...]
    market_concentration: str
    barrier_to_entry: str


@dataclass(frozen=True)
class StrategicInsights:
    key_opportunities: tuple[str, ...]
    strategic_threats: tuple[str, ...]
    success_factors: tuple[str, ...]


@dataclass(frozen=True)
class AnalysisResult:
    query: str
    therapeutic: TherapeuticArea
    product_type: ProductType
    concepts: tuple[str, ...]
    summary: str
    studies: tuple[Study, ...]
    risk_factors: tuple[RiskFactor, ...]
    recommendations: tuple[str, ...]
    timeline: tuple[Milestone, ...]
    confidence: int
    regulatory_pathway: str
    market_analysis: MarketAnalysis
    competitive_intelligence: CompetitiveIntelligence
    strategic_insights: StrategicInsights
    filters: AnalysisFilters = field(default_factory=AnalysisFilters)

    def with_studies(self, studies: Sequence[Study], filters: Optional[AnalysisFilters] = None) -> "AnalysisResult":
        """Return a copy carrying a freshly generated studies list."""
        return replace(self, studies=tuple(studies), filters=filters or self.filters)

    def to_dict(self) -> dict:
        return to_plain(self)


def to_plain(obj: Any) -> Any:
    """Recursively convert dataclasses, enums and tuples into JSON-ready builtins."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_plain(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [to_plain(item) for item in obj]
    if isinstance(obj, dict):
        return {key: to_plain(value) for key, value in obj.items()}
    return obj
