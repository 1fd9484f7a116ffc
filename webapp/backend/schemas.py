"""
Pydantic models for request and response payloads.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from researchlens.models import ProductType, TherapeuticArea


class FiltersPayload(BaseModel):
    therapeutic: str = Field("all", description="Therapeutic area hint, or 'all'.")
    phase: str = Field("all", description="phase1 | phase2 | phase3 | registry | meta | all")
    quality: str = Field("all", description="high | medium | low | all")


class AnalyzeRequest(BaseModel):
    query: str = Field(..., description="Free-text research question (at least 5 characters).")
    filters: FiltersPayload = Field(default_factory=FiltersPayload)

    class Config:
        json_schema_extra = {
            "example": {
                "query": "CAR-T cell therapy cardiac toxicity",
                "filters": {"therapeutic": "all", "phase": "phase3", "quality": "high"},
            }
        }


class StudyPayload(BaseModel):
    id: str
    title: str
    phase: str
    design: str
    sample_size: int
    endpoint_success: bool
    ich_gcp: bool
    confidence: int
    therapeutic: str = TherapeuticArea.GENERAL.value


class RiskFactorPayload(BaseModel):
    factor: str
    risk: str
    rationale: str


class MilestonePayload(BaseModel):
    quarter: str
    probability: float
    milestone: str


class MarketAnalysisPayload(BaseModel):
    market_size: str
    growth_rate: str
    key_drivers: List[str]
    competitive_landscape: str


class CompetitiveIntelligencePayload(BaseModel):
    market_leaders: List[str]
    emerging_players: List[str]
    market_concentration: str
    barrier_to_entry: str


class StrategicInsightsPayload(BaseModel):
    key_opportunities: List[str]
    strategic_threats: List[str]
    success_factors: List[str]


class AnalyzeResponse(BaseModel):
    query: str
    therapeutic: TherapeuticArea
    product_type: ProductType
    concepts: List[str]
    summary: str
    studies: List[StudyPayload]
    risk_factors: List[RiskFactorPayload]
    recommendations: List[str]
    timeline: List[MilestonePayload]
    confidence: int
    regulatory_pathway: str
    market_analysis: MarketAnalysisPayload
    competitive_intelligence: CompetitiveIntelligencePayload
    strategic_insights: StrategicInsightsPayload
    filters: FiltersPayload


class StudiesRequest(BaseModel):
    therapeutic: TherapeuticArea
    product_type: ProductType
    concepts: List[str] = Field(default_factory=list)
    filters: FiltersPayload = Field(default_factory=FiltersPayload)

    class Config:
        json_schema_extra = {
            "example": {
                "therapeutic": "oncology",
                "product_type": "therapy",
                "concepts": ["car-t", "cardiac"],
                "filters": {"quality": "high"},
            }
        }


class StudiesResponse(BaseModel):
    studies: List[StudyPayload]
    filters: FiltersPayload


class IntelligenceRequest(BaseModel):
    query: Optional[str] = Field(None, description="Optional query; omit for the generic report.")
    filters: FiltersPayload = Field(default_factory=FiltersPayload)


class AlertPayload(BaseModel):
    id: int
    type: str
    severity: str
    title: str
    content: str
    time: str
    acknowledged: bool
    category: str


class AlertSummary(BaseModel):
    total: int
    unacknowledged: int
    high: int
    medium: int
    low: int


class ValidationRequest(BaseModel):
    studies: List[StudyPayload] = Field(default_factory=list)


class ComplianceItemPayload(BaseModel):
    section: str
    status: str
    owner: str
    updated: str


class PathwayRequest(BaseModel):
    product_type: str = Field(..., description="device-class2 | device-class3 | drug-small | biologic")
    risk_level: str = ""
    target_market: str = ""

    class Config:
        json_schema_extra = {
            "example": {"product_type": "device-class2", "risk_level": "moderate", "target_market": "us"}
        }


class PathwayResponse(BaseModel):
    product_key: str
    path: str
    timeline: str
    recommendation: str
    risk_level: str
    target_market: str
    report: str


class ExportStudiesRequest(BaseModel):
    studies: List[StudyPayload]


class StudyEvidenceRequest(BaseModel):
    studies: List[StudyPayload] = Field(
        default_factory=list,
        description="Studies from the current analysis; the sample evidence table is always searched first.",
    )
