"""
Synthetic literature-analysis reports.

`LiteratureAnalyzer.analyze` classifies a query and dresses the two tags up as
a full report: summary text, 3-5 synthetic studies, risk rows, pathway label
and market figures. None of the numbers mean anything; only their ranges are
fixed. All randomness comes from the analyzer's numpy Generator, so a seeded
analyzer is fully reproducible.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

import numpy as np

from .classifier import classify_query
from .keywords import DEFAULT_KEYWORD_TABLES, KeywordTables
from .models import (
    AnalysisFilters,
    AnalysisResult,
    CompetitiveIntelligence,
    MarketAnalysis,
    Milestone,
    ProductType,
    RiskFactor,
    RiskLevel,
    StrategicInsights,
    Study,
    TherapeuticArea,
)
from .utils import clean_query, logger, next_quarters, title_case_words

# ======================= Bounds =======================
SUMMARY_STUDY_COUNT = (50, 250)
SUMMARY_EFFECT_SIZE = (15, 55)
SUMMARY_APPROVAL_COUNT = (2, 10)
SUMMARY_TIME_RANGE = "2019-2024"

STUDIES_PER_REPORT = (3, 6)
PMID_RANGE = (30_000_000, 39_000_000)
SAMPLE_SIZE_RANGE = (200, 5_200)
ENDPOINT_SUCCESS_THRESHOLD = 0.3
GCP_THRESHOLD = 0.2

QUALITY_CONFIDENCE_RANGES = {
    "high": (80, 95),
    "medium": (60, 80),
    "low": (40, 60),
}
DEFAULT_STUDY_CONFIDENCE = (60, 90)

CONFIDENCE_BASE = 75
CONFIDENCE_BOUNDS = (60, 95)
CONFIDENCE_JITTER = (-5, 10)

MARKET_SIZE_BILLIONS = (10, 60)
MARKET_GROWTH_PERCENT = (5, 20)

MAX_RECOMMENDATIONS = 6

# ======================= Lookup tables =======================
SUMMARY_TEMPLATES = {
    TherapeuticArea.CARDIOVASCULAR: (
        'Comprehensive analysis of "{query}" reveals {study_count} relevant studies spanning {time_range}. '
        "Evidence indicates {effect_size}% improvement in primary cardiovascular endpoints. FDA precedent "
        "analysis shows {approval_count} similar device approvals, suggesting favorable regulatory landscape "
        "for this indication."
    ),
    TherapeuticArea.ONCOLOGY: (
        'Literature synthesis for "{query}" encompasses {study_count} peer-reviewed studies. Clinical evidence '
        "demonstrates {effect_size}% response rate in target patient population. Regulatory pathway analysis "
        "indicates potential for breakthrough designation based on unmet medical need in oncology."
    ),
    TherapeuticArea.NEUROLOGY: (
        'Evidence review of "{query}" includes {study_count} neurological studies from leading institutions. '
        "Biomarker-driven approaches show {effect_size}% improvement in clinical outcomes. FDA guidance suggests "
        "early engagement for innovative neurological therapies."
    ),
    TherapeuticArea.DIABETES: (
        'Analysis of "{query}" incorporates {study_count} diabetes-focused clinical studies. Continuous '
        "monitoring technologies demonstrate {effect_size}% improvement in glycemic control. Clear 510(k) "
        "predicate pathway available for diabetes management devices."
    ),
    TherapeuticArea.GENERAL: (
        'Systematic review of "{query}" identifies {study_count} relevant clinical studies across multiple '
        "therapeutic areas. Meta-analysis indicates {effect_size}% improvement in primary endpoints. Regulatory "
        "strategy should consider FDA guidance for similar therapeutic approaches."
    ),
}

STUDY_TITLES = {
    TherapeuticArea.CARDIOVASCULAR: (
        "Long-term Outcomes of Drug-Eluting Stents in Complex Coronary Lesions",
        "Transcatheter Aortic Valve Replacement vs Surgical Replacement",
        "Novel Anticoagulation Strategies in Atrial Fibrillation Management",
        "Cardiac Resynchronization Therapy in Heart Failure Patients",
    ),
    TherapeuticArea.ONCOLOGY: (
        "CAR-T Cell Therapy Efficacy in Relapsed B-Cell Malignancies",
        "Immunotherapy Combinations in Advanced Solid Tumors",
        "Targeted Therapy Response Biomarkers in Precision Oncology",
        "Novel Checkpoint Inhibitor Safety and Efficacy Profile",
    ),
    TherapeuticArea.NEUROLOGY: (
        "Deep Brain Stimulation Outcomes in Treatment-Resistant Depression",
        "Alzheimer's Disease Biomarker-Guided Therapeutic Interventions",
        "Epilepsy Management with Next-Generation Neurostimulation Devices",
        "Stroke Recovery Enhancement Through Neurotechnology Applications",
    ),
    TherapeuticArea.DIABETES: (
        "Continuous Glucose Monitoring Impact on Glycemic Control",
        "Artificial Pancreas Systems in Type 1 Diabetes Management",
        "Advanced Insulin Delivery Technologies Clinical Outcomes",
        "Diabetes Technology Integration in Clinical Practice",
    ),
}
GENERIC_STUDY_TITLES = (
    "Clinical Evaluation of Novel Therapeutic Intervention",
    "Safety and Efficacy Assessment in Target Patient Population",
    "Comparative Effectiveness Research in Clinical Practice",
    "Long-term Outcomes Analysis of Innovative Treatment Approach",
)

PHASE_OPTIONS = {
    "phase1": ("Phase I", "Phase I/II"),
    "phase2": ("Phase II", "Phase II/III"),
    "phase3": ("Phase III", "Phase III RCT"),
    "registry": ("Registry Study", "Real-world Evidence"),
    "meta": ("Meta-analysis", "Systematic Review"),
}
UNRECOGNISED_PHASE_OPTIONS = ("Phase III RCT", "Phase II", "Registry Study")
ALL_PHASE_OPTIONS = ("Phase III RCT", "Phase II", "Registry Study", "Meta-analysis", "Post-market Surveillance")

STUDY_DESIGNS = (
    "Multi-center, randomized, double-blind",
    "Prospective observational",
    "Retrospective cohort",
    "Single-arm, open-label",
    "Systematic review and meta-analysis",
)

BASE_RECOMMENDATIONS = (
    "Schedule FDA pre-submission meeting to discuss regulatory strategy",
    "Conduct comprehensive literature review for regulatory submission",
    "Develop biomarker strategy for patient stratification",
    "Initiate health economics outcomes research for market access",
)
DEVICE_RECOMMENDATIONS = (
    "Evaluate 510(k) predicate devices for clearance pathway",
    "Conduct usability studies for human factors validation",
)
ONCOLOGY_RECOMMENDATIONS = (
    "Consider breakthrough designation for unmet medical need",
    "Develop companion diagnostic strategy if applicable",
)
SAFETY_RECOMMENDATIONS = (
    "Implement enhanced pharmacovigilance program",
    "Design post-market surveillance study protocol",
)

TIMELINE_STEPS = (
    (0.20, "Regulatory strategy finalization"),
    (0.40, "Regulatory submission"),
    (0.65, "Regulatory review process"),
    (0.80, "Regulatory decision"),
    (0.90, "Market launch preparation"),
)
TIMELINE_OVERRIDES = {
    ProductType.DEVICE: {1: "510(k) submission", 2: "FDA review (90-120 days)"},
    ProductType.DRUG: {1: "IND/NDA submission", 2: "FDA review (6-12 months)"},
}

MARKET_DRIVERS = {
    TherapeuticArea.CARDIOVASCULAR: ("Aging population", "Rising prevalence of heart disease", "Technological advancement"),
    TherapeuticArea.ONCOLOGY: ("Precision medicine adoption", "Immunotherapy development", "Companion diagnostics"),
    TherapeuticArea.NEUROLOGY: ("Neurodegenerative disease prevalence", "Digital therapeutics", "Brain-computer interfaces"),
    TherapeuticArea.DIABETES: ("Global diabetes epidemic", "Continuous monitoring adoption", "Artificial pancreas systems"),
    TherapeuticArea.GENERAL: ("Healthcare digitization", "Regulatory modernization", "Value-based care models"),
}

COMPETITORS = {
    TherapeuticArea.CARDIOVASCULAR: ("Medtronic", "Abbott", "Boston Scientific", "Edwards Lifesciences", "Biotronik"),
    TherapeuticArea.ONCOLOGY: ("Novartis", "Gilead", "Bristol Myers Squibb", "Roche", "Merck"),
    TherapeuticArea.NEUROLOGY: ("Medtronic", "Boston Scientific", "Nevro", "Abbott", "LivaNova"),
    TherapeuticArea.DIABETES: ("Dexcom", "Abbott", "Medtronic", "Insulet", "Tandem Diabetes"),
    TherapeuticArea.GENERAL: ("Johnson & Johnson", "Medtronic", "Abbott", "Boston Scientific", "Stryker"),
}

STRATEGIC_INSIGHTS = StrategicInsights(
    key_opportunities=(
        "Unmet medical need in patient population",
        "Regulatory pathway precedent established",
        "Growing market demand and favorable reimbursement",
    ),
    strategic_threats=(
        "Competitive product launches expected",
        "Regulatory requirements evolving",
        "Reimbursement landscape uncertainty",
    ),
    success_factors=(
        "Strong clinical evidence generation",
        "Effective regulatory strategy execution",
        "Strategic partnership development",
    ),
)


def phase_options(phase_filter: Optional[str]) -> tuple[str, ...]:
    if not phase_filter or phase_filter == "all":
        return ALL_PHASE_OPTIONS
    return PHASE_OPTIONS.get(phase_filter, UNRECOGNISED_PHASE_OPTIONS)


def confidence_range(quality_filter: Optional[str]) -> tuple[int, int]:
    """Half-open [low, high) range for study confidence under a quality filter."""
    return QUALITY_CONFIDENCE_RANGES.get(quality_filter or "all", DEFAULT_STUDY_CONFIDENCE)


class LiteratureAnalyzer:
    """
    Classifier plus report synthesizer.

    The keyword tables are read-only and may be shared; the random Generator
    is owned by the instance, so use one analyzer per thread.
    """

    def __init__(
        self,
        tables: Optional[KeywordTables] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        today: Optional[date] = None,
    ):
        self.tables = tables or DEFAULT_KEYWORD_TABLES
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.today = today

    # ----- random helpers -----
    def _randint(self, bounds: tuple[int, int]) -> int:
        low, high = bounds
        return int(self.rng.integers(low, high))

    def _choice(self, options: Sequence[Any]):
        return options[int(self.rng.integers(len(options)))]

    def _chance(self, threshold: float) -> bool:
        return bool(self.rng.random() > threshold)

    # ----- public operations -----
    def analyze(self, query: str, filters: Optional[Mapping[str, Any] | AnalysisFilters] = None) -> AnalysisResult:
        """
        Classify `query` and build a complete report. Never raises for string
        input: unmatched text falls back to the general / therapy tags.

        Only classification sees the normalised text; the report keeps the
        query as given.
        """
        filters = AnalysisFilters.from_mapping(filters)
        text = query if query is not None else ""
        classification = classify_query(clean_query(text), self.tables, hint=filters.therapeutic_hint)
        therapeutic = classification.therapeutic
        product_type = classification.product_type
        concepts = list(classification.concepts)

        result = AnalysisResult(
            query=text,
            therapeutic=therapeutic,
            product_type=product_type,
            concepts=tuple(concepts),
            summary=self.generate_summary(text, therapeutic),
            studies=tuple(self.regenerate_studies(therapeutic, product_type, concepts, filters)),
            risk_factors=tuple(self.generate_risks(therapeutic, product_type)),
            recommendations=tuple(self.generate_recommendations(text, therapeutic, product_type)),
            timeline=tuple(self.generate_timeline(product_type)),
            confidence=self.confidence_score(text, concepts),
            regulatory_pathway=self.regulatory_pathway(product_type, therapeutic),
            market_analysis=self.market_analysis(therapeutic),
            competitive_intelligence=self.competitive_intelligence(therapeutic, product_type),
            strategic_insights=STRATEGIC_INSIGHTS,
            filters=filters,
        )
        logger.log(f"Analysis complete for '{text}': {therapeutic.value} / {product_type.value}")
        return result

    def regenerate_studies(
        self,
        therapeutic: TherapeuticArea | str,
        product_type: ProductType | str,
        concepts: Sequence[str],
        filters: Optional[Mapping[str, Any] | AnalysisFilters] = None,
    ) -> list[Study]:
        """
        Generate a fresh list of 3-5 synthetic studies for already-chosen tags.
        Used on its own when filters change after an initial analysis.
        """
        therapeutic = TherapeuticArea(therapeutic)
        product_type = ProductType(product_type)
        filters = AnalysisFilters.from_mapping(filters)
        phases = phase_options(filters.phase)
        confidence_bounds = confidence_range(filters.quality)

        studies = []
        for _ in range(self._randint(STUDIES_PER_REPORT)):
            studies.append(
                Study(
                    id=f"PMID{self._randint(PMID_RANGE)}",
                    title=self.study_title(therapeutic, concepts),
                    phase=self._choice(phases),
                    design=self._choice(STUDY_DESIGNS),
                    sample_size=self._randint(SAMPLE_SIZE_RANGE),
                    endpoint_success=self._chance(ENDPOINT_SUCCESS_THRESHOLD),
                    ich_gcp=self._chance(GCP_THRESHOLD),
                    confidence=self._randint(confidence_bounds),
                    therapeutic=therapeutic.value,
                )
            )
        logger.debug(f"[STUDIES] {therapeutic.value}/{product_type.value} filters={filters} -> {len(studies)} studies")
        return studies

    def refilter(self, result: AnalysisResult, filters: Optional[Mapping[str, Any] | AnalysisFilters]) -> AnalysisResult:
        """Re-run study generation only, returning a new result."""
        filters = AnalysisFilters.from_mapping(filters)
        studies = self.regenerate_studies(result.therapeutic, result.product_type, result.concepts, filters)
        return result.with_studies(studies, filters)

    # ----- report sections -----
    def generate_summary(self, query: str, therapeutic: TherapeuticArea) -> str:
        template = SUMMARY_TEMPLATES.get(therapeutic, SUMMARY_TEMPLATES[TherapeuticArea.GENERAL])
        return template.format(
            query=query,
            study_count=self._randint(SUMMARY_STUDY_COUNT),
            time_range=SUMMARY_TIME_RANGE,
            effect_size=self._randint(SUMMARY_EFFECT_SIZE),
            approval_count=self._randint(SUMMARY_APPROVAL_COUNT),
        )

    def study_title(self, therapeutic: TherapeuticArea, concepts: Sequence[str]) -> str:
        title = self._choice(STUDY_TITLES.get(therapeutic, GENERIC_STUDY_TITLES))
        if concepts:
            return f"{title_case_words(concepts[0])} Clinical Trial: {title}"
        return title

    def generate_risks(self, therapeutic: TherapeuticArea, product_type: ProductType) -> list[RiskFactor]:
        risks = [
            RiskFactor("Regulatory Precedent", self._choice((RiskLevel.LOW, RiskLevel.MEDIUM)),
                       "Similar products approved in recent years"),
            RiskFactor("Clinical Evidence", self._choice((RiskLevel.MEDIUM, RiskLevel.LOW)),
                       "Phase III data demonstrates efficacy"),
            RiskFactor("Manufacturing", RiskLevel.LOW, "Established manufacturing capabilities"),
            RiskFactor("Market Access", self._choice((RiskLevel.MEDIUM, RiskLevel.HIGH)),
                       "Reimbursement pathway under review"),
        ]
        if therapeutic is TherapeuticArea.ONCOLOGY:
            risks.append(RiskFactor("Safety Profile", RiskLevel.MEDIUM,
                                    "Oncology therapies require extensive safety monitoring"))
        elif product_type is ProductType.DEVICE:
            risks.append(RiskFactor("Device Classification", RiskLevel.LOW, "Clear predicate devices available"))
        return risks

    def generate_recommendations(self, query: str, therapeutic: TherapeuticArea, product_type: ProductType) -> list[str]:
        contextual = []
        if product_type is ProductType.DEVICE:
            contextual.extend(DEVICE_RECOMMENDATIONS)
        if therapeutic is TherapeuticArea.ONCOLOGY:
            contextual.extend(ONCOLOGY_RECOMMENDATIONS)
        query_lower = query.lower()
        if "safety" in query_lower or "adverse" in query_lower:
            contextual.extend(SAFETY_RECOMMENDATIONS)
        return [*BASE_RECOMMENDATIONS, *contextual][:MAX_RECOMMENDATIONS]

    def generate_timeline(self, product_type: ProductType) -> list[Milestone]:
        quarters = next_quarters(self.today or date.today(), len(TIMELINE_STEPS))
        overrides = TIMELINE_OVERRIDES.get(product_type, {})
        return [
            Milestone(quarter=quarter, probability=prob, milestone=overrides.get(idx, text))
            for idx, (quarter, (prob, text)) in enumerate(zip(quarters, TIMELINE_STEPS))
        ]

    def confidence_score(self, query: str, concepts: Sequence[str]) -> int:
        score = CONFIDENCE_BASE
        if len(query) > 50:
            score += 5
        if len(concepts) > 3:
            score += 5
        score += self._randint(CONFIDENCE_JITTER)
        low, high = CONFIDENCE_BOUNDS
        return min(max(score, low), high)

    def regulatory_pathway(self, product_type: ProductType, therapeutic: TherapeuticArea) -> str:
        if product_type is ProductType.DEVICE:
            return "510(k) Clearance" if self._chance(0.5) else "De Novo Classification"
        if product_type is ProductType.DRUG:
            if therapeutic is TherapeuticArea.ONCOLOGY:
                return "IND → NDA (Breakthrough)"
            return "IND → NDA (Standard)"
        return "Standard Regulatory Pathway"

    def market_analysis(self, therapeutic: TherapeuticArea) -> MarketAnalysis:
        return MarketAnalysis(
            market_size=f"${self._randint(MARKET_SIZE_BILLIONS)}B",
            growth_rate=f"{self._randint(MARKET_GROWTH_PERCENT)}% CAGR",
            key_drivers=MARKET_DRIVERS.get(therapeutic, MARKET_DRIVERS[TherapeuticArea.GENERAL]),
            competitive_landscape="Moderately competitive with room for innovation",
        )

    def competitive_intelligence(self, therapeutic: TherapeuticArea, product_type: ProductType) -> CompetitiveIntelligence:
        competitors = COMPETITORS.get(therapeutic, COMPETITORS[TherapeuticArea.GENERAL])
        if product_type is ProductType.DEVICE:
            barrier = "Medium - regulatory pathway established"
        else:
            barrier = "High - extensive clinical trials required"
        return CompetitiveIntelligence(
            market_leaders=competitors[:3],
            emerging_players=competitors[3:5],
            market_concentration="Fragmented market with multiple players",
            barrier_to_entry=barrier,
        )


# ======================= Functional entry points =======================
def classify(
    query: str,
    filters: Optional[Mapping[str, Any] | AnalysisFilters] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    tables: Optional[KeywordTables] = None,
) -> AnalysisResult:
    """One-shot analysis with a throwaway analyzer."""
    return LiteratureAnalyzer(tables=tables, rng=rng, seed=seed).analyze(query, filters)


def regenerate_studies(
    therapeutic: TherapeuticArea | str,
    product_type: ProductType | str,
    concepts: Sequence[str],
    filters: Optional[Mapping[str, Any] | AnalysisFilters] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> list[Study]:
    return LiteratureAnalyzer(rng=rng, seed=seed).regenerate_studies(therapeutic, product_type, concepts, filters)
