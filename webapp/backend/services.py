"""
Service layer that bridges the FastAPI endpoints with the `researchlens` package.

Every function here is synchronous; the endpoints push the heavier ones onto a
worker thread. Each call builds its own analyzer so no random Generator is
shared between requests.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from researchlens.feeds import RegulatoryFeed, fallback_snapshot
from researchlens.intelligence import generate_strategic_report
from researchlens.models import AnalysisFilters, Study
from researchlens.synthesis import LiteratureAnalyzer
from researchlens.utils import clean_query

from .deps import Settings, get_keyword_tables

MIN_QUERY_LENGTH = 5


def _validated_query(query: Optional[str]) -> str:
    if len(clean_query(query)) < MIN_QUERY_LENGTH:
        raise ValueError(f"Query must be at least {MIN_QUERY_LENGTH} characters.")
    return query


def build_analyzer(settings: Settings) -> LiteratureAnalyzer:
    return LiteratureAnalyzer(tables=get_keyword_tables(settings.keywords_file), seed=settings.seed)


def run_analysis(query: str, filters: Optional[Dict], settings: Settings) -> Dict:
    text = _validated_query(query)
    result = build_analyzer(settings).analyze(text, filters)
    return result.to_dict()


def regenerate_studies(
    therapeutic: str,
    product_type: str,
    concepts: List[str],
    filters: Optional[Dict],
    settings: Settings,
) -> Dict:
    parsed = AnalysisFilters.from_mapping(filters)
    studies = build_analyzer(settings).regenerate_studies(therapeutic, product_type, concepts, parsed)
    return {
        "studies": [study_to_dict(s) for s in studies],
        "filters": {"therapeutic": parsed.therapeutic, "phase": parsed.phase, "quality": parsed.quality},
    }


def run_intelligence(query: Optional[str], filters: Optional[Dict], settings: Settings) -> Dict:
    if query is None or not query.strip():
        return generate_strategic_report(None)
    text = _validated_query(query)
    result = build_analyzer(settings).analyze(text, filters)
    return generate_strategic_report(result)


def load_feed(settings: Settings) -> Dict:
    if settings.offline_feed:
        return fallback_snapshot()
    feed = RegulatoryFeed(
        fda_base_url=settings.fda_base_url,
        clinicaltrials_url=settings.clinicaltrials_url,
        timeout=settings.feed_timeout,
        trial_term=settings.trial_term,
    )
    return feed.snapshot()


def study_from_dict(data: Dict) -> Study:
    return Study(
        id=str(data["id"]),
        title=data["title"],
        phase=data["phase"],
        design=data["design"],
        sample_size=int(data["sample_size"]),
        endpoint_success=bool(data["endpoint_success"]),
        ich_gcp=bool(data["ich_gcp"]),
        confidence=int(data["confidence"]),
        therapeutic=data.get("therapeutic") or "general",
    )


def study_to_dict(study: Study) -> Dict:
    return {
        "id": study.id,
        "title": study.title,
        "phase": study.phase,
        "design": study.design,
        "sample_size": study.sample_size,
        "endpoint_success": study.endpoint_success,
        "ich_gcp": study.ich_gcp,
        "confidence": study.confidence,
        "therapeutic": study.therapeutic,
    }
