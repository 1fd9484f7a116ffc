"""
Sample evidence table shown before any query has been analysed.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .models import Study

SAMPLE_EVIDENCE = (
    Study(
        id="37329115",
        title="Drug-Coated Balloon vs. Drug-Eluting Stent in Acute MI",
        phase="Meta-analysis",
        design="Systematic Review of 8 studies",
        sample_size=1310,
        endpoint_success=False,
        ich_gcp=True,
        confidence=70,
        therapeutic="cardiovascular",
    ),
    Study(
        id="40117414",
        title="Temporal Trends in 1-Year Mortality After TAVR",
        phase="Registry",
        design="TVT Registry",
        sample_size=36877,
        endpoint_success=True,
        ich_gcp=True,
        confidence=90,
        therapeutic="cardiovascular",
    ),
    Study(
        id="31561032",
        title="Complications of Subcutaneous ICD",
        phase="Post-Market",
        design="MAUDE Review",
        sample_size=1604,
        endpoint_success=False,
        ich_gcp=False,
        confidence=45,
        therapeutic="cardiovascular",
    ),
)


def matches_quality(study: Study, quality: Optional[str]) -> bool:
    if quality == "high":
        return study.confidence >= 80
    if quality == "medium":
        return 60 <= study.confidence < 80
    if quality == "low":
        return study.confidence < 60
    return True


def filter_by_quality(studies: Iterable[Study], quality: Optional[str] = "all") -> list[Study]:
    return [study for study in studies if matches_quality(study, quality)]


def find_study(study_id: str, *collections: Sequence[Study]) -> Optional[Study]:
    for studies in collections:
        for study in studies or ():
            if study.id == study_id:
                return study
    return None
