"""
Static keyword tables used by the query classifier.

The tables are built once and never mutated. Category iteration order is the
declaration order of `TherapeuticArea`, which is what makes tie-breaking in
`classifier.score_therapeutic_areas` reproducible.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Mapping

from .models import TherapeuticArea
from .utils import logger


DEFAULT_THERAPEUTIC_KEYWORDS: dict[TherapeuticArea, tuple[str, ...]] = {
    TherapeuticArea.CARDIOVASCULAR: (
        "heart", "cardiac", "cardio", "stent", "angioplasty", "bypass", "valve", "arrhythmia",
        "hypertension", "coronary", "myocardial", "infarction", "tavr", "des", "pci",
    ),
    TherapeuticArea.ONCOLOGY: (
        "cancer", "tumor", "oncology", "chemotherapy", "radiation", "immunotherapy", "car-t",
        "cell therapy", "lymphoma", "leukemia", "metastasis", "biopsy", "cytotoxic", "targeted therapy",
    ),
    TherapeuticArea.NEUROLOGY: (
        "brain", "neuro", "alzheimer", "parkinson", "epilepsy", "stroke", "migraine", "dementia",
        "seizure", "cognitive", "neurological", "neuropathy",
    ),
    TherapeuticArea.DIABETES: (
        "diabetes", "insulin", "glucose", "glycemic", "hba1c", "diabetic", "blood sugar", "cgm",
        "continuous glucose", "metformin",
    ),
    TherapeuticArea.ORTHOPEDIC: (
        "bone", "joint", "orthopedic", "fracture", "arthritis", "implant", "hip", "knee", "spine",
        "cartilage", "ligament", "tendon",
    ),
    TherapeuticArea.RESPIRATORY: (
        "lung", "pulmonary", "respiratory", "asthma", "copd", "pneumonia", "ventilator", "oxygen",
        "airway", "bronchial",
    ),
    TherapeuticArea.GASTROENTEROLOGY: (
        "gastro", "digestive", "intestinal", "liver", "hepatic", "colon", "endoscopy", "ulcer", "ibd", "crohn",
    ),
    TherapeuticArea.INFECTIOUS: (
        "infection", "antimicrobial", "antibiotic", "viral", "bacterial", "sepsis", "pathogen",
        "vaccine", "immunization",
    ),
    TherapeuticArea.DERMATOLOGY: (
        "skin", "dermal", "dermatology", "melanoma", "psoriasis", "eczema", "wound healing", "topical",
    ),
    TherapeuticArea.OPHTHALMOLOGY: (
        "eye", "ocular", "vision", "retinal", "glaucoma", "cataract", "ophthalmology", "macular",
    ),
    TherapeuticArea.UROLOGY: (
        "kidney", "renal", "urinary", "bladder", "prostate", "urological", "dialysis", "nephrology",
    ),
    TherapeuticArea.PSYCHIATRY: (
        "mental health", "depression", "anxiety", "psychiatric", "antidepressant", "bipolar",
        "schizophrenia", "therapy",
    ),
}

DEFAULT_DEVICE_KEYWORDS = (
    "device", "implant", "catheter", "stent", "valve", "pacemaker", "defibrillator", "monitor", "sensor", "pump",
)
DEFAULT_DRUG_KEYWORDS = (
    "drug", "medication", "therapy", "treatment", "compound", "molecule", "pharmaceutical", "biologic",
)

# Multi-word phrases kept verbatim as concepts
DEFAULT_MEDICAL_PHRASES = (
    "adverse events", "clinical trial", "randomized controlled", "meta analysis", "systematic review",
    "phase iii", "phase ii", "phase i", "post market", "real world evidence", "regulatory approval",
    "fda clearance", "ce mark", "clinical outcomes", "safety profile", "efficacy endpoint", "primary endpoint",
)

DEFAULT_STOP_WORDS = ("treatment", "analysis", "study", "research", "clinical")


@dataclass(frozen=True)
class KeywordTables:
    therapeutic: tuple[tuple[TherapeuticArea, tuple[str, ...]], ...]
    device: tuple[str, ...]
    drug: tuple[str, ...]
    medical_phrases: tuple[str, ...] = DEFAULT_MEDICAL_PHRASES
    stop_words: frozenset[str] = frozenset(DEFAULT_STOP_WORDS)

    def keywords_for(self, area: TherapeuticArea) -> tuple[str, ...]:
        for name, keywords in self.therapeutic:
            if name is area:
                return keywords
        return ()

    def as_json(self) -> dict:
        return {
            "therapeutic": {area.value: list(keywords) for area, keywords in self.therapeutic},
            "device": list(self.device),
            "drug": list(self.drug),
            "phrases": list(self.medical_phrases),
            "stop_words": sorted(self.stop_words),
        }


def _clean_keywords(values: Iterable, label: str) -> tuple[str, ...]:
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise ValueError(f"Keyword list '{label}' must be a list of strings.")
    cleaned = []
    for value in values:
        kw = str(value).strip().lower()
        # an empty keyword would match every query
        if kw and kw not in cleaned:
            cleaned.append(kw)
    return tuple(cleaned)


def build_keyword_tables(
    therapeutic: Mapping[str, Iterable[str]] | None = None,
    device: Iterable[str] | None = None,
    drug: Iterable[str] | None = None,
    phrases: Iterable[str] | None = None,
    stop_words: Iterable[str] | None = None,
) -> KeywordTables:
    """
    Build tables from the defaults, replacing whichever parts are supplied.
    Unknown category names (and keywords for "general") raise ValueError.
    """
    if therapeutic is not None and not isinstance(therapeutic, Mapping):
        raise ValueError("The therapeutic keyword table must map area names to keyword lists.")
    overrides: dict[TherapeuticArea, tuple[str, ...]] = {}
    for name, keywords in (therapeutic or {}).items():
        try:
            area = TherapeuticArea(str(name).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown therapeutic area in keyword table: {name!r}") from exc
        if area is TherapeuticArea.GENERAL:
            raise ValueError("The 'general' area is the fallback and cannot carry keywords.")
        overrides[area] = _clean_keywords(keywords, area.value)

    table = tuple(
        (area, overrides.get(area, DEFAULT_THERAPEUTIC_KEYWORDS[area]))
        for area in TherapeuticArea
        if area is not TherapeuticArea.GENERAL
    )
    tables = KeywordTables(therapeutic=table, device=DEFAULT_DEVICE_KEYWORDS, drug=DEFAULT_DRUG_KEYWORDS)
    if device is not None:
        tables = replace(tables, device=_clean_keywords(device, "device"))
    if drug is not None:
        tables = replace(tables, drug=_clean_keywords(drug, "drug"))
    if phrases is not None:
        tables = replace(tables, medical_phrases=_clean_keywords(phrases, "phrases"))
    if stop_words is not None:
        tables = replace(tables, stop_words=frozenset(_clean_keywords(stop_words, "stop_words")))
    return tables


DEFAULT_KEYWORD_TABLES = build_keyword_tables()


def load_keyword_tables(path: str | os.PathLike | None = None) -> KeywordTables:
    """
    Load keyword tables from a JSON file, falling back to the built-in tables
    when no path is given (or RL_KEYWORDS_FILE is unset).

    Expected layout::

        {"therapeutic": {"oncology": ["cancer", ...]}, "device": [...], "drug": [...],
         "phrases": [...], "stop_words": [...]}

    Every key is optional; omitted parts keep their defaults.
    """
    path = path or os.getenv("RL_KEYWORDS_FILE")
    if not path:
        return DEFAULT_KEYWORD_TABLES

    kw_path = Path(path)
    with kw_path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Keyword file {kw_path} must contain a JSON object.")

    tables = build_keyword_tables(
        therapeutic=data.get("therapeutic"),
        device=data.get("device"),
        drug=data.get("drug"),
        phrases=data.get("phrases"),
        stop_words=data.get("stop_words"),
    )
    logger.log(f"Loaded keyword tables from {kw_path} ({len(tables.therapeutic)} therapeutic areas)", once=True)
    return tables
