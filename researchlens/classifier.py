"""
Keyword classifier for free-text research queries.

All functions are pure: they read the (immutable) keyword tables and the
query text and nothing else. Matching is plain lower-case substring search,
so short keywords such as "des" or "hip" also fire inside longer words.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .keywords import DEFAULT_KEYWORD_TABLES, KeywordTables
from .models import ProductType, TherapeuticArea
from .utils import logger

MAX_TOKEN_CONCEPTS = 5
MIN_TOKEN_LENGTH = 5


@dataclass(frozen=True)
class Classification:
    therapeutic: TherapeuticArea
    product_type: ProductType
    concepts: tuple[str, ...]
    area_scores: tuple[tuple[TherapeuticArea, int], ...]
    device_hits: int
    drug_hits: int


def score_therapeutic_areas(
    query_lower: str,
    tables: KeywordTables = DEFAULT_KEYWORD_TABLES,
) -> list[tuple[TherapeuticArea, int]]:
    """
    Score every area as the summed length of its keywords found in the query.
    Longer (more specific) keywords weigh more than short generic ones.
    """
    scores = []
    for area, keywords in tables.therapeutic:
        score = sum(len(kw) for kw in keywords if kw in query_lower)
        scores.append((area, score))
    return scores


def identify_therapeutic_area(
    query_lower: str,
    tables: KeywordTables = DEFAULT_KEYWORD_TABLES,
    hint: Optional[TherapeuticArea] = None,
) -> TherapeuticArea:
    """
    Highest score wins; ties keep the first area in table order unless `hint`
    names one of the tied leaders. No matches at all gives GENERAL.
    """
    scores = score_therapeutic_areas(query_lower, tables)
    return _pick_area(scores, hint)


def _pick_area(scores, hint: Optional[TherapeuticArea]) -> TherapeuticArea:
    best_area, best_score = TherapeuticArea.GENERAL, 0
    for area, score in scores:
        if score > best_score:
            best_area, best_score = area, score
    if best_score == 0:
        return TherapeuticArea.GENERAL
    if hint is not None and hint is not best_area:
        if any(area is hint and score == best_score for area, score in scores):
            return hint
    return best_area


def count_hits(query_lower: str, keywords) -> int:
    return sum(1 for kw in keywords if kw in query_lower)


def identify_product_type(query_lower: str, tables: KeywordTables = DEFAULT_KEYWORD_TABLES) -> ProductType:
    device_score = count_hits(query_lower, tables.device)
    drug_score = count_hits(query_lower, tables.drug)
    if device_score > drug_score:
        return ProductType.DEVICE
    if drug_score > device_score:
        return ProductType.DRUG
    return ProductType.THERAPY


def extract_key_concepts(query_lower: str, tables: KeywordTables = DEFAULT_KEYWORD_TABLES) -> list[str]:
    """
    Known multi-word phrases first, then up to five longer tokens that are
    not generic research words. Duplicates are dropped, first occurrence wins.
    """
    concepts = [phrase for phrase in tables.medical_phrases if phrase in query_lower]

    tokens = [
        word
        for word in query_lower.split()
        if len(word) >= MIN_TOKEN_LENGTH and word not in tables.stop_words
    ]
    concepts.extend(tokens[:MAX_TOKEN_CONCEPTS])

    return list(dict.fromkeys(concepts))


def classify_query(
    query: str,
    tables: KeywordTables = DEFAULT_KEYWORD_TABLES,
    hint: Optional[TherapeuticArea] = None,
) -> Classification:
    """Run all three classification steps over one query."""
    query_lower = (query or "").lower()
    scores = score_therapeutic_areas(query_lower, tables)
    therapeutic = _pick_area(scores, hint)
    device_hits = count_hits(query_lower, tables.device)
    drug_hits = count_hits(query_lower, tables.drug)
    product_type = identify_product_type(query_lower, tables)
    concepts = extract_key_concepts(query_lower, tables)

    logger.debug(
        f"[CLASSIFY] query='{query}' scores={[(a.value, s) for a, s in scores if s]} "
        f"-> {therapeutic.value}; device={device_hits} drug={drug_hits} -> {product_type.value}"
    )
    return Classification(
        therapeutic=therapeutic,
        product_type=product_type,
        concepts=tuple(concepts),
        area_scores=tuple(scores),
        device_hits=device_hits,
        drug_hits=drug_hits,
    )
