"""
Live regulatory feed: openFDA and ClinicalTrials.gov lookups with static
fallbacks.

Every fetch is a single GET with a short timeout. Any failure (network error,
timeout, non-2xx status, unexpected payload) is logged and replaced with the
bundled sample list; nothing here raises to the caller and nothing is retried.
"""

from __future__ import annotations

import os
from datetime import date, timedelta
from typing import Any, Optional

import requests

from .utils import logger

DEFAULT_TIMEOUT = 3.0
DEFAULT_FDA_BASE_URL = "https://api.fda.gov"
DEFAULT_CLINICALTRIALS_URL = "https://clinicaltrials.gov/api/v2/studies"

# Raised while mapping a 2xx body whose records have an unexpected shape
PAYLOAD_ERRORS = (AttributeError, TypeError, KeyError)


def fetch_json(url: str, timeout: float = DEFAULT_TIMEOUT, params: Optional[dict] = None) -> Optional[Any]:
    """GET `url` and return the decoded JSON body, or None on any failure."""
    try:
        resp = requests.get(
            url,
            params=params,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as exc:
        logger.log(f"[WARN] API call failed for {url}: {exc}")
        return None


def _days_ago(today: date, days: int) -> str:
    return (today - timedelta(days=days)).isoformat()


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "..."


def _records(value) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _first(value, default=None):
    if isinstance(value, list):
        return value[0] if value else default
    return value if value is not None else default


def sample_guidance(today: Optional[date] = None) -> list[dict]:
    today = today or date.today()
    return [
        {
            "agency": "FDA",
            "title": "Cybersecurity in Medical Devices: Quality System Requirements",
            "date": _days_ago(today, 2),
            "type": "Final Guidance",
        },
        {
            "agency": "FDA",
            "title": "Software as Medical Device (SaMD) Clinical Evaluation Framework",
            "date": _days_ago(today, 5),
            "type": "Draft Guidance",
        },
        {
            "agency": "EMA",
            "title": "Adaptive Pathways for Advanced Therapy Medicinal Products",
            "date": _days_ago(today, 3),
            "type": "Guideline Update",
        },
    ]


def sample_approvals(today: Optional[date] = None) -> list[dict]:
    today = today or date.today()
    return [
        {
            "agency": "FDA",
            "product": "CardioSync DES Pro",
            "company": "Vascular Innovations Inc",
            "decision": "PMA Approved",
            "date": _days_ago(today, 1),
        },
        {
            "agency": "FDA",
            "product": "NeuroStim Advanced",
            "company": "Neural Dynamics Corp",
            "decision": "510(k) Cleared",
            "date": _days_ago(today, 4),
        },
        {
            "agency": "EMA",
            "product": "BioThera CAR-T",
            "company": "European BioPharma",
            "decision": "Marketing Authorization",
            "date": _days_ago(today, 6),
        },
    ]


def sample_trials(today: Optional[date] = None) -> list[dict]:
    today = today or date.today()
    return [
        {
            "nct": "NCT05987654",
            "title": "Safety and Efficacy of Next-Generation Cardiac Stent System",
            "phase": "Phase III",
            "status": "Recruiting",
            "post_date": _days_ago(today, 1),
        },
        {
            "nct": "NCT05876321",
            "title": "TAVR Long-term Outcomes Registry in High-Risk Patients",
            "phase": "Registry",
            "status": "Active, not recruiting",
            "post_date": _days_ago(today, 3),
        },
        {
            "nct": "NCT05765432",
            "title": "AI-Guided Percutaneous Coronary Intervention Study",
            "phase": "Phase II",
            "status": "Enrolling by invitation",
            "post_date": _days_ago(today, 2),
        },
    ]


class RegulatoryFeed:
    """Fetches the three dashboard lists, substituting samples on failure."""

    def __init__(
        self,
        fda_base_url: Optional[str] = None,
        clinicaltrials_url: Optional[str] = None,
        timeout: Optional[float] = None,
        trial_term: Optional[str] = None,
    ):
        self.fda_base_url = (fda_base_url or os.getenv("RL_FDA_BASE_URL") or DEFAULT_FDA_BASE_URL).rstrip("/")
        self.clinicaltrials_url = clinicaltrials_url or os.getenv("RL_CLINICALTRIALS_URL") or DEFAULT_CLINICALTRIALS_URL
        self.timeout = timeout if timeout is not None else float(os.getenv("RL_FEED_TIMEOUT", DEFAULT_TIMEOUT))
        self.trial_term = trial_term or os.getenv("RL_TRIAL_TERM") or "cardiovascular"

    def fetch_guidance(self) -> list[dict]:
        logger.log("Fetching FDA guidance data...")
        data = fetch_json(
            f"{self.fda_base_url}/device/enforcement.json",
            timeout=self.timeout,
            params={"limit": 5, "sort": "report_date:desc"},
        )
        results = _records(data.get("results")) if isinstance(data, dict) else []
        if not results:
            logger.log("FDA guidance API unavailable, using fallback data")
            return sample_guidance()

        today = date.today().isoformat()
        try:
            items = [
                {
                    "agency": "FDA",
                    "title": _truncate(item.get("product_description") or "Medical Device Safety Notice", 80),
                    "date": item.get("report_date") or today,
                    "type": item.get("classification") or "Class II",
                }
                for item in results[:3]
            ]
        except PAYLOAD_ERRORS as exc:
            logger.log(f"[WARN] Unexpected FDA guidance payload: {exc!r}, using fallback data")
            return sample_guidance()
        logger.log(f"FDA guidance data loaded: {len(items)} items")
        return items

    def fetch_approvals(self) -> list[dict]:
        logger.log("Fetching FDA approvals data...")
        data = fetch_json(
            f"{self.fda_base_url}/drug/drugsfda.json",
            timeout=self.timeout,
            params={"limit": 5, "sort": "submission_status_date:desc"},
        )
        results = _records(data.get("results")) if isinstance(data, dict) else []
        if not results:
            logger.log("FDA approvals API unavailable, using fallback data")
            return sample_approvals()

        today = date.today().isoformat()
        items = []
        try:
            for item in results[:3]:
                product = _first(item.get("products"), {}) or {}
                openfda = item.get("openfda") or {}
                submission = _first(item.get("submissions"), {}) or {}
                items.append(
                    {
                        "agency": "FDA",
                        "product": product.get("brand_name") or _first(openfda.get("brand_name")) or "New Drug Application",
                        "company": item.get("sponsor_name") or "Pharmaceutical Company",
                        "decision": submission.get("submission_status") or "Approved",
                        "date": submission.get("submission_status_date") or today,
                    }
                )
        except PAYLOAD_ERRORS as exc:
            logger.log(f"[WARN] Unexpected FDA approvals payload: {exc!r}, using fallback data")
            return sample_approvals()
        logger.log(f"FDA approvals data loaded: {len(items)} items")
        return items

    def fetch_trials(self) -> list[dict]:
        logger.log("Fetching clinical trials data...")
        data = fetch_json(
            self.clinicaltrials_url,
            timeout=self.timeout,
            params={"query.term": self.trial_term, "pageSize": 5},
        )
        studies = _records(data.get("studies")) if isinstance(data, dict) else []
        if not studies:
            logger.log("Clinical trials API unavailable, using fallback data")
            return sample_trials()

        today = date.today().isoformat()
        items = []
        try:
            for study in studies:
                protocol = study.get("protocolSection") or {}
                ident = protocol.get("identificationModule") or {}
                status = protocol.get("statusModule") or {}
                design = protocol.get("designModule") or {}
                last_update = status.get("lastUpdatePostDateStruct") or {}
                items.append(
                    {
                        "nct": ident.get("nctId") or "NCT05000000",
                        "title": _truncate(ident.get("briefTitle") or "Clinical Trial", 60),
                        "phase": _first(design.get("phases"), "Phase II"),
                        "status": status.get("overallStatus") or "Active",
                        "post_date": last_update.get("date") or today,
                    }
                )
        except PAYLOAD_ERRORS as exc:
            logger.log(f"[WARN] Unexpected clinical trials payload: {exc!r}, using fallback data")
            return sample_trials()
        logger.log(f"Clinical trials data loaded: {len(items)} items")
        return items

    def snapshot(self) -> dict:
        return {
            "guidance": self.fetch_guidance(),
            "approvals": self.fetch_approvals(),
            "trials": self.fetch_trials(),
        }


def fallback_snapshot(today: Optional[date] = None) -> dict:
    """The sample lists shown before (or instead of) any live fetch."""
    return {
        "guidance": sample_guidance(today),
        "approvals": sample_approvals(today),
        "trials": sample_trials(today),
    }
