"""
CSV / JSON / text exports for evidence tables and the compliance checklist.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from .compliance import ComplianceItem
from .models import Study, to_plain
from .utils import logger

STUDY_COLUMNS = [
    "Study ID",
    "Title",
    "Phase",
    "Design",
    "Sample Size",
    "Endpoint Success",
    "ICH-GCP",
    "Confidence",
]
COMPLIANCE_COLUMNS = ["Section", "Status", "Owner", "Last Updated"]


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def studies_frame(studies: Iterable[Study]) -> pd.DataFrame:
    rows = [
        {
            "Study ID": s.id,
            "Title": s.title,
            "Phase": s.phase,
            "Design": s.design,
            "Sample Size": s.sample_size,
            "Endpoint Success": _yes_no(s.endpoint_success),
            "ICH-GCP": _yes_no(s.ich_gcp),
            "Confidence": f"{s.confidence}%",
        }
        for s in studies
    ]
    return pd.DataFrame(rows, columns=STUDY_COLUMNS)


def compliance_frame(items: Iterable[ComplianceItem]) -> pd.DataFrame:
    rows = [
        {"Section": i.section, "Status": i.status, "Owner": i.owner, "Last Updated": i.updated}
        for i in items
    ]
    return pd.DataFrame(rows, columns=COMPLIANCE_COLUMNS)


def studies_csv(studies: Iterable[Study]) -> str:
    return studies_frame(studies).to_csv(index=False, lineterminator="\n")


def compliance_csv(items: Iterable[ComplianceItem]) -> str:
    return compliance_frame(items).to_csv(index=False, lineterminator="\n")


def compliance_json(items: Iterable[ComplianceItem]) -> str:
    return json.dumps(to_plain(list(items)), indent=2, ensure_ascii=False)


def export_filename(prefix: str, extension: str, day: Optional[date] = None) -> str:
    """Dated download name, e.g. ``fda-evidence-table-2026-10-18.csv``."""
    return f"{prefix}-{(day or date.today()).isoformat()}.{extension.lstrip('.')}"


def write_export(content: str, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(content, encoding="utf-8")
    logger.log(f"Saved export to {out}")
    return out
