"""
EU MDR compliance checklist and the regulatory pathway wizard.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, Optional

from .utils import logger

STATUS_COMPLETE = "Complete"
STATUS_IN_PROGRESS = "In Progress"
STATUS_NEEDS_UPDATE = "Needs Update"
STATUS_MISSING = "Missing"


@dataclass(frozen=True)
class ComplianceItem:
    section: str
    status: str
    owner: str
    updated: str

    @property
    def outstanding(self) -> bool:
        return self.status != STATUS_COMPLETE


DEFAULT_COMPLIANCE_ITEMS = (
    ComplianceItem("GSPR Checklist", STATUS_COMPLETE, "Reg Affairs", "2025-01-01"),
    ComplianceItem("Clinical Evaluation Report", STATUS_COMPLETE, "Clinical", "2025-01-03"),
    ComplianceItem("PMCF Plan", STATUS_MISSING, "Clinical", "-"),
    ComplianceItem("PSUR", STATUS_NEEDS_UPDATE, "Reg Affairs", "2024-12-31"),
    ComplianceItem("Risk Management Plan", STATUS_COMPLETE, "Quality", "2025-01-02"),
    ComplianceItem("Clinical Investigation Plan", STATUS_IN_PROGRESS, "Clinical", "2025-01-05"),
)

# Outstanding actions, most urgent first
_ACTION_VERBS = {
    STATUS_MISSING: "Complete {section} (Due: High Priority)",
    STATUS_NEEDS_UPDATE: "Update {section} documentation",
    STATUS_IN_PROGRESS: "Finalize {section}",
}
_ACTION_ORDER = (STATUS_MISSING, STATUS_NEEDS_UPDATE, STATUS_IN_PROGRESS)


class ComplianceChecklist:
    def __init__(self, items: Optional[Iterable[ComplianceItem]] = None):
        self._items: list[ComplianceItem] = list(DEFAULT_COMPLIANCE_ITEMS if items is None else items)

    def items(self) -> list[ComplianceItem]:
        return list(self._items)

    def get(self, section: str) -> Optional[ComplianceItem]:
        return next((item for item in self._items if item.section == section), None)

    def mark_in_progress(self, section: str, today: Optional[date] = None) -> Optional[ComplianceItem]:
        """Move a section to In Progress and stamp it with today's date."""
        for idx, item in enumerate(self._items):
            if item.section == section:
                updated = replace(item, status=STATUS_IN_PROGRESS, updated=(today or date.today()).isoformat())
                self._items[idx] = updated
                logger.log(f"{section} status updated to {STATUS_IN_PROGRESS}")
                return updated
        return None

    def outstanding(self) -> list[ComplianceItem]:
        return [item for item in self._items if item.outstanding]

    def outstanding_actions(self) -> list[str]:
        actions = []
        for status in _ACTION_ORDER:
            for item in self._items:
                if item.status == status:
                    actions.append(_ACTION_VERBS[status].format(section=item.section))
        return actions

    def audit_trail(self, now: Optional[datetime] = None) -> str:
        """Plain-text EU MDR audit trail built from the current checklist."""
        now = now or datetime.now()
        lines = [
            "EU MDR Audit Trail Report",
            f"Generated: {now.strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "Compliance Status Summary:",
        ]
        for item in self._items:
            suffix = " (Action Required)" if item.status == STATUS_MISSING else ""
            lines.append(f"- {item.section}: {item.status}{suffix}")

        dated = sorted((item for item in self._items if item.updated != "-"), key=lambda i: i.updated, reverse=True)
        lines.extend(["", "Recent Activity:"])
        for item in dated:
            lines.append(f"- {item.updated}: {item.section} {item.status.lower()}")

        lines.extend(["", "Outstanding Actions:"])
        actions = self.outstanding_actions()
        if actions:
            lines.extend(f"{idx}. {action}" for idx, action in enumerate(actions, start=1))
        else:
            lines.append("None")
        return "\n".join(lines) + "\n"


# ======================= Pathway wizard =======================
@dataclass(frozen=True)
class PathwayRecommendation:
    product_key: str
    path: str
    timeline: str
    recommendation: str
    risk_level: str = ""
    target_market: str = ""

    def report(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.now()
        return "\n".join(
            [
                "Regulatory Pathway Analysis Report",
                f"Generated: {now.strftime('%Y-%m-%d %H:%M:%S')}",
                "",
                f"Product Classification: {PATHWAY_PRODUCT_LABELS.get(self.product_key, self.product_key)}",
                f"Recommended Pathway: {self.path}",
                f"Estimated Timeline: {self.timeline}",
                f"Risk Level: {self.risk_level or 'n/a'}",
                f"Target Market: {self.target_market or 'n/a'}",
                "",
                "Next Steps:",
                f"1. {self.recommendation}",
                *(f"{idx}. {step}" for idx, step in enumerate(PATHWAY_NEXT_STEPS.get(self.product_key, ()), start=2)),
                "",
            ]
        )


PATHWAYS = {
    "device-class2": ("510(k) Clearance", "6-12 months", "Pre-submission meeting recommended"),
    "device-class3": ("PMA Approval", "12-18 months", "Early engagement with FDA critical"),
    "drug-small": ("IND → NDA", "18-24 months", "Consider breakthrough designation"),
    "biologic": ("IND → BLA", "24-36 months", "Biosimilar pathway if applicable"),
}

PATHWAY_PRODUCT_LABELS = {
    "device-class2": "Medical Device Class II",
    "device-class3": "Medical Device Class III",
    "drug-small": "Small Molecule Drug",
    "biologic": "Biologic",
}

PATHWAY_NEXT_STEPS = {
    "device-class2": ("Predicate device analysis", "Clinical evidence package preparation",
                      "Quality management system review"),
    "device-class3": ("Clinical investigation planning", "Quality management system review"),
    "drug-small": ("Nonclinical safety package", "IND-enabling study plan"),
    "biologic": ("CMC development plan", "Immunogenicity assessment strategy"),
}


def recommend_pathway(product_key: str, risk_level: str = "", target_market: str = "") -> Optional[PathwayRecommendation]:
    """Look up the pathway for a wizard product key; unknown keys give None."""
    entry = PATHWAYS.get(product_key)
    if entry is None:
        return None
    path, timeline, recommendation = entry
    return PathwayRecommendation(
        product_key=product_key,
        path=path,
        timeline=timeline,
        recommendation=recommendation,
        risk_level=risk_level,
        target_market=target_market,
    )
