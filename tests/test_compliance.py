from datetime import date, datetime

import pytest

from researchlens.compliance import (
    STATUS_IN_PROGRESS,
    ComplianceChecklist,
    recommend_pathway,
)

NOW = datetime(2026, 10, 18, 9, 30, 0)


@pytest.fixture
def checklist():
    return ComplianceChecklist()


class TestChecklist:
    def test_default_sections(self, checklist):
        assert [i.section for i in checklist.items()] == [
            "GSPR Checklist",
            "Clinical Evaluation Report",
            "PMCF Plan",
            "PSUR",
            "Risk Management Plan",
            "Clinical Investigation Plan",
        ]
        assert [i.section for i in checklist.outstanding()] == ["PMCF Plan", "PSUR", "Clinical Investigation Plan"]

    def test_mark_in_progress(self, checklist):
        item = checklist.mark_in_progress("PMCF Plan", today=date(2026, 10, 18))
        assert item.status == STATUS_IN_PROGRESS
        assert item.updated == "2026-10-18"
        assert checklist.get("PMCF Plan") == item

    def test_mark_unknown_section(self, checklist):
        assert checklist.mark_in_progress("Nope") is None
        assert checklist.get("Nope") is None

    def test_outstanding_actions_most_urgent_first(self, checklist):
        assert checklist.outstanding_actions() == [
            "Complete PMCF Plan (Due: High Priority)",
            "Update PSUR documentation",
            "Finalize Clinical Investigation Plan",
        ]

    def test_audit_trail_reflects_current_state(self, checklist):
        text = checklist.audit_trail(NOW)
        assert text.startswith("EU MDR Audit Trail Report\nGenerated: 2026-10-18 09:30:00\n")
        assert "- PMCF Plan: Missing (Action Required)" in text
        assert "- 2025-01-05: Clinical Investigation Plan in progress" in text
        assert "1. Complete PMCF Plan (Due: High Priority)" in text

        checklist.mark_in_progress("PMCF Plan", today=date(2026, 10, 18))
        updated = checklist.audit_trail(NOW)
        assert "(Action Required)" not in updated
        recent = updated.split("Recent Activity:\n")[1]
        assert recent.startswith("- 2026-10-18: PMCF Plan in progress")

    def test_audit_trail_with_nothing_outstanding(self):
        checklist = ComplianceChecklist(items=[])
        assert checklist.audit_trail(NOW).rstrip().endswith("Outstanding Actions:\nNone")


class TestPathway:
    @pytest.mark.parametrize(
        "key,path,timeline",
        [
            ("device-class2", "510(k) Clearance", "6-12 months"),
            ("device-class3", "PMA Approval", "12-18 months"),
            ("drug-small", "IND → NDA", "18-24 months"),
            ("biologic", "IND → BLA", "24-36 months"),
        ],
    )
    def test_known_products(self, key, path, timeline):
        rec = recommend_pathway(key)
        assert rec.path == path
        assert rec.timeline == timeline

    def test_unknown_product(self):
        assert recommend_pathway("combination-product") is None

    def test_report_text(self):
        report = recommend_pathway("device-class2", "moderate", "us").report(NOW)
        assert "Product Classification: Medical Device Class II" in report
        assert "Recommended Pathway: 510(k) Clearance" in report
        assert "Risk Level: moderate" in report
        assert "1. Pre-submission meeting recommended" in report
        assert "2. Predicate device analysis" in report
