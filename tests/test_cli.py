import json
from unittest.mock import patch

import pytest
import requests
from click.testing import CliRunner

from researchlens.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


class TestAnalyze:
    def test_analyze_prints_report(self, runner):
        result = runner.invoke(cli, ["analyze", "CAR-T cell therapy cardiac toxicity", "--seed", "3"])
        assert result.exit_code == 0, result.output
        assert "Therapeutic area: oncology" in result.output
        assert "Product type: drug" in result.output
        assert "IND → NDA (Breakthrough)" in result.output
        assert "Study ID" in result.output

    def test_short_query_is_usage_error(self, runner):
        result = runner.invoke(cli, ["analyze", "  abc "])
        assert result.exit_code == 2
        assert "at least 5 characters" in result.output

    def test_invalid_filter_choice(self, runner):
        result = runner.invoke(cli, ["analyze", "stent outcomes", "--quality", "excellent"])
        assert result.exit_code == 2

    def test_outputs_written(self, runner, tmp_path):
        json_path = tmp_path / "report.json"
        csv_path = tmp_path / "studies.csv"
        result = runner.invoke(
            cli,
            [
                "analyze",
                "continuous glucose monitoring diabetes",
                "--quality", "high",
                "--seed", "9",
                "--output-json", str(json_path),
                "--output-csv", str(csv_path),
                "--no-display",
            ],
        )
        assert result.exit_code == 0, result.output
        report = json.loads(json_path.read_text(encoding="utf-8"))
        assert report["therapeutic"] == "diabetes"
        assert report["product_type"] == "device"
        assert all(80 <= s["confidence"] < 95 for s in report["studies"])
        lines = csv_path.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("Study ID,Title")
        assert len(lines) == len(report["studies"]) + 1
        assert "Therapeutic area" not in result.output

    def test_seed_from_env(self, runner, tmp_path):
        outputs = []
        for name in ("a.json", "b.json"):
            path = tmp_path / name
            runner.invoke(
                cli,
                ["analyze", "stent restenosis", "--output-json", str(path), "--no-display"],
                env={"RL_SEED": "21"},
            )
            report = json.loads(path.read_text(encoding="utf-8"))
            report.pop("timeline")
            outputs.append(report)
        assert outputs[0] == outputs[1]

    def test_bad_keywords_file_exits(self, runner, tmp_path):
        path = tmp_path / "kw.json"
        path.write_text(json.dumps({"therapeutic": {"podiatry": ["foot"]}}), encoding="utf-8")
        result = runner.invoke(cli, ["analyze", "foot ulcer care", "--keywords-file", str(path)])
        assert result.exit_code == 1

    def test_intelligence_flag(self, runner):
        result = runner.invoke(cli, ["analyze", "metformin dosing", "--seed", "1", "--intelligence"])
        assert result.exit_code == 0, result.output
        assert "Strategic intelligence" in result.output
        assert "Prioritize regulatory engagement early in development" in result.output


def test_feed_offline(runner):
    with patch("researchlens.feeds.requests.get") as mock_get:
        result = runner.invoke(cli, ["feed", "--offline"])
    assert result.exit_code == 0, result.output
    mock_get.assert_not_called()
    assert "CardioSync DES Pro" in result.output
    assert "NCT05987654" in result.output


def test_feed_falls_back_when_offline(runner):
    with patch("researchlens.feeds.requests.get", side_effect=requests.ConnectionError("down")):
        result = runner.invoke(cli, ["feed", "--timeout", "0.1"])
    assert result.exit_code == 0, result.output
    assert "Cybersecurity in Medical Devices" in result.output


def test_alerts_filtered(runner):
    result = runner.invoke(cli, ["alerts", "--severity", "high"])
    assert result.exit_code == 0, result.output
    assert "Critical Safety Signal Detected" in result.output
    assert "FDA Guidance Update" not in result.output
    assert "5 total, 5 unacknowledged" in result.output


def test_compliance_exports(runner, tmp_path):
    csv_path, json_path, audit_path = tmp_path / "c.csv", tmp_path / "c.json", tmp_path / "audit.txt"
    result = runner.invoke(
        cli, ["compliance", "--csv", str(csv_path), "--json", str(json_path), "--audit", str(audit_path)]
    )
    assert result.exit_code == 0, result.output
    assert "PMCF Plan" in result.output
    assert csv_path.read_text(encoding="utf-8").startswith("Section,Status,Owner,Last Updated")
    assert len(json.loads(json_path.read_text(encoding="utf-8"))) == 6
    assert audit_path.read_text(encoding="utf-8").startswith("EU MDR Audit Trail Report")


def test_pathway(runner, tmp_path):
    out = tmp_path / "pathway.txt"
    result = runner.invoke(cli, ["pathway", "biologic", "--target-market", "eu", "--output", str(out)])
    assert result.exit_code == 0, result.output
    assert "Recommended Pathway: IND → BLA" in result.output
    assert "Target Market: eu" in out.read_text(encoding="utf-8")


def test_pathway_unknown_product(runner):
    result = runner.invoke(cli, ["pathway", "cosmetic"])
    assert result.exit_code == 2
    assert "device-class2" in result.output


def test_evidence_quality(runner, tmp_path):
    out = tmp_path / "evidence.csv"
    result = runner.invoke(cli, ["evidence", "--quality", "low", "--output-csv", str(out)])
    assert result.exit_code == 0, result.output
    assert "Complications of Subcutaneous ICD" in result.output
    assert "TAVR" not in result.output
    assert out.read_text(encoding="utf-8").splitlines()[1].startswith("31561032,")


def test_evidence_single_study(runner, tmp_path):
    out = tmp_path / "study.csv"
    result = runner.invoke(cli, ["evidence", "--study-id", "40117414", "--output-csv", str(out)])
    assert result.exit_code == 0, result.output
    assert "Temporal Trends in 1-Year Mortality After TAVR" in result.output
    assert "Sample size: 36,877" in result.output
    assert "90% (strong evidence)" in result.output
    lines = out.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("40117414,")


def test_evidence_unknown_study(runner):
    result = runner.invoke(cli, ["evidence", "--study-id", "123"])
    assert result.exit_code == 2
    assert "37329115" in result.output


class TestKeywords:
    def test_lists_one_area(self, runner):
        result = runner.invoke(cli, ["keywords", "--area", "oncology"])
        assert result.exit_code == 0, result.output
        assert "car-t" in result.output
        assert "cell therapy" in result.output

    def test_general_has_no_keywords(self, runner):
        result = runner.invoke(cli, ["keywords", "--area", "general"])
        assert result.output.strip() == "(no keywords)"

    def test_dump_reflects_override(self, runner, tmp_path):
        override = tmp_path / "kw.json"
        override.write_text(json.dumps({"therapeutic": {"urology": ["incontinence"]}}), encoding="utf-8")
        out = tmp_path / "tables.json"
        result = runner.invoke(cli, ["keywords", "--keywords-file", str(override), "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert "Therapeutic areas" in result.output
        dumped = json.loads(out.read_text(encoding="utf-8"))
        assert dumped["therapeutic"]["urology"] == ["incontinence"]
        assert "stent" in dumped["device"]
