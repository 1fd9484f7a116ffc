"""
Feed tests never touch the network: `requests.get` is patched throughout.
"""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from researchlens.feeds import (
    RegulatoryFeed,
    fallback_snapshot,
    fetch_json,
    sample_approvals,
    sample_guidance,
    sample_trials,
)


def _response(payload=None, status_error=None, json_error=None):
    resp = MagicMock()
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


class TestFetchJson:
    def test_returns_decoded_body(self):
        with patch("researchlens.feeds.requests.get", return_value=_response({"ok": True})) as mock_get:
            assert fetch_json("https://example.test/x.json", timeout=1.5) == {"ok": True}
        _, kwargs = mock_get.call_args
        assert kwargs["timeout"] == 1.5
        assert kwargs["headers"]["Accept"] == "application/json"

    def test_http_error_gives_none(self):
        err = requests.HTTPError("503 Server Error")
        with patch("researchlens.feeds.requests.get", return_value=_response(status_error=err)):
            assert fetch_json("https://example.test/x.json") is None

    def test_timeout_gives_none(self):
        with patch("researchlens.feeds.requests.get", side_effect=requests.Timeout("slow")):
            assert fetch_json("https://example.test/x.json") is None

    def test_invalid_json_gives_none(self):
        with patch("researchlens.feeds.requests.get", return_value=_response(json_error=ValueError("bad json"))):
            assert fetch_json("https://example.test/x.json") is None


class TestSamples:
    def test_sample_dates_are_relative(self):
        today = date(2026, 3, 10)
        assert [g["date"] for g in sample_guidance(today)] == ["2026-03-08", "2026-03-05", "2026-03-07"]
        assert sample_approvals(today)[0]["date"] == "2026-03-09"
        assert sample_trials(today)[1]["post_date"] == "2026-03-07"

    def test_fallback_snapshot_has_three_lists(self):
        snap = fallback_snapshot(date(2026, 3, 10))
        assert set(snap) == {"guidance", "approvals", "trials"}
        assert all(len(items) == 3 for items in snap.values())


class TestRegulatoryFeed:
    def test_guidance_parses_enforcement_records(self):
        payload = {
            "results": [
                {"product_description": "X" * 100, "report_date": "20260101", "classification": "Class I"},
                {"product_description": "Short notice", "classification": "Class II"},
                {},
                {"product_description": "ignored, only top three kept"},
            ]
        }
        with patch("researchlens.feeds.requests.get", return_value=_response(payload)) as mock_get:
            items = RegulatoryFeed(fda_base_url="https://fda.test/").fetch_guidance()
        assert mock_get.call_args[0][0] == "https://fda.test/device/enforcement.json"
        assert len(items) == 3
        assert items[0]["title"] == "X" * 80 + "..."
        assert items[0]["type"] == "Class I"
        assert items[1]["title"] == "Short notice..."
        assert items[2]["title"].startswith("Medical Device Safety Notice")
        assert items[2]["date"] == date.today().isoformat()

    def test_approvals_parse_drugsfda_records(self):
        payload = {
            "results": [
                {
                    "sponsor_name": "Acme Pharma",
                    "products": [{"brand_name": "Cardiozol"}],
                    "submissions": [{"submission_status": "AP", "submission_status_date": "20260201"}],
                },
                {"openfda": {"brand_name": ["Fallbackol"]}},
            ]
        }
        with patch("researchlens.feeds.requests.get", return_value=_response(payload)):
            items = RegulatoryFeed().fetch_approvals()
        assert items[0] == {
            "agency": "FDA",
            "product": "Cardiozol",
            "company": "Acme Pharma",
            "decision": "AP",
            "date": "20260201",
        }
        assert items[1]["product"] == "Fallbackol"
        assert items[1]["company"] == "Pharmaceutical Company"
        assert items[1]["decision"] == "Approved"

    def test_trials_parse_v2_studies(self):
        payload = {
            "studies": [
                {
                    "protocolSection": {
                        "identificationModule": {"nctId": "NCT01234567", "briefTitle": "A" * 70},
                        "statusModule": {
                            "overallStatus": "RECRUITING",
                            "lastUpdatePostDateStruct": {"date": "2026-02-02"},
                        },
                        "designModule": {"phases": ["PHASE3"]},
                    }
                }
            ]
        }
        with patch("researchlens.feeds.requests.get", return_value=_response(payload)) as mock_get:
            items = RegulatoryFeed(clinicaltrials_url="https://ct.test/api/v2/studies", trial_term="stent").fetch_trials()
        assert mock_get.call_args[1]["params"]["query.term"] == "stent"
        assert items == [
            {
                "nct": "NCT01234567",
                "title": "A" * 60 + "...",
                "phase": "PHASE3",
                "status": "RECRUITING",
                "post_date": "2026-02-02",
            }
        ]

    def test_failures_fall_back_to_samples(self):
        with patch("researchlens.feeds.requests.get", side_effect=requests.ConnectionError("offline")):
            snap = RegulatoryFeed(timeout=0.1).snapshot()
        today = date.today()
        assert snap == {
            "guidance": sample_guidance(today),
            "approvals": sample_approvals(today),
            "trials": sample_trials(today),
        }

    def test_malformed_payload_falls_back(self):
        with patch("researchlens.feeds.requests.get", return_value=_response({"results": "nope"})):
            assert RegulatoryFeed().fetch_guidance() == sample_guidance()

    @pytest.mark.parametrize(
        "method,payload,fallback",
        [
            ("fetch_guidance", {"results": [{"product_description": 42}]}, sample_guidance),
            ("fetch_approvals", {"results": [{"products": ["x"]}]}, sample_approvals),
            ("fetch_approvals", {"results": [{"openfda": "x"}]}, sample_approvals),
            ("fetch_trials", {"studies": [{"protocolSection": "x"}]}, sample_trials),
            ("fetch_trials", {"studies": [{"protocolSection": {"statusModule": ["x"]}}]}, sample_trials),
        ],
    )
    def test_odd_record_shapes_fall_back(self, method, payload, fallback):
        with patch("researchlens.feeds.requests.get", return_value=_response(payload)):
            items = getattr(RegulatoryFeed(), method)()
        assert items == fallback()

    def test_snapshot_never_raises_on_odd_records(self):
        payload = {"results": [{"products": ["x"], "product_description": 42}], "studies": [{"protocolSection": "x"}]}
        with patch("researchlens.feeds.requests.get", return_value=_response(payload)):
            snap = RegulatoryFeed().snapshot()
        assert snap == fallback_snapshot()

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("RL_FDA_BASE_URL", "https://mirror.test")
        monkeypatch.setenv("RL_FEED_TIMEOUT", "7.5")
        monkeypatch.setenv("RL_TRIAL_TERM", "oncology")
        feed = RegulatoryFeed()
        assert feed.fda_base_url == "https://mirror.test"
        assert feed.timeout == 7.5
        assert feed.trial_term == "oncology"
