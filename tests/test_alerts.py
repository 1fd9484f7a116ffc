import pytest

from researchlens.alerts import DEFAULT_ALERTS, MAX_ALERTS, Alert, AlertManager
from researchlens.models import Study


@pytest.fixture
def manager():
    return AlertManager()


def _study(confidence):
    return Study(
        id=f"PMID{confidence}",
        title="t",
        phase="Phase II",
        design="Retrospective cohort",
        sample_size=300,
        endpoint_success=True,
        ich_gcp=True,
        confidence=confidence,
    )


def test_seeded_with_default_alerts(manager):
    assert [a.id for a in manager.all_alerts()] == [1, 2, 3, 4, 5]
    assert manager.summary() == {"total": 5, "unacknowledged": 5, "high": 2, "medium": 2, "low": 1}


def test_managers_do_not_share_state():
    first, second = AlertManager(), AlertManager()
    first.acknowledge(1)
    assert not second.get(1).acknowledged
    assert not DEFAULT_ALERTS[0].acknowledged


@pytest.mark.parametrize(
    "category,severity,expected",
    [
        ("all", "all", [1, 2, 3, 4, 5]),
        ("compliance", "all", [2, 5]),
        ("all", "high", [1, 5]),
        ("compliance", "high", [5]),
        ("strategic", "high", []),
    ],
)
def test_filter_alerts(manager, category, severity, expected):
    assert [a.id for a in manager.filter_alerts(category, severity)] == expected


def test_acknowledge(manager):
    assert manager.acknowledge(3) is True
    assert manager.get(3).acknowledged
    assert manager.summary()["unacknowledged"] == 4


def test_acknowledge_unknown(manager):
    assert manager.acknowledge(99) is False
    assert manager.summary()["unacknowledged"] == 5


def test_generate_alert_prepends_with_next_id(manager):
    alert = manager.generate_alert("clinical", "low", "New data", "Something changed")
    assert alert.id == 6
    assert alert.category == "clinical"
    assert alert.time == "Just now"
    assert manager.all_alerts()[0] is alert


def test_generate_alert_on_empty_manager():
    manager = AlertManager(alerts=[])
    assert manager.generate_alert("regulatory", "high", "t", "c").id == 1


def test_run_validation_uses_mean_confidence(manager):
    alert = manager.run_validation([_study(70), _study(90), _study(45)])
    assert alert.title == "Evidence Validation Complete"
    assert alert.severity == "info"
    assert "Validated 3 studies" in alert.content
    assert "average confidence score of 68%" in alert.content


def test_run_validation_without_studies(manager):
    alert = manager.run_validation([])
    assert "Validated 0 studies" in alert.content
    assert "85%" in alert.content


def test_record_strategic_report(manager):
    alert = manager.record_strategic_report()
    assert isinstance(alert, Alert)
    assert alert.category == "strategic"
    assert manager.summary()["total"] == 6


def test_alert_list_keeps_newest(manager):
    for _ in range(MAX_ALERTS + 10):
        manager.record_strategic_report()
    alerts = manager.all_alerts()
    assert len(alerts) == MAX_ALERTS
    assert alerts[0].id == len(DEFAULT_ALERTS) + MAX_ALERTS + 10
    assert [a.id for a in alerts] == sorted((a.id for a in alerts), reverse=True)
    assert manager.get(1) is None


def test_small_cap_trims_initial_alerts():
    manager = AlertManager(max_alerts=2)
    assert [a.id for a in manager.all_alerts()] == [1, 2]
    manager.generate_alert("clinical", "low", "t", "c")
    assert [a.id for a in manager.all_alerts()] == [3, 1]


def test_cap_must_be_positive():
    with pytest.raises(ValueError):
        AlertManager(max_alerts=0)
