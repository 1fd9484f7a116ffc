import json

import pytest

from researchlens.classifier import identify_therapeutic_area
from researchlens.keywords import (
    DEFAULT_KEYWORD_TABLES,
    build_keyword_tables,
    load_keyword_tables,
)
from researchlens.models import TherapeuticArea


def test_default_tables_follow_enum_order():
    areas = [area for area, _ in DEFAULT_KEYWORD_TABLES.therapeutic]
    assert areas == [a for a in TherapeuticArea if a is not TherapeuticArea.GENERAL]


def test_keywords_for_general_is_empty():
    assert DEFAULT_KEYWORD_TABLES.keywords_for(TherapeuticArea.GENERAL) == ()
    assert "car-t" in DEFAULT_KEYWORD_TABLES.keywords_for(TherapeuticArea.ONCOLOGY)


def test_tables_are_immutable():
    with pytest.raises(AttributeError):
        DEFAULT_KEYWORD_TABLES.device = ("scalpel",)


def test_override_replaces_only_given_area():
    tables = build_keyword_tables(therapeutic={"Urology": [" Incontinence ", "incontinence", ""]})
    assert tables.keywords_for(TherapeuticArea.UROLOGY) == ("incontinence",)
    assert tables.keywords_for(TherapeuticArea.ONCOLOGY) == DEFAULT_KEYWORD_TABLES.keywords_for(TherapeuticArea.ONCOLOGY)
    assert identify_therapeutic_area("incontinence", tables) is TherapeuticArea.UROLOGY


def test_unknown_area_rejected():
    with pytest.raises(ValueError, match="Unknown therapeutic area"):
        build_keyword_tables(therapeutic={"podiatry": ["foot"]})


def test_general_area_cannot_carry_keywords():
    with pytest.raises(ValueError):
        build_keyword_tables(therapeutic={"general": ["anything"]})


def test_keyword_list_must_be_a_list():
    with pytest.raises(ValueError):
        build_keyword_tables(device="catheter")


def test_therapeutic_table_must_be_a_mapping():
    with pytest.raises(ValueError):
        build_keyword_tables(therapeutic=["cancer"])


def test_load_without_path_returns_defaults():
    assert load_keyword_tables() is DEFAULT_KEYWORD_TABLES


def test_load_from_json(tmp_path):
    path = tmp_path / "keywords.json"
    path.write_text(json.dumps({"device": ["scalpel"], "stop_words": ["outcomes"]}), encoding="utf-8")
    tables = load_keyword_tables(path)
    assert tables.device == ("scalpel",)
    assert tables.stop_words == frozenset({"outcomes"})
    assert tables.drug == DEFAULT_KEYWORD_TABLES.drug


def test_load_from_env(tmp_path, monkeypatch):
    path = tmp_path / "keywords.json"
    path.write_text(json.dumps({"drug": ["elixir"]}), encoding="utf-8")
    monkeypatch.setenv("RL_KEYWORDS_FILE", str(path))
    assert load_keyword_tables().drug == ("elixir",)


def test_load_rejects_non_object(tmp_path):
    path = tmp_path / "keywords.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_keyword_tables(path)


def test_as_json_round_trips_through_loader(tmp_path):
    path = tmp_path / "keywords.json"
    path.write_text(json.dumps(DEFAULT_KEYWORD_TABLES.as_json()), encoding="utf-8")
    assert load_keyword_tables(path) == DEFAULT_KEYWORD_TABLES
