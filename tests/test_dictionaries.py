"""Tests for the synonym and correction tables."""

import json

import pytest

from catalog_search.dictionaries import (
    AUTO_CORRECTIONS,
    SYNONYMS,
    load_corrections,
    load_synonyms,
)


def test_builtin_tables_are_read_only():
    with pytest.raises(TypeError):
        SYNONYMS["nuovo"] = ("new",)
    with pytest.raises(TypeError):
        AUTO_CORRECTIONS["x"] = "y"


def test_no_path_uses_builtin_tables():
    assert load_synonyms("") is SYNONYMS
    assert load_corrections(None) is AUTO_CORRECTIONS


def test_missing_file_falls_back(tmp_path):
    assert load_synonyms(tmp_path / "missing.json") is SYNONYMS
    assert load_corrections(tmp_path / "missing.json") is AUTO_CORRECTIONS


def test_loaded_synonyms_are_normalized(tmp_path):
    path = tmp_path / "synonyms.json"
    path.write_text(json.dumps({"Relè": ["Relay", "  "], "Presa": ["Socket"]}), encoding="utf-8")
    table = load_synonyms(path)
    assert dict(table) == {"rele": ("relay",), "presa": ("socket",)}
    assert list(table) == ["rele", "presa"]


def test_loaded_corrections_keep_file_order(tmp_path):
    path = tmp_path / "corrections.json"
    path.write_text(json.dumps({"Scatla": "scatola", "cavetoo": "cavetto"}), encoding="utf-8")
    assert list(load_corrections(path).items()) == [("scatla", "scatola"), ("cavetoo", "cavetto")]


@pytest.mark.parametrize("content", ["[]", "{not json", '{"presa": "socket"}'])
def test_malformed_synonyms_raise(tmp_path, content):
    path = tmp_path / "synonyms.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_synonyms(path)


def test_malformed_corrections_raise(tmp_path):
    path = tmp_path / "corrections.json"
    path.write_text(json.dumps({"scatla": ["scatola"]}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_corrections(path)
