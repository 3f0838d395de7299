"""Tests for the terminal client."""

import json

from cli_search import main


def _catalog(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(
        json.dumps(
            [
                {"code": "AB12", "name": "Interruttore 10A", "category": "Interruttori"},
                {"code": "PS-16", "name": "Presa schuko 16A"},
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_single_query(tmp_path, capsys):
    assert main(["ab12", "--catalog", str(_catalog(tmp_path))]) == 0
    out = capsys.readouterr().out
    assert "intent: CODE" in out
    assert "AB12 | Interruttore 10A | Interruttori" in out


def test_batch_mode(tmp_path, capsys):
    queries = tmp_path / "queries.txt"
    queries.write_text("ab12\n\npresa\n", encoding="utf-8")
    assert main(["--batch", str(queries), "--catalog", str(_catalog(tmp_path))]) == 0
    out = capsys.readouterr().out
    assert out.count("Query:") == 2
    assert "PS-16 | Presa schuko 16A | -" in out


def test_missing_catalog(tmp_path, capsys):
    assert main(["ab12", "--catalog", str(tmp_path / "missing.json")]) == 1
    assert "Cannot load catalog" in capsys.readouterr().out
