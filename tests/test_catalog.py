"""Tests for catalog loading and snapshot swapping."""

import json

import pytest

from catalog_search.catalog import CatalogLoadError, CatalogStore, load_products
from catalog_search.models import Product


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_products_reads_records(tmp_path):
    path = _write(
        tmp_path / "products.json",
        [{"code": "AB12", "name": "Interruttore", "price": 4.5}, {"code": "C1"}],
    )
    products = load_products(path)
    assert isinstance(products, tuple)
    assert products[0].code == "AB12"
    assert products[0].model_dump()["price"] == 4.5
    assert products[1] == Product(code="C1")


@pytest.mark.parametrize(
    "content, message",
    [
        ("", "empty"),
        ("{broken", "not valid JSON"),
        ('{"code": "AB12"}', "must be an array"),
        ('[{"code": "AB12"}, "AB13"]', "record 1"),
    ],
)
def test_load_products_rejects_bad_files(tmp_path, content, message):
    path = tmp_path / "products.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(CatalogLoadError, match=message):
        load_products(path)


def test_load_products_missing_file(tmp_path):
    with pytest.raises(CatalogLoadError, match="File not found"):
        load_products(tmp_path / "nope.json")


def test_empty_array_is_a_valid_catalog(tmp_path):
    assert load_products(_write(tmp_path / "products.json", [])) == ()


def test_store_starts_not_ready(tmp_path):
    snapshot = CatalogStore(tmp_path / "products.json").snapshot
    assert not snapshot.ready
    assert snapshot.products == ()


def test_store_reload_publishes_snapshot(tmp_path):
    store = CatalogStore(_write(tmp_path / "products.json", [{"code": "AB12", "name": "Switch"}]))
    assert store.reload()
    snapshot = store.snapshot
    assert snapshot.ready
    assert snapshot.count == 1
    assert snapshot.version
    assert snapshot.loaded_at is not None
    assert snapshot.error is None


def test_store_reload_swaps_without_touching_old_snapshot(tmp_path):
    path = _write(tmp_path / "products.json", [{"code": "AB12"}])
    store = CatalogStore(path)
    store.reload()
    old = store.snapshot

    _write(path, [{"code": "AB12"}, {"code": "AB13"}])
    store.reload()

    assert [p.code for p in old.products] == ["AB12"]
    assert store.snapshot.count == 2
    assert store.snapshot.version != old.version


def test_store_degrades_on_failure(tmp_path):
    path = _write(tmp_path / "products.json", [{"code": "AB12"}])
    store = CatalogStore(path)
    store.reload()
    path.write_text("not json", encoding="utf-8")

    assert not store.reload()
    snapshot = store.snapshot
    assert not snapshot.ready
    assert snapshot.products == ()
    assert "not valid JSON" in snapshot.error
