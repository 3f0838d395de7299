"""Tests for the cascading fallback retrieval."""

from catalog_search.intent import Intent
from catalog_search.models import Product
from catalog_search.retrieval import MAX_RESULTS, find_exact_code, search_with_fallback


def _codes(products):
    return [product.code for product in products]


def test_empty_catalog_or_queries():
    assert search_with_fallback([], ["presa"], Intent.CATEGORY) == []
    assert search_with_fallback([Product(code="P1", name="presa")], [], Intent.CATEGORY) == []


def test_find_exact_code_uses_normalized_codes():
    products = [Product(code="SW-10"), Product(code="sw-100")]
    assert find_exact_code(products, "sw-100") is products[1]
    assert find_exact_code(products, "") is None


def test_exact_code_wins_over_earlier_prefix_matches():
    """The exact product is returned even if the prefix scan would stop early."""

    products = [
        Product(code="AB10", name="Relè 10A"),
        Product(code="AB11", name="Relè 11A"),
        Product(code="AB12", name="Relè 12A"),
        Product(code="AB1", name="Relè base"),
    ]
    assert _codes(search_with_fallback(products, ["ab1"], Intent.CODE)) == ["AB1"]


def test_exact_code_on_later_variant():
    products = [Product(code="BTICINO", name="Placca"), Product(code="X2", name="btc placca")]
    result = search_with_fallback(products, ["btc", "bticino"], Intent.CATEGORY)
    assert _codes(result) == ["BTICINO"]


def test_strong_code_prefix_returns_single_best():
    products = [
        Product(code="SW-100", name="Interruttore"),
        Product(code="SW-1000", name="Interruttore doppio"),
    ]
    assert _codes(search_with_fallback(products, ["sw-10"], Intent.CODE)) == ["SW-100"]


def test_name_scan_tolerates_typo():
    products = [
        Product(code="P1", name="Interruttore bianco"),
        Product(code="P2", name="Presa schuko"),
    ]
    assert _codes(search_with_fallback(products, ["interruttote"], Intent.CATEGORY)) == ["P1"]


def test_results_are_ranked_by_score():
    products = [
        Product(code="A", name="Interruttore bipolare"),
        Product(code="B", name="Interruttore"),
    ]
    assert _codes(search_with_fallback(products, ["interruttore"], Intent.CATEGORY)) == ["B", "A"]


def test_results_are_capped_and_unique():
    products = [Product(code=f"C{i}", name=f"Cavo tipo {i}") for i in range(20)]
    products.append(Product(code="C3", name="Cavo duplicato"))
    result = search_with_fallback(products, ["cavo", "filo"], Intent.CATEGORY)
    codes = _codes(result)
    assert 0 < len(codes) <= MAX_RESULTS
    assert len(set(codes)) == len(codes)


def test_multi_token_broaden_matches_reordered_words():
    products = [Product(code="L1", name="Lampadina LED E27"), Product(code="P1", name="Presa")]
    result = search_with_fallback(products, ["led lampadina"], Intent.PRODUCT)
    assert _codes(result) == ["L1"]


def test_category_fallback():
    products = [Product(code="L1", name="Lampadina", category="Illuminazione")]
    result = search_with_fallback(products, ["illuminazione"], Intent.CATEGORY)
    assert _codes(result) == ["L1"]


def test_description_fallback_needs_longer_query():
    products = [Product(code="N07", name="N07V-K", category="Cavi", description="Cordina flessibile blu")]
    assert _codes(search_with_fallback(products, ["flessibile"], Intent.CATEGORY)) == ["N07"]
    assert search_with_fallback(products, ["blu"], Intent.CATEGORY) == []


def test_token_fallback_uses_first_matching_token():
    products = [
        Product(code="D1", name="Deviatore 10A"),
        Product(code="D2", name="Deviatore 16A"),
        Product(code="P1", name="Presa 10A"),
    ]
    result = search_with_fallback(products, ["zzz deviatore"], Intent.CODE)
    assert _codes(result) == ["D1", "D2"]


def test_token_fallback_skips_short_tokens():
    products = [Product(code="D1", name="Deviatore 10A")]
    # "de" would match the name, but tokens shorter than three characters are ignored
    assert search_with_fallback(products, ["qq de"], Intent.CODE) == []
