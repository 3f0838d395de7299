"""Cascading retrieval over an in-memory catalog.

The search widens in phases until enough candidates are collected:

    code scan -> name scan (per query variant) -> multi-token broaden
    -> category -> description -> single-token last resort

Each phase only looks at products that no earlier phase matched, and several
phases stop scanning as soon as a quota is reached. The outcome is a fast
"good enough" top five rather than an exhaustive ranking.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .intent import Intent
from .models import Product
from .normalization import normalize, tokenize
from .scoring import CODE_PREFIX_SCORE, CODE_SUBSTRING_SCORE, fuzzy_match, score_product

logger = logging.getLogger(__name__)

MAX_RESULTS = 5
# Quotas below apply to the number of accumulated candidates.
CODE_EARLY_STOP_COUNT = 3
NAME_SCAN_LIMIT = 10
MULTI_TOKEN_LIMIT = 15
MULTI_TOKEN_MIN_SCORE = 300
CATEGORY_MIN_COUNT = 3
CATEGORY_LIMIT = 10
DESCRIPTION_MIN_COUNT = 2
DESCRIPTION_MIN_QUERY_LENGTH = 4
DESCRIPTION_LIMIT = 10
TOKEN_MIN_LENGTH = 3
TOKEN_FALLBACK_SCORE = 100


@dataclass(frozen=True)
class ScoredCandidate:
    product: Product
    score: float


class _Accumulator:
    """Insertion-ordered candidates, unique by product code."""

    def __init__(self) -> None:
        self._items: Dict[str, ScoredCandidate] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, product: Product) -> bool:
        return product.code in self._items

    def add(self, product: Product, score: float) -> None:
        # First score wins; later phases never re-rank a known product.
        self._items.setdefault(product.code, ScoredCandidate(product, score))

    def best_score(self) -> float:
        return max((item.score for item in self._items.values()), default=0.0)

    def ranked(self, limit: int) -> List[Product]:
        ordered = sorted(self._items.values(), key=lambda item: item.score, reverse=True)
        return [item.product for item in ordered[:limit]]


def find_exact_code(products: Sequence[Product], query: str) -> Optional[Product]:
    """Return the first product whose normalized code equals ``query``."""

    if not query:
        return None
    for product in products:
        if normalize(product.code) == query:
            return product
    return None


def _scan_codes(products, query, tokens, intent, results: _Accumulator) -> None:
    for product in products:
        code = normalize(product.code)
        if not (code.startswith(query) or query in code):
            continue
        score = score_product(product, query, tokens, intent)
        results.add(product, score)
        if len(results) >= CODE_EARLY_STOP_COUNT and score >= CODE_SUBSTRING_SCORE:
            break


def _scan_names(products, query, tokens, intent, results: _Accumulator) -> None:
    for product in products:
        if product in results:
            continue
        name = normalize(product.name)
        if query not in name and not fuzzy_match(name, query):
            continue
        score = score_product(product, query, tokens, intent)
        if score > 0:
            results.add(product, score)
        if len(results) >= NAME_SCAN_LIMIT:
            break


def _broaden_multi_token(products, query, tokens, intent, results: _Accumulator) -> None:
    for product in products:
        if product in results:
            continue
        score = score_product(product, query, tokens, intent)
        if score >= MULTI_TOKEN_MIN_SCORE:
            results.add(product, score)
        if len(results) >= MULTI_TOKEN_LIMIT:
            break


def _scan_field(products, field: str, query, tokens, intent, results: _Accumulator, limit: int) -> None:
    for product in products:
        if product in results:
            continue
        if query in normalize(getattr(product, field)):
            score = score_product(product, query, tokens, intent)
            if score > 0:
                results.add(product, score)
        if len(results) >= limit:
            break


def _scan_tokens(products, tokens: Sequence[str], results: _Accumulator) -> None:
    for token in tokens:
        if len(token) < TOKEN_MIN_LENGTH:
            continue
        for product in products:
            if product in results:
                continue
            fields = (normalize(product.code), normalize(product.name), normalize(product.category))
            if any(token in value for value in fields):
                results.add(product, TOKEN_FALLBACK_SCORE)
            if len(results) >= MAX_RESULTS:
                break
        if results:
            logger.debug("token fallback matched on %r", token)
            return


def search_with_fallback(
    products: Sequence[Product],
    queries: Sequence[str],
    intent: Intent,
) -> List[Product]:
    """Run the phase cascade for ``queries`` (original query first).

    An exact code match on any variant is authoritative and returned alone;
    a very strong code prefix hit likewise returns only the best product.
    Otherwise up to :data:`MAX_RESULTS` products are returned, best first.
    """

    if not products or not queries:
        return []

    primary = queries[0]
    tokens = tokenize(primary)
    results = _Accumulator()

    for query in queries:
        exact = find_exact_code(products, query)
        if exact is not None:
            logger.debug("exact code match q=%r code=%r", query, exact.code)
            return [exact]

        _scan_codes(products, query, tokens, intent, results)
        if results and results.best_score() >= CODE_PREFIX_SCORE:
            logger.debug("strong code match q=%r score=%s", query, results.best_score())
            return results.ranked(1)

        if len(results) < MAX_RESULTS:
            _scan_names(products, query, tokens, intent, results)
        if len(results) >= MAX_RESULTS:
            break

    if len(results) < MAX_RESULTS and len(tokens) > 1:
        _broaden_multi_token(products, primary, tokens, intent, results)

    if len(results) < CATEGORY_MIN_COUNT:
        _scan_field(products, "category", primary, tokens, intent, results, CATEGORY_LIMIT)

    if len(results) < DESCRIPTION_MIN_COUNT and len(primary) > DESCRIPTION_MIN_QUERY_LENGTH:
        _scan_field(products, "description", primary, tokens, intent, results, DESCRIPTION_LIMIT)

    if not results and len(tokens) > 1:
        _scan_tokens(products, tokens, results)

    ranked = results.ranked(MAX_RESULTS)
    logger.debug(
        "fallback search q=%r intent=%s variants=%s candidates=%s returned=%s",
        primary,
        intent.value,
        len(queries),
        len(results),
        len(ranked),
    )
    return ranked
