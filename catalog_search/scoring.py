"""Relevance scoring of a single product against a query."""
from __future__ import annotations

from typing import NamedTuple, Sequence

from .intent import Intent
from .models import Product
from .normalization import normalize

# Shortest pattern for which a one-character substitution is tolerated.
MIN_FUZZY_LENGTH = 3


class FieldWeights(NamedTuple):
    code: float
    name: float
    category: float


INTENT_WEIGHTS: dict[Intent, FieldWeights] = {
    Intent.CODE: FieldWeights(code=3.0, name=1.0, category=0.3),
    Intent.PRODUCT: FieldWeights(code=1.0, name=3.0, category=1.0),
    Intent.CATEGORY: FieldWeights(code=0.5, name=1.5, category=3.0),
}

EXACT_CODE_SCORE = 10000
CODE_PREFIX_SCORE = 5000
CODE_SUBSTRING_SCORE = 2500
CODE_FUZZY_SCORE = 1200
NAME_EXACT_SCORE = 3000
NAME_PREFIX_SCORE = 1500
NAME_SUBSTRING_SCORE = 800
NAME_FUZZY_SCORE = 400
CATEGORY_SCORE = 600
TOKEN_CODE_SCORE = 300
TOKEN_NAME_SCORE = 150
TOKEN_CATEGORY_SCORE = 100
TOKEN_DESCRIPTION_SCORE = 50
DESCRIPTION_SCORE = 200
# Description matches only count for products that scored poorly elsewhere.
DESCRIPTION_SCORE_CEILING = 500


def fuzzy_match(haystack: str, pattern: str) -> bool:
    """Substring test tolerating a single substituted character.

    Slides a window of ``len(pattern)`` over ``haystack`` and accepts the first
    window that differs in at most one aligned position. Insertions and
    deletions are not considered.
    """

    if pattern in haystack:
        return True
    size = len(pattern)
    if size < MIN_FUZZY_LENGTH:
        return False
    for start in range(len(haystack) - size + 1):
        diff = 0
        for offset, expected in enumerate(pattern):
            if haystack[start + offset] != expected:
                diff += 1
                if diff > 1:
                    break
        if diff <= 1:
            return True
    return False


def _token_bonus(
    tokens: Sequence[str],
    code: str,
    name: str,
    category: str,
    description: str,
    weights: FieldWeights,
) -> float:
    bonus = 0.0
    matched = 0
    for token in tokens:
        if token in code:
            bonus += TOKEN_CODE_SCORE * weights.code
        elif token in name:
            bonus += TOKEN_NAME_SCORE * weights.name
        elif token in category:
            bonus += TOKEN_CATEGORY_SCORE * weights.category
        elif token in description:
            bonus += TOKEN_DESCRIPTION_SCORE
        else:
            continue
        matched += 1
    if matched == len(tokens):
        bonus *= 2
    return bonus


def score_product(product: Product, query: str, tokens: Sequence[str], intent: Intent) -> float:
    """Score ``product`` for an already normalized ``query``.

    Code matches dominate, then names, then categories; ``intent`` rescales the
    three fields. An exact code hit short-circuits every other rule.
    """

    weights = INTENT_WEIGHTS.get(intent, INTENT_WEIGHTS[Intent.PRODUCT])
    code = normalize(product.code)
    name = normalize(product.name)
    category = normalize(product.category)
    description = normalize(product.description)

    if code == query:
        return EXACT_CODE_SCORE * weights.code

    score = 0.0
    if code.startswith(query):
        score += CODE_PREFIX_SCORE * weights.code
    if query in code:
        score += CODE_SUBSTRING_SCORE * weights.code
    if fuzzy_match(code, query):
        score += CODE_FUZZY_SCORE * weights.code

    if name == query:
        score += NAME_EXACT_SCORE * weights.name
    if name.startswith(query):
        score += NAME_PREFIX_SCORE * weights.name
    if query in name:
        score += NAME_SUBSTRING_SCORE * weights.name
    if fuzzy_match(name, query):
        score += NAME_FUZZY_SCORE * weights.name

    if query in category:
        score += CATEGORY_SCORE * weights.category

    if len(tokens) > 1:
        score += _token_bonus(tokens, code, name, category, description, weights)

    if score < DESCRIPTION_SCORE_CEILING and query in description:
        score += DESCRIPTION_SCORE
    return score
