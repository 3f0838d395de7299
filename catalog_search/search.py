"""Query-to-ranking pipeline over an in-memory catalog snapshot."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from .dictionaries import AUTO_CORRECTIONS, SYNONYMS, CorrectionTable, SynonymTable
from .expansion import auto_correct, expand_with_synonyms
from .intent import Intent, classify_intent
from .models import Product
from .normalization import normalize
from .retrieval import find_exact_code, search_with_fallback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryPlan:
    """Everything derived from the raw query before touching the catalog."""

    normalized: str
    intent: Intent | None = None
    corrected: str = ""
    variants: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.normalized


def analyze_query(
    raw_query: str,
    *,
    synonyms: SynonymTable = SYNONYMS,
    corrections: CorrectionTable = AUTO_CORRECTIONS,
) -> QueryPlan:
    # Step 1: canonical form; nothing left means nothing to search.
    normalized = normalize(raw_query)
    if not normalized:
        return QueryPlan(normalized="")
    # Step 2: intent is taken from what the user typed, before any rewriting.
    intent = classify_intent(normalized)
    # Step 3: fix known typos, then fan out into synonym variants.
    corrected = auto_correct(normalized, corrections)
    variants = tuple(expand_with_synonyms(corrected, synonyms))
    logger.debug(
        "query plan raw=%r normalized=%r intent=%s corrected=%r variants=%s",
        raw_query,
        normalized,
        intent.value,
        corrected,
        variants,
    )
    return QueryPlan(normalized=normalized, intent=intent, corrected=corrected, variants=variants)


def run_plan(products: Sequence[Product], plan: QueryPlan) -> List[Product]:
    """Execute a prepared :class:`QueryPlan` against ``products``."""

    if plan.is_empty or plan.intent is None:
        return []
    if plan.corrected != plan.normalized:
        # A code that happens to look like a typo must still be found verbatim.
        exact = find_exact_code(products, plan.normalized)
        if exact is not None:
            return [exact]
    return search_with_fallback(products, plan.variants, plan.intent)


def search_products(
    products: Sequence[Product],
    raw_query: str,
    *,
    synonyms: SynonymTable = SYNONYMS,
    corrections: CorrectionTable = AUTO_CORRECTIONS,
) -> List[Product]:
    """Return at most five products best matching ``raw_query``.

    Never raises: empty or unusable queries and empty catalogs produce ``[]``.
    """

    plan = analyze_query(raw_query, synonyms=synonyms, corrections=corrections)
    return run_plan(products, plan)
