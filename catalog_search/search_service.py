"""Search service: caching, timing and response shaping around the pipeline."""
from __future__ import annotations

import logging
from functools import lru_cache
from time import perf_counter
from typing import Any, Dict, Tuple

from .cache import CacheBackend, cache_key
from .catalog import CatalogSnapshot
from .config import settings
from .dictionaries import CorrectionTable, SynonymTable, load_corrections, load_synonyms
from .search import analyze_query, run_plan

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_query_tables() -> Tuple[SynonymTable, CorrectionTable]:
    """Synonym and correction tables, loaded once per process."""

    return load_synonyms(settings.synonyms_path), load_corrections(settings.corrections_path)


def search_catalog(snapshot: CatalogSnapshot, raw_query: str, cache: CacheBackend) -> Dict[str, Any]:
    query = (raw_query or "").strip()
    synonyms, corrections = get_query_tables()

    t0 = perf_counter()
    plan = analyze_query(query, synonyms=synonyms, corrections=corrections)
    if plan.is_empty:
        return {"query": query, "count": 0, "results": [], "classification": None, "searchTimeMs": 0.0}

    key = cache_key(snapshot.version, plan.normalized)
    cached = cache.get(key)
    if cached is not None:
        total_ms = (perf_counter() - t0) * 1000
        logger.info(
            "timing: total=%.2fms cache_hit=1 q=%r intent=%s",
            total_ms,
            query,
            cached.get("classification"),
        )
        return {**cached, "query": query, "searchTimeMs": total_ms, "cached": True}

    t1 = perf_counter()
    products = run_plan(snapshot.products, plan)
    t2 = perf_counter()

    analyze_ms = (t1 - t0) * 1000
    retrieve_ms = (t2 - t1) * 1000
    total_ms = (t2 - t0) * 1000
    intent = plan.intent.value if plan.intent else None
    logger.info(
        "timing: total=%.2fms analyze=%.2fms retrieve=%.2fms q=%r intent=%s variants=%s results=%s",
        total_ms,
        analyze_ms,
        retrieve_ms,
        query,
        intent,
        len(plan.variants),
        len(products),
    )

    response = {
        "query": query,
        "count": len(products),
        "results": [product.model_dump() for product in products],
        "classification": intent,
        "searchTimeMs": total_ms,
    }
    cache.set(key, response, settings.cache_ttl_seconds)
    logger.debug("cache_store q=%r ttl=%s", plan.normalized, settings.cache_ttl_seconds)
    return response
