"""Query rewriting: typo correction and synonym expansion."""
from __future__ import annotations

import logging

from .dictionaries import AUTO_CORRECTIONS, SYNONYMS, CorrectionTable, SynonymTable
from .normalization import normalize

logger = logging.getLogger(__name__)


def auto_correct(query: str, corrections: CorrectionTable = AUTO_CORRECTIONS) -> str:
    """Rewrite known misspellings in ``query``.

    Every matching entry restarts from the normalized query, so when several
    misspellings are present only the last one (in table order) is fixed.
    Queries without a known misspelling are returned untouched.
    """

    corrected = query
    normalized = normalize(query)
    for error, correction in corrections.items():
        if error in normalized:
            corrected = normalized.replace(error, correction)
    if corrected != query:
        logger.debug("auto_correct %r -> %r", query, corrected)
    return corrected


def expand_with_synonyms(query: str, synonyms: SynonymTable = SYNONYMS) -> list[str]:
    """Return ``query`` followed by its synonym variants, without duplicates.

    A term found in the query yields one variant per synonym; a synonym found in
    the query yields a variant carrying the canonical term. Only the first
    occurrence is substituted.
    """

    expanded = [query]
    normalized = normalize(query)
    for key, terms in synonyms.items():
        if key in normalized:
            expanded.extend(normalized.replace(key, term, 1) for term in terms)
        for term in terms:
            if term in normalized:
                expanded.append(normalized.replace(term, key, 1))
    variants = list(dict.fromkeys(expanded))
    logger.debug("expand_with_synonyms %r -> %s", query, variants)
    return variants
