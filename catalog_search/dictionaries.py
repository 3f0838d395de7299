"""Synonym and auto-correction tables used by query expansion.

Both tables are read-only process-wide configuration. The built-in versions
below cover the usual Italian electrical trade vocabulary; deployments may
replace them once at startup from JSON files (see :func:`load_synonyms` and
:func:`load_corrections`). Keys and terms are stored in normalized form so
they can be compared directly against normalized queries.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Tuple

from .normalization import normalize

logger = logging.getLogger(__name__)

SynonymTable = Mapping[str, Tuple[str, ...]]
CorrectionTable = Mapping[str, str]

# Canonical term -> synonyms. Iteration order drives the order of generated
# query variants.
SYNONYMS: SynonymTable = MappingProxyType(
    {
        # Prodotti comuni
        "interruttore": ("switch", "pulsante", "deviatore"),
        "presa": ("socket", "spina"),
        "lampada": ("lampadina", "led", "luce", "bulbo"),
        "cavo": ("filo", "cavetto", "cable"),
        "scatola": ("box", "contenitore"),
        "quadro": ("centralino", "pannello"),
        "rele": ("relay",),
        "trasformatore": ("trafo",),
        "magnetotermico": ("salvavita", "differenziale"),
        # Abbreviazioni
        "btc": ("bticino",),
        "gewiss": ("gw",),
        "abb": ("abb",),
        # Errori frequenti
        "inturrettore": ("interruttore",),
        "interruttorw": ("interruttore",),
        "lampadins": ("lampadina",),
        "quadr": ("quadro",),
    }
)

# Known misspelling -> correction. Only the last matching entry survives a
# correction pass, so the order here is significant.
AUTO_CORRECTIONS: CorrectionTable = MappingProxyType(
    {
        "inturrettore": "interruttore",
        "interruttorw": "interruttore",
        "lampadins": "lampadina",
        "trasofrmatore": "trasformatore",
        "magnetotermic": "magnetotermico",
        "btcino": "bticino",
        "gewis": "gewiss",
    }
)


def _read_json(path: Path) -> object | None:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc


def load_synonyms(path: str | Path | None) -> SynonymTable:
    """Load a ``{"term": ["synonym", ...]}`` table, defaulting to :data:`SYNONYMS`."""

    if not path:
        return SYNONYMS
    file_path = Path(path)
    raw = _read_json(file_path)
    if raw is None:
        logger.warning("Synonyms file %s not found; using built-in table", file_path)
        return SYNONYMS
    if not isinstance(raw, dict):
        raise ValueError(f"{file_path} must contain a JSON object")

    table: dict[str, Tuple[str, ...]] = {}
    for key, terms in raw.items():
        if not isinstance(terms, list) or not all(isinstance(term, str) for term in terms):
            raise ValueError(f"{file_path}: synonyms for {key!r} must be a list of strings")
        canonical = normalize(key)
        if not canonical:
            continue
        normalized_terms = tuple(term for term in (normalize(item) for item in terms) if term)
        table[canonical] = table.get(canonical, ()) + normalized_terms
    logger.info("Loaded %s synonym entries from %s", len(table), file_path)
    return MappingProxyType(table)


def load_corrections(path: str | Path | None) -> CorrectionTable:
    """Load a ``{"misspelling": "correction"}`` table, defaulting to :data:`AUTO_CORRECTIONS`."""

    if not path:
        return AUTO_CORRECTIONS
    file_path = Path(path)
    raw = _read_json(file_path)
    if raw is None:
        logger.warning("Corrections file %s not found; using built-in table", file_path)
        return AUTO_CORRECTIONS
    if not isinstance(raw, dict):
        raise ValueError(f"{file_path} must contain a JSON object")

    table: dict[str, str] = {}
    for error, correction in raw.items():
        if not isinstance(correction, str):
            raise ValueError(f"{file_path}: correction for {error!r} must be a string")
        key = normalize(error)
        if key:
            table[key] = normalize(correction)
    logger.info("Loaded %s auto-corrections from %s", len(table), file_path)
    return MappingProxyType(table)
