"""Text normalization shared by queries and catalog fields.

Both sides of every comparison go through :func:`normalize`, so product codes
like ``"SW-100"`` and queries like ``"sw-100 "`` meet in the same canonical
form:

    1) lowercase,
    2) NFD decomposition with combining marks dropped (``"relè"`` -> ``"rele"``),
    3) anything outside ``[a-z0-9]``, whitespace, ``-``, ``_`` and ``.`` becomes
       a space,
    4) whitespace runs collapse to a single space and the ends are trimmed.

The output alphabet is closed under the same steps, which makes the function
idempotent.
"""
from __future__ import annotations

import re
import unicodedata

# Everything we do not keep is turned into a separator, not deleted, so that
# "10A/16A" still yields two tokens.
_DISALLOWED_RE = re.compile(r"[^a-z0-9\s\-_.]")


def normalize(text: object) -> str:
    """Return the canonical comparison form of ``text``.

    Non-string input (``None``, numbers, ...) is treated as an empty string.
    """

    if not isinstance(text, str) or not text:
        return ""
    lowered = text.lower()
    decomposed = unicodedata.normalize("NFD", lowered)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = _DISALLOWED_RE.sub(" ", stripped)
    return " ".join(cleaned.split())


def tokenize(query: str) -> list[str]:
    """Split a normalized query into whitespace-delimited tokens."""

    return [token for token in query.split(" ") if token]
