"""Rule-based query intent classification."""
from __future__ import annotations

import re
from enum import Enum

from .normalization import normalize, tokenize

_DIGIT_RE = re.compile(r"[0-9]")
_LETTER_RE = re.compile(r"[a-z]")

# Longest query still considered a product code when it mixes letters and digits.
MAX_CODE_LENGTH = 15


class Intent(str, Enum):
    CODE = "CODE"
    PRODUCT = "PRODUCT"
    CATEGORY = "CATEGORY"


def classify_intent(query: str) -> Intent:
    """Guess whether the user typed a code, a category or a product description.

    * letters + digits, short, one or two words -> ``CODE`` (``"ab12"``, ``"gw 20a"``)
    * digits only -> ``CODE``
    * a single word without digits -> ``CATEGORY`` (``"interruttore"``)
    * anything else -> ``PRODUCT``
    """

    normalized = normalize(query)
    has_digits = bool(_DIGIT_RE.search(normalized))
    has_letters = bool(_LETTER_RE.search(normalized))
    word_count = len(tokenize(normalized))

    if has_digits and has_letters and len(normalized) <= MAX_CODE_LENGTH and word_count <= 2:
        return Intent.CODE
    if has_digits and not has_letters:
        return Intent.CODE
    if not has_digits and word_count == 1:
        return Intent.CATEGORY
    return Intent.PRODUCT
