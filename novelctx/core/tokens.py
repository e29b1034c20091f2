"""
novelctx.core.tokens -- Token estimation utilities.

Kept in its own module so callers that only need token math
don't have to import the budget or content layers.

No real tokenizer is consulted.  Two heuristics are provided:

``estimate_tokens``
    Script-aware estimate.  Text is split on whitespace and every
    whitespace-delimited piece is classified:

    * CJK-dominant (more than half of its codepoints are CJK
      ideographs): 1.5 tokens per codepoint
    * numeric-dominant (more than 70% decimal digits): 0.5 tokens
    * anything else: 0.75 tokens, plus 0.33 per punctuation codepoint

    The contributions are summed and floored.

``estimate_tokens_fast``
    Codepoint count divided by 1.2, rounded half up.

Both are exposed as ``Estimator`` objects (``HEURISTIC`` / ``FAST``)
whose raw *units* are integers and additive across whitespace
boundaries.  The truncator relies on that to keep a running total
without re-estimating the whole prefix on every step.
"""

from __future__ import annotations

import unicodedata
from typing import Callable

# Inclusive codepoint ranges treated as CJK ideographs.
CJK_RANGES = (
    (0x4E00, 0x9FFF),  # CJK Unified Ideographs
    (0x3400, 0x4DBF),  # Extension A
    (0x20000, 0x2A6DF),  # Extension B
    (0x2A700, 0x2B73F),  # Extension C
    (0x2B740, 0x2B81F),  # Extension D
    (0x2B820, 0x2CEAF),  # Extension E
    (0x2CEB0, 0x2EBEF),  # Extension F
)

# Heuristic weights in hundredths of a token.
CJK_UNITS_PER_CODEPOINT = 150
NUMERIC_UNITS_PER_WORD = 50
LATIN_UNITS_PER_WORD = 75
PUNCT_UNITS_PER_CODEPOINT = 33
UNITS_PER_TOKEN = 100

CJK_DOMINANT_RATIO = 0.5
NUMERIC_DOMINANT_RATIO = 0.7


def is_cjk(ch: str) -> bool:
    """Return True if the single codepoint *ch* is a CJK ideograph."""
    cp = ord(ch)
    for lo, hi in CJK_RANGES:
        if lo <= cp <= hi:
            return True
    return False


def _word_units(word: str) -> int:
    """Heuristic units (hundredths of a token) for one whitespace-free piece."""
    total = len(word)
    if total == 0:
        return 0

    cjk = 0
    digits = 0
    punct = 0
    for ch in word:
        if is_cjk(ch):
            cjk += 1
        elif ch.isdecimal():
            digits += 1
        elif unicodedata.category(ch).startswith("P"):
            punct += 1

    if cjk / total > CJK_DOMINANT_RATIO:
        return total * CJK_UNITS_PER_CODEPOINT
    if digits / total > NUMERIC_DOMINANT_RATIO:
        return NUMERIC_UNITS_PER_WORD
    return LATIN_UNITS_PER_WORD + punct * PUNCT_UNITS_PER_CODEPOINT


def heuristic_units(text: str) -> int:
    """Raw heuristic units for *text*; whitespace contributes nothing."""
    if not text:
        return 0
    return sum(_word_units(word) for word in text.split())


def fast_units(text: str) -> int:
    """Raw fast-estimator units: one per codepoint."""
    return len(text)


def _heuristic_tokens(units: int) -> int:
    return units // UNITS_PER_TOKEN


def _fast_tokens(units: int) -> int:
    # round(units / 1.2) half up, in integer arithmetic
    return (units * 5 + 3) // 6


class Estimator:
    """A token estimator built from an additive unit count.

    ``units(a + sep + b) == units(a) + units(sep) + units(b)`` whenever
    *sep* is whitespace, and ``to_tokens`` is monotonic, so running
    totals over lines and words stay exact.
    """

    __slots__ = ("name", "units", "to_tokens")

    def __init__(
        self,
        name: str,
        units: Callable[[str], int],
        to_tokens: Callable[[int], int],
    ) -> None:
        self.name = name
        self.units = units
        self.to_tokens = to_tokens

    def __call__(self, text: str) -> int:
        return self.to_tokens(self.units(text))

    def __repr__(self) -> str:
        return f"Estimator({self.name!r})"


HEURISTIC = Estimator("heuristic", heuristic_units, _heuristic_tokens)
FAST = Estimator("fast", fast_units, _fast_tokens)


def estimate_tokens(text: str) -> int:
    """Estimate the number of tokens in *text* (script-aware).

    Pure and deterministic.  Returns 0 for empty or whitespace-only
    text.  Dense CJK text is counted per codepoint so it is not
    under-counted relative to Latin text sharing the same budget.
    """
    return HEURISTIC(text)


def estimate_tokens_fast(text: str) -> int:
    """Cheap estimate: codepoints / 1.2, rounded.

    Does not agree with ``estimate_tokens``; pick one explicitly.
    """
    return FAST(text)


def count_codepoints(text: str) -> int:
    """Number of Unicode codepoints in *text*."""
    return len(text)


def fits_budget(text: str, budget: int, estimator: Estimator = HEURISTIC) -> bool:
    """Return True if *text* fits within *budget* tokens."""
    return estimator(text) <= budget
