"""
novelctx.budget.truncator -- Cut text down to a token ceiling.

``truncate(text, ceiling)`` returns the longest structurally preferred
prefix of *text* whose estimate is at most *ceiling*, trying three
granularities in turn:

1. whole lines, while the running estimate stays within the ceiling;
2. whole words of the first line that did not fit;
3. codepoints of that line, by binary search, when not even its first
   word fits.

The result is always a literal prefix of the input: lines keep their
``\\n`` separators and words keep the whitespace that separated them
in the source line.  Because the estimators ignore how much whitespace
sits between words, this costs nothing against the ceiling.  Slicing
happens on ``str`` indices (codepoints), so a multi-byte character is
never split.

The estimate of the returned prefix is computed from a running unit
total (see ``novelctx.core.tokens.Estimator``) and is exactly
``estimator(prefix)``.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from novelctx.core.tokens import HEURISTIC, Estimator

_WORD = re.compile(r"\S+")


def truncate(
    text: str,
    ceiling: int,
    estimator: Estimator = HEURISTIC,
) -> Tuple[str, int]:
    """Truncate *text* so its estimate fits *ceiling*.

    Returns ``(prefix, estimated_tokens)`` with
    ``estimated_tokens <= max(ceiling, 0)``.  Never raises.
    """
    if not text or ceiling <= 0:
        return "", 0

    total_units = estimator.units(text)
    if estimator.to_tokens(total_units) <= ceiling:
        return text, estimator.to_tokens(total_units)

    newline_units = estimator.units("\n")
    lines = text.split("\n")

    # -- 1. whole lines ------------------------------------------------------
    kept: List[str] = []
    used = 0
    overflow = ""
    for line in lines:
        line_units = estimator.units(line)
        candidate = used + (newline_units if kept else 0) + line_units
        if estimator.to_tokens(candidate) > ceiling:
            overflow = line
            break
        kept.append(line)
        used = candidate

    prefix = "\n".join(kept)
    base = used + (newline_units if kept else 0)

    # -- 2./3. part of the overflowing line ----------------------------------
    partial, partial_units = _fit_line(overflow, base, ceiling, estimator)
    if partial:
        prefix = prefix + "\n" + partial if kept else partial
        used = base + partial_units

    return prefix, estimator.to_tokens(used)


def _fit_line(
    line: str,
    base: int,
    ceiling: int,
    estimator: Estimator,
) -> Tuple[str, int]:
    """Longest prefix of *line* that fits on top of *base* units.

    Returns ``(prefix, prefix_units)``; ``("", 0)`` when nothing fits.
    """
    if not line:
        return "", 0

    # word level: extend to the end of each word, keeping source whitespace
    end = 0
    units = 0
    for match in _WORD.finditer(line):
        piece_units = estimator.units(line[end : match.end()])
        if estimator.to_tokens(base + units + piece_units) > ceiling:
            break
        units += piece_units
        end = match.end()

    if end > 0:
        return line[:end], units

    # codepoint level: the first word alone overflows
    best = 0
    best_units = 0
    lo, hi = 1, len(line)
    while lo <= hi:
        mid = (lo + hi) // 2
        mid_units = estimator.units(line[:mid])
        if estimator.to_tokens(base + mid_units) <= ceiling:
            best, best_units = mid, mid_units
            lo = mid + 1
        else:
            hi = mid - 1

    return line[:best], best_units

