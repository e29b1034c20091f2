"""
novelctx.budget.weights -- Validated, immutable category weight sets.

A ``CategoryWeights`` is an ordered set of ``(name, fraction)`` pairs.
Names are open: callers may add their own categories alongside the
default five.  Validation happens once, here, so allocation never has
to re-check anything.
"""

from __future__ import annotations

import math
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple, Union

from novelctx.core.errors import ConfigurationError

DEFAULT_CATEGORIES = ("plan", "character", "worldview", "chapters", "index")

DEFAULT_WEIGHTS: Dict[str, float] = {
    "plan": 0.15,
    "character": 0.10,
    "worldview": 0.10,
    "chapters": 0.60,
    "index": 0.05,
}

# Accepted deviation of the weight sum from 1.0.
SUM_TOLERANCE = 0.01

WeightsInput = Union[Mapping[str, float], Sequence[Tuple[str, float]]]


class CategoryWeights:
    """Ordered, validated ``name -> fraction`` pairs.

    Raises ``ConfigurationError`` when a name is empty or repeated, a
    fraction is negative or not finite, or the fractions do not sum
    to 1.0 within +/-1%.
    """

    __slots__ = ("_pairs",)

    def __init__(self, weights: WeightsInput) -> None:
        items = list(weights.items()) if isinstance(weights, Mapping) else list(weights)
        if not items:
            raise ConfigurationError("Category weights must not be empty")

        pairs = []
        seen = set()
        for name, fraction in items:
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError(f"Invalid category name {name!r}")
            if name in seen:
                raise ConfigurationError(f"Duplicate category {name!r}")
            try:
                value = float(fraction)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Weight for {name!r} is not a number: {fraction!r}"
                ) from None
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(
                    f"Weight for {name!r} must be a non-negative number, got {fraction!r}"
                )
            seen.add(name)
            pairs.append((name, value))

        total = sum(value for _, value in pairs)
        if abs(total - 1.0) > SUM_TOLERANCE:
            raise ConfigurationError(
                f"Category weights sum to {total:.3f}, expected 1.0"
            )

        self._pairs: Tuple[Tuple[str, float], ...] = tuple(pairs)

    @classmethod
    def default(cls) -> "CategoryWeights":
        return cls(DEFAULT_WEIGHTS)

    # -- read access ----------------------------------------------------------

    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self._pairs)

    def items(self) -> Tuple[Tuple[str, float], ...]:
        return self._pairs

    def get(self, name: str, default: Optional[float] = None) -> Optional[float]:
        for key, value in self._pairs:
            if key == name:
                return value
        return default

    def nonzero(self) -> Tuple[str, ...]:
        """Names of categories with a weight above zero."""
        return tuple(name for name, value in self._pairs if value > 0)

    @property
    def total(self) -> float:
        return sum(value for _, value in self._pairs)

    def to_dict(self) -> Dict[str, float]:
        return dict(self._pairs)

    # -- "updates replace the whole set" --------------------------------------

    def replace(self, **changes: float) -> "CategoryWeights":
        """Return a new set with the given fractions changed or added."""
        merged = dict(self._pairs)
        merged.update(changes)
        return CategoryWeights(merged)

    def with_weight(self, name: str, fraction: float) -> "CategoryWeights":
        """Return a new set with one fraction changed or added."""
        merged = dict(self._pairs)
        merged[name] = fraction
        return CategoryWeights(merged)

    # -- protocol -------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._pairs)

    def __getitem__(self, name: str) -> float:
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryWeights):
            return NotImplemented
        return self._pairs == other._pairs

    def __hash__(self) -> int:
        return hash(self._pairs)

    def __repr__(self) -> str:
        inner = ", ".join(f"{name}={value:g}" for name, value in self._pairs)
        return f"CategoryWeights({inner})"
