"""
novelctx.budget.allocator -- Split a total token budget across categories.

Each category's ceiling is ``ceil(total * weight)``.  Rounding up
almost always pushes the sum past ``total``; when it does, every
ceiling is rescaled once::

    adjusted = floor(ceiling * total / sum_of_ceilings)

and floored at 1 for any category with a weight above zero, so a
requested category is never starved.  The rescale is a single pass,
not a fixed-point solve: with many tiny weights the floor-at-1 rule
can leave the sum up to one token per nonzero-weight category above
``total``.  Callers that need a hard overall cap should truncate the
final formatted context as well.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Mapping, Optional

from novelctx.budget.weights import CategoryWeights, WeightsInput
from novelctx.core.errors import ConfigurationError, TokenLimitExceeded
from novelctx.core.tokens import HEURISTIC, Estimator

log = logging.getLogger(__name__)


def _as_weights(weights: "CategoryWeights | WeightsInput") -> CategoryWeights:
    if isinstance(weights, CategoryWeights):
        return weights
    return CategoryWeights(weights)


def allocate(total: int, weights: "CategoryWeights | WeightsInput") -> Dict[str, int]:
    """Return ``{category: ceiling}`` in the order of *weights*.

    Pure.  *total* must be a positive integer; *weights* may be a
    ``CategoryWeights`` or anything its constructor accepts.
    """
    if isinstance(total, bool) or not isinstance(total, int) or total <= 0:
        raise ConfigurationError(f"Token budget must be a positive integer, got {total!r}")
    weights = _as_weights(weights)

    # round() first so float noise like 76800.00000000001 does not ceil up
    allocation = {
        name: math.ceil(round(total * fraction, 9)) for name, fraction in weights.items()
    }
    allocated = sum(allocation.values())
    if allocated <= total:
        return allocation

    for name, fraction in weights.items():
        adjusted = allocation[name] * total // allocated
        if fraction > 0 and adjusted < 1:
            adjusted = 1
        allocation[name] = adjusted

    log.debug(
        "Rescaled allocation: requested=%d total=%d final=%d",
        allocated,
        total,
        sum(allocation.values()),
    )
    return allocation


class Budget:
    """A total token ceiling plus the weights that divide it.

    Immutable in spirit: ``with_weights`` / ``with_total`` return a
    new Budget rather than mutating this one.
    """

    __slots__ = ("total", "weights")

    def __init__(
        self,
        total: int,
        weights: "Optional[CategoryWeights | WeightsInput]" = None,
    ) -> None:
        if isinstance(total, bool) or not isinstance(total, int) or total <= 0:
            raise ConfigurationError(
                f"Token budget must be a positive integer, got {total!r}"
            )
        self.total = total
        self.weights = CategoryWeights.default() if weights is None else _as_weights(weights)

    def allocate(self) -> Dict[str, int]:
        return allocate(self.total, self.weights)

    def ceiling_for(self, category: str) -> int:
        """Ceiling for *category*; 0 when it is not part of this budget."""
        return self.allocate().get(category, 0)

    def check_content(
        self,
        content: Mapping[str, str],
        estimator: Estimator = HEURISTIC,
    ) -> None:
        """Raise ``TokenLimitExceeded`` for the first category over its ceiling.

        Categories not in the budget are ignored.
        """
        allocation = self.allocate()
        for category, text in content.items():
            if category not in allocation:
                continue
            tokens = estimator(text)
            if tokens > allocation[category]:
                raise TokenLimitExceeded(category, tokens, allocation[category])

    def with_weights(self, weights: "CategoryWeights | WeightsInput") -> "Budget":
        return Budget(self.total, weights)

    def with_total(self, total: int) -> "Budget":
        return Budget(total, self.weights)

    def usage_stats(self) -> Dict:
        """Totals of the current allocation.

        ``overshoot`` is how far the ceilings sum past ``total`` (see the
        module docstring); ``remaining`` is the unallocated part of it.
        """
        allocation = self.allocate()
        allocated = sum(allocation.values())
        return {
            "total": self.total,
            "allocated": allocated,
            "remaining": max(self.total - allocated, 0),
            "overshoot": max(allocated - self.total, 0),
            "allocation": allocation,
            "weights": self.weights.to_dict(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Budget):
            return NotImplemented
        return self.total == other.total and self.weights == other.weights

    def __repr__(self) -> str:
        return f"Budget(total={self.total}, weights={self.weights!r})"
