"""novelctx.budget -- Category weights, budget allocation, and truncation."""

from novelctx.budget.allocator import Budget, allocate
from novelctx.budget.truncator import truncate
from novelctx.budget.weights import DEFAULT_WEIGHTS, CategoryWeights

__all__ = ["Budget", "allocate", "truncate", "CategoryWeights", "DEFAULT_WEIGHTS"]
