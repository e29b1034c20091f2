"""
novelctx -- Token-budgeted context assembly for long-form fiction.

    from novelctx import Config

    config = Config.from_data_dir("./my_novel")
    assembler = config.build_assembler()
    context = assembler.assemble(config.budget())
    prompt = context.formatted
"""

from novelctx.assembly.assembler import ContextAssembler
from novelctx.budget.allocator import Budget, allocate
from novelctx.budget.truncator import truncate
from novelctx.budget.weights import CategoryWeights
from novelctx.content.store import ContentStore
from novelctx.core.config import Config
from novelctx.core.tokens import estimate_tokens, estimate_tokens_fast
from novelctx.core.types import AssembledContext

__version__ = "0.1.0"

__all__ = [
    "Config",
    "Budget",
    "CategoryWeights",
    "ContentStore",
    "ContextAssembler",
    "AssembledContext",
    "allocate",
    "truncate",
    "estimate_tokens",
    "estimate_tokens_fast",
]
