"""novelctx.assembly -- Budgeted context assembly."""

from novelctx.assembly.assembler import DEFAULT_PLACEHOLDERS, ContextAssembler

__all__ = ["ContextAssembler", "DEFAULT_PLACEHOLDERS"]
