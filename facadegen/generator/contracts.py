"""What the generator needs from its host."""
from __future__ import annotations
from typing import Optional, Protocol, Sequence

from facadegen.semantics.symbols import TypeSymbol


class SymbolResolutionService(Protocol):
    """Read-only whole-program symbol lookup.

    ``facadegen.semantics.compilation.SemanticModel`` is the reference
    implementation.
    """

    def get_declared_symbol(self, declaration: object) -> Optional[TypeSymbol]:
        ...

    def all_interfaces(self, symbol: TypeSymbol) -> Sequence[TypeSymbol]:
        ...
