"""Protocol for the name-resolution oracle."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Union

if TYPE_CHECKING:
    from dtsbundle.core.models import (
        Declaration,
        ExportAssignment,
        ExportSpecifier,
        ImportBinding,
        ImportEquals,
        ImportSpecifier,
        SourceFileExport,
        SourceUnit,
        Statement,
        Symbol,
        VariableDeclarator,
    )

    NamedNode = Union[
        Declaration,
        VariableDeclarator,
        ImportBinding,
        ImportSpecifier,
        ImportEquals,
        ExportSpecifier,
        ExportAssignment,
    ]


class ResolutionOracle(Protocol):
    """Answers every question about names the bundler needs.

    The bundler never resolves names on its own; all identity and equivalence
    decisions go through an oracle.
    """

    def symbol_of(self, node: NamedNode) -> Symbol | None:
        """Actual (alias-free) symbol a named node refers to."""
        ...

    def declarations_of(self, symbol: Symbol) -> list[Statement | VariableDeclarator]:
        """All declarations merged into a symbol."""
        ...

    def exports_of(self, unit: SourceUnit) -> list[SourceFileExport]:
        """Names exported from a source unit."""
        ...

    def module_symbol_of(self, unit: SourceUnit) -> Symbol | None:
        """Module identity of a source unit, if it is a module."""
        ...

    def is_declared_in_builtin_library(self, unit: SourceUnit) -> bool:
        """Check if a unit belongs to the language's standard declarations."""
        ...

    def split_merged_symbol(self, symbol: Symbol) -> list[Symbol]:
        """Constituents of a transient symbol; ``[symbol]`` otherwise."""
        ...

    def referenced_symbols(self, node: Declaration | VariableDeclarator) -> list[Symbol]:
        """Symbols mentioned by the type signature of a declaration."""
        ...

    def source_unit_of(self, node: Statement | VariableDeclarator) -> SourceUnit:
        """The unit a declaration was parsed from."""
        ...
