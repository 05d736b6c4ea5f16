"""Reachability questions asked relative to one entry point's root exports."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from dtsbundle.core.exceptions import InvariantError
from dtsbundle.core.models import (
    Declaration,
    SourceUnit,
    Statement,
    Symbol,
    VariableDeclarator,
    VariableStatement,
)
from dtsbundle.core.module_info import get_library_name

if TYPE_CHECKING:
    from dtsbundle.core.graph import UsageGraph
    from dtsbundle.resolution import ResolutionOracle


class EntryUsage:
    """Binds the shared UsageGraph to the root exports of one entry point."""

    def __init__(
        self,
        graph: UsageGraph,
        oracle: ResolutionOracle,
        root_export_symbols: Sequence[Symbol],
    ) -> None:
        self._graph = graph
        self._oracle = oracle
        self._roots = list(root_export_symbols)

    def is_symbol_used(self, symbol: Symbol) -> bool:
        """Check if any root export transitively uses the symbol."""
        return any(self._graph.is_used_by(symbol, root) for root in self._roots)

    def is_statement_used(self, statement: Statement | VariableDeclarator) -> bool:
        """Declarations are used when reachable; variable statements by any declarator."""
        if isinstance(statement, (Declaration, VariableDeclarator)):
            symbol = self._oracle.symbol_of(statement)
            if symbol is None:
                return False
            return self.is_symbol_used(symbol)

        if isinstance(statement, VariableStatement):
            return any(self.is_statement_used(d) for d in statement.declarators)

        return False

    def exported_symbols_using(self, node: Declaration | VariableDeclarator) -> list[Symbol]:
        """Direct users of ``node`` that are part of this entry's public surface.

        Users declared only inside external libraries do not count; they will
        not be emitted and so cannot carry an import.
        """
        symbol = self._oracle.symbol_of(node)
        if symbol is None:
            return []

        users = self._graph.users_of(symbol)
        if users is None:
            raise InvariantError(f"Symbol {symbol.key!r} is missing from the usage graph")

        result = []
        for user in sorted(users, key=lambda s: s.key):
            declarations = self._oracle.declarations_of(user)
            if not declarations:
                continue
            if all(get_library_name(d.file_name) is not None for d in declarations):
                continue
            if self.is_symbol_used(user):
                result.append(user)
        return result

    def should_be_imported(self, node: Declaration | VariableDeclarator) -> bool:
        """Check if an external declaration needs an import line in the bundle."""
        symbol = self._oracle.symbol_of(node)
        if symbol is None:
            return False

        # A built-in declaration is never importable, even when it also merges elsewhere
        for declaration in self._oracle.declarations_of(symbol):
            unit = self._oracle.source_unit_of(declaration)
            if self._oracle.is_declared_in_builtin_library(unit):
                return False

        return len(self.exported_symbols_using(node)) != 0

    def usages_source_units(self, node: Declaration | VariableDeclarator) -> list[SourceUnit]:
        """Units declaring the exported users of ``node``, in first-seen order."""
        result: list[SourceUnit] = []
        for user in self.exported_symbols_using(node):
            for declaration in self._oracle.declarations_of(user):
                unit = self._oracle.source_unit_of(declaration)
                if unit not in result:
                    result.append(unit)
        return result
