"""Aggregate the imports external declarations need in the bundle."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from dtsbundle.core.exceptions import InvariantError
from dtsbundle.core.models import (
    CollectingResult,
    Declaration,
    ImportBinding,
    ImportDeclaration,
    ImportEquals,
    Statement,
    VariableDeclarator,
    VariableStatement,
)
from dtsbundle.core.module_info import ModuleInfo, ModuleType

if TYPE_CHECKING:
    from dtsbundle.core.usage import EntryUsage
    from dtsbundle.resolution import ResolutionOracle
    from dtsbundle.resolution.base import NamedNode

logger = logging.getLogger(__name__)

ModuleInfoGetter = Callable[[str], ModuleInfo]


def add_types_reference(result: CollectingResult, library: str) -> None:
    """Record a library-reference directive once."""
    if result.add_types_reference(library):
        logger.info('Library "%s" will be added via reference directive', library)


def get_import_module_name(statement: ImportDeclaration | ImportEquals) -> str | None:
    """Module specifier an import statement loads, or None if it cannot be used.

    Side-effect imports and ``import a = B.C`` aliases carry no specifier.
    Non-literal ``require`` expressions are reported and skipped.
    """
    if isinstance(statement, ImportDeclaration):
        if not statement.has_clause:
            return None
        return statement.module_specifier

    if not statement.is_external:
        return None

    if statement.module_reference is None:
        logger.warning(
            "Cannot handle non string-literal-like import expression: %s",
            statement.reference_text,
        )
        return None

    return statement.module_reference


class ImportAggregator:
    """Merges every import form of the same declaration per module specifier."""

    def __init__(
        self,
        oracle: ResolutionOracle,
        usage: EntryUsage,
        get_module_info: ModuleInfoGetter,
        result: CollectingResult,
    ) -> None:
        self._oracle = oracle
        self._usage = usage
        self._get_module_info = get_module_info
        self._result = result

    def update_imports_for_statement(
        self, statement: Statement, current_module: ModuleInfo
    ) -> None:
        """Add imports for a used statement of an ``IMPORT`` module."""
        if current_module.type != ModuleType.IMPORT:
            return

        nodes: list[Declaration | VariableDeclarator]
        if isinstance(statement, VariableStatement):
            nodes = list(statement.declarators)
        elif isinstance(statement, Declaration):
            nodes = [statement]
        else:
            return

        for node in nodes:
            if not self._usage.should_be_imported(node):
                continue

            self.add_import(node)

            # The consumer's type roots may exclude a types package that only
            # shows up through imports, so reference it explicitly as well.
            unit = self._oracle.source_unit_of(node)
            module_info = self._get_module_info(unit.file_name)
            if (
                module_info.type == ModuleType.REFERENCE_AS_TYPES
                and module_info.types_library_name is not None
            ):
                add_types_reference(self._result, module_info.types_library_name)

    def add_import(self, node: Declaration | VariableDeclarator) -> None:
        """Scan imports of every unit using ``node`` and merge the matching bindings."""
        if node.name is None:
            raise InvariantError(f"Import/usage unnamed declaration: {_node_text(node)}")

        for unit in self._usage.usages_source_units(node):
            for statement in unit.statements:
                if isinstance(statement, (ImportDeclaration, ImportEquals)):
                    self._merge_import(node, statement)

    def _merge_import(
        self, node: Declaration | VariableDeclarator, statement: ImportDeclaration | ImportEquals
    ) -> None:
        module_specifier = get_import_module_name(statement)
        if module_specifier is None:
            return

        if isinstance(statement, ImportEquals):
            if self.are_declarations_same(node, statement):
                self._result.imports_for(module_specifier).require_imports.add(statement.name)
            return

        if statement.default is not None and self.are_declarations_same(node, statement.default):
            self._result.imports_for(module_specifier).default_imports.add(statement.default.name)

        if statement.named is not None:
            for specifier in statement.named:
                if self.are_declarations_same(node, specifier):
                    self._result.imports_for(module_specifier).named_imports.add(specifier.text)

        if statement.namespace is not None and self._is_namespace_of(node, statement.namespace):
            self._result.imports_for(module_specifier).star_imports.add(statement.namespace.name)

    def _is_namespace_of(
        self, node: Declaration | VariableDeclarator, binding: ImportBinding
    ) -> bool:
        """Check if a namespace import binds the module that declares ``node``."""
        if self.are_declarations_same(node, binding):
            return True
        namespace_symbol = self._oracle.symbol_of(binding)
        if namespace_symbol is None:
            return False
        unit = self._oracle.source_unit_of(node)
        return namespace_symbol == self._oracle.module_symbol_of(unit)

    def are_declarations_same(self, left: NamedNode, right: NamedNode) -> bool:
        """Check if two nodes share any constituent symbol."""
        left_symbol = self._oracle.symbol_of(left)
        right_symbol = self._oracle.symbol_of(right)
        if left_symbol is None or right_symbol is None:
            return False

        right_parts = self._oracle.split_merged_symbol(right_symbol)
        return any(part in right_parts for part in self._oracle.split_merged_symbol(left_symbol))


def _node_text(node: Declaration | VariableDeclarator) -> str:
    if isinstance(node, Declaration):
        return node.text
    return f"{node.file_name}: <variable declarator>"
