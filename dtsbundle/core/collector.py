"""Statement collector: decides what each top-level statement becomes in the bundle."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from dtsbundle.core.imports import ImportAggregator, add_types_reference
from dtsbundle.core.models import (
    AmbientModule,
    CollectingResult,
    Declaration,
    ExportAssignment,
    ExportDeclaration,
    ExportSpecifier,
    Statement,
    StatementKind,
)
from dtsbundle.core.module_info import (
    ModuleCriteria,
    ModuleInfo,
    ModuleType,
    get_module_info,
    resolve_module_file_name,
)

if TYPE_CHECKING:
    from dtsbundle.core.config import OutputOptions
    from dtsbundle.core.usage import EntryUsage
    from dtsbundle.resolution import ResolutionOracle

logger = logging.getLogger(__name__)

_SKIPPED_KINDS = frozenset(
    {
        StatementKind.EXPORT_DECLARATION,
        StatementKind.IMPORT_DECLARATION,
        StatementKind.IMPORT_EQUALS,
    }
)

_MAX_SNIPPET = 50


@dataclass(frozen=True)
class UpdateParams:
    """Context of one walk: the module the statements belong to, and the statements."""

    current_module: ModuleInfo
    statements: Sequence[Statement]


class StatementCollector:
    """Walks the statements of every unit for one entry point.

    The CollectingResult is the only mutable state and is filled in place.
    """

    def __init__(
        self,
        oracle: ResolutionOracle,
        usage: EntryUsage,
        criteria: ModuleCriteria,
        output: OutputOptions,
        result: CollectingResult,
    ) -> None:
        self._oracle = oracle
        self._usage = usage
        self._criteria = criteria
        self._output = output
        self._result = result
        self._imports = ImportAggregator(oracle, usage, self.get_module_info, result)

    @property
    def result(self) -> CollectingResult:
        return self._result

    def get_module_info(self, file_name: str) -> ModuleInfo:
        return get_module_info(file_name, self._criteria)

    def update_result(self, params: UpdateParams) -> None:
        """Place every statement of ``params`` according to the current module."""
        for statement in params.statements:
            self._update_for_statement(statement, params)

    def _update_for_statement(self, statement: Statement, params: UpdateParams) -> None:
        kind = statement.kind
        current = params.current_module

        if kind in _SKIPPED_KINDS:
            return

        if isinstance(statement, AmbientModule):
            self._update_for_module_declaration(statement, params)
            return

        if current.type == ModuleType.MODULE_ONLY:
            return

        if kind == StatementKind.GLOBAL_AUGMENTATION:
            if self._output.inline_declare_globals and current.type == ModuleType.INLINE:
                self._result.add_statement(statement)
            return

        if isinstance(statement, ExportAssignment):
            if statement.is_export_equals and current.type == ModuleType.IMPORT:
                self._update_for_imported_eq_export_assignment(statement, params)
            return

        if kind not in (StatementKind.DECLARATION, StatementKind.VARIABLE):
            return

        if not self._usage.is_statement_used(statement):
            logger.debug("Skip file member: %s...", _snippet(statement))
            return

        if current.type == ModuleType.REFERENCE_AS_TYPES:
            if current.types_library_name is not None:
                add_types_reference(self._result, current.types_library_name)
        elif current.type == ModuleType.IMPORT:
            self._imports.update_imports_for_statement(statement, current)
        elif current.type == ModuleType.INLINE:
            self._result.add_statement(statement)

    def update_result_for_root(self, params: UpdateParams) -> None:
        """Generic walk plus the re-exports only the entry file can contribute."""
        self.update_result(params)

        for statement in params.statements:
            if statement.kind == StatementKind.EXPORT_ASSIGNMENT:
                # export default X / export = X
                self._result.add_statement(statement)
                continue

            if not isinstance(statement, ExportDeclaration):
                continue

            if self._is_re_export_from_importable_module(statement):
                self._result.add_statement(statement)

            for element in statement.elements or []:
                renamed = self._renamed_export(element)
                if renamed is not None:
                    self._result.renamed_exports.append(renamed)

    def _renamed_export(self, element: ExportSpecifier) -> str | None:
        if element.property_name is None:
            # export { foo } needs no renaming, export { default } is redundant
            return None

        if element.property_name == "default":
            # export { default as Name }
            return f"{self._resolve_original_name(element)} as {element.name}"

        # export { foo as bar }
        return element.text

    def _resolve_original_name(self, element: ExportSpecifier) -> str:
        symbol = self._oracle.symbol_of(element)
        if symbol is None:
            return ""

        declarations = self._oracle.declarations_of(symbol)
        if not declarations:
            return ""

        name = getattr(declarations[0], "name", None)
        return name or ""

    def _is_re_export_from_importable_module(self, statement: ExportDeclaration) -> bool:
        if statement.module_specifier is None:
            return False

        file_name = resolve_module_file_name(statement.file_name, statement.module_specifier)
        return self.get_module_info(file_name).type == ModuleType.IMPORT

    def _update_for_imported_eq_export_assignment(
        self, statement: ExportAssignment, params: UpdateParams
    ) -> None:
        """``export = NS`` makes the namespace body the module's whole surface."""
        symbol = self._oracle.symbol_of(statement)
        if symbol is None:
            return

        for declaration in self._oracle.declarations_of(symbol):
            if not isinstance(declaration, Declaration) or not declaration.is_namespace:
                continue
            if declaration.file_name != statement.file_name:
                continue

            self.update_result(replace(params, statements=declaration.body))

    def _update_for_module_declaration(
        self, statement: AmbientModule, params: UpdateParams
    ) -> None:
        if statement.body is None:
            return

        current = params.current_module
        file_name = resolve_module_file_name(current.file_name, statement.module_name)
        module_info = self.get_module_info(file_name)

        if not current.is_external and module_info.is_external:
            # An external module declared from inside the project
            if self._output.inline_declare_externals:
                self._result.add_statement(statement)
            return

        self.update_result(UpdateParams(current_module=module_info, statements=statement.body))


def _snippet(statement: Statement) -> str:
    return " ".join(statement.text.split())[:_MAX_SNIPPET]
