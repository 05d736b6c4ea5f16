"""Entry-point orchestration: one shared usage graph, one collecting run per entry."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dtsbundle.core.collector import StatementCollector, UpdateParams
from dtsbundle.core.exceptions import BundleError, ClassDeclarationError, ConfigurationError
from dtsbundle.core.graph import UsageGraph, build_usage_graph
from dtsbundle.core.models import (
    CollectingResult,
    Declaration,
    DeclarationKind,
    Program,
    SourceFileExport,
    SourceUnit,
    Statement,
    StatementKind,
    Symbol,
    VariableStatement,
)
from dtsbundle.core.module_info import ModuleCriteria, get_module_info
from dtsbundle.core.usage import EntryUsage

if TYPE_CHECKING:
    from dtsbundle.core.config import EntryPointConfig
    from dtsbundle.resolution import ResolutionOracle

logger = logging.getLogger(__name__)

Renderer = Callable[["EntryBundle"], str]

_VALUABLE_KINDS = frozenset(
    {
        DeclarationKind.CLASS,
        DeclarationKind.ENUM,
        DeclarationKind.FUNCTION,
    }
)


@dataclass
class EntryBundle:
    """Everything the renderer needs for one entry point."""

    entry: EntryPointConfig
    result: CollectingResult
    root_exports: list[SourceFileExport]
    preserve_const_enums: bool
    _oracle: ResolutionOracle = field(repr=False)

    def exports_for_statement(self, statement: Statement) -> list[SourceFileExport]:
        """Root exports that name the statement's declaration."""
        node: object
        if isinstance(statement, VariableStatement):
            if not statement.declarators:
                return []
            node = statement.declarators[0]
        elif isinstance(statement, Declaration):
            node = statement
        else:
            return []

        symbol = self._oracle.symbol_of(node)  # type: ignore[arg-type]
        if symbol is None:
            return []

        parts = set(self._oracle.split_merged_symbol(symbol))
        return [
            exp
            for exp in self.root_exports
            if not parts.isdisjoint(self._oracle.split_merged_symbol(exp.symbol))
        ]

    def should_statement_have_export_keyword(self, statement: Statement) -> bool:
        """Check if the rendered statement keeps (or gains) an ``export`` keyword.

        Statements re-exported only under another name get no keyword: the
        renamed export list exports them.
        """
        if statement.kind in (StatementKind.AMBIENT_MODULE, StatementKind.EXPORT_DECLARATION):
            return False

        exports = self.exports_for_statement(statement)
        result = not exports or any(_is_direct_export(statement, exp) for exp in exports)

        is_valuable = statement.kind == StatementKind.VARIABLE or (
            isinstance(statement, Declaration) and statement.declaration_kind in _VALUABLE_KINDS
        )
        if is_valuable:
            # Values must be exported from the entry file to be exported here
            result = result and bool(exports)
            if isinstance(statement, Declaration) and statement.is_const_enum:
                result = True

        return result

    def need_strip_default_keyword(self, statement: Statement) -> bool:
        """Check if a ``default`` modifier must go: the entry does not export it as default."""
        exports = self.exports_for_statement(statement)
        return all(exp.exported_name != "default" for exp in exports)

    def need_strip_const_from_const_enum(self, statement: Statement) -> bool:
        """Check if a root-exported const enum is rendered as a plain enum."""
        if not isinstance(statement, Declaration) or not statement.is_const_enum:
            return False
        if not self.preserve_const_enums or not self.entry.output.respect_preserve_const_enum:
            return False

        return bool(self.exports_for_statement(statement))


@dataclass
class BundleOutput:
    """Outcome of one entry point: either text or the error that stopped it."""

    entry: EntryPointConfig
    text: str | None = None
    error: BundleError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def get_program_units(program: Program, oracle: ResolutionOracle) -> list[SourceUnit]:
    """Source units eligible for output (built-in declarations excluded)."""
    return [
        unit for unit in program.source_units if not oracle.is_declared_in_builtin_library(unit)
    ]


def get_root_source_unit(program: Program, root_file_name: str) -> SourceUnit:
    if root_file_name not in program.root_file_names:
        raise ConfigurationError(f"There is no such root file {root_file_name}")

    unit = program.get_source_unit(root_file_name)
    if unit is None:
        raise ConfigurationError(f"Cannot get source file for root file {root_file_name}")
    return unit


def collect_entry(
    program: Program,
    oracle: ResolutionOracle,
    graph: UsageGraph,
    entry: EntryPointConfig,
    units: Sequence[SourceUnit] | None = None,
) -> EntryBundle:
    """Run the statement collector for one entry point. Raises on failure."""
    logger.info("Processing %s", entry.file_path)

    root_file_name = program.root_files_remapping.get(entry.file_path)
    if root_file_name is None:
        raise ConfigurationError(f"Cannot remap root source file {entry.file_path}")

    root_unit = get_root_source_unit(program, root_file_name)
    if oracle.module_symbol_of(root_unit) is None:
        raise ConfigurationError(f"Symbol for root source file {root_file_name} not found")

    libraries = entry.libraries
    criteria = ModuleCriteria(
        inlined_libraries=tuple(libraries.inlined_libraries),
        imported_libraries=_as_tuple(libraries.imported_libraries),
        allowed_types_libraries=_as_tuple(libraries.allowed_types_libraries),
        type_roots=tuple(program.type_roots),
    )

    root_exports = oracle.exports_of(root_unit)
    root_symbols: list[Symbol] = [exp.symbol for exp in root_exports]

    result = CollectingResult()
    collector = StatementCollector(
        oracle=oracle,
        usage=EntryUsage(graph, oracle, root_symbols),
        criteria=criteria,
        output=entry.output,
        result=result,
    )

    if units is None:
        units = get_program_units(program, oracle)

    for unit in units:
        logger.debug("Preparing file: %s", unit.file_name)
        previous_count = len(result.statements)

        params = UpdateParams(
            current_module=get_module_info(unit.file_name, criteria),
            statements=unit.statements,
        )
        if unit is root_unit:
            collector.update_result_for_root(params)
        else:
            collector.update_result(params)

        if len(result.statements) == previous_count:
            logger.debug("No output for file: %s", unit.file_name)

    if entry.fail_on_class:
        classes = [
            statement
            for statement in result.statements
            if isinstance(statement, Declaration) and statement.is_class
        ]
        if classes:
            raise ClassDeclarationError(
                [c.name if c.name is not None else "anonymous class" for c in classes]
            )

    return EntryBundle(
        entry=entry,
        result=result,
        root_exports=root_exports,
        preserve_const_enums=program.compiler_options.preserve_const_enums,
        _oracle=oracle,
    )


def generate_dts_bundle(
    program: Program,
    oracle: ResolutionOracle,
    entries: Sequence[EntryPointConfig],
    renderer: Renderer | None = None,
) -> list[BundleOutput]:
    """Bundle every entry point of a program.

    The usage graph is built once and shared. A failing entry point yields a
    BundleOutput carrying its error; the remaining entries still run.
    """
    if renderer is None:
        from dtsbundle.render import render_output

        renderer = render_output

    logger.info("Compiling input files...")
    units = get_program_units(program, oracle)
    logger.debug("Input source files:\n  %s", "\n  ".join(u.file_name for u in units))

    graph = build_usage_graph(units, oracle)

    outputs = []
    for entry in entries:
        try:
            bundle = collect_entry(program, oracle, graph, entry, units)
            outputs.append(BundleOutput(entry=entry, text=renderer(bundle)))
        except BundleError as e:
            logger.error("Entry %s failed: %s", entry.file_path, e)
            outputs.append(BundleOutput(entry=entry, error=e))

    return outputs


def _as_tuple(values: list[str] | None) -> tuple[str, ...] | None:
    return None if values is None else tuple(values)


def _is_direct_export(statement: Statement, exp: SourceFileExport) -> bool:
    """The statement itself carries the export: ``export interface A`` or ``export default``."""
    if exp.exported_name == "default":
        return statement.has_default_modifier
    return exp.exported_name == exp.symbol.name
