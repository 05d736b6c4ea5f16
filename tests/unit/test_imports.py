"""Unit tests for import aggregation."""

import logging

import pytest

from dtsbundle.core.exceptions import InvariantError
from dtsbundle.core.graph import build_usage_graph
from dtsbundle.core.imports import ImportAggregator, get_import_module_name
from dtsbundle.core.models import (
    CollectingResult,
    Declaration,
    DeclarationKind,
    ImportBinding,
    ImportDeclaration,
    ImportEquals,
    ImportSpecifier,
    Program,
    SourceUnit,
    Statement,
)
from dtsbundle.core.module_info import ModuleCriteria, get_module_info
from dtsbundle.core.usage import EntryUsage
from dtsbundle.resolution import SnapshotOracle

LIB = "node_modules/lib/index.d.ts"
CONSUMER = "src/a.ts"


def make_interface(name: str, file_name: str, *references: str) -> Declaration:
    return Declaration(
        file_name=file_name,
        text=f"export interface {name} {{}}",
        declaration_kind=DeclarationKind.INTERFACE,
        name=name,
        symbol=name,
        references=references,
    )


def make_aggregator(
    units: list[SourceUnit], roots: list[str]
) -> tuple[ImportAggregator, CollectingResult, SnapshotOracle]:
    """Wire an aggregator over an in-memory program."""
    oracle = SnapshotOracle(Program(source_units=units))
    graph = build_usage_graph(units, oracle)
    usage = EntryUsage(graph, oracle, [oracle.symbol_of(make_interface(r, "")) for r in roots])
    result = CollectingResult()
    aggregator = ImportAggregator(
        oracle, usage, lambda name: get_module_info(name, ModuleCriteria()), result
    )
    return aggregator, result, oracle


@pytest.fixture
def lib_unit() -> SourceUnit:
    return SourceUnit(
        file_name=LIB,
        statements=[make_interface("Ext", LIB), make_interface("Unused", LIB)],
        symbol="m:lib",
    )


def consumer_unit(*imports: Statement) -> SourceUnit:
    return SourceUnit(
        file_name=CONSUMER,
        statements=[*imports, make_interface("Local", CONSUMER, "Ext")],
        symbol="m:a",
    )


class TestGetImportModuleName:
    """Tests for reading the module specifier of an import."""

    def test_import_declaration(self) -> None:
        statement = ImportDeclaration(
            module_specifier="lib", named=[ImportSpecifier(name="A", symbol="A")]
        )
        assert get_import_module_name(statement) == "lib"

    def test_side_effect_import(self) -> None:
        assert get_import_module_name(ImportDeclaration(module_specifier="polyfill")) is None

    def test_require_literal(self) -> None:
        statement = ImportEquals(name="x", module_reference="lib")
        assert get_import_module_name(statement) == "lib"

    def test_internal_alias(self) -> None:
        statement = ImportEquals(name="x", is_external=False, reference_text="A.B")
        assert get_import_module_name(statement) is None

    def test_non_literal_require_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        statement = ImportEquals(name="x", reference_text="require(name)")
        with caplog.at_level(logging.WARNING, logger="dtsbundle.core.imports"):
            assert get_import_module_name(statement) is None
        assert "Cannot handle non string-literal-like import expression" in caplog.text
        assert "require(name)" in caplog.text


class TestImportAggregator:
    """Tests for merging import forms per module specifier."""

    def test_merges_every_import_form(self, lib_unit: SourceUnit) -> None:
        consumer = consumer_unit(
            ImportDeclaration(
                file_name=CONSUMER,
                module_specifier="lib",
                default=ImportBinding(name="E", symbol="Ext"),
                named=[ImportSpecifier(name="Ext2", property_name="Ext", symbol="Ext")],
                namespace=ImportBinding(name="lib", symbol="m:lib"),
            ),
            ImportEquals(file_name=CONSUMER, name="R", symbol="Ext", module_reference="lib"),
        )
        aggregator, result, _ = make_aggregator([consumer, lib_unit], ["Local"])

        aggregator.add_import(lib_unit.statements[0])  # type: ignore[arg-type]

        record = result.imports["lib"]
        assert record.default_imports == {"E"}
        assert record.named_imports == {"Ext as Ext2"}
        assert record.star_imports == {"lib"}
        assert record.require_imports == {"R"}

    def test_unrelated_imports_create_no_record(self, lib_unit: SourceUnit) -> None:
        consumer = consumer_unit(
            ImportDeclaration(
                file_name=CONSUMER,
                module_specifier="lib",
                named=[ImportSpecifier(name="Ext", symbol="Ext")],
            ),
            ImportDeclaration(
                file_name=CONSUMER,
                module_specifier="other",
                namespace=ImportBinding(name="other", symbol="m:other"),
            ),
            ImportDeclaration(file_name=CONSUMER, module_specifier="side-effect"),
        )
        aggregator, result, _ = make_aggregator([consumer, lib_unit], ["Local"])

        aggregator.add_import(lib_unit.statements[0])  # type: ignore[arg-type]

        assert list(result.imports) == ["lib"]
        assert result.imports["lib"].named_imports == {"Ext"}

    def test_update_skips_unused_declarations(self, lib_unit: SourceUnit) -> None:
        consumer = consumer_unit(
            ImportDeclaration(
                file_name=CONSUMER,
                module_specifier="lib",
                named=[ImportSpecifier(name="Ext", symbol="Ext")],
            )
        )
        aggregator, result, _ = make_aggregator([consumer, lib_unit], ["Local"])
        module = get_module_info(LIB, ModuleCriteria())

        for statement in lib_unit.statements:
            aggregator.update_imports_for_statement(statement, module)

        assert result.imports["lib"].named_imports == {"Ext"}
        assert len(result.imports) == 1

    def test_update_ignores_non_import_modules(self, lib_unit: SourceUnit) -> None:
        consumer = consumer_unit(
            ImportDeclaration(
                file_name=CONSUMER,
                module_specifier="lib",
                named=[ImportSpecifier(name="Ext", symbol="Ext")],
            )
        )
        aggregator, result, _ = make_aggregator([consumer, lib_unit], ["Local"])
        module = get_module_info(LIB, ModuleCriteria(inlined_libraries=("lib",)))

        aggregator.update_imports_for_statement(lib_unit.statements[0], module)

        assert result.imports == {}

    def test_unnamed_declaration_is_an_invariant_error(self, lib_unit: SourceUnit) -> None:
        aggregator, _, _ = make_aggregator([consumer_unit(), lib_unit], ["Local"])
        anonymous = Declaration(
            file_name=LIB,
            text="export default class {}",
            declaration_kind=DeclarationKind.CLASS,
            name=None,
            symbol="anon",
        )

        with pytest.raises(InvariantError, match="unnamed declaration"):
            aggregator.add_import(anonymous)

    def test_are_declarations_same_uses_merged_parts(self) -> None:
        aggregator, _, _ = make_aggregator([], [])
        left = ImportSpecifier(name="A", symbol="A")
        right = ImportSpecifier(name="B", symbol="B")
        assert aggregator.are_declarations_same(left, ImportSpecifier(name="A2", symbol="A"))
        assert not aggregator.are_declarations_same(left, right)
        assert not aggregator.are_declarations_same(left, ImportSpecifier(name="C"))
