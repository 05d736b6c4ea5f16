"""Integration tests for snapshot loading and the snapshot oracle."""

import json
import tempfile
from pathlib import Path

import pytest

from dtsbundle.core.models import (
    AmbientModule,
    Declaration,
    DeclarationKind,
    ExportDeclaration,
    ImportDeclaration,
    ImportEquals,
    StatementKind,
    Symbol,
    VariableStatement,
)
from dtsbundle.resolution import SnapshotOracle, load_snapshot

SNAPSHOT = {
    "root_files": ["/p/src/index.ts"],
    "root_files_remapping": {"src/index.ts": "/p/src/index.ts"},
    "type_roots": ["/p/typings"],
    "compiler_options": {"preserve_const_enums": True},
    "symbols": [{"key": "Merged", "name": "Merged", "parts": ["Merged#1", "Merged#2"]}],
    "source_files": [
        {
            "file_name": "/p/src/index.ts",
            "symbol": "m:index",
            "exports": {"Api": "Api", "Merged": "Merged"},
            "statements": [
                {
                    "kind": "import",
                    "text": 'import def, * as ns from "lib";',
                    "module_specifier": "lib",
                    "default": {"name": "def", "symbol": "Def"},
                    "namespace": {"name": "ns", "symbol": "m:lib"},
                },
                {
                    "kind": "import_equals",
                    "text": 'import r = require("lib");',
                    "name": "r",
                    "symbol": "m:lib",
                    "module_reference": "lib",
                },
                {
                    "kind": "interface",
                    "name": "Api",
                    "symbol": "Api",
                    "text": "export interface Api { d: def; }",
                    "references": ["Def"],
                },
                {
                    "kind": "namespace",
                    "name": "Merged",
                    "symbol": "Merged#1",
                    "text": "export declare namespace Merged { const x: number; }",
                    "body": [
                        {
                            "kind": "variable",
                            "text": "const x: number;",
                            "declarators": [{"name": "x", "symbol": "Merged.x"}],
                        }
                    ],
                },
                {
                    "kind": "interface",
                    "name": "Merged",
                    "symbol": "Merged#2",
                    "text": "export interface Merged {}",
                },
                {
                    "kind": "module",
                    "name": "lib",
                    "text": 'declare module "lib";',
                    "body": None,
                },
                {
                    "kind": "export_declaration",
                    "text": 'export * from "./b";',
                    "module_specifier": "./b",
                },
                {"kind": "other", "text": "export {};"},
            ],
        },
        {
            "file_name": "/p/node_modules/typescript/lib/lib.d.ts",
            "is_default_library": True,
            "statements": [],
        },
    ],
}


@pytest.fixture
def snapshot_file():
    """Write the sample snapshot to a temporary file."""
    with tempfile.TemporaryDirectory() as td:
        path = Path(td) / "program.json"
        path.write_text(json.dumps(SNAPSHOT))
        yield path


class TestLoadSnapshot:
    """Tests for reading a snapshot into a Program."""

    def test_program_fields(self, snapshot_file: Path) -> None:
        program = load_snapshot(snapshot_file)

        assert program.root_file_names == ["/p/src/index.ts"]
        assert program.root_files_remapping == {
            "src/index.ts": "/p/src/index.ts",
            "/p/src/index.ts": "/p/src/index.ts",
        }
        assert program.type_roots == ["/p/typings"]
        assert program.compiler_options.preserve_const_enums
        assert len(program.source_units) == 2

    def test_statement_shapes(self, snapshot_file: Path) -> None:
        program = load_snapshot(snapshot_file)
        unit = program.get_source_unit("/p/src/index.ts")
        assert unit is not None

        kinds = [s.kind for s in unit.statements]
        assert kinds == [
            StatementKind.IMPORT_DECLARATION,
            StatementKind.IMPORT_EQUALS,
            StatementKind.DECLARATION,
            StatementKind.DECLARATION,
            StatementKind.DECLARATION,
            StatementKind.AMBIENT_MODULE,
            StatementKind.EXPORT_DECLARATION,
            StatementKind.OTHER,
        ]

        imports, require, api, namespace, _, module, export, _ = unit.statements
        assert isinstance(imports, ImportDeclaration)
        assert imports.default is not None and imports.default.name == "def"
        assert imports.named is None
        assert isinstance(require, ImportEquals)
        assert require.is_external and require.module_reference == "lib"
        assert isinstance(api, Declaration)
        assert api.declaration_kind == DeclarationKind.INTERFACE
        assert api.references == ("Def",)
        assert isinstance(namespace, Declaration) and namespace.is_namespace
        assert isinstance(namespace.body[0], VariableStatement)
        assert namespace.body[0].declarators[0].file_name == "/p/src/index.ts"
        assert isinstance(module, AmbientModule) and module.body is None
        assert isinstance(export, ExportDeclaration) and export.elements is None

    def test_missing_unit(self, snapshot_file: Path) -> None:
        assert load_snapshot(snapshot_file).get_source_unit("/p/src/other.ts") is None


class TestSnapshotOracle:
    """Tests for oracle answers over a loaded snapshot."""

    @pytest.fixture
    def oracle(self, snapshot_file: Path) -> SnapshotOracle:
        return SnapshotOracle(load_snapshot(snapshot_file))

    def test_merged_symbol_is_split(self, oracle: SnapshotOracle) -> None:
        merged = Symbol("Merged", "Merged", ("Merged#1", "Merged#2"))
        parts = oracle.split_merged_symbol(merged)

        assert [p.key for p in parts] == ["Merged#1", "Merged#2"]
        assert len(oracle.declarations_of(merged)) == 2

    def test_plain_symbol_is_its_own_split(self, oracle: SnapshotOracle) -> None:
        api = Symbol("Api", "Api")
        assert oracle.split_merged_symbol(api) == [api]
        assert len(oracle.declarations_of(api)) == 1

    def test_nested_declarations_are_indexed(self, oracle: SnapshotOracle) -> None:
        [declarator] = oracle.declarations_of(Symbol("Merged.x", "x"))
        assert declarator.name == "x"  # type: ignore[union-attr]

    def test_exports(self, snapshot_file: Path) -> None:
        program = load_snapshot(snapshot_file)
        oracle = SnapshotOracle(program)
        unit = program.source_units[0]

        exports = {e.exported_name: e.symbol.key for e in oracle.exports_of(unit)}

        assert exports == {"Api": "Api", "Merged": "Merged"}
        module_symbol = oracle.module_symbol_of(unit)
        assert module_symbol is not None and module_symbol.key == "m:index"

    def test_builtin_library(self, snapshot_file: Path) -> None:
        program = load_snapshot(snapshot_file)
        oracle = SnapshotOracle(program)

        assert not oracle.is_declared_in_builtin_library(program.source_units[0])
        assert oracle.is_declared_in_builtin_library(program.source_units[1])
        assert oracle.module_symbol_of(program.source_units[1]) is None

    def test_unknown_reference_gets_a_symbol(self, oracle: SnapshotOracle) -> None:
        api = Declaration(
            file_name="/p/src/index.ts",
            declaration_kind=DeclarationKind.INTERFACE,
            name="Api",
            symbol="Api",
            references=("Def",),
        )

        [referenced] = oracle.referenced_symbols(api)

        assert referenced.key == "Def"
        assert oracle.declarations_of(referenced) == []
