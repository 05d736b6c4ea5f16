"""In-memory oracle over a resolved program snapshot.

A snapshot is a JSON document produced by a parser front end. Every named
node carries the key of the symbol it resolves to, so answering oracle
questions is a matter of table lookups.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from dtsbundle.core.exceptions import SnapshotError
from dtsbundle.core.models import (
    AmbientModule,
    CompilerOptions,
    Declaration,
    DeclarationKind,
    ExportAssignment,
    ExportDeclaration,
    ExportSpecifier,
    GlobalAugmentation,
    ImportBinding,
    ImportDeclaration,
    ImportEquals,
    ImportSpecifier,
    OtherStatement,
    Program,
    SourceFileExport,
    SourceUnit,
    Statement,
    Symbol,
    VariableDeclarator,
    VariableStatement,
)


class SnapshotOracle:
    """ResolutionOracle backed by the symbol keys stored on the nodes."""

    def __init__(self, program: Program) -> None:
        self._program = program
        self._symbols: dict[str, Symbol] = dict(program.symbols)
        self._declarations: dict[str, list[Statement | VariableDeclarator]] = {}
        self._units: dict[str, SourceUnit] = {}

        for unit in program.source_units:
            self._units[unit.file_name] = unit
            if unit.symbol is not None and unit.symbol not in self._symbols:
                self._symbols[unit.symbol] = Symbol(key=unit.symbol, name=unit.file_name)
            self._index_statements(unit.statements)

    def _index_statements(self, statements: Iterable[Statement]) -> None:
        for statement in statements:
            if isinstance(statement, Declaration):
                self._index_declaration(statement.symbol, statement.name, statement)
                self._index_statements(statement.body)
            elif isinstance(statement, VariableStatement):
                for declarator in statement.declarators:
                    self._index_declaration(declarator.symbol, declarator.name, declarator)
            elif isinstance(statement, (AmbientModule, GlobalAugmentation)):
                self._index_statements(statement.body or [])

    def _index_declaration(
        self, key: str | None, name: str | None, node: Statement | VariableDeclarator
    ) -> None:
        if key is None:
            return
        if key not in self._symbols:
            self._symbols[key] = Symbol(key=key, name=name or "default")
        self._declarations.setdefault(key, []).append(node)

    def _lookup(self, key: str | None) -> Symbol | None:
        if key is None:
            return None
        symbol = self._symbols.get(key)
        if symbol is None:
            # Declared outside the snapshot (e.g. a built-in type)
            symbol = Symbol(key=key, name=key)
            self._symbols[key] = symbol
        return symbol

    def symbol_of(self, node: Any) -> Symbol | None:
        return self._lookup(getattr(node, "symbol", None))

    def declarations_of(self, symbol: Symbol) -> list[Statement | VariableDeclarator]:
        result: list[Statement | VariableDeclarator] = []
        for part in self.split_merged_symbol(symbol):
            result.extend(self._declarations.get(part.key, []))
        return result

    def exports_of(self, unit: SourceUnit) -> list[SourceFileExport]:
        result = []
        for exported_name, key in unit.exports.items():
            symbol = self._lookup(key)
            if symbol is not None:
                result.append(
                    SourceFileExport(
                        exported_name=exported_name, symbol=symbol, original_name=symbol.name
                    )
                )
        return result

    def module_symbol_of(self, unit: SourceUnit) -> Symbol | None:
        return self._lookup(unit.symbol)

    def is_declared_in_builtin_library(self, unit: SourceUnit) -> bool:
        return unit.is_default_library

    def split_merged_symbol(self, symbol: Symbol) -> list[Symbol]:
        if not symbol.is_transient:
            return [symbol]
        result: list[Symbol] = []
        for key in symbol.parts:
            part = self._lookup(key)
            if part is not None and part not in result:
                result.append(part)
        return result

    def referenced_symbols(self, node: Declaration | VariableDeclarator) -> list[Symbol]:
        return [symbol for symbol in map(self._lookup, node.references) if symbol is not None]

    def source_unit_of(self, node: Statement | VariableDeclarator) -> SourceUnit:
        unit = self._units.get(node.file_name)
        if unit is None:
            raise SnapshotError(f"No source unit for {node.file_name!r}")
        return unit


def load_snapshot(path: Path) -> Program:
    """Read a JSON program snapshot from disk."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e

    return parse_snapshot(data)


def parse_snapshot(data: dict[str, Any]) -> Program:
    """Build a Program from snapshot data."""
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object")

    try:
        units = [_parse_unit(raw) for raw in data.get("source_files", [])]
        root_file_names = list(data.get("root_files", []))
        remapping = dict(data.get("root_files_remapping", {}))
        for name in root_file_names:
            remapping.setdefault(name, name)

        symbols = {}
        for raw in data.get("symbols", []):
            symbol = Symbol(key=raw["key"], name=raw["name"], parts=tuple(raw.get("parts", ())))
            symbols[symbol.key] = symbol

        options = data.get("compiler_options", {})
        return Program(
            source_units=units,
            root_file_names=root_file_names,
            root_files_remapping=remapping,
            type_roots=list(data.get("type_roots", [])),
            compiler_options=CompilerOptions(
                preserve_const_enums=bool(options.get("preserve_const_enums", False))
            ),
            symbols=symbols,
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Malformed snapshot: {e!r}") from e


def _parse_unit(raw: dict[str, Any]) -> SourceUnit:
    file_name = raw["file_name"]
    return SourceUnit(
        file_name=file_name,
        statements=_parse_statements(raw.get("statements", []), file_name),
        is_default_library=bool(raw.get("is_default_library", False)),
        symbol=raw.get("symbol"),
        exports=dict(raw.get("exports", {})),
    )


def _parse_statements(raw_statements: list[dict[str, Any]], file_name: str) -> list[Statement]:
    return [_parse_statement(raw, file_name) for raw in raw_statements]


_DECLARATION_KINDS = {kind.value: kind for kind in DeclarationKind}


def _parse_statement(raw: dict[str, Any], file_name: str) -> Statement:
    kind = raw["kind"]
    text = raw.get("text", "")

    if kind in _DECLARATION_KINDS:
        return Declaration(
            file_name=file_name,
            text=text,
            declaration_kind=_DECLARATION_KINDS[kind],
            name=raw.get("name"),
            symbol=raw.get("symbol"),
            references=tuple(raw.get("references", ())),
            is_const=bool(raw.get("const", False)),
            body=_parse_statements(raw.get("body", []), file_name),
        )

    if kind == "variable":
        return VariableStatement(
            file_name=file_name,
            text=text,
            declarators=[
                VariableDeclarator(
                    file_name=file_name,
                    name=d["name"],
                    symbol=d.get("symbol"),
                    references=tuple(d.get("references", ())),
                )
                for d in raw.get("declarators", [])
            ],
        )

    if kind == "module":
        body = raw.get("body")
        return AmbientModule(
            file_name=file_name,
            text=text,
            module_name=raw["name"],
            body=None if body is None else _parse_statements(body, file_name),
        )

    if kind == "global":
        return GlobalAugmentation(
            file_name=file_name,
            text=text,
            body=_parse_statements(raw.get("body", []), file_name),
        )

    if kind == "export_assignment":
        return ExportAssignment(
            file_name=file_name,
            text=text,
            is_export_equals=bool(raw.get("is_export_equals", False)),
            symbol=raw.get("symbol"),
        )

    if kind == "export_declaration":
        elements = raw.get("elements")
        return ExportDeclaration(
            file_name=file_name,
            text=text,
            module_specifier=raw.get("module_specifier"),
            elements=None
            if elements is None
            else [
                ExportSpecifier(
                    name=e["name"], property_name=e.get("property_name"), symbol=e.get("symbol")
                )
                for e in elements
            ],
        )

    if kind == "import":
        named = raw.get("named")
        return ImportDeclaration(
            file_name=file_name,
            text=text,
            module_specifier=raw["module_specifier"],
            default=_parse_binding(raw.get("default")),
            named=None
            if named is None
            else [
                ImportSpecifier(
                    name=n["name"], property_name=n.get("property_name"), symbol=n.get("symbol")
                )
                for n in named
            ],
            namespace=_parse_binding(raw.get("namespace")),
        )

    if kind == "import_equals":
        return ImportEquals(
            file_name=file_name,
            text=text,
            name=raw["name"],
            symbol=raw.get("symbol"),
            is_external=bool(raw.get("is_external", True)),
            module_reference=raw.get("module_reference"),
            reference_text=raw.get("reference_text", ""),
        )

    if kind == "other":
        return OtherStatement(file_name=file_name, text=text)

    raise SnapshotError(f"Unknown statement kind {kind!r} in {file_name}")


def _parse_binding(raw: dict[str, Any] | None) -> ImportBinding | None:
    if raw is None:
        return None
    return ImportBinding(name=raw["name"], symbol=raw.get("symbol"))
