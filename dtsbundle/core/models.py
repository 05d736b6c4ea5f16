"""Data models for dtsbundle."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

_EXPORT_DEFAULT_RE = re.compile(r"\s*export\s+default\b")


class StatementKind(Enum):
    """Top-level statement shapes the collector distinguishes."""

    DECLARATION = "declaration"
    VARIABLE = "variable"
    AMBIENT_MODULE = "module"
    GLOBAL_AUGMENTATION = "global"
    EXPORT_ASSIGNMENT = "export_assignment"
    EXPORT_DECLARATION = "export_declaration"
    IMPORT_DECLARATION = "import"
    IMPORT_EQUALS = "import_equals"
    OTHER = "other"


class DeclarationKind(Enum):
    """Kinds of named declaration statements."""

    INTERFACE = "interface"
    TYPE_ALIAS = "type"
    CLASS = "class"
    ENUM = "enum"
    FUNCTION = "function"
    NAMESPACE = "namespace"


@dataclass(frozen=True)
class Symbol:
    """A declaration identity.

    Merged declarations share one symbol. A transient symbol (an alias that
    merges several declarations) lists the keys of its constituents in ``parts``.
    """

    key: str
    name: str
    parts: tuple[str, ...] = ()

    @property
    def is_transient(self) -> bool:
        return bool(self.parts)


@dataclass(eq=False, kw_only=True)
class Statement:
    """A top-level (or block-level) statement of a source unit."""

    kind: ClassVar[StatementKind] = StatementKind.OTHER

    file_name: str = ""
    text: str = ""

    @property
    def has_default_modifier(self) -> bool:
        """True for ``export default interface Foo {}`` and the like."""
        return _EXPORT_DEFAULT_RE.match(self.text) is not None

    def __repr__(self) -> str:
        snippet = " ".join(self.text.split())[:40]
        return f"{type(self).__name__}({self.file_name!r}, {snippet!r})"


@dataclass(eq=False, kw_only=True)
class OtherStatement(Statement):
    """Any statement without a declaration identity of its own."""


@dataclass(eq=False, kw_only=True)
class Declaration(Statement):
    """interface, type alias, class, enum, function or namespace."""

    kind: ClassVar[StatementKind] = StatementKind.DECLARATION

    declaration_kind: DeclarationKind
    name: str | None
    symbol: str | None = None
    references: tuple[str, ...] = ()
    is_const: bool = False
    # Namespaces only
    body: list[Statement] = field(default_factory=list)

    @property
    def is_class(self) -> bool:
        return self.declaration_kind == DeclarationKind.CLASS

    @property
    def is_namespace(self) -> bool:
        return self.declaration_kind == DeclarationKind.NAMESPACE

    @property
    def is_const_enum(self) -> bool:
        return self.declaration_kind == DeclarationKind.ENUM and self.is_const


@dataclass(eq=False, kw_only=True)
class VariableDeclarator:
    """One binding of a variable statement: ``declare const a: A, b: B``."""

    file_name: str = ""
    name: str
    symbol: str | None = None
    references: tuple[str, ...] = ()


@dataclass(eq=False, kw_only=True)
class VariableStatement(Statement):
    kind: ClassVar[StatementKind] = StatementKind.VARIABLE

    declarators: list[VariableDeclarator] = field(default_factory=list)


@dataclass(eq=False, kw_only=True)
class AmbientModule(Statement):
    """``declare module "name" { ... }``."""

    kind: ClassVar[StatementKind] = StatementKind.AMBIENT_MODULE

    module_name: str
    body: list[Statement] | None = field(default_factory=list)


@dataclass(eq=False, kw_only=True)
class GlobalAugmentation(Statement):
    """``declare global { ... }``."""

    kind: ClassVar[StatementKind] = StatementKind.GLOBAL_AUGMENTATION

    body: list[Statement] = field(default_factory=list)


@dataclass(eq=False, kw_only=True)
class ExportAssignment(Statement):
    """``export = X`` or ``export default X``."""

    kind: ClassVar[StatementKind] = StatementKind.EXPORT_ASSIGNMENT

    is_export_equals: bool = False
    symbol: str | None = None


@dataclass(eq=False, kw_only=True)
class ExportSpecifier:
    """``name`` or ``property_name as name`` inside ``export { ... }``."""

    name: str
    property_name: str | None = None
    symbol: str | None = None

    @property
    def text(self) -> str:
        if self.property_name is None:
            return self.name
        return f"{self.property_name} as {self.name}"


@dataclass(eq=False, kw_only=True)
class ExportDeclaration(Statement):
    """``export { a, b as c } [from "x"]`` or ``export * from "x"``.

    ``elements`` is ``None`` for star re-exports.
    """

    kind: ClassVar[StatementKind] = StatementKind.EXPORT_DECLARATION

    module_specifier: str | None = None
    elements: list[ExportSpecifier] | None = None


@dataclass(eq=False, kw_only=True)
class ImportBinding:
    """A default (``import a from``) or namespace (``import * as a from``) binding."""

    name: str
    symbol: str | None = None


@dataclass(eq=False, kw_only=True)
class ImportSpecifier:
    """``name`` or ``property_name as name`` inside ``import { ... }``."""

    name: str
    property_name: str | None = None
    symbol: str | None = None

    @property
    def text(self) -> str:
        if self.property_name is None:
            return self.name
        return f"{self.property_name} as {self.name}"


@dataclass(eq=False, kw_only=True)
class ImportDeclaration(Statement):
    kind: ClassVar[StatementKind] = StatementKind.IMPORT_DECLARATION

    module_specifier: str
    default: ImportBinding | None = None
    named: list[ImportSpecifier] | None = None
    namespace: ImportBinding | None = None

    @property
    def has_clause(self) -> bool:
        """False for side-effect imports: ``import "x"``."""
        return self.default is not None or self.named is not None or self.namespace is not None


@dataclass(eq=False, kw_only=True)
class ImportEquals(Statement):
    """``import name = require("x")`` or ``import name = A.B``.

    ``module_reference`` holds the literal module name. It is ``None`` when the
    reference is external but not a string literal, in which case
    ``reference_text`` keeps the expression as written.
    """

    kind: ClassVar[StatementKind] = StatementKind.IMPORT_EQUALS

    name: str
    symbol: str | None = None
    is_external: bool = True
    module_reference: str | None = None
    reference_text: str = ""


@dataclass(eq=False)
class SourceUnit:
    """A parsed file."""

    file_name: str
    statements: list[Statement] = field(default_factory=list)
    is_default_library: bool = False
    symbol: str | None = None
    # exported name -> symbol key
    exports: dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"SourceUnit({self.file_name!r}, statements={len(self.statements)})"


@dataclass
class CompilerOptions:
    preserve_const_enums: bool = False


@dataclass
class Program:
    """A parsed program as handed over by the parsing collaborator."""

    source_units: list[SourceUnit]
    root_file_names: list[str] = field(default_factory=list)
    # entry file path -> canonical root file name
    root_files_remapping: dict[str, str] = field(default_factory=dict)
    type_roots: list[str] = field(default_factory=list)
    compiler_options: CompilerOptions = field(default_factory=CompilerOptions)
    symbols: dict[str, Symbol] = field(default_factory=dict)

    def get_source_unit(self, file_name: str) -> SourceUnit | None:
        for unit in self.source_units:
            if unit.file_name == file_name:
                return unit
        return None


@dataclass(frozen=True)
class SourceFileExport:
    """A name exported from a source unit together with the symbol behind it."""

    exported_name: str
    symbol: Symbol
    original_name: str


@dataclass
class ModuleImportsSet:
    """All import forms collected for one external module specifier."""

    default_imports: set[str] = field(default_factory=set)
    named_imports: set[str] = field(default_factory=set)
    star_imports: set[str] = field(default_factory=set)
    require_imports: set[str] = field(default_factory=set)


@dataclass
class CollectingResult:
    """What one entry point's run decided to put into the bundle."""

    types_references: list[str] = field(default_factory=list)
    imports: dict[str, ModuleImportsSet] = field(default_factory=dict)
    statements: list[Statement] = field(default_factory=list)
    renamed_exports: list[str] = field(default_factory=list)
    _seen_statements: set[Statement] = field(default_factory=set, repr=False)

    def add_statement(self, statement: Statement) -> bool:
        """Append a statement for inline emission. Returns False for duplicates."""
        if statement in self._seen_statements:
            return False
        self._seen_statements.add(statement)
        self.statements.append(statement)
        return True

    def add_types_reference(self, library: str) -> bool:
        if library in self.types_references:
            return False
        self.types_references.append(library)
        return True

    def imports_for(self, module_specifier: str) -> ModuleImportsSet:
        """Get or create the aggregated record of a module specifier."""
        record = self.imports.get(module_specifier)
        if record is None:
            record = ModuleImportsSet()
            self.imports[module_specifier] = record
        return record


def iter_named_nodes(statements: list[Statement]) -> Iterator[Declaration | VariableDeclarator]:
    """Yield declarations and variable declarators of a statement list (non-recursive)."""
    for statement in statements:
        if isinstance(statement, Declaration):
            yield statement
        elif isinstance(statement, VariableStatement):
            yield from statement.declarators
