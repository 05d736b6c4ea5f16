"""Default text renderer for a collected entry point."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from dtsbundle.core.models import (
    Declaration,
    DeclarationKind,
    ModuleImportsSet,
    Statement,
    StatementKind,
)

if TYPE_CHECKING:
    from dtsbundle.core.bundler import EntryBundle

_MODIFIERS = frozenset({"export", "default", "declare", "const", "abstract", "async"})
_LEADING_WORD_RE = re.compile(r"\s*([A-Za-z_$][\w$]*)\s+")

# Kinds that need ``declare`` at the top level of a declaration file
_AMBIENT_KINDS = frozenset(
    {
        DeclarationKind.CLASS,
        DeclarationKind.ENUM,
        DeclarationKind.FUNCTION,
        DeclarationKind.NAMESPACE,
    }
)


def render_output(bundle: EntryBundle) -> str:
    """Render one entry point as declaration file text.

    Layout:
        banner, reference directives, imports, statements, renamed exports,
        UMD namespace, trailing ``export {};``
    """
    import dtsbundle

    result = bundle.result
    output = bundle.entry.output
    parts: list[str] = []

    if not output.no_banner:
        parts.append(f"// Generated by dtsbundle v{dtsbundle.__version__}\n\n")

    if result.types_references:
        parts.append(
            "\n".join(
                f'/// <reference types="{library}" />'
                for library in sorted(result.types_references)
            )
        )
        parts.append("\n\n")

    import_lines = []
    for module_specifier in sorted(result.imports):
        import_lines.extend(render_imports(module_specifier, result.imports[module_specifier]))
    if import_lines:
        parts.append("\n".join(import_lines))
        parts.append("\n\n")

    statements = [render_statement(bundle, statement) for statement in result.statements]
    if output.sort_nodes:
        statements.sort(key=_sort_key)
    parts.append("\n\n".join(statements))

    if result.renamed_exports:
        joined = ",\n\t".join(sorted(result.renamed_exports))
        parts.append(f"\n\nexport {{\n\t{joined},\n}};")

    if output.umd_module_name is not None:
        parts.append(f"\n\nexport as namespace {output.umd_module_name};")

    parts.append("\n\nexport {};\n")
    return "".join(parts)


def render_imports(module_specifier: str, imports: ModuleImportsSet) -> list[str]:
    """Import lines of one module specifier, each form in a stable order."""
    lines = []
    for name in sorted(imports.star_imports):
        lines.append(f"import * as {name} from '{module_specifier}';")
    for name in sorted(imports.require_imports):
        lines.append(f"import {name} = require('{module_specifier}');")
    for name in sorted(imports.default_imports):
        lines.append(f"import {name} from '{module_specifier}';")
    if imports.named_imports:
        names = ", ".join(sorted(imports.named_imports))
        lines.append(f"import {{ {names} }} from '{module_specifier}';")
    return lines


def render_statement(bundle: EntryBundle, statement: Statement) -> str:
    """Statement text with its leading modifiers rewritten for the bundle."""
    text = statement.text.strip()
    if statement.kind not in (StatementKind.DECLARATION, StatementKind.VARIABLE):
        return text

    modifiers, rest = split_modifiers(text)
    had_default = "default" in modifiers
    modifiers = [m for m in modifiers if m not in ("export", "default")]

    if bundle.need_strip_const_from_const_enum(statement):
        modifiers = [m for m in modifiers if m != "const"]

    keep_default = had_default and not bundle.need_strip_default_keyword(statement)
    if keep_default:
        # export default class X, never export default declare class X
        modifiers = [m for m in modifiers if m != "declare"]
    elif _needs_declare(statement) and "declare" not in modifiers:
        modifiers.insert(0, "declare")

    leading = []
    if bundle.should_statement_have_export_keyword(statement):
        leading.append("export")
        if keep_default:
            leading.append("default")

    return " ".join([*leading, *modifiers, rest])


def split_modifiers(text: str) -> tuple[list[str], str]:
    """Split ``export declare const enum E {}`` into modifiers and the rest.

    ``const`` is only a modifier when followed by ``enum``.
    """
    modifiers = []
    position = 0
    while True:
        match = _LEADING_WORD_RE.match(text, position)
        if match is None or match.group(1) not in _MODIFIERS:
            break
        word = match.group(1)
        if word == "const" and not text.startswith("enum", match.end()):
            break
        modifiers.append(word)
        position = match.end()
    return modifiers, text[position:]


def _needs_declare(statement: Statement) -> bool:
    if statement.kind == StatementKind.VARIABLE:
        return True
    return isinstance(statement, Declaration) and statement.declaration_kind in _AMBIENT_KINDS


def _sort_key(text: str) -> str:
    _, rest = split_modifiers(text)
    return rest
