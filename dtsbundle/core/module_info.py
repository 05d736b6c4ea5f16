"""Classify source units by how their declarations end up in the bundle."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from enum import Enum

_NODE_MODULES = "node_modules/"
_TYPES_PREFIX = "@types/"
_LIBRARY_NAME_RE = re.compile(r"node_modules/((?:(?=@)[^/]+/[^/]+|[^/]+))/")


class ModuleType(Enum):
    """Disposition of a source unit."""

    INLINE = "inline"
    IMPORT = "import"
    REFERENCE_AS_TYPES = "reference_as_types"
    MODULE_ONLY = "module_only"


@dataclass(frozen=True)
class ModuleCriteria:
    """Library rules of one entry point.

    ``None`` lists mean "every library matches".
    """

    inlined_libraries: tuple[str, ...] = ()
    imported_libraries: tuple[str, ...] | None = None
    allowed_types_libraries: tuple[str, ...] | None = None
    type_roots: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModuleInfo:
    """Classification result for one file name."""

    type: ModuleType
    file_name: str
    is_external: bool
    types_library_name: str | None = None


def fix_path(path: str) -> str:
    """Normalise path separators to forward slashes."""
    return path.replace("\\", "/")


def get_library_name(file_name: str) -> str | None:
    """Package name of a file living under node_modules (scoped names included)."""
    file_name = fix_path(file_name)
    index = file_name.rfind(_NODE_MODULES)
    if index == -1:
        return None

    match = _LIBRARY_NAME_RE.match(file_name[index:])
    if match is None:
        return None
    return match.group(1)


def get_types_library_name(file_name: str) -> str | None:
    """Name ``x`` for files of a companion types package ``@types/x``."""
    library_name = get_library_name(file_name)
    if library_name is None or not library_name.startswith(_TYPES_PREFIX):
        return None
    return library_name[len(_TYPES_PREFIX) :]


def resolve_module_file_name(current_file_name: str, module_name: str) -> str:
    """File name a module specifier points to, as far as classification cares."""
    if module_name.startswith("."):
        directory = posixpath.dirname(fix_path(current_file_name))
        return posixpath.normpath(posixpath.join(directory, fix_path(module_name)))
    return f"{_NODE_MODULES}{module_name}/"


def get_module_info(file_name: str, criteria: ModuleCriteria) -> ModuleInfo:
    """Classify a file. Pure and total: every path gets exactly one disposition."""
    return _get_module_info(fix_path(file_name), fix_path(file_name), criteria)


def _get_module_info(current_path: str, file_name: str, criteria: ModuleCriteria) -> ModuleInfo:
    library_name = get_library_name(current_path)
    if library_name is None:
        for root in criteria.type_roots:
            relative = _relative_to(file_name, fix_path(root))
            # A package directory under a type root acts like node_modules/@types/<name>
            if relative is not None and "/" in relative:
                remapped = f"{_NODE_MODULES}{_TYPES_PREFIX}{relative}"
                return _get_module_info(remapped, file_name, criteria)

        return ModuleInfo(type=ModuleType.INLINE, file_name=file_name, is_external=False)

    types_library_name = get_types_library_name(current_path)

    if _matches(library_name, types_library_name, criteria.inlined_libraries):
        return ModuleInfo(type=ModuleType.INLINE, file_name=file_name, is_external=True)

    if criteria.imported_libraries is not None and _matches(
        library_name, types_library_name, criteria.imported_libraries
    ):
        return ModuleInfo(type=ModuleType.IMPORT, file_name=file_name, is_external=True)

    if types_library_name is not None and _is_allowed(
        types_library_name, criteria.allowed_types_libraries
    ):
        return ModuleInfo(
            type=ModuleType.REFERENCE_AS_TYPES,
            file_name=file_name,
            is_external=True,
            types_library_name=types_library_name,
        )

    if criteria.imported_libraries is None:
        return ModuleInfo(type=ModuleType.IMPORT, file_name=file_name, is_external=True)

    return ModuleInfo(type=ModuleType.MODULE_ONLY, file_name=file_name, is_external=True)


def _matches(
    library_name: str, types_library_name: str | None, libraries: tuple[str, ...]
) -> bool:
    return library_name in libraries or (
        types_library_name is not None and types_library_name in libraries
    )


def _is_allowed(library_name: str, allowed: tuple[str, ...] | None) -> bool:
    return allowed is None or library_name in allowed


def _relative_to(file_name: str, root: str) -> str | None:
    """Path of ``file_name`` inside ``root``, or None when it lies outside."""
    root = root.rstrip("/")
    if not root or file_name.startswith("/") != root.startswith("/"):
        return None
    relative = posixpath.relpath(file_name, root)
    if relative in (".", "..") or relative.startswith("../"):
        return None
    return relative
