"""Per-entry-point configuration."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class LibrariesOptions:
    """How declarations coming from external packages are placed.

    ``None`` means "no restriction": every library is allowed for that rule.
    An empty list allows none.
    """

    inlined_libraries: list[str] = field(default_factory=list)
    imported_libraries: list[str] | None = None
    allowed_types_libraries: list[str] | None = None


@dataclass
class OutputOptions:
    """Options for the rendered declaration file."""

    sort_nodes: bool = False
    umd_module_name: str | None = None
    inline_declare_globals: bool = False
    inline_declare_externals: bool = False
    no_banner: bool = False
    respect_preserve_const_enum: bool = False


@dataclass
class EntryPointConfig:
    """A single entry file to bundle."""

    file_path: str
    libraries: LibrariesOptions = field(default_factory=LibrariesOptions)
    output: OutputOptions = field(default_factory=OutputOptions)
    fail_on_class: bool = False
