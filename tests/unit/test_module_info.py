"""Unit tests for module classification."""

import pytest

from dtsbundle.core.module_info import (
    ModuleCriteria,
    ModuleType,
    fix_path,
    get_library_name,
    get_module_info,
    get_types_library_name,
    resolve_module_file_name,
)


class TestLibraryNames:
    """Tests for library name extraction from paths."""

    @pytest.mark.parametrize(
        ("file_name", "expected"),
        [
            ("/project/node_modules/lib/index.d.ts", "lib"),
            ("node_modules/@scope/pkg/dist/index.d.ts", "@scope/pkg"),
            ("/p/node_modules/a/node_modules/b/index.d.ts", "b"),
            ("/project/src/index.ts", None),
            ("node_modules/lib", None),
        ],
    )
    def test_get_library_name(self, file_name: str, expected: str | None) -> None:
        assert get_library_name(file_name) == expected

    def test_windows_separators(self) -> None:
        assert fix_path("C:\\p\\node_modules\\lib\\a.d.ts") == "C:/p/node_modules/lib/a.d.ts"
        assert get_library_name("C:\\p\\node_modules\\lib\\a.d.ts") == "lib"

    def test_get_types_library_name(self) -> None:
        assert get_types_library_name("node_modules/@types/node/fs.d.ts") == "node"
        assert get_types_library_name("node_modules/@types/scope__pkg/index.d.ts") == "scope__pkg"
        assert get_types_library_name("node_modules/lib/index.d.ts") is None
        assert get_types_library_name("src/index.ts") is None


class TestResolveModuleFileName:
    """Tests for module specifier resolution."""

    def test_relative(self) -> None:
        assert resolve_module_file_name("src/a/b.ts", "./c") == "src/a/c"
        assert resolve_module_file_name("src/a/b.ts", "../d") == "src/d"

    def test_bare(self) -> None:
        assert resolve_module_file_name("src/a.ts", "lib") == "node_modules/lib/"
        assert get_library_name(resolve_module_file_name("src/a.ts", "@s/p")) == "@s/p"


class TestGetModuleInfo:
    """Tests for the classification rules."""

    def test_local_file_is_inlined(self) -> None:
        info = get_module_info("src/index.ts", ModuleCriteria())
        assert info.type == ModuleType.INLINE
        assert not info.is_external

    def test_every_library_imported_by_default(self) -> None:
        info = get_module_info("node_modules/lib/index.d.ts", ModuleCriteria())
        assert info.type == ModuleType.IMPORT
        assert info.is_external

    def test_inlined_library(self) -> None:
        criteria = ModuleCriteria(inlined_libraries=("lib",))
        info = get_module_info("node_modules/lib/index.d.ts", criteria)
        assert info.type == ModuleType.INLINE
        assert info.is_external

    def test_inlined_wins_over_imported(self) -> None:
        criteria = ModuleCriteria(inlined_libraries=("lib",), imported_libraries=("lib",))
        assert get_module_info("node_modules/lib/a.d.ts", criteria).type == ModuleType.INLINE

    def test_types_package_is_referenced(self) -> None:
        info = get_module_info("node_modules/@types/node/fs.d.ts", ModuleCriteria())
        assert info.type == ModuleType.REFERENCE_AS_TYPES
        assert info.types_library_name == "node"

    def test_explicitly_imported_types_package(self) -> None:
        criteria = ModuleCriteria(imported_libraries=("express",))
        info = get_module_info("node_modules/@types/express/index.d.ts", criteria)
        assert info.type == ModuleType.IMPORT

    def test_types_package_not_allowed(self) -> None:
        criteria = ModuleCriteria(imported_libraries=(), allowed_types_libraries=("react",))
        info = get_module_info("node_modules/@types/node/fs.d.ts", criteria)
        assert info.type == ModuleType.MODULE_ONLY

    def test_library_outside_imported_list(self) -> None:
        criteria = ModuleCriteria(imported_libraries=("other",))
        info = get_module_info("node_modules/lib/index.d.ts", criteria)
        assert info.type == ModuleType.MODULE_ONLY

    def test_empty_imported_list_imports_nothing(self) -> None:
        criteria = ModuleCriteria(imported_libraries=())
        assert get_module_info("node_modules/lib/a.d.ts", criteria).type == ModuleType.MODULE_ONLY

    def test_type_root_acts_as_types_package(self) -> None:
        criteria = ModuleCriteria(type_roots=("/project/typings",))
        info = get_module_info("/project/typings/legacy/index.d.ts", criteria)
        assert info.type == ModuleType.REFERENCE_AS_TYPES
        assert info.types_library_name == "legacy"
        assert info.file_name == "/project/typings/legacy/index.d.ts"

    def test_file_directly_in_type_root_stays_local(self) -> None:
        criteria = ModuleCriteria(type_roots=("/project/typings",))
        info = get_module_info("/project/typings/index.d.ts", criteria)
        assert info.type == ModuleType.INLINE

    def test_classification_is_deterministic(self) -> None:
        criteria = ModuleCriteria(inlined_libraries=("a",), imported_libraries=("b",))
        first = get_module_info("node_modules/b/x.d.ts", criteria)
        second = get_module_info("node_modules/b/x.d.ts", criteria)
        assert first == second
