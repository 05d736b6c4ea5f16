"""
dtsbundle: Bundle a program's public type surface into one declaration file.

Given a parsed program, an entry file and a resolution oracle, dtsbundle:
- Builds a "used by" graph between declarations
- Classifies every source unit (inline, import, reference, modules only)
- Collects the reachable declarations, imports and reference directives
- Renders the result as a single self-contained declaration file

Usage:
    from dtsbundle import EntryPointConfig, generate_dts_bundle
    from dtsbundle.resolution import SnapshotOracle, load_snapshot

    program = load_snapshot(Path("program.json"))
    outputs = generate_dts_bundle(
        program, SnapshotOracle(program), [EntryPointConfig("src/index.ts")]
    )
"""

__version__ = "0.1.0"

from dtsbundle.core.bundler import BundleOutput, generate_dts_bundle
from dtsbundle.core.config import EntryPointConfig, LibrariesOptions, OutputOptions

__all__ = [
    "BundleOutput",
    "EntryPointConfig",
    "LibrariesOptions",
    "OutputOptions",
    "generate_dts_bundle",
]
