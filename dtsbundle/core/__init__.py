"""
Core module: program model, configuration, exceptions and the bundling passes.

Models (models.py):
    - Program/SourceUnit: A parsed program and its files
    - Statement and subclasses: The top-level statement shapes the bundler
      distinguishes (declarations, variables, modules, imports, exports)
    - Symbol: A declaration identity, shared by merged declarations
    - CollectingResult: What one entry point contributes to its bundle

Configuration (config.py):
    - EntryPointConfig, LibrariesOptions, OutputOptions

Exceptions (exceptions.py):
    - BundleError: Base exception for all dtsbundle errors
    - ConfigurationError: Entry point cannot be mapped onto the program
    - InvariantError: Program model violates an internal assumption
    - ClassDeclarationError: Classes found while fail_on_class is set
    - SnapshotError: Program snapshot cannot be read

Passes:
    - graph/: Usage graph, built once per program
    - module_info.py: Classify files (inline, import, reference, modules only)
    - collector.py: Walk statements and place them in the result
    - imports.py: Merge the imports external declarations need
    - bundler.py: Run everything per entry point
"""

from dtsbundle.core.bundler import (
    BundleOutput,
    EntryBundle,
    collect_entry,
    generate_dts_bundle,
)
from dtsbundle.core.config import EntryPointConfig, LibrariesOptions, OutputOptions
from dtsbundle.core.exceptions import (
    BundleError,
    ClassDeclarationError,
    ConfigurationError,
    InvariantError,
    SnapshotError,
)
from dtsbundle.core.models import CollectingResult, Program, SourceUnit, Symbol

__all__ = [
    # Models
    "CollectingResult",
    "Program",
    "SourceUnit",
    "Symbol",
    # Configuration
    "EntryPointConfig",
    "LibrariesOptions",
    "OutputOptions",
    # Exceptions
    "BundleError",
    "ClassDeclarationError",
    "ConfigurationError",
    "InvariantError",
    "SnapshotError",
    # Bundling
    "BundleOutput",
    "EntryBundle",
    "collect_entry",
    "generate_dts_bundle",
]
