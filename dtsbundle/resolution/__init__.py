"""
Name resolution: the oracle the bundler consults for every identity question.

Components:
    - ResolutionOracle: Protocol the bundler core depends on
    - SnapshotOracle: In-memory oracle over a resolved program snapshot
    - load_snapshot/parse_snapshot: Read a JSON snapshot into a Program

A snapshot is written by a parser front end. It lists the source units of a
program, their statements, and for every named node the key of the symbol
it resolves to. Declarations that merge share one key.

Plugging in another front end:
    1. Produce a Program (or a snapshot JSON document)
    2. Implement ResolutionOracle over it, or reuse SnapshotOracle
"""

from dtsbundle.resolution.base import ResolutionOracle
from dtsbundle.resolution.snapshot import SnapshotOracle, load_snapshot, parse_snapshot

__all__ = [
    "ResolutionOracle",
    "SnapshotOracle",
    "load_snapshot",
    "parse_snapshot",
]
