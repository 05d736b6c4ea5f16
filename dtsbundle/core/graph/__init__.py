"""
Usage graph: which declarations mention which in their type signatures.

Data Structures:
    - UsageGraph: "used by" adjacency sets with memoized reachability

Building:
    - build_usage_graph(): Walk every declaration of a program once through
      the resolution oracle

The graph is the most expensive part of a run, so it is built once per
program and shared by every entry point.
"""

from dtsbundle.core.graph.base import UsageGraph
from dtsbundle.core.graph.builder import build_usage_graph

__all__ = [
    "UsageGraph",
    "build_usage_graph",
]
