"""Build a UsageGraph from the source units of a program."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from dtsbundle.core.graph.base import UsageGraph
from dtsbundle.core.models import (
    AmbientModule,
    Declaration,
    Statement,
    Symbol,
    VariableDeclarator,
    VariableStatement,
    iter_named_nodes,
)

if TYPE_CHECKING:
    from dtsbundle.core.models import SourceUnit
    from dtsbundle.resolution import ResolutionOracle

logger = logging.getLogger(__name__)


def build_usage_graph(units: Iterable[SourceUnit], oracle: ResolutionOracle) -> UsageGraph:
    """Compute usages for every declaration of every unit. O(declarations + references).

    The result is meant to be built once per program and shared, read-only,
    by every entry point.
    """
    graph = UsageGraph(split=oracle.split_merged_symbol)
    for unit in units:
        for statement in unit.statements:
            _compute_usage_for_statement(graph, oracle, statement)

    logger.debug("Usage graph built: %r", graph)
    return graph


def _compute_usage_for_statement(
    graph: UsageGraph, oracle: ResolutionOracle, statement: Statement
) -> None:
    if isinstance(statement, AmbientModule):
        for nested in statement.body or []:
            _compute_usage_for_statement(graph, oracle, nested)

    elif isinstance(statement, Declaration):
        symbols = _compute_usage_for_node(graph, oracle, statement)
        if statement.is_namespace:
            for nested in statement.body:
                _compute_usage_for_statement(graph, oracle, nested)
            # A namespace exposes its members, so it uses every one of them
            for member in iter_named_nodes(statement.body):
                member_symbol = oracle.symbol_of(member)
                if member_symbol is None:
                    continue
                for used in oracle.split_merged_symbol(member_symbol):
                    for user in symbols:
                        graph.add_usage(used, user)

    elif isinstance(statement, VariableStatement):
        for declarator in statement.declarators:
            _compute_usage_for_node(graph, oracle, declarator)


def _compute_usage_for_node(
    graph: UsageGraph, oracle: ResolutionOracle, node: Declaration | VariableDeclarator
) -> list[Symbol]:
    symbol = oracle.symbol_of(node)
    if symbol is None:
        return []

    users = oracle.split_merged_symbol(symbol)
    for user in users:
        graph.add_symbol(user)

    for referenced in oracle.referenced_symbols(node):
        for used in oracle.split_merged_symbol(referenced):
            for user in users:
                graph.add_usage(used, user)

    return users
