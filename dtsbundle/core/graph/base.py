"""Core UsageGraph class with "used by" adjacency sets."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable

from dtsbundle.core.models import Symbol

SymbolSplitter = Callable[[Symbol], list[Symbol]]


def _no_split(symbol: Symbol) -> list[Symbol]:
    return [symbol]


class UsageGraph:
    """Directed graph for type-level usage between declaration identities.

    An edge ``used -> user`` means the type signature of ``user`` mentions
    ``used``. Queries split transient symbols into their constituents, so any
    part of a merged identity answers for the whole.
    """

    __slots__ = ("_users", "_split", "_closure_cache")

    def __init__(self, split: SymbolSplitter | None = None) -> None:
        self._users: dict[Symbol, set[Symbol]] = {}
        self._split = split or _no_split
        self._closure_cache: dict[Symbol, frozenset[Symbol]] = {}

    def add_symbol(self, symbol: Symbol) -> None:
        """Add a symbol node. O(1)."""
        if symbol not in self._users:
            self._users[symbol] = set()

    def add_usage(self, used: Symbol, user: Symbol) -> None:
        """Record that ``user`` references ``used``. O(1)."""
        self.add_symbol(used)
        self.add_symbol(user)
        # A declaration referencing itself is not a usage
        if used != user:
            self._users[used].add(user)
            self._closure_cache.clear()

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._users

    def users_of(self, symbol: Symbol) -> set[Symbol] | None:
        """Direct users of a symbol. O(in-degree).

        Returns None when no constituent of the symbol was ever seen.
        """
        found = False
        result: set[Symbol] = set()
        for part in self._split(symbol):
            users = self._users.get(part)
            if users is not None:
                found = True
                result.update(users)
        return result if found else None

    def is_used_by(self, symbol: Symbol, by: Symbol) -> bool:
        """Check if ``symbol`` is transitively used by ``by`` (or is ``by``)."""
        targets = set(self._split(by))
        for part in self._split(symbol):
            if part in targets:
                return True
            if not targets.isdisjoint(self.transitive_users(part)):
                return True
        return False

    def transitive_users(self, symbol: Symbol) -> frozenset[Symbol]:
        """All symbols reachable through "used by" edges. BFS, memoized."""
        cached = self._closure_cache.get(symbol)
        if cached is not None:
            return cached

        visited: set[Symbol] = set()
        queue: deque[Symbol] = deque([symbol])
        while queue:
            current = queue.popleft()
            for user in self._users.get(current, ()):
                if user not in visited:
                    visited.add(user)
                    queue.append(user)

        result = frozenset(visited)
        self._closure_cache[symbol] = result
        return result

    @property
    def num_nodes(self) -> int:
        return len(self._users)

    @property
    def num_edges(self) -> int:
        return sum(len(users) for users in self._users.values())

    def __repr__(self) -> str:
        return f"UsageGraph(nodes={self.num_nodes}, edges={self.num_edges})"
