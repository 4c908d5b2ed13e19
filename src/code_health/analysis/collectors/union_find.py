"""Union-Find over string keys, shared by cohesion and method clustering."""

from __future__ import annotations

from collections.abc import Iterable


class UnionFind:
    """Disjoint-set forest with path compression and union by rank.

    Nodes are identified by string keys and must be added before use.

    Example:
        uf = UnionFind()
        uf.add_all(["a", "b", "c"])
        uf.union("a", "b")
        uf.components()  # [("a", "b"), ("c",)]
    """

    def __init__(self) -> None:
        self._parent: dict[str, str] = {}
        self._rank: dict[str, int] = {}

    def __contains__(self, node: str) -> bool:
        return node in self._parent

    def __len__(self) -> int:
        return len(self._parent)

    def add(self, node: str) -> None:
        """Add a singleton node (no-op if already present)."""
        if node not in self._parent:
            self._parent[node] = node
            self._rank[node] = 0

    def add_all(self, nodes: Iterable[str]) -> None:
        for node in nodes:
            self.add(node)

    def find(self, node: str) -> str:
        """Return the root of ``node``, compressing the path on the way."""
        root = node
        while self._parent[root] != root:
            root = self._parent[root]

        # Path compression
        while self._parent[node] != root:
            self._parent[node], node = root, self._parent[node]

        return root

    def union(self, a: str, b: str) -> None:
        """Merge the components containing ``a`` and ``b``."""
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return

        if self._rank[root_a] < self._rank[root_b]:
            self._parent[root_a] = root_b
        elif self._rank[root_a] > self._rank[root_b]:
            self._parent[root_b] = root_a
        else:
            self._parent[root_b] = root_a
            self._rank[root_a] += 1

    def components(self) -> list[tuple[str, ...]]:
        """Return all connected components.

        Members are sorted within each component and components are ordered
        by their first member, so the result does not depend on insertion
        or union order.
        """
        groups: dict[str, list[str]] = {}
        for node in self._parent:
            groups.setdefault(self.find(node), []).append(node)

        return sorted(tuple(sorted(members)) for members in groups.values())

    def component_count(self) -> int:
        return len({self.find(node) for node in self._parent})
