"""Unit tests for the union-find structure."""

from code_health.analysis.collectors.union_find import UnionFind


class TestUnionFind:
    """Test disjoint-set operations."""

    def test_singletons(self):
        uf = UnionFind()
        uf.add_all(["a", "b", "c"])

        assert uf.component_count() == 3
        assert uf.components() == [("a",), ("b",), ("c",)]

    def test_union_merges_components(self):
        uf = UnionFind()
        uf.add_all(["a", "b", "c", "d"])
        uf.union("a", "b")
        uf.union("c", "d")
        uf.union("b", "d")

        assert uf.component_count() == 1
        assert uf.find("a") == uf.find("d")

    def test_components_are_order_independent(self):
        first = UnionFind()
        first.add_all(["x", "y", "z"])
        first.union("z", "x")

        second = UnionFind()
        second.add_all(["z", "y", "x"])
        second.union("x", "z")

        assert first.components() == second.components() == [("x", "z"), ("y",)]

    def test_add_is_idempotent(self):
        uf = UnionFind()
        uf.add("a")
        uf.add("b")
        uf.union("a", "b")
        uf.add("a")

        assert len(uf) == 2
        assert uf.component_count() == 1
        assert "a" in uf
        assert "missing" not in uf

    def test_union_same_component_is_noop(self):
        uf = UnionFind()
        uf.add_all(["a", "b"])
        uf.union("a", "b")
        uf.union("b", "a")

        assert uf.components() == [("a", "b")]
