"""Unit tests for package coupling and the dependency graph."""

import pytest
from conftest import make_package

from code_health.analysis.collectors.coupling import (
    CouplingAnalyzer,
    build_import_graph,
    calculate_dependency_depth,
    find_import_cycles,
    instability,
    is_internal_import,
)

MODULE = "example.com/app"


def _chain():
    return [
        make_package("a", imports={f"{MODULE}/b", "fmt"}),
        make_package("b", imports={f"{MODULE}/c"}),
        make_package("c", imports={"strings"}),
    ]


class TestHelpers:
    """Test instability and import classification helpers."""

    @pytest.mark.parametrize(
        "afferent,efferent,expected",
        [(0, 0, 0.0), (0, 3, 1.0), (3, 0, 0.0), (1, 3, 0.75)],
    )
    def test_instability(self, afferent, efferent, expected):
        assert instability(afferent, efferent) == expected

    def test_is_internal_import(self):
        assert is_internal_import(MODULE, MODULE) is True
        assert is_internal_import(f"{MODULE}/store", MODULE) is True
        assert is_internal_import("example.com/application", MODULE) is False
        assert is_internal_import("fmt", MODULE) is False
        assert is_internal_import("fmt", "") is False


class TestImportGraph:
    """Test graph construction."""

    def test_imported_by_is_populated(self):
        graph = build_import_graph(_chain(), MODULE)

        assert graph["b"].imported_by == [f"{MODULE}/a"]
        assert graph["c"].imported_by == [f"{MODULE}/b"]
        assert graph["a"].imported_by == []
        assert graph["a"].imports == ["example.com/app/b", "fmt"]

    def test_root_package_uses_module_path(self):
        packages = [
            make_package("", imports={f"{MODULE}/store"}),
            make_package("store"),
        ]

        graph = build_import_graph(packages, MODULE)

        assert graph[""].import_path == MODULE
        assert graph["store"].imported_by == [MODULE]

    def test_self_import_is_ignored(self):
        graph = build_import_graph([make_package("a", imports={f"{MODULE}/a"})], MODULE)
        assert graph["a"].imports == []
        assert graph["a"].imported_by == []


class TestDependencyDepth:
    """Test longest-chain depth computation."""

    def test_chain_depths(self):
        depths = calculate_dependency_depth(build_import_graph(_chain(), MODULE))
        assert depths == {"a": 2, "b": 1, "c": 0}

    def test_diamond_takes_longest_path(self):
        packages = [
            make_package("top", imports={f"{MODULE}/left", f"{MODULE}/right"}),
            make_package("left", imports={f"{MODULE}/base"}),
            make_package("right", imports={f"{MODULE}/mid"}),
            make_package("mid", imports={f"{MODULE}/base"}),
            make_package("base"),
        ]

        depths = calculate_dependency_depth(build_import_graph(packages, MODULE))

        assert depths["top"] == 3
        assert depths["right"] == 2
        assert depths["base"] == 0

    def test_cycle_edge_contributes_zero(self):
        packages = [
            make_package("a", imports={f"{MODULE}/b"}),
            make_package("b", imports={f"{MODULE}/a"}),
        ]

        depths = calculate_dependency_depth(build_import_graph(packages, MODULE))

        assert depths == {"a": 1, "b": 0}


class TestImportCycles:
    """Test strongly connected component detection."""

    def test_acyclic_graph_has_no_cycles(self):
        assert find_import_cycles(build_import_graph(_chain(), MODULE)) == []

    def test_two_node_cycle(self):
        packages = [
            make_package("a", imports={f"{MODULE}/b"}),
            make_package("b", imports={f"{MODULE}/a"}),
            make_package("c", imports={f"{MODULE}/a"}),
        ]

        cycles = find_import_cycles(build_import_graph(packages, MODULE))

        assert cycles == [(f"{MODULE}/a", f"{MODULE}/b")]

    def test_three_node_cycle(self):
        packages = [
            make_package("x", imports={f"{MODULE}/y"}),
            make_package("y", imports={f"{MODULE}/z"}),
            make_package("z", imports={f"{MODULE}/x"}),
        ]

        cycles = find_import_cycles(build_import_graph(packages, MODULE))

        assert cycles == [(f"{MODULE}/x", f"{MODULE}/y", f"{MODULE}/z")]


class TestCouplingAnalyzer:
    """Test package-level coupling results."""

    def test_chain_coupling(self):
        analyzer = CouplingAnalyzer(MODULE)
        results = analyzer.analyze(_chain())

        a, b, c = results["a"], results["b"], results["c"]
        assert (a.afferent, a.efferent, a.instability) == (0, 1, 1.0)
        assert (b.afferent, b.efferent, b.instability) == (1, 1, 0.5)
        assert (c.afferent, c.efferent, c.instability) == (1, 0, 0.0)
        assert a.dependency_depth == 2
        assert a.import_path == f"{MODULE}/a"
        assert analyzer.cycles == []

    def test_external_imports_do_not_count(self):
        results = CouplingAnalyzer(MODULE).analyze(
            [make_package("solo", imports={"fmt", "github.com/other/lib"})]
        )

        assert results["solo"].efferent == 0
        assert results["solo"].instability == 0.0

    def test_cycles_are_recorded(self):
        analyzer = CouplingAnalyzer(MODULE)
        analyzer.analyze(
            [
                make_package("a", imports={f"{MODULE}/b"}),
                make_package("b", imports={f"{MODULE}/a"}),
            ]
        )

        assert analyzer.cycles == [(f"{MODULE}/a", f"{MODULE}/b")]
