"""Package coupling and dependency graph analysis.

This module builds the in-project import graph and derives, per package:

- Afferent coupling (Ca): in-project packages importing this package
- Efferent coupling (Ce): in-project packages this package imports
- Instability: Ce / (Ca + Ce), 0 when both are 0
- Dependency depth: length of the longest chain of in-project imports

Higher instability means a package is easy to change but fragile; a
package many others depend on should be stable.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from ...core.facts import PackageFacts
from ..metrics import CouplingResult


def instability(afferent: int, efferent: int) -> float:
    """Compute instability I = Ce / (Ca + Ce).

    Examples:
        >>> instability(0, 0)
        0.0
        >>> instability(1, 3)
        0.75
    """
    total = afferent + efferent
    if total == 0:
        return 0.0
    return efferent / total


def is_internal_import(import_path: str, module_path: str) -> bool:
    """Check if an import path belongs to the project.

    Args:
        import_path: Fully qualified import path
        module_path: Project module path (e.g. "github.com/acme/shop")

    Returns:
        True if the path is the module itself or nested under it

    Examples:
        >>> is_internal_import("github.com/acme/shop/store", "github.com/acme/shop")
        True

        >>> is_internal_import("github.com/acme/shopify", "github.com/acme/shop")
        False

        >>> is_internal_import("fmt", "github.com/acme/shop")
        False
    """
    if not module_path:
        return False
    return import_path == module_path or import_path.startswith(module_path + "/")


@dataclass
class PackageDependency:
    """Dependency information for one analyzed package.

    Built once by ``build_import_graph`` and treated as read-only afterwards.

    Attributes:
        import_path: Fully qualified import path of the package
        imports: Import paths this package uses (internal and external)
        imported_by: Import paths of analyzed packages importing this one
    """

    import_path: str
    imports: list[str] = field(default_factory=list)
    imported_by: list[str] = field(default_factory=list)


def build_import_graph(
    packages: Iterable[PackageFacts], module_path: str
) -> dict[str, PackageDependency]:
    """Build the package dependency graph.

    Args:
        packages: Facts of every analyzed package
        module_path: Project module path

    Returns:
        Mapping of project-relative package path to its dependency info
    """
    packages = list(packages)
    graph: dict[str, PackageDependency] = {}
    full_to_rel: dict[str, str] = {}

    for package in packages:
        full_path = package.import_path(module_path)
        full_to_rel[full_path] = package.path
        graph[package.path] = PackageDependency(import_path=full_path)

    for package in packages:
        dependency = graph[package.path]
        dependency.imports = sorted(
            imp for imp in package.imports if imp != dependency.import_path
        )
        for imp in dependency.imports:
            target = full_to_rel.get(imp)
            if target is not None:
                graph[target].imported_by.append(dependency.import_path)

    for dependency in graph.values():
        dependency.imported_by.sort()

    return graph


def _internal_successors(
    graph: dict[str, PackageDependency],
) -> dict[str, list[str]]:
    """Map each package path to the analyzed packages it imports (sorted)."""
    full_to_rel = {dep.import_path: rel for rel, dep in graph.items()}
    return {
        rel: sorted(full_to_rel[imp] for imp in dep.imports if imp in full_to_rel)
        for rel, dep in graph.items()
    }


def calculate_dependency_depth(graph: dict[str, PackageDependency]) -> dict[str, int]:
    """Compute the longest in-project import chain for every package.

    Uses memoized depth-first search. A package importing nothing in the
    project has depth 0. An edge to a package still on the recursion stack
    closes a cycle and contributes 0 instead of recursing, so depths in
    cyclic graphs are a lower bound.

    Args:
        graph: Dependency graph from ``build_import_graph``

    Returns:
        Mapping of package path to dependency depth
    """
    successors = _internal_successors(graph)
    memo: dict[str, int] = {}
    on_stack: set[str] = set()

    def depth(node: str) -> int:
        if node in memo:
            return memo[node]

        on_stack.add(node)
        best = 0
        for child in successors[node]:
            if child in on_stack:
                contribution = 0
            else:
                contribution = 1 + depth(child)
            best = max(best, contribution)
        on_stack.discard(node)

        memo[node] = best
        return best

    for node in sorted(successors):
        depth(node)

    return memo


def find_import_cycles(graph: dict[str, PackageDependency]) -> list[tuple[str, ...]]:
    """Find import cycles among analyzed packages.

    Returns every strongly connected component with more than one package
    (Tarjan's algorithm, iterative).

    Args:
        graph: Dependency graph from ``build_import_graph``

    Returns:
        Sorted list of cycles, each a sorted tuple of import paths
    """
    successors = _internal_successors(graph)
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    cycles: list[tuple[str, ...]] = []
    counter = 0

    for start in sorted(successors):
        if start in index_of:
            continue

        index_of[start] = lowlink[start] = counter
        counter += 1
        stack.append(start)
        on_stack.add(start)
        work = [(start, iter(successors[start]))]

        while work:
            node, children = work[-1]
            descended = False
            for child in children:
                if child not in index_of:
                    index_of[child] = lowlink[child] = counter
                    counter += 1
                    stack.append(child)
                    on_stack.add(child)
                    work.append((child, iter(successors[child])))
                    descended = True
                    break
                if child in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[child])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index_of[node]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                if len(component) > 1:
                    cycles.append(
                        tuple(sorted(graph[rel].import_path for rel in component))
                    )

    return sorted(cycles)


class CouplingAnalyzer:
    """Compute package coupling from the complete import graph.

    Needs every package's imports before any result can be produced, so it
    runs once per analysis, before per-package work is combined.
    """

    def __init__(self, module_path: str) -> None:
        self.module_path = module_path
        self.graph: dict[str, PackageDependency] = {}
        self.cycles: list[tuple[str, ...]] = []

    def analyze(self, packages: Iterable[PackageFacts]) -> dict[str, CouplingResult]:
        """Build the graph and compute coupling for every package.

        Args:
            packages: Facts of every analyzed package

        Returns:
            Mapping of package path to CouplingResult
        """
        packages = list(packages)
        self.graph = build_import_graph(packages, self.module_path)
        depths = calculate_dependency_depth(self.graph)
        self.cycles = find_import_cycles(self.graph)

        if self.cycles:
            logger.warning(
                f"Found {len(self.cycles)} import cycle(s); "
                "dependency depth is approximate for packages on them"
            )

        results: dict[str, CouplingResult] = {}
        for package in packages:
            dependency = self.graph[package.path]
            afferent = sum(
                1
                for importer in dependency.imported_by
                if is_internal_import(importer, self.module_path)
            )
            efferent = sum(
                1
                for imported in dependency.imports
                if is_internal_import(imported, self.module_path)
            )
            results[package.path] = CouplingResult(
                package_name=package.name,
                import_path=dependency.import_path,
                afferent=afferent,
                efferent=efferent,
                instability=instability(afferent, efferent),
                dependency_depth=depths.get(package.path, 0),
            )

        return results
