"""Cyclomatic complexity and function-level coupling.

Cyclomatic complexity counts decision points in a function body:
- Base complexity starts at 1
- Each if, loop and switch adds +1
- Each case clause with a match value adds +1 (default excluded)
- Each non-default select case adds +1
- Each && / || operator adds +1

Function coupling:
- Efferent (Ce): distinct imported packages referenced inside the body
- Afferent (Ca): other functions of the same package calling this one,
  matched by exact qualified name
- Instability: Ce / (Ca + Ce), 0 when both are 0
"""

from __future__ import annotations

from loguru import logger

from ...core.facts import FunctionFacts, PackageFacts
from ..metrics import ComplexityResult
from .coupling import instability, is_internal_import


def cyclomatic_complexity(function: FunctionFacts) -> int:
    """Return the cyclomatic complexity of a function (1 without a body)."""
    if not function.has_body:
        return 1
    return 1 + function.decision_points.total


def function_loc(function: FunctionFacts) -> int:
    """Return lines spanned by the body, clamped to >= 0 (0 without a body)."""
    if not function.has_body:
        return 0
    return max(0, function.body_line_count)


def categorize_dependencies(
    dependencies: list[str], module_path: str
) -> tuple[list[str], list[str]]:
    """Split import paths into internal (project) and external sets.

    Args:
        dependencies: Import paths used by a function
        module_path: Project module path

    Returns:
        Tuple of (internal, external) lists, each sorted
    """
    internal = sorted(d for d in dependencies if is_internal_import(d, module_path))
    external = sorted(
        d for d in dependencies if not is_internal_import(d, module_path)
    )
    return internal, external


def count_function_afferent(functions: list[FunctionFacts]) -> dict[str, int]:
    """Count distinct in-package callers of each function.

    Resolution is syntactic: a caller counts when its recorded call targets
    contain the exact qualified name. Self-recursion does not count.

    Args:
        functions: All functions of one package

    Returns:
        Mapping of qualified function name to afferent count
    """
    local = {f.qualified_name for f in functions}
    callers: dict[str, set[str]] = {name: set() for name in local}

    for caller in functions:
        for callee in caller.calls:
            if callee in local and callee != caller.qualified_name:
                callers[callee].add(caller.qualified_name)

    return {name: len(who) for name, who in callers.items()}


class ComplexityCalculator:
    """Compute complexity results for all functions of a package."""

    def __init__(self, module_path: str) -> None:
        """Initialize calculator.

        Args:
            module_path: Project module path, used to split internal deps
        """
        self.module_path = module_path

    def calculate_package(self, package: PackageFacts) -> list[ComplexityResult]:
        """Calculate complexity, LoC and coupling for each function.

        Args:
            package: Facts of the package

        Returns:
            One ComplexityResult per function, in declaration order
        """
        functions = list(package.functions)
        afferent_counts = count_function_afferent(functions)

        results = []
        for function in functions:
            dependencies = sorted(function.imported_packages_used)
            internal, external = categorize_dependencies(
                dependencies, self.module_path
            )
            efferent = len(dependencies)
            afferent = afferent_counts.get(function.qualified_name, 0)

            results.append(
                ComplexityResult(
                    func_name=function.qualified_name,
                    file_path=function.file_path,
                    complexity=cyclomatic_complexity(function),
                    loc=function_loc(function),
                    dependencies=tuple(dependencies),
                    internal_deps=tuple(internal),
                    external_deps=tuple(external),
                    efferent=efferent,
                    afferent=afferent,
                    instability=instability(afferent, efferent),
                )
            )

        logger.debug(
            f"Complexity: {len(results)} function(s) in package '{package.name}'"
        )
        return results
