"""Metric collectors.

Each collector reads the fact model of one package (or, for coupling, all
packages) and returns immutable result records.

Example:
    from code_health.analysis.collectors import LCOM4Calculator

    result = LCOM4Calculator().calculate(struct_facts)
    print(result.lcom4_score)
"""

from .cohesion import LCOM4Calculator
from .complexity import ComplexityCalculator, cyclomatic_complexity
from .coupling import (
    CouplingAnalyzer,
    PackageDependency,
    build_import_graph,
    calculate_dependency_depth,
    find_import_cycles,
    instability,
)
from .field_clustering import FieldClusterAnalyzer
from .method_clustering import MethodClusterAnalyzer
from .union_find import UnionFind

__all__ = [
    "ComplexityCalculator",
    "CouplingAnalyzer",
    "FieldClusterAnalyzer",
    "LCOM4Calculator",
    "MethodClusterAnalyzer",
    "PackageDependency",
    "UnionFind",
    "build_import_graph",
    "calculate_dependency_depth",
    "cyclomatic_complexity",
    "find_import_cycles",
    "instability",
]
