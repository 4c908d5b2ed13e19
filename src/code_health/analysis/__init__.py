"""Metrics and diagnostics engine.

Key Components:
    - LCOM4Calculator: struct cohesion (connected method/field components)
    - ComplexityCalculator: cyclomatic complexity, size and function coupling
    - CouplingAnalyzer: package import graph, Ca/Ce/instability, depth
    - MethodClusterAnalyzer: islands of private methods
    - FieldClusterAnalyzer: PCA over the method×field usage matrix
    - DiagnosticsEngine: cross-metric findings

Example:
    from code_health.analysis import DiagnosticsEngine

    findings = DiagnosticsEngine().run(package_results)
    for finding in findings:
        print(finding.severity.value, finding.target_name)
"""

from .collectors import (
    ComplexityCalculator,
    CouplingAnalyzer,
    FieldClusterAnalyzer,
    LCOM4Calculator,
    MethodClusterAnalyzer,
    UnionFind,
)
from .diagnostics import DiagnosticsEngine, Finding, FindingKind, Severity
from .metrics import (
    CohesionResult,
    ComplexityResult,
    CouplingResult,
    FieldClusterResult,
    MethodCluster,
    MethodClusterResult,
    PackageResult,
    Report,
    StructResult,
)

__all__ = [
    "CohesionResult",
    "ComplexityCalculator",
    "ComplexityResult",
    "CouplingAnalyzer",
    "CouplingResult",
    "DiagnosticsEngine",
    "FieldClusterAnalyzer",
    "FieldClusterResult",
    "Finding",
    "FindingKind",
    "LCOM4Calculator",
    "MethodCluster",
    "MethodClusterAnalyzer",
    "MethodClusterResult",
    "PackageResult",
    "Report",
    "Severity",
    "StructResult",
    "UnionFind",
]
