"""Metric result records produced by the analyzers.

Every record is immutable once created. ``to_dict`` flattens a record into
plain JSON-compatible values for the report renderers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .diagnostics import Finding


@dataclass(frozen=True)
class CohesionResult:
    """LCOM4 result for a single struct.

    Attributes:
        struct_name: Name of the struct
        file_path: Source file declaring the struct
        lcom4_score: Number of connected components (0 when not applicable)
        components: Sorted member names of each component
        applicable: False for structs without methods
    """

    struct_name: str
    file_path: str
    lcom4_score: int
    components: tuple[tuple[str, ...], ...] = ()
    applicable: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "struct_name": self.struct_name,
            "file_path": self.file_path,
            "lcom4_score": self.lcom4_score,
            "component_details": [list(c) for c in self.components],
            "applicable": self.applicable,
        }


@dataclass(frozen=True)
class ComplexityResult:
    """Cyclomatic complexity, size and coupling of one function."""

    func_name: str
    file_path: str
    complexity: int
    loc: int
    dependencies: tuple[str, ...] = ()
    internal_deps: tuple[str, ...] = ()
    external_deps: tuple[str, ...] = ()
    efferent: int = 0
    afferent: int = 0
    instability: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "function_name": self.func_name,
            "file_path": self.file_path,
            "complexity": self.complexity,
            "loc": self.loc,
            "dependencies": list(self.dependencies),
            "internal_deps": list(self.internal_deps),
            "external_deps": list(self.external_deps),
            "dependency_count": len(self.dependencies),
            "afferent": self.afferent,
            "efferent": self.efferent,
            "instability": self.instability,
        }


@dataclass(frozen=True)
class CouplingResult:
    """Package-level coupling metrics."""

    package_name: str
    import_path: str
    afferent: int
    efferent: int
    instability: float
    dependency_depth: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "package_name": self.package_name,
            "import_path": self.import_path,
            "afferent": self.afferent,
            "efferent": self.efferent,
            "instability": self.instability,
            "dependency_depth": self.dependency_depth,
        }


@dataclass(frozen=True)
class MethodCluster:
    """A connected group of private methods (one candidate responsibility)."""

    cluster_id: int
    methods: tuple[str, ...]
    called_by: tuple[str, ...] = ()
    responsibility_hint: str = ""

    @property
    def size(self) -> int:
        return len(self.methods)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.cluster_id,
            "methods": list(self.methods),
            "size": self.size,
            "called_by": list(self.called_by),
            "responsibility_hint": self.responsibility_hint,
        }


@dataclass(frozen=True)
class MethodClusterResult:
    """Private method island analysis of one struct."""

    clusters: tuple[MethodCluster, ...]
    total_private_methods: int

    @property
    def cluster_count(self) -> int:
        return len(self.clusters)

    @property
    def has_multiple_islands(self) -> bool:
        return len(self.clusters) >= 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_private_methods": self.total_private_methods,
            "cluster_count": self.cluster_count,
            "clusters": [c.to_dict() for c in self.clusters],
            "has_multiple_islands": self.has_multiple_islands,
        }


@dataclass(frozen=True)
class FieldClusterResult:
    """PCA-based responsibility estimate over the method×field usage matrix."""

    matrix: tuple[tuple[int, ...], ...]
    method_names: tuple[str, ...]
    field_names: tuple[str, ...]
    estimated_clusters: int
    explained_variance: tuple[float, ...]
    recommendation_text: str

    @property
    def has_multiple_responsibilities(self) -> bool:
        return self.estimated_clusters >= 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "matrix": [list(row) for row in self.matrix],
            "method_names": list(self.method_names),
            "field_names": list(self.field_names),
            "estimated_clusters": self.estimated_clusters,
            "explained_variance": list(self.explained_variance),
            "has_multiple_responsibilities": self.has_multiple_responsibilities,
            "recommendations": self.recommendation_text,
        }


@dataclass(frozen=True)
class StructResult:
    """All struct-level results. Clustering results are None when not applicable."""

    cohesion: CohesionResult
    method_clusters: MethodClusterResult | None = None
    field_clusters: FieldClusterResult | None = None

    @property
    def struct_name(self) -> str:
        return self.cohesion.struct_name

    @property
    def file_path(self) -> str:
        return self.cohesion.file_path

    def to_dict(self) -> dict[str, Any]:
        data = self.cohesion.to_dict()
        data["method_clusters"] = (
            self.method_clusters.to_dict() if self.method_clusters else None
        )
        data["field_matrix"] = (
            self.field_clusters.to_dict() if self.field_clusters else None
        )
        return data


@dataclass(frozen=True)
class PackageResult:
    """Analysis results for a single package."""

    name: str
    path: str
    coupling: CouplingResult
    structs: tuple[StructResult, ...] = ()
    functions: tuple[ComplexityResult, ...] = ()
    total_loc: int = 0
    file_count: int = 0

    @property
    def afferent(self) -> int:
        return self.coupling.afferent

    @property
    def efferent(self) -> int:
        return self.coupling.efferent

    @property
    def instability(self) -> float:
        return self.coupling.instability

    @property
    def dependency_depth(self) -> int:
        return self.coupling.dependency_depth

    @property
    def func_count(self) -> int:
        return len(self.functions)

    @property
    def avg_func_loc(self) -> float:
        if not self.functions:
            return 0.0
        return sum(f.loc for f in self.functions) / len(self.functions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "afferent": self.afferent,
            "efferent": self.efferent,
            "instability": self.instability,
            "dependency_depth": self.dependency_depth,
            "structs": [s.to_dict() for s in self.structs],
            "functions": [f.to_dict() for f in self.functions],
            "total_loc": self.total_loc,
            "avg_func_loc": round(self.avg_func_loc, 2),
            "func_count": self.func_count,
            "file_count": self.file_count,
        }


@dataclass(frozen=True)
class Report:
    """Complete output of one analysis run.

    Attributes:
        findings: Diagnostics in rule order
        packages: Package results in analysis order
        total_loc: Lines of code across all analyzed packages
        skipped_directories: Directories excluded because they failed to parse
        dependency_cycles: Import cycles found among in-project packages
        analyzed_at: Timestamp of the run
    """

    findings: tuple[Finding, ...]
    packages: tuple[PackageResult, ...]
    total_loc: int = 0
    skipped_directories: tuple[str, ...] = ()
    dependency_cycles: tuple[tuple[str, ...], ...] = ()
    analyzed_at: datetime = field(default_factory=datetime.now)

    @property
    def struct_count(self) -> int:
        return sum(len(p.structs) for p in self.packages)

    @property
    def function_count(self) -> int:
        return sum(len(p.functions) for p in self.packages)

    def findings_by_severity(self) -> dict[str, int]:
        """Count findings per severity label."""
        counts: dict[str, int] = {}
        for finding in self.findings:
            counts[finding.severity.value] = counts.get(finding.severity.value, 0) + 1
        return counts

    def to_summary(self) -> dict[str, Any]:
        """Generate summary dict for reporting."""
        return {
            "analyzed_at": self.analyzed_at.isoformat(),
            "total_loc": self.total_loc,
            "package_count": len(self.packages),
            "struct_count": self.struct_count,
            "function_count": self.function_count,
            "finding_count": len(self.findings),
            "findings_by_severity": self.findings_by_severity(),
            "skipped_directory_count": len(self.skipped_directories),
            "dependency_cycle_count": len(self.dependency_cycles),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.to_summary(),
            "diagnostics": [f.to_dict() for f in self.findings],
            "packages": [p.to_dict() for p in self.packages],
            "total_loc": self.total_loc,
            "skipped_directories": list(self.skipped_directories),
            "dependency_cycles": [list(c) for c in self.dependency_cycles],
        }
