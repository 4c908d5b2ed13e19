"""Cross-metric diagnostics.

A fixed rule set reads the metric results of every package at once and
emits severity-tagged findings. Rules run in a fixed order and findings
keep that order:

1. God Object               - LCOM4 high and package heavily depended upon
2. Unstable Foundation      - package heavily depended upon but unstable
3. Overly Complex Function  - cyclomatic complexity too high
4. Ambiguous Struct         - low cohesion plus a complex method
5. Split Responsibility (Method Islands)
6. Split Responsibility (Field Clusters)

Results that are "not applicable" (LCOM4 of a struct without methods,
missing clustering results) never trigger a rule.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from ..config.thresholds import DiagnosticThresholds
from .metrics import PackageResult, StructResult


class Severity(str, Enum):
    """Finding severity levels."""

    CRITICAL = "Critical"
    WARNING = "Warning"


class FindingKind(str, Enum):
    """Stable finding type tags."""

    GOD_OBJECT = "God Object"
    UNSTABLE_FOUNDATION = "Unstable Foundation"
    COMPLEX_FUNCTION = "Overly Complex Function"
    AMBIGUOUS_STRUCT = "Ambiguous Struct"
    METHOD_ISLANDS = "Split Responsibility (Method Islands)"
    FIELD_CLUSTERS = "Split Responsibility (Field Clusters)"


@dataclass(frozen=True)
class Finding:
    """A diagnostic finding.

    Attributes:
        kind: Rule that produced the finding
        target_name: Package name, ``Package.Struct`` or ``Package.Function``
        severity: Critical or Warning
        message: Human-readable description
        evidence: Exact metric values that triggered the rule
        related_path: Anchor into a rendered report (e.g. "#struct-store-Cart")
    """

    kind: FindingKind
    target_name: str
    severity: Severity
    message: str
    evidence: dict[str, Any] = field(default_factory=dict)
    related_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "target_name": self.target_name,
            "message": self.message,
            "severity": self.severity.value,
            "evidence": self.evidence,
            "related_path": self.related_path,
        }


def _struct_anchor(package: PackageResult, struct: StructResult) -> str:
    return f"#struct-{package.path}-{struct.struct_name}"


class DiagnosticsEngine:
    """Evaluate the diagnostic rules over a complete set of package results."""

    def __init__(self, thresholds: DiagnosticThresholds | None = None) -> None:
        self.thresholds = thresholds or DiagnosticThresholds()
        self._rules: list[Callable[[list[PackageResult]], list[Finding]]] = [
            self.detect_god_objects,
            self.detect_unstable_foundations,
            self.detect_complex_functions,
            self.detect_ambiguous_structs,
            self.detect_method_islands,
            self.detect_field_clusters,
        ]

    def run(self, packages: Iterable[PackageResult]) -> list[Finding]:
        """Run every rule in order.

        Args:
            packages: Results of every analyzed package

        Returns:
            Findings in rule order
        """
        packages = list(packages)
        findings: list[Finding] = []
        for rule in self._rules:
            found = rule(packages)
            if found:
                logger.debug(f"{found[0].kind.value}: {len(found)} finding(s)")
            findings.extend(found)
        return findings

    def detect_god_objects(self, packages: list[PackageResult]) -> list[Finding]:
        """Structs with LCOM4 >= 5 in packages with Ca >= 10."""
        t = self.thresholds
        results = []
        for pkg in packages:
            if pkg.afferent < t.god_object_afferent:
                continue
            for s in pkg.structs:
                score = s.cohesion.lcom4_score
                if not s.cohesion.applicable or score < t.god_object_lcom4:
                    continue
                results.append(
                    Finding(
                        kind=FindingKind.GOD_OBJECT,
                        target_name=f"{pkg.name}.{s.struct_name}",
                        severity=Severity.CRITICAL,
                        message=(
                            f"Struct '{s.struct_name}' has excessive responsibilities "
                            f"(LCOM4={score}) and is heavily depended upon "
                            f"(Ca={pkg.afferent}). Consider splitting into smaller, "
                            "focused structs."
                        ),
                        evidence={
                            "lcom4_score": score,
                            "afferent": pkg.afferent,
                            "package": pkg.name,
                            "file_path": s.file_path,
                        },
                        related_path=_struct_anchor(pkg, s),
                    )
                )
        return results

    def detect_unstable_foundations(
        self, packages: list[PackageResult]
    ) -> list[Finding]:
        """Packages with Ca >= 10 and instability >= 0.7."""
        t = self.thresholds
        results = []
        for pkg in packages:
            if (
                pkg.afferent < t.unstable_afferent
                or pkg.instability < t.unstable_instability
            ):
                continue
            results.append(
                Finding(
                    kind=FindingKind.UNSTABLE_FOUNDATION,
                    target_name=pkg.name,
                    severity=Severity.CRITICAL,
                    message=(
                        f"Package '{pkg.name}' is heavily depended upon "
                        f"(Ca={pkg.afferent}) but highly unstable "
                        f"(I={pkg.instability:.2f}). This creates a fragile "
                        "foundation. Consider stabilizing this package by reducing "
                        "dependencies."
                    ),
                    evidence={
                        "afferent": pkg.afferent,
                        "efferent": pkg.efferent,
                        "instability": pkg.instability,
                        "package": pkg.name,
                    },
                    related_path=f"#package-{pkg.path}",
                )
            )
        return results

    def detect_complex_functions(self, packages: list[PackageResult]) -> list[Finding]:
        """Functions with cyclomatic complexity >= 15."""
        t = self.thresholds
        results = []
        for pkg in packages:
            for f in pkg.functions:
                if f.complexity < t.complex_function:
                    continue
                results.append(
                    Finding(
                        kind=FindingKind.COMPLEX_FUNCTION,
                        target_name=f"{pkg.name}.{f.func_name}",
                        severity=Severity.WARNING,
                        message=(
                            f"Function '{f.func_name}' is too complex "
                            f"(Complexity={f.complexity}). High complexity makes code "
                            "hard to test and maintain. Consider refactoring into "
                            "smaller functions."
                        ),
                        evidence={
                            "complexity": f.complexity,
                            "function": f.func_name,
                            "package": pkg.name,
                            "file_path": f.file_path,
                        },
                        related_path=f"#function-{pkg.path}-{f.func_name}",
                    )
                )
        return results

    def detect_ambiguous_structs(self, packages: list[PackageResult]) -> list[Finding]:
        """Structs with LCOM4 >= 3 owning a method of complexity >= 10."""
        t = self.thresholds
        results = []
        for pkg in packages:
            for s in pkg.structs:
                score = s.cohesion.lcom4_score
                if not s.cohesion.applicable or score < t.ambiguous_lcom4:
                    continue

                prefix = f"{s.struct_name}."
                complex_methods = sorted(
                    f.func_name
                    for f in pkg.functions
                    if f.func_name.startswith(prefix)
                    and len(f.func_name) > len(prefix)
                    and f.complexity >= t.ambiguous_method_complexity
                )
                if not complex_methods:
                    continue

                results.append(
                    Finding(
                        kind=FindingKind.AMBIGUOUS_STRUCT,
                        target_name=f"{pkg.name}.{s.struct_name}",
                        severity=Severity.WARNING,
                        message=(
                            f"Struct '{s.struct_name}' has unclear responsibilities "
                            f"(LCOM4={score}) and contains complex logic. This "
                            "suggests mixed concerns. Consider refactoring."
                        ),
                        evidence={
                            "lcom4_score": score,
                            "complex_methods": complex_methods,
                            "package": pkg.name,
                            "file_path": s.file_path,
                        },
                        related_path=_struct_anchor(pkg, s),
                    )
                )
        return results

    def detect_method_islands(self, packages: list[PackageResult]) -> list[Finding]:
        """Structs whose private methods form two or more islands."""
        results = []
        for pkg in packages:
            for s in pkg.structs:
                mc = s.method_clusters
                if mc is None or not mc.has_multiple_islands:
                    continue

                summary = "; ".join(
                    f"Cluster {c.cluster_id} ({c.size} methods): {c.responsibility_hint}"
                    for c in mc.clusters
                )
                results.append(
                    Finding(
                        kind=FindingKind.METHOD_ISLANDS,
                        target_name=f"{pkg.name}.{s.struct_name}",
                        severity=Severity.WARNING,
                        message=(
                            f"Struct '{s.struct_name}' has {mc.cluster_count} isolated "
                            "groups of private methods, suggesting "
                            f"{mc.cluster_count} distinct responsibilities. Private "
                            "methods that don't call each other likely serve "
                            f"different purposes. Clusters: {summary}. Consider "
                            "splitting into separate structs."
                        ),
                        evidence={
                            "cluster_count": mc.cluster_count,
                            "total_private_methods": mc.total_private_methods,
                            "clusters": [c.to_dict() for c in mc.clusters],
                            "package": pkg.name,
                            "file_path": s.file_path,
                        },
                        related_path=_struct_anchor(pkg, s),
                    )
                )
        return results

    def detect_field_clusters(self, packages: list[PackageResult]) -> list[Finding]:
        """Structs whose field usage splits into two or more clusters."""
        t = self.thresholds
        results = []
        for pkg in packages:
            for s in pkg.structs:
                fm = s.field_clusters
                if fm is None or not fm.has_multiple_responsibilities:
                    continue

                severity = (
                    Severity.CRITICAL
                    if fm.estimated_clusters >= t.field_cluster_critical
                    else Severity.WARNING
                )
                results.append(
                    Finding(
                        kind=FindingKind.FIELD_CLUSTERS,
                        target_name=f"{pkg.name}.{s.struct_name}",
                        severity=severity,
                        message=(
                            f"Struct '{s.struct_name}' shows {fm.estimated_clusters} "
                            "distinct responsibility patterns in method-field usage "
                            f"(PCA analysis). {fm.recommendation_text}"
                        ),
                        evidence={
                            "estimated_clusters": fm.estimated_clusters,
                            "explained_variance": list(fm.explained_variance),
                            "method_count": len(fm.method_names),
                            "field_count": len(fm.field_names),
                            "package": pkg.name,
                            "file_path": s.file_path,
                            "recommendations": fm.recommendation_text,
                        },
                        related_path=_struct_anchor(pkg, s),
                    )
                )
        return results
