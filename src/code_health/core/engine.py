"""Analysis engine orchestrating metrics and diagnostics."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loguru import logger

from ..analysis.collectors import (
    ComplexityCalculator,
    CouplingAnalyzer,
    FieldClusterAnalyzer,
    LCOM4Calculator,
    MethodClusterAnalyzer,
)
from ..analysis.diagnostics import DiagnosticsEngine
from ..analysis.metrics import CouplingResult, PackageResult, Report, StructResult
from ..config.thresholds import ThresholdConfig
from ..parsers.go import GoFactExtractor
from .exceptions import AnalysisTimeoutError, CodeHealthError
from .facts import PackageFacts, ProjectFacts
from .project import ProjectLoader


class AnalysisEngine:
    """Run every analyzer over a project's fact model.

    Coupling needs the complete import graph, so it is computed first in a
    single pass. Per-package analyzers then run in parallel and only read
    the facts and the finished coupling results. Diagnostics run last over
    the complete set of package results.
    """

    def __init__(self, config: ThresholdConfig | None = None) -> None:
        """Initialize engine.

        Args:
            config: Threshold configuration (defaults if None)
        """
        self.config = config or ThresholdConfig()
        self.cohesion = LCOM4Calculator()
        self.method_clustering = MethodClusterAnalyzer(self.config.method_clustering)
        self.field_clustering = FieldClusterAnalyzer(self.config.field_clustering)
        self.diagnostics = DiagnosticsEngine(self.config.diagnostics)

    def run(self, project: ProjectFacts, deadline: float | None = None) -> Report:
        """Analyze a project.

        Args:
            project: Fact model of the project
            deadline: ``time.monotonic()`` value after which the run is aborted

        Returns:
            Complete report

        Raises:
            AnalysisTimeoutError: If the deadline passes before all packages
                are analyzed (no partial report is produced)
            InvariantViolationError: If an analyzer detects a broken invariant
        """
        start = time.perf_counter()
        packages = list(project.packages)

        coupling = CouplingAnalyzer(project.module_path)
        coupling_results = coupling.analyze(packages)
        complexity = ComplexityCalculator(project.module_path)

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [
                executor.submit(
                    self._analyze_package,
                    package,
                    coupling_results[package.path],
                    complexity,
                    deadline,
                )
                for package in packages
            ]
            try:
                results = [future.result() for future in futures]
            except CodeHealthError:
                for future in futures:
                    future.cancel()
                raise

        findings = self.diagnostics.run(results)
        report = Report(
            findings=tuple(findings),
            packages=tuple(results),
            total_loc=sum(r.total_loc for r in results),
            skipped_directories=tuple(project.skipped_directories),
            dependency_cycles=tuple(coupling.cycles),
        )

        elapsed = time.perf_counter() - start
        logger.info(
            f"Analyzed {len(results)} package(s), {report.total_loc} LoC: "
            f"{len(findings)} finding(s) in {elapsed:.2f}s"
        )
        return report

    def _analyze_package(
        self,
        package: PackageFacts,
        coupling: CouplingResult,
        complexity: ComplexityCalculator,
        deadline: float | None,
    ) -> PackageResult:
        if deadline is not None and time.monotonic() >= deadline:
            raise AnalysisTimeoutError(
                f"Analysis timed out before package '{package.name}'",
                context={"package": package.path},
            )

        logger.debug(f"Analyzing package {package.name} ({package.path or '.'})")

        structs = tuple(
            StructResult(
                cohesion=self.cohesion.calculate(struct),
                method_clusters=self.method_clustering.analyze(struct),
                field_clusters=self.field_clustering.analyze(struct),
            )
            for struct in package.structs
        )

        return PackageResult(
            name=package.name,
            path=package.path,
            coupling=coupling,
            structs=structs,
            functions=tuple(complexity.calculate_package(package)),
            total_loc=sum(package.file_line_counts.values()),
            file_count=len(package.file_line_counts),
        )


def analyze_project(
    root: Path,
    exclude_dirs: list[str] | None = None,
    config: ThresholdConfig | None = None,
    timeout: float | None = None,
) -> Report:
    """Load and analyze a Go project in one call.

    Args:
        root: Project root directory
        exclude_dirs: Extra directories to skip (added to the configured ones)
        config: Threshold configuration (defaults if None)
        timeout: Seconds allowed for the whole run (None for no limit)

    Returns:
        Complete report

    Raises:
        InputError: If the root is missing or unreadable
        AnalysisTimeoutError: If the timeout expires
    """
    config = config or ThresholdConfig()
    deadline = time.monotonic() + timeout if timeout is not None else None

    loader = ProjectLoader(
        root,
        exclude_dirs=list(config.exclude_dirs) + list(exclude_dirs or []),
        extractor=GoFactExtractor(config.method_clustering),
    )
    project = loader.load()

    if deadline is not None and time.monotonic() >= deadline:
        raise AnalysisTimeoutError(
            "Analysis timed out while loading the project",
            context={"root": str(root)},
        )

    return AnalysisEngine(config).run(project, deadline=deadline)
