"""Console reporter for code health results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from ..metrics import Report

console = Console()

_SEVERITY_COLORS = {"Critical": "red", "Warning": "yellow"}


class ConsoleReporter:
    """Console reporter for displaying analysis results in terminal."""

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def render(self, report: Report, top: int = 10) -> None:
        """Print the complete report.

        Args:
            report: Analysis report
            top: Rows shown in each "worst offenders" table
        """
        self.print_summary(report)
        self.print_findings(report)
        self.print_packages(report, top)
        self.print_structs(report, top)
        self.print_functions(report, top)
        self.print_run_notes(report)

    def print_summary(self, report: Report) -> None:
        """Print high-level project summary."""
        summary = report.to_summary()
        severities = summary["findings_by_severity"]

        self.console.print("\n[bold blue]🩺 Code Health Report[/bold blue]")
        self.console.print("━" * 60)
        self.console.print()

        self.console.print("[bold]Project Summary[/bold]")
        self.console.print(f"  Packages: {summary['package_count']}")
        self.console.print(f"  Structs: {summary['struct_count']}")
        self.console.print(f"  Functions: {summary['function_count']}")
        self.console.print(f"  Total Lines: {summary['total_loc']:,}")
        self.console.print(
            f"  Findings: {summary['finding_count']} "
            f"([red]{severities.get('Critical', 0)} critical[/red], "
            f"[yellow]{severities.get('Warning', 0)} warning[/yellow])"
        )
        self.console.print()

    def print_findings(self, report: Report) -> None:
        """Print diagnostics, Critical first, otherwise in rule order."""
        if not report.findings:
            self.console.print("[bold]🔍 Diagnostics[/bold]")
            self.console.print("  [green]No issues detected![/green]")
            self.console.print()
            return

        self.console.print(
            f"[bold]🔍 Diagnostics[/bold] - Found {len(report.findings)} issues"
        )

        ordered = sorted(
            report.findings, key=lambda f: 0 if f.severity.value == "Critical" else 1
        )

        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Severity", width=10)
        table.add_column("Type", width=24)
        table.add_column("Target", style="cyan", width=32)
        table.add_column("Message")

        for finding in ordered:
            color = _SEVERITY_COLORS.get(finding.severity.value, "white")
            table.add_row(
                f"[{color}]{finding.severity.value}[/{color}]",
                finding.kind.value,
                finding.target_name,
                finding.message,
            )

        self.console.print(table)
        self.console.print()

    def print_packages(self, report: Report, top: int = 10) -> None:
        """Print packages with the highest afferent coupling."""
        if not report.packages:
            return

        packages = sorted(
            report.packages, key=lambda p: (-p.afferent, -p.instability, p.path)
        )[:top]

        self.console.print("[bold]📦 Package Coupling[/bold]")
        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Package", style="cyan", width=32)
        table.add_column("Ca", justify="right", width=6)
        table.add_column("Ce", justify="right", width=6)
        table.add_column("Instability", justify="right", width=12)
        table.add_column("Depth", justify="right", width=7)
        table.add_column("LoC", justify="right", width=8)

        for pkg in packages:
            table.add_row(
                pkg.path or pkg.name,
                str(pkg.afferent),
                str(pkg.efferent),
                f"{pkg.instability:.2f}",
                str(pkg.dependency_depth),
                f"{pkg.total_loc:,}",
            )

        self.console.print(table)
        self.console.print()

    def print_structs(self, report: Report, top: int = 10) -> None:
        """Print the least cohesive structs."""
        rows = [
            (pkg, s)
            for pkg in report.packages
            for s in pkg.structs
            if s.cohesion.applicable
        ]
        if not rows:
            return

        rows.sort(key=lambda row: (-row[1].cohesion.lcom4_score, row[1].struct_name))

        self.console.print("[bold]🧩 Struct Cohesion[/bold]")
        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Struct", style="cyan", width=32)
        table.add_column("LCOM4", justify="right", width=7)
        table.add_column("Method Islands", justify="right", width=15)
        table.add_column("Field Clusters", justify="right", width=15)

        for pkg, s in rows[:top]:
            islands = str(s.method_clusters.cluster_count) if s.method_clusters else "-"
            clusters = (
                str(s.field_clusters.estimated_clusters) if s.field_clusters else "-"
            )
            score = s.cohesion.lcom4_score
            color = "green" if score <= 1 else "yellow" if score < 5 else "red"
            table.add_row(
                f"{pkg.name}.{s.struct_name}",
                f"[{color}]{score}[/{color}]",
                islands,
                clusters,
            )

        self.console.print(table)
        self.console.print()

    def print_functions(self, report: Report, top: int = 10) -> None:
        """Print the most complex functions."""
        rows = [(pkg, f) for pkg in report.packages for f in pkg.functions]
        if not rows:
            return

        rows.sort(key=lambda row: (-row[1].complexity, row[1].func_name))

        self.console.print(f"[bold]🔥 Top {min(top, len(rows))} Complex Functions[/bold]")
        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Function", style="cyan", width=40)
        table.add_column("Complexity", justify="right", width=11)
        table.add_column("LoC", justify="right", width=6)
        table.add_column("Ca", justify="right", width=5)
        table.add_column("Ce", justify="right", width=5)

        for pkg, f in rows[:top]:
            table.add_row(
                f"{pkg.name}.{f.func_name}",
                str(f.complexity),
                str(f.loc),
                str(f.afferent),
                str(f.efferent),
            )

        self.console.print(table)
        self.console.print()

    def print_run_notes(self, report: Report) -> None:
        """Print skipped directories and import cycles, if any."""
        if report.skipped_directories:
            self.console.print(
                f"[yellow]⚠ Skipped {len(report.skipped_directories)} "
                "directory(ies) with parse errors:[/yellow] "
                + ", ".join(report.skipped_directories)
            )
        for cycle in report.dependency_cycles:
            self.console.print(
                "[yellow]⚠ Import cycle (dependency depth approximate):[/yellow] "
                + " → ".join(cycle)
            )
