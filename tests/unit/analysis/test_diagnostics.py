"""Unit tests for the diagnostics rule engine."""

from conftest import (
    make_complexity,
    make_package_result,
    make_struct_result,
)

from code_health.analysis.diagnostics import (
    DiagnosticsEngine,
    FindingKind,
    Severity,
)
from code_health.analysis.metrics import (
    FieldClusterResult,
    MethodCluster,
    MethodClusterResult,
)
from code_health.config.thresholds import DiagnosticThresholds


def _islands(count: int) -> MethodClusterResult:
    clusters = tuple(
        MethodCluster(
            cluster_id=i,
            methods=(f"Cart.load{i}", f"Cart.read{i}"),
            responsibility_hint="Load-related operations",
        )
        for i in range(1, count + 1)
    )
    return MethodClusterResult(clusters=clusters, total_private_methods=2 * count)


def _field_clusters(estimate: int) -> FieldClusterResult:
    return FieldClusterResult(
        matrix=((1, 0, 0), (0, 1, 0)),
        method_names=("A", "B"),
        field_names=("x", "y", "z"),
        estimated_clusters=estimate,
        explained_variance=(0.6, 0.4),
        recommendation_text="Split it.",
    )


class TestGodObject:
    """Test the God Object rule."""

    def test_single_god_object_finding(self):
        package = make_package_result(
            afferent=12, structs=[make_struct_result("Cart", lcom4=6)]
        )

        findings = DiagnosticsEngine().run([package])

        assert len(findings) == 1
        finding = findings[0]
        assert finding.kind is FindingKind.GOD_OBJECT
        assert finding.severity is Severity.CRITICAL
        assert finding.target_name == "store.Cart"
        assert finding.evidence["lcom4_score"] == 6
        assert finding.evidence["afferent"] == 12
        assert finding.evidence["package"] == "store"
        assert finding.evidence["file_path"] == "cart.go"
        assert finding.related_path == "#struct-store-Cart"

    def test_below_afferent_threshold(self):
        package = make_package_result(
            afferent=9, structs=[make_struct_result("Cart", lcom4=6)]
        )
        assert DiagnosticsEngine().detect_god_objects([package]) == []

    def test_not_applicable_cohesion_never_fires(self):
        package = make_package_result(
            afferent=50, structs=[make_struct_result("Empty", lcom4=0)]
        )
        assert DiagnosticsEngine().run([package]) == []


class TestUnstableFoundation:
    """Test the Unstable Foundation rule."""

    def test_heavily_used_unstable_package(self):
        package = make_package_result(afferent=10, efferent=30)

        findings = DiagnosticsEngine().detect_unstable_foundations([package])

        assert len(findings) == 1
        assert findings[0].severity is Severity.CRITICAL
        assert findings[0].target_name == "store"
        assert findings[0].evidence["instability"] == 0.75
        assert findings[0].evidence["efferent"] == 30
        assert findings[0].related_path == "#package-store"
        assert "I=0.75" in findings[0].message

    def test_stable_package(self):
        package = make_package_result(afferent=10, efferent=2)
        assert DiagnosticsEngine().detect_unstable_foundations([package]) == []


class TestComplexFunction:
    """Test the Overly Complex Function rule."""

    def test_threshold_is_inclusive(self):
        package = make_package_result(
            functions=[make_complexity("Parse", 15), make_complexity("Scan", 14)]
        )

        findings = DiagnosticsEngine().detect_complex_functions([package])

        assert [f.target_name for f in findings] == ["store.Parse"]
        assert findings[0].severity is Severity.WARNING
        assert findings[0].evidence["complexity"] == 15
        assert findings[0].related_path == "#function-store-Parse"

    def test_thresholds_can_be_overridden(self):
        package = make_package_result(functions=[make_complexity("Scan", 6)])
        engine = DiagnosticsEngine(DiagnosticThresholds(complex_function=5))

        assert len(engine.detect_complex_functions([package])) == 1


class TestAmbiguousStruct:
    """Test the Ambiguous Struct rule."""

    def test_complex_method_of_low_cohesion_struct(self):
        package = make_package_result(
            structs=[make_struct_result("Cart", lcom4=3)],
            functions=[
                make_complexity("Cart.Checkout", 12),
                make_complexity("Cart.Apply", 10),
                make_complexity("Cart.Add", 3),
                make_complexity("Cartography.Map", 20),
            ],
        )

        findings = DiagnosticsEngine().detect_ambiguous_structs([package])

        assert len(findings) == 1
        assert findings[0].target_name == "store.Cart"
        assert findings[0].evidence["complex_methods"] == [
            "Cart.Apply",
            "Cart.Checkout",
        ]

    def test_cohesive_struct_is_not_ambiguous(self):
        package = make_package_result(
            structs=[make_struct_result("Cart", lcom4=2)],
            functions=[make_complexity("Cart.Checkout", 30)],
        )
        assert DiagnosticsEngine().detect_ambiguous_structs([package]) == []


class TestSplitResponsibility:
    """Test the method island and field cluster rules."""

    def test_method_islands(self):
        package = make_package_result(
            structs=[make_struct_result("Cart", lcom4=1, method_clusters=_islands(2))]
        )

        findings = DiagnosticsEngine().run([package])

        assert len(findings) == 1
        finding = findings[0]
        assert finding.kind is FindingKind.METHOD_ISLANDS
        assert finding.severity is Severity.WARNING
        assert finding.evidence["cluster_count"] == 2
        assert finding.evidence["total_private_methods"] == 4
        assert finding.evidence["clusters"][0]["methods"] == ["Cart.load1", "Cart.read1"]

    def test_single_island_is_fine(self):
        package = make_package_result(
            structs=[make_struct_result("Cart", lcom4=1, method_clusters=_islands(1))]
        )
        assert DiagnosticsEngine().run([package]) == []

    def test_field_cluster_severity(self):
        package = make_package_result(
            structs=[
                make_struct_result("Two", lcom4=1, field_clusters=_field_clusters(2)),
                make_struct_result("Three", lcom4=1, field_clusters=_field_clusters(3)),
                make_struct_result("One", lcom4=1, field_clusters=_field_clusters(1)),
            ]
        )

        findings = DiagnosticsEngine().detect_field_clusters([package])

        assert [(f.target_name, f.severity) for f in findings] == [
            ("store.Two", Severity.WARNING),
            ("store.Three", Severity.CRITICAL),
        ]
        assert findings[0].evidence["method_count"] == 2
        assert findings[0].evidence["field_count"] == 3
        assert findings[0].evidence["recommendations"] == "Split it."


class TestRuleOrder:
    """Test that findings follow the fixed rule order."""

    def test_findings_in_rule_order(self):
        package = make_package_result(
            afferent=12,
            efferent=40,
            structs=[
                make_struct_result(
                    "Cart",
                    lcom4=6,
                    method_clusters=_islands(2),
                    field_clusters=_field_clusters(3),
                )
            ],
            functions=[make_complexity("Cart.Checkout", 16)],
        )

        findings = DiagnosticsEngine().run([package])

        assert [f.kind for f in findings] == [
            FindingKind.GOD_OBJECT,
            FindingKind.UNSTABLE_FOUNDATION,
            FindingKind.COMPLEX_FUNCTION,
            FindingKind.AMBIGUOUS_STRUCT,
            FindingKind.METHOD_ISLANDS,
            FindingKind.FIELD_CLUSTERS,
        ]

    def test_to_dict(self):
        package = make_package_result(functions=[make_complexity("Parse", 20)])

        data = DiagnosticsEngine().run([package])[0].to_dict()

        assert data["type"] == "Overly Complex Function"
        assert data["severity"] == "Warning"
        assert data["target_name"] == "store.Parse"
