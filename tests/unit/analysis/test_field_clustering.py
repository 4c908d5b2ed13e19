"""Unit tests for field usage clustering (PCA over the usage matrix)."""

import numpy as np
import pytest
from conftest import make_method, make_struct

from code_health.analysis.collectors.field_clustering import (
    FieldClusterAnalyzer,
    covariance_matrix,
    estimate_cluster_count,
    explained_variance_ratios,
    generate_recommendation,
    power_iteration,
    top_eigenvalues,
)
from code_health.config.thresholds import FieldClusteringConfig


def _split_struct():
    """Three independent field groups plus one method touching everything."""
    methods = [
        make_method("Hub", "syncAll", {"a": 3, "b": 3, "c": 3}),
        make_method("Hub", "ingest", {"a": 3}),
        make_method("Hub", "render", {"b": 3}),
        make_method("Hub", "persist", {"c": 3}),
    ]
    return make_struct("Hub", ["a", "b", "c"], methods)


class TestLinearAlgebra:
    """Test covariance and eigenvalue extraction."""

    def test_covariance_uses_sample_denominator(self):
        matrix = np.array([[0, 1], [2, 1]])

        cov = covariance_matrix(matrix)

        assert cov[0, 0] == pytest.approx(2.0)
        assert cov[1, 1] == pytest.approx(0.0)
        assert cov[0, 1] == pytest.approx(0.0)

    def test_power_iteration_dominant_eigenvalue(self):
        matrix = np.diag([5.0, 2.0, 1.0])
        assert power_iteration(matrix, 100, 1e-10) == pytest.approx(5.0)

    def test_power_iteration_zero_matrix(self):
        assert power_iteration(np.zeros((3, 3)), 100, 1e-10) == 0.0

    def test_diagonal_deflation_sequence(self):
        eigenvalues = top_eigenvalues(np.diag([5.0, 2.0, 1.0]), FieldClusteringConfig())
        assert eigenvalues == pytest.approx([5.0, 2.5, 2.75], rel=1e-6)

    def test_extraction_stops_at_zero_eigenvalue(self):
        assert top_eigenvalues(np.zeros((4, 4)), FieldClusteringConfig()) == []

    def test_explained_variance_ratios(self):
        assert explained_variance_ratios([3.0, 1.0]) == pytest.approx([0.75, 0.25])
        assert explained_variance_ratios([]) == []


class TestClusterEstimate:
    """Test the Kaiser / elbow / cumulative-variance combination."""

    def test_no_eigenvalues(self):
        assert estimate_cluster_count([], [], FieldClusteringConfig()) == 1

    def test_two_clusters(self):
        explained = [4 / 7, 2 / 7, 1 / 7]
        assert (
            estimate_cluster_count([3.0, 1.5, 0.75], explained, FieldClusteringConfig())
            == 2
        )

    def test_cumulative_cap(self):
        # Elbow says 1, Kaiser says 0; a dominant component covers 90%
        assert (
            estimate_cluster_count([0.5, 0.05], [0.9, 0.1], FieldClusteringConfig())
            == 1
        )

    def test_flat_spectrum(self):
        eigenvalues = [10.0, 9.0, 8.0, 7.0, 6.0]
        explained = explained_variance_ratios(eigenvalues)
        assert estimate_cluster_count(eigenvalues, explained, FieldClusteringConfig()) == 4

    def test_clamped_to_max_clusters(self):
        eigenvalues = [10.0, 9.0, 8.0, 7.0, 6.0]
        explained = explained_variance_ratios(eigenvalues)
        config = FieldClusteringConfig(max_clusters=2)
        assert estimate_cluster_count(eigenvalues, explained, config) == 2


class TestRecommendation:
    """Test recommendation wording."""

    def test_single_cluster(self):
        text = generate_recommendation(1, 4, 3, [], FieldClusteringConfig())
        assert "single cohesive responsibility" in text
        assert "4 methods" in text

    def test_strong_separation(self):
        text = generate_recommendation(2, 4, 3, [4 / 7, 2 / 7, 1 / 7], FieldClusteringConfig())
        assert "2 distinct responsibility clusters" in text
        assert "variance explained: 57.1%, 28.6%" in text
        assert "strong separation" in text

    def test_weak_and_moderate_separation(self):
        config = FieldClusteringConfig()
        weak = generate_recommendation(3, 6, 4, [0.25, 0.25, 0.25, 0.25], config)
        moderate = generate_recommendation(2, 6, 4, [0.4, 0.35, 0.25], config)

        assert "weak separation" in weak
        assert "moderate separation" in moderate


class TestFieldClusterAnalyzer:
    """Test struct-level analysis."""

    def test_independent_field_groups(self):
        result = FieldClusterAnalyzer().analyze(_split_struct())

        assert result.method_names == ("syncAll", "ingest", "render", "persist")
        assert result.field_names == ("a", "b", "c")
        assert result.matrix[1] == (3, 0, 0)
        assert result.estimated_clusters == 2
        assert result.has_multiple_responsibilities is True
        assert result.explained_variance == pytest.approx([4 / 7, 2 / 7, 1 / 7])

    def test_identical_usage_is_single_cluster(self):
        methods = [
            make_method("Point", name, {"x": 1, "y": 1, "z": 1})
            for name in ("Norm", "Scale", "Move")
        ]

        result = FieldClusterAnalyzer().analyze(make_struct("Point", ["x", "y", "z"], methods))

        assert result.estimated_clusters == 1
        assert result.has_multiple_responsibilities is False
        assert result.explained_variance == ()
        assert "single cohesive responsibility" in result.recommendation_text

    def test_too_few_fields(self):
        methods = [make_method("P", "A", {"x": 1}), make_method("P", "B", {"y": 1})]
        assert FieldClusterAnalyzer().analyze(make_struct("P", ["x", "y"], methods)) is None

    def test_utility_methods_are_excluded(self):
        methods = [
            make_method("P", "Compute", {"x": 1}),
            make_method("P", "GetX", {"x": 1}),
            make_method("P", "testHook", {"y": 1}),
        ]
        struct = make_struct("P", ["x", "y", "z"], methods)

        assert FieldClusterAnalyzer().analyze(struct) is None
