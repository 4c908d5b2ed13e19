"""Field usage clustering via a lightweight principal-component analysis.

Rows of the usage matrix are a struct's non-utility methods, columns are
its fields, and each cell holds the usage weight (0 unused, 1 read,
2 write, 3 read+write). The eigenvalue spectrum of the field covariance
matrix estimates how many independent usage patterns, and therefore
responsibilities, the struct mixes.

Eigenvalues come from power iteration with a simplified diagonal
deflation (subtracting half of each found eigenvalue from the diagonal).
That is an approximation, not exact deflation: the cluster count is a
heuristic signal and the thresholds below are tuned against it.
"""

from __future__ import annotations

import numpy as np
from loguru import logger

from ...config.thresholds import FieldClusteringConfig
from ...core.facts import StructFacts
from ..metrics import FieldClusterResult


def covariance_matrix(matrix: np.ndarray) -> np.ndarray:
    """Sample covariance (divides by rows - 1) of the column-centered matrix."""
    data = matrix.astype(np.float64)
    centered = data - data.mean(axis=0)
    rows = data.shape[0]
    return (centered.T @ centered) / (rows - 1)


def power_iteration(matrix: np.ndarray, iterations: int, epsilon: float) -> float:
    """Estimate the dominant eigenvalue magnitude by power iteration.

    Starts from the uniform unit vector, normalizes every step and uses the
    Rayleigh quotient as the estimate.

    Args:
        matrix: Square symmetric matrix
        iterations: Number of iterations
        epsilon: Norm below which the iteration stops early

    Returns:
        Absolute value of the eigenvalue estimate
    """
    n = matrix.shape[0]
    if n == 0:
        return 0.0

    vector = np.full(n, 1.0 / np.sqrt(n))
    eigenvalue = 0.0

    for _ in range(iterations):
        product = matrix @ vector

        denominator = float(vector @ vector)
        if denominator > 0:
            eigenvalue = float(product @ vector) / denominator

        norm = float(np.sqrt(product @ product))
        if norm < epsilon:
            break
        vector = product / norm

    return abs(eigenvalue)


def top_eigenvalues(matrix: np.ndarray, config: FieldClusteringConfig) -> list[float]:
    """Extract up to ``max_components`` dominant eigenvalues.

    Extraction stops early once an eigenvalue falls to ``eigen_epsilon``
    or below.
    """
    n = matrix.shape[0]
    k = min(config.max_components, n)
    work = matrix.copy()
    eigenvalues: list[float] = []

    for _ in range(k):
        eigenvalue = power_iteration(work, config.power_iterations, config.eigen_epsilon)
        if eigenvalue <= config.eigen_epsilon:
            break
        eigenvalues.append(eigenvalue)

        # Simplified deflation: shift the diagonal, no eigenvector involved
        np.fill_diagonal(work, work.diagonal() - config.deflation_factor * eigenvalue)

    return eigenvalues


def explained_variance_ratios(eigenvalues: list[float]) -> list[float]:
    """Share of each eigenvalue in the sum of positive eigenvalues."""
    total = sum(ev for ev in eigenvalues if ev > 0)
    if total <= 0:
        return [0.0 for _ in eigenvalues]
    return [ev / total for ev in eigenvalues]


def estimate_cluster_count(
    eigenvalues: list[float],
    explained_variance: list[float],
    config: FieldClusteringConfig,
) -> int:
    """Combine Kaiser, elbow and cumulative-variance heuristics.

    - Kaiser: eigenvalues above ``kaiser_threshold``
    - Elbow: leading components each above ``elbow_threshold`` (the last
      component is never counted by this heuristic)
    - Cumulative: smallest prefix reaching ``cumulative_threshold``

    The estimate is max(Kaiser, elbow), capped by the cumulative count and
    clamped to [1, max_clusters].
    """
    if not eigenvalues:
        return 1

    kaiser_count = sum(1 for ev in eigenvalues if ev > config.kaiser_threshold)

    elbow_count = 1
    for i in range(len(explained_variance) - 1):
        if explained_variance[i] > config.elbow_threshold:
            elbow_count = i + 1
        else:
            break

    cumulative = 0.0
    variance_count = 0
    for i, ratio in enumerate(explained_variance):
        cumulative += ratio
        variance_count = i + 1
        if cumulative >= config.cumulative_threshold:
            break

    estimate = max(kaiser_count, elbow_count)
    estimate = min(estimate, variance_count)
    return max(1, min(config.max_clusters, estimate))


def generate_recommendation(
    clusters: int,
    method_count: int,
    field_count: int,
    explained_variance: list[float],
    config: FieldClusteringConfig,
) -> str:
    """Build the human-readable recommendation for a clustering estimate."""
    if clusters == 1:
        return (
            "Analysis suggests a single cohesive responsibility. "
            f"The {method_count} methods work together on {field_count} fields "
            "in a unified way. This is a good sign of high cohesion."
        )

    strength = "moderate"
    if explained_variance and explained_variance[0] > config.strong_separation:
        strength = "strong"
    elif explained_variance and explained_variance[0] < config.weak_separation:
        strength = "weak"

    top = sorted(explained_variance[:clusters], reverse=True)
    variance_text = ", ".join(f"{share * 100:.1f}%" for share in top)

    return (
        f"Analysis detects {clusters} distinct responsibility clusters "
        f"(variance explained: {variance_text}). "
        f"The primary cluster shows {strength} separation. "
        f"Consider splitting this struct into {clusters} smaller, focused structs, "
        "each handling one specific responsibility. "
        "Group methods and fields based on which cluster they belong to."
    )


class FieldClusterAnalyzer:
    """Estimate responsibility clusters from method×field usage."""

    def __init__(self, config: FieldClusteringConfig | None = None) -> None:
        self.config = config or FieldClusteringConfig()

    def analyze(self, struct: StructFacts) -> FieldClusterResult | None:
        """Analyze one struct.

        Args:
            struct: Struct facts with weighted field usage

        Returns:
            FieldClusterResult, or None when there is too little data
            (fewer than ``min_fields`` fields or ``min_methods`` non-utility
            methods)
        """
        fields = list(struct.fields)
        if len(fields) < self.config.min_fields:
            return None

        methods = [m for m in struct.methods if not m.is_utility]
        if len(methods) < self.config.min_methods:
            return None

        rows = [[int(m.field_usage.get(f, 0)) for f in fields] for m in methods]
        matrix = np.array(rows, dtype=np.int64)

        covariance = covariance_matrix(matrix)
        eigenvalues = top_eigenvalues(covariance, self.config)
        explained = explained_variance_ratios(eigenvalues)
        estimate = estimate_cluster_count(eigenvalues, explained, self.config)

        logger.debug(
            f"Field clustering {struct.name}: eigenvalues={eigenvalues}, "
            f"estimate={estimate}"
        )

        return FieldClusterResult(
            matrix=tuple(tuple(row) for row in rows),
            method_names=tuple(m.name for m in methods),
            field_names=tuple(fields),
            estimated_clusters=estimate,
            explained_variance=tuple(explained),
            recommendation_text=generate_recommendation(
                estimate, len(methods), len(fields), explained, self.config
            ),
        )
