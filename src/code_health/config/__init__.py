"""Configuration for code-health-analyzer."""

from .thresholds import (
    DiagnosticThresholds,
    FieldClusteringConfig,
    MethodClusteringConfig,
    ThresholdConfig,
)

__all__ = [
    "DiagnosticThresholds",
    "FieldClusteringConfig",
    "MethodClusteringConfig",
    "ThresholdConfig",
]
