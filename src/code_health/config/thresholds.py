"""Threshold configuration for code health metrics and diagnostics."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from ..core.exceptions import ConfigError


@dataclass
class DiagnosticThresholds:
    """Trigger levels for the diagnostics rule set."""

    # God Object: LCOM4 >= god_object_lcom4 AND package Ca >= god_object_afferent
    god_object_lcom4: int = 5
    god_object_afferent: int = 10

    # Unstable Foundation: Ca >= unstable_afferent AND I >= unstable_instability
    unstable_afferent: int = 10
    unstable_instability: float = 0.7

    # Overly Complex Function
    complex_function: int = 15

    # Ambiguous Struct: LCOM4 >= ambiguous_lcom4 AND some method >= ambiguous_method_complexity
    ambiguous_lcom4: int = 3
    ambiguous_method_complexity: int = 10

    # Field clusters at or above this estimate are Critical, below are Warning
    field_cluster_critical: int = 3


@dataclass
class MethodClusteringConfig:
    """Settings for private-method island detection."""

    weight_threshold: int = 1  # Minimum call frequency to count an edge
    min_cluster_size: int = 2
    min_cluster_ratio: float = 0.2  # Of total private non-utility methods

    # Method names containing any of these (case-insensitive) are utilities
    utility_patterns: list[str] = field(
        default_factory=lambda: ["test", "util", "helper", "mock", "stub"]
    )
    # Accessor shapes: Get*/Set*/Is*/Has* followed by an uppercase letter
    accessor_prefixes: list[str] = field(
        default_factory=lambda: ["Get", "Set", "Is", "Has"]
    )
    # Words ignored when naming a cluster's responsibility
    label_stop_words: list[str] = field(
        default_factory=lambda: ["get", "set", "is", "has", "do"]
    )


@dataclass
class FieldClusteringConfig:
    """Settings for the method×field usage PCA."""

    min_fields: int = 3
    min_methods: int = 2
    max_components: int = 5
    power_iterations: int = 100
    eigen_epsilon: float = 1e-10
    deflation_factor: float = 0.5

    kaiser_threshold: float = 1.0
    elbow_threshold: float = 0.1
    cumulative_threshold: float = 0.8
    max_clusters: int = 5

    # Leading component variance share bands for the recommendation text
    strong_separation: float = 0.5
    weak_separation: float = 0.3


@dataclass
class ThresholdConfig:
    """Complete threshold configuration."""

    diagnostics: DiagnosticThresholds = field(default_factory=DiagnosticThresholds)
    method_clustering: MethodClusteringConfig = field(
        default_factory=MethodClusteringConfig
    )
    field_clustering: FieldClusteringConfig = field(
        default_factory=FieldClusteringConfig
    )

    # Engine settings
    max_workers: int = 4
    exclude_dirs: list[str] = field(default_factory=list)

    # Quality gate settings
    fail_on_critical: bool = False

    @classmethod
    def load(cls, path: Path) -> ThresholdConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            ThresholdConfig instance (defaults if the file does not exist)

        Raises:
            ConfigError: If the file is not valid YAML or has unknown keys
        """
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML in {path}: {e}", context={"path": str(path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration root must be a mapping: {path}",
                context={"path": str(path)},
            )

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ThresholdConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            ThresholdConfig instance

        Raises:
            ConfigError: If a section or key is unknown
        """
        _reject_unknown(cls, data, "config")

        diagnostics_data = data.get("diagnostics") or {}
        method_data = data.get("method_clustering") or {}
        field_data = data.get("field_clustering") or {}

        _reject_unknown(DiagnosticThresholds, diagnostics_data, "diagnostics")
        _reject_unknown(MethodClusteringConfig, method_data, "method_clustering")
        _reject_unknown(FieldClusteringConfig, field_data, "field_clustering")

        config = cls(
            diagnostics=DiagnosticThresholds(**diagnostics_data),
            method_clustering=MethodClusteringConfig(**method_data),
            field_clustering=FieldClusteringConfig(**field_data),
            max_workers=data.get("max_workers", 4),
            exclude_dirs=list(data.get("exclude_dirs", [])),
            fail_on_critical=data.get("fail_on_critical", False),
        )

        if config.max_workers < 1:
            raise ConfigError(
                "max_workers must be at least 1",
                context={"max_workers": config.max_workers},
            )

        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary representation
        """
        return {
            "diagnostics": asdict(self.diagnostics),
            "method_clustering": asdict(self.method_clustering),
            "field_clustering": asdict(self.field_clustering),
            "max_workers": self.max_workers,
            "exclude_dirs": list(self.exclude_dirs),
            "fail_on_critical": self.fail_on_critical,
        }

    def save(self, path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path to save configuration
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def _reject_unknown(section_cls: type, data: dict[str, Any], section: str) -> None:
    """Raise ConfigError when data carries keys the dataclass does not define."""
    if not isinstance(data, dict):
        raise ConfigError(
            f"Section '{section}' must be a mapping", context={"section": section}
        )
    known = {f.name for f in fields(section_cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(
            f"Unknown key(s) in '{section}': {', '.join(unknown)}",
            context={"section": section, "unknown": unknown},
        )
