"""Typed exception hierarchy for code-health-analyzer.

Hierarchy
---------
CodeHealthError (base)
├── InputError               – the analysis target cannot be used (fatal)
│   ├── TargetNotFoundError
│   └── TargetNotReadableError
├── ParsingError             – one directory failed to parse (recoverable)
├── FactModelError           – malformed facts handed to the engine
├── AnalysisError            – failures while computing metrics
│   ├── InvariantViolationError
│   └── AnalysisTimeoutError
├── ConfigError              – threshold / configuration errors
└── ReportError              – report rendering or writing failed

Analyzer inapplicability (a struct without methods, too little data for
field clustering) is not an error and never raises.
"""

from typing import Any


class CodeHealthError(Exception):
    """Base exception for code-health-analyzer."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


# ── Input layer ─────────────────────────────────────────────────────────


class InputError(CodeHealthError):
    """The analysis target is unusable. Always fatal."""

    pass


class TargetNotFoundError(InputError):
    """Target path does not exist."""

    pass


class TargetNotReadableError(InputError):
    """Target path exists but is not a readable directory."""

    pass


# ── Parsing layer ───────────────────────────────────────────────────────


class ParsingError(CodeHealthError):
    """Source files in a directory could not be parsed.

    The project loader catches this, skips the directory and records it in
    the run metadata.
    """

    pass


class FactModelError(CodeHealthError):
    """Facts violate the fact model contract (bad weights, duplicate fields)."""

    pass


# ── Analysis layer ──────────────────────────────────────────────────────


class AnalysisError(CodeHealthError):
    """Metric computation failed."""

    pass


class InvariantViolationError(AnalysisError):
    """Internal invariant broken while analyzing a package.

    Signals a programming defect. The whole run is aborted rather than
    reporting misleading metrics.
    """

    pass


class AnalysisTimeoutError(AnalysisError):
    """The run deadline expired before all packages were analyzed."""

    pass


# ── Configuration layer ─────────────────────────────────────────────────


class ConfigError(CodeHealthError):
    """Configuration / validation errors."""

    pass


# ── Reporting layer ─────────────────────────────────────────────────────


class ReportError(CodeHealthError):
    """Report rendering or writing failed."""

    pass
