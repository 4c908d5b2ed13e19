"""Code health metrics and diagnostics for Go code bases."""

__version__ = "0.1.0"
__author__ = "Code Health Analyzer Team"

from .core.exceptions import CodeHealthError

__all__ = ["CodeHealthError", "__version__"]
