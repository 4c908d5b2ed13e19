"""Analysis reporters for outputting results in various formats."""

from .console import ConsoleReporter
from .json import JsonReporter

__all__ = ["ConsoleReporter", "JsonReporter"]
