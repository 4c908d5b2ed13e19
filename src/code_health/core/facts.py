"""Structural facts extracted from source code.

The fact model is the only input of the metrics engine. It is produced
once per run by a parser front end (see ``code_health.parsers``) and is
never mutated by the analyzers that read it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

from .exceptions import FactModelError

if TYPE_CHECKING:
    from ..config.thresholds import MethodClusteringConfig


class FieldUsage(IntEnum):
    """How a method touches a field. Values combine with bitwise OR."""

    UNUSED = 0
    READ = 1
    WRITE = 2
    READ_WRITE = 3

    def combine(self, other: int) -> FieldUsage:
        """Merge another observed access into this one."""
        return FieldUsage(int(self) | int(other))


def is_private_name(name: str) -> bool:
    """Check if a method name is private (first letter lowercase).

    Accepts bare or ``Struct.Method`` qualified names.

    Examples:
        >>> is_private_name("loadUser")
        True
        >>> is_private_name("Store.Save")
        False
    """
    bare = name.rsplit(".", 1)[-1]
    if not bare:
        return False
    return bare[0].islower()


def is_utility_method(name: str, config: MethodClusteringConfig | None = None) -> bool:
    """Check if a method is a utility/helper/test/accessor method.

    Utility methods are called from everywhere and would merge otherwise
    unrelated responsibility clusters, so clustering ignores them.

    Args:
        name: Bare or qualified method name
        config: Clustering settings holding the name patterns (defaults if None)

    Returns:
        True if the name contains a utility pattern or has accessor shape
    """
    if config is None:
        from ..config.thresholds import MethodClusteringConfig

        config = MethodClusteringConfig()

    bare = name.rsplit(".", 1)[-1]
    lower = bare.lower()

    if any(pattern in lower for pattern in config.utility_patterns):
        return True

    for prefix in config.accessor_prefixes:
        if (
            bare.startswith(prefix)
            and len(bare) > len(prefix)
            and bare[len(prefix)].isupper()
        ):
            return True

    return False


@dataclass(frozen=True)
class MethodFacts:
    """A method declared on a struct.

    Attributes:
        qualified_name: ``Struct.Method``
        receiver_name: Local name bound to the receiver ("" when unnamed)
        is_private: First letter of the bare name is lowercase
        is_utility: Matches the utility/accessor heuristic
        field_usage: Field name -> FieldUsage weight (0..3)
        calls: Callee qualified name -> call-site frequency (>= 1)
    """

    qualified_name: str
    receiver_name: str = ""
    is_private: bool = False
    is_utility: bool = False
    field_usage: Mapping[str, int] = field(default_factory=dict)
    calls: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for field_name, weight in self.field_usage.items():
            if weight not in (0, 1, 2, 3):
                raise FactModelError(
                    f"Invalid usage weight {weight} for field '{field_name}' "
                    f"in {self.qualified_name}",
                    context={"method": self.qualified_name, "field": field_name},
                )
        for callee, frequency in self.calls.items():
            if frequency < 1:
                raise FactModelError(
                    f"Call frequency must be >= 1 ({self.qualified_name} -> {callee})",
                    context={"method": self.qualified_name, "callee": callee},
                )

    @property
    def name(self) -> str:
        """Bare method name without the struct prefix."""
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def struct_name(self) -> str:
        """Receiver type name ("" if the name is not qualified)."""
        head, _, _ = self.qualified_name.rpartition(".")
        return head

    def used_fields(self) -> list[str]:
        """Fields read or written by this method, sorted."""
        return sorted(name for name, weight in self.field_usage.items() if weight)


@dataclass(frozen=True)
class StructFacts:
    """A struct type and the methods whose receiver resolves to it."""

    name: str
    file_path: str
    fields: tuple[str, ...] = ()
    methods: tuple[MethodFacts, ...] = ()

    def __post_init__(self) -> None:
        if len(set(self.fields)) != len(self.fields):
            raise FactModelError(
                f"Duplicate field names in struct '{self.name}'",
                context={"struct": self.name, "fields": list(self.fields)},
            )


@dataclass(frozen=True)
class DecisionPoints:
    """Decision points found in a function body.

    Cyclomatic complexity is ``1 + total``.
    """

    if_statements: int = 0
    loops: int = 0
    switches: int = 0
    case_clauses: int = 0  # Cases with at least one match value
    select_cases: int = 0  # Non-default select cases
    logical_operators: int = 0  # && and || occurrences

    @property
    def total(self) -> int:
        return (
            self.if_statements
            + self.loops
            + self.switches
            + self.case_clauses
            + self.select_cases
            + self.logical_operators
        )


@dataclass(frozen=True)
class FunctionFacts:
    """A function or method declaration.

    Attributes:
        qualified_name: Function name, receiver-prefixed for methods
        file_path: Source file path
        body_line_count: Lines spanned by the body (end - start, >= 0)
        decision_points: Decision point counts of the body
        imported_packages_used: Import paths referenced via ``alias.Member``
        calls: Syntactic call targets found in the body
        has_body: False for declarations without a body
    """

    qualified_name: str
    file_path: str
    body_line_count: int = 0
    decision_points: DecisionPoints = field(default_factory=DecisionPoints)
    imported_packages_used: frozenset[str] = frozenset()
    calls: frozenset[str] = frozenset()
    has_body: bool = True


@dataclass(frozen=True)
class PackageFacts:
    """All facts of one analyzed package."""

    name: str
    path: str  # Project-relative, slash-normalized, "" for the root package
    structs: tuple[StructFacts, ...] = ()
    functions: tuple[FunctionFacts, ...] = ()
    imports: frozenset[str] = frozenset()
    file_line_counts: Mapping[str, int] = field(default_factory=dict)

    def import_path(self, module_path: str) -> str:
        """Fully qualified import path of this package."""
        if not self.path:
            return module_path
        return f"{module_path}/{self.path}"


@dataclass(frozen=True)
class ProjectFacts:
    """Fact model of a whole project, as produced by the project loader."""

    module_path: str
    packages: tuple[PackageFacts, ...] = ()
    skipped_directories: tuple[str, ...] = ()
