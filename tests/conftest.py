"""Shared fact and result builders for the test suite."""

from __future__ import annotations

import pytest

from code_health.analysis.metrics import (
    CohesionResult,
    ComplexityResult,
    CouplingResult,
    PackageResult,
    StructResult,
)
from code_health.core.facts import (
    DecisionPoints,
    FunctionFacts,
    MethodFacts,
    PackageFacts,
    StructFacts,
    is_private_name,
    is_utility_method,
)


def make_method(
    struct: str,
    name: str,
    uses: dict[str, int] | None = None,
    calls: dict[str, int] | None = None,
) -> MethodFacts:
    """Build a method; ``calls`` takes bare callee names of the same struct."""
    return MethodFacts(
        qualified_name=f"{struct}.{name}",
        receiver_name="s",
        is_private=is_private_name(name),
        is_utility=is_utility_method(name),
        field_usage=dict(uses or {}),
        calls={f"{struct}.{callee}": n for callee, n in (calls or {}).items()},
    )


def make_struct(name: str, fields: list[str], methods: list[MethodFacts]) -> StructFacts:
    return StructFacts(
        name=name,
        file_path=f"{name.lower()}.go",
        fields=tuple(fields),
        methods=tuple(methods),
    )


def make_function(
    name: str,
    ifs: int = 0,
    loops: int = 0,
    logical: int = 0,
    body_lines: int = 5,
    imports: set[str] | None = None,
    calls: set[str] | None = None,
    has_body: bool = True,
) -> FunctionFacts:
    return FunctionFacts(
        qualified_name=name,
        file_path="main.go",
        body_line_count=body_lines,
        decision_points=DecisionPoints(
            if_statements=ifs, loops=loops, logical_operators=logical
        ),
        imported_packages_used=frozenset(imports or ()),
        calls=frozenset(calls or ()),
        has_body=has_body,
    )


def make_package(
    path: str,
    imports: set[str] | None = None,
    structs: list[StructFacts] | None = None,
    functions: list[FunctionFacts] | None = None,
    name: str | None = None,
) -> PackageFacts:
    return PackageFacts(
        name=name or (path.rsplit("/", 1)[-1] if path else "main"),
        path=path,
        structs=tuple(structs or ()),
        functions=tuple(functions or ()),
        imports=frozenset(imports or ()),
        file_line_counts={f"{path}/a.go" if path else "a.go": 10},
    )


def make_package_result(
    name: str = "store",
    afferent: int = 0,
    efferent: int = 0,
    structs: list[StructResult] | None = None,
    functions: list[ComplexityResult] | None = None,
) -> PackageResult:
    total = afferent + efferent
    return PackageResult(
        name=name,
        path=name,
        coupling=CouplingResult(
            package_name=name,
            import_path=f"example.com/app/{name}",
            afferent=afferent,
            efferent=efferent,
            instability=efferent / total if total else 0.0,
            dependency_depth=0,
        ),
        structs=tuple(structs or ()),
        functions=tuple(functions or ()),
    )


def make_struct_result(
    name: str, lcom4: int, method_clusters=None, field_clusters=None
) -> StructResult:
    return StructResult(
        cohesion=CohesionResult(
            struct_name=name,
            file_path=f"{name.lower()}.go",
            lcom4_score=lcom4,
            applicable=lcom4 > 0,
        ),
        method_clusters=method_clusters,
        field_clusters=field_clusters,
    )


def make_complexity(name: str, complexity: int) -> ComplexityResult:
    return ComplexityResult(
        func_name=name, file_path="main.go", complexity=complexity, loc=10
    )


@pytest.fixture
def module_path() -> str:
    return "example.com/app"
