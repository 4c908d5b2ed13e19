"""LCOM4 cohesion metric.

LCOM4 (Lack of Cohesion of Methods, version 4) counts the connected
components of the graph whose nodes are a struct's methods and fields and
whose edges link each method to every field it reads or writes.

- LCOM4 = 1: all methods work on shared state (cohesive)
- LCOM4 = N: the struct holds N unrelated groups and could be split
- LCOM4 = 0: the struct has no methods, so the metric does not apply

A score of 0 is "not applicable", never "better than 1".
"""

from __future__ import annotations

from loguru import logger

from ...core.facts import StructFacts
from ..metrics import CohesionResult
from .union_find import UnionFind


class LCOM4Calculator:
    """Compute LCOM4 for structs from their field-usage facts."""

    def calculate(self, struct: StructFacts) -> CohesionResult:
        """Calculate LCOM4 for a single struct.

        Args:
            struct: Struct facts with fields and methods

        Returns:
            CohesionResult with score and component membership
        """
        if not struct.methods:
            return CohesionResult(
                struct_name=struct.name,
                file_path=struct.file_path,
                lcom4_score=0,
                components=(),
                applicable=False,
            )

        uf = UnionFind()
        uf.add_all(method.name for method in struct.methods)
        uf.add_all(struct.fields)

        known_fields = set(struct.fields)
        for method in struct.methods:
            for field_name in method.used_fields():
                # Usage of names outside the declared fields is ignored
                if field_name in known_fields:
                    uf.union(method.name, field_name)

        components = tuple(uf.components())

        logger.debug(
            f"LCOM4 {struct.name}: {len(components)} component(s) over "
            f"{len(struct.methods)} methods / {len(struct.fields)} fields"
        )

        return CohesionResult(
            struct_name=struct.name,
            file_path=struct.file_path,
            lcom4_score=len(components),
            components=components,
        )

    def calculate_all(self, structs: list[StructFacts]) -> list[CohesionResult]:
        """Calculate LCOM4 for every struct, preserving order."""
        return [self.calculate(struct) for struct in structs]
