"""Private method island detection.

Private methods of a struct that never call each other, directly or
through other private methods, tend to serve different purposes. Each
connected group ("island") of the private call graph is a candidate
separate responsibility.

Utility methods (helpers, accessors, test hooks) are left out entirely:
they are called from everywhere and would merge unrelated islands.
"""

from __future__ import annotations

import math
from collections import Counter

from loguru import logger

from ...config.thresholds import MethodClusteringConfig
from ...core.exceptions import InvariantViolationError
from ...core.facts import MethodFacts, StructFacts
from ..metrics import MethodCluster, MethodClusterResult
from .union_find import UnionFind


def split_camel_case(name: str) -> list[str]:
    """Split a camelCase / PascalCase identifier into words.

    A new word starts at every uppercase letter after the first character
    and at underscores.

    Examples:
        >>> split_camel_case("loadUserProfile")
        ['load', 'User', 'Profile']
    """
    words: list[str] = []
    current = ""
    for i, char in enumerate(name):
        if char == "_":
            if current:
                words.append(current)
            current = ""
            continue
        if i > 0 and char.isupper() and current:
            words.append(current)
            current = ""
        current += char
    if current:
        words.append(current)
    return words


def suggest_responsibility(
    methods: tuple[str, ...] | list[str], stop_words: list[str] | None = None
) -> str:
    """Suggest a responsibility label from the cluster's method names.

    The most frequent word across the bare method names wins; ties go to
    the lexicographically smallest word.

    Args:
        methods: Qualified method names of the cluster
        stop_words: Lowercase words to ignore (get/set/is/has/do by default)

    Returns:
        Label such as "Cache-related operations"
    """
    if not methods:
        return "Unknown"

    if stop_words is None:
        stop_words = MethodClusteringConfig().label_stop_words
    ignored = set(stop_words)
    keywords: Counter[str] = Counter()

    for method in methods:
        bare = method.rsplit(".", 1)[-1]
        for word in split_camel_case(bare):
            word = word.lower()
            if word in ignored:
                continue
            keywords[word] += 1

    if not keywords:
        return "Mixed operations"

    word, _ = min(keywords.items(), key=lambda item: (-item[1], item[0]))
    return f"{word[:1].upper()}{word[1:]}-related operations"


def minimum_cluster_size(total_methods: int, config: MethodClusteringConfig) -> int:
    """Return max(min_cluster_size, round(total × ratio)), rounding halves up."""
    ratio_based = math.floor(total_methods * config.min_cluster_ratio + 0.5)
    return max(config.min_cluster_size, ratio_based)


class MethodClusterAnalyzer:
    """Partition private, non-utility methods into call-graph islands."""

    def __init__(self, config: MethodClusteringConfig | None = None) -> None:
        self.config = config or MethodClusteringConfig()

    def analyze(self, struct: StructFacts) -> MethodClusterResult | None:
        """Analyze one struct.

        Args:
            struct: Struct facts with methods and their call frequencies

        Returns:
            MethodClusterResult, or None when the struct has no methods or no
            private methods (not applicable)

        Raises:
            InvariantViolationError: If a method calls a method of this struct
                that is not declared
        """
        methods = {m.qualified_name: m for m in struct.methods}
        if not methods:
            return None

        private = {name: m for name, m in methods.items() if m.is_private}
        if not private:
            return None
        public = {name for name, m in methods.items() if not m.is_private}

        candidates = sorted(name for name, m in private.items() if not m.is_utility)
        candidate_set = set(candidates)

        self._check_call_targets(struct, methods)

        uf = UnionFind()
        uf.add_all(candidates)
        for caller in candidates:
            for callee, frequency in methods[caller].calls.items():
                if (
                    callee in candidate_set
                    and callee != caller
                    and frequency >= self.config.weight_threshold
                ):
                    uf.union(caller, callee)

        components = uf.components()

        min_size = minimum_cluster_size(len(candidates), self.config)
        kept = [c for c in components if len(c) >= min_size or len(components) == 1]
        kept.sort(key=lambda members: (-len(members), members))

        called_by = self._reverse_calls(methods)
        clusters = tuple(
            MethodCluster(
                cluster_id=index,
                methods=members,
                called_by=tuple(
                    sorted(
                        {
                            caller
                            for member in members
                            for caller in called_by.get(member, ())
                            if caller in public
                        }
                    )
                ),
                responsibility_hint=suggest_responsibility(
                    members, self.config.label_stop_words
                ),
            )
            for index, members in enumerate(kept, start=1)
        )

        if len(clusters) >= 2:
            logger.debug(
                f"{struct.name}: {len(clusters)} private method islands "
                f"({len(components) - len(clusters)} below size {min_size} dropped)"
            )

        return MethodClusterResult(
            clusters=clusters,
            total_private_methods=len(private),
        )

    @staticmethod
    def _reverse_calls(methods: dict[str, MethodFacts]) -> dict[str, set[str]]:
        """Map each method to the struct methods that call it."""
        called_by: dict[str, set[str]] = {}
        for caller, info in methods.items():
            for callee in info.calls:
                if callee in methods and callee != caller:
                    called_by.setdefault(callee, set()).add(caller)
        return called_by

    @staticmethod
    def _check_call_targets(
        struct: StructFacts, methods: dict[str, MethodFacts]
    ) -> None:
        prefix = f"{struct.name}."
        for caller, info in methods.items():
            for callee in info.calls:
                if callee.startswith(prefix) and callee not in methods:
                    raise InvariantViolationError(
                        f"{caller} calls undeclared method {callee}",
                        context={
                            "struct": struct.name,
                            "caller": caller,
                            "callee": callee,
                        },
                    )
