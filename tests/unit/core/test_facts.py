"""Unit tests for the fact model."""

import pytest

from code_health.core.exceptions import FactModelError
from code_health.core.facts import (
    DecisionPoints,
    FieldUsage,
    MethodFacts,
    PackageFacts,
    StructFacts,
    is_private_name,
    is_utility_method,
)


class TestFieldUsage:
    """Test usage weight combination."""

    def test_read_plus_write(self):
        assert FieldUsage.READ.combine(FieldUsage.WRITE) is FieldUsage.READ_WRITE

    def test_combine_is_idempotent(self):
        assert FieldUsage.WRITE.combine(FieldUsage.WRITE) is FieldUsage.WRITE
        assert FieldUsage.UNUSED.combine(FieldUsage.READ) is FieldUsage.READ


class TestNameHeuristics:
    """Test private and utility name classification."""

    @pytest.mark.parametrize(
        "name,expected",
        [("loadUser", True), ("Save", False), ("Store.flush", True), ("Store.Flush", False), ("", False)],
    )
    def test_is_private_name(self, name, expected):
        assert is_private_name(name) is expected

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("GetName", True),
            ("SetTimeout", True),
            ("IsReady", True),
            ("HasItems", True),
            ("Getaway", False),
            ("Get", False),
            ("loadTestData", True),
            ("mockClient", True),
            ("formatHelper", True),
            ("Checkout", False),
        ],
    )
    def test_is_utility_method(self, name, expected):
        assert is_utility_method(name) is expected

    def test_qualified_names_use_bare_part(self):
        assert is_utility_method("Store.GetName") is True


class TestFactValidation:
    """Test fact model contract checks."""

    def test_invalid_usage_weight(self):
        with pytest.raises(FactModelError):
            MethodFacts(qualified_name="S.m", field_usage={"x": 4})

    def test_invalid_call_frequency(self):
        with pytest.raises(FactModelError):
            MethodFacts(qualified_name="S.m", calls={"S.n": 0})

    def test_duplicate_fields(self):
        with pytest.raises(FactModelError):
            StructFacts(name="S", file_path="s.go", fields=("x", "x"))

    def test_method_name_parts(self):
        method = MethodFacts(qualified_name="Store.flush", field_usage={"a": 1, "b": 0})

        assert method.name == "flush"
        assert method.struct_name == "Store"
        assert method.used_fields() == ["a"]

    def test_decision_point_total(self):
        points = DecisionPoints(
            if_statements=1,
            loops=2,
            switches=1,
            case_clauses=3,
            select_cases=1,
            logical_operators=2,
        )
        assert points.total == 10

    def test_package_import_path(self):
        assert PackageFacts(name="main", path="").import_path("example.com/app") == (
            "example.com/app"
        )
        assert PackageFacts(name="store", path="internal/store").import_path(
            "example.com/app"
        ) == "example.com/app/internal/store"
