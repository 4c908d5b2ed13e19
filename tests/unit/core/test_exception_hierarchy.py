"""Tests for the typed exception hierarchy."""

from __future__ import annotations

import pytest

from code_health.core.exceptions import (
    AnalysisError,
    AnalysisTimeoutError,
    CodeHealthError,
    ConfigError,
    FactModelError,
    InputError,
    InvariantViolationError,
    ParsingError,
    ReportError,
    TargetNotFoundError,
    TargetNotReadableError,
)


class TestExceptionHierarchy:
    """Verify the class hierarchy defined in core/exceptions.py."""

    def test_base_is_exception(self):
        assert isinstance(CodeHealthError("base"), Exception)

    @pytest.mark.parametrize(
        "cls,parent",
        [
            (InputError, CodeHealthError),
            (TargetNotFoundError, InputError),
            (TargetNotReadableError, InputError),
            (ParsingError, CodeHealthError),
            (FactModelError, CodeHealthError),
            (AnalysisError, CodeHealthError),
            (InvariantViolationError, AnalysisError),
            (AnalysisTimeoutError, AnalysisError),
            (ConfigError, CodeHealthError),
            (ReportError, CodeHealthError),
        ],
    )
    def test_parent_classes(self, cls, parent):
        assert isinstance(cls("boom"), parent)

    def test_parsing_error_is_not_an_input_error(self):
        assert not isinstance(ParsingError("bad file"), InputError)

    def test_context_defaults_to_empty_dict(self):
        assert CodeHealthError("x").context == {}
        assert ParsingError("x", context={"file": "a.go"}).context == {"file": "a.go"}

    def test_message_is_preserved(self):
        assert str(ConfigError("bad threshold")) == "bad threshold"

    def test_root_export(self):
        from code_health import CodeHealthError as Exported

        assert Exported is CodeHealthError
