"""Tests for hami.core.errors module."""

import pytest

from hami.core.errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ExecutionError,
    HamiError,
    MissingSharedKeyError,
    NodeKindNotFoundError,
    PluginAlreadyRegisteredError,
    RegistrationError,
    SchemaError,
    TraceNotFoundError,
    is_retryable,
)


class TestErrorContext:
    def test_empty_context(self):
        ctx = ErrorContext()
        assert ctx.kind is None
        assert ctx.metadata == {}
        assert ctx.to_dict() == {}

    def test_to_dict_includes_set_fields(self):
        ctx = ErrorContext(kind="core:debug", plugin="@hami/core", metadata={"key": "value"})
        assert ctx.to_dict() == {"kind": "core:debug", "plugin": "@hami/core", "key": "value"}


class TestHamiError:
    def test_defaults(self):
        error = HamiError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"
        assert error.category == ErrorCategory.INTERNAL
        assert error.retryable is False

    def test_overrides(self):
        error = HamiError("x", category=ErrorCategory.STORAGE, retryable=True)
        assert error.category == ErrorCategory.STORAGE
        assert error.retryable is True

    def test_with_context(self):
        error = HamiError("x").with_context(kind="core:map", attempt=2)
        assert error.context.kind == "core:map"
        assert error.context.metadata == {"attempt": 2}

    def test_cause_is_chained(self):
        cause = OSError("disk")
        error = HamiError("wrapped", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "disk"

    def test_to_dict(self):
        d = ExecutionError("failed").with_context(kind="core-fs:copy").to_dict()
        assert d == {
            "error_type": "ExecutionError",
            "message": "failed",
            "category": "EXECUTION",
            "retryable": False,
            "context": {"kind": "core-fs:copy"},
        }


class TestSpecificErrors:
    def test_configuration_error(self):
        error = ConfigurationError(["a is required", "b must be at least 1"], kind="demo:node")
        assert error.errors == ["a is required", "b must be at least 1"]
        assert error.kind == "demo:node"
        assert error.context.kind == "demo:node"
        assert error.message == (
            "Invalid configuration for demo:node: a is required; b must be at least 1"
        )
        assert error.to_dict()["errors"] == error.errors
        assert error.category == ErrorCategory.CONFIG

    def test_configuration_error_without_kind(self):
        assert ConfigurationError(["x"]).message == "Invalid configuration for node: x"

    def test_registration_errors(self):
        dup = PluginAlreadyRegisteredError("@hami/core")
        assert isinstance(dup, RegistrationError)
        assert dup.message == "Plugin @hami/core is already registered"
        assert dup.context.plugin == "@hami/core"

        missing = NodeKindNotFoundError("core:nope")
        assert missing.message == "No node class registered for kind: core:nope"
        assert missing.category == ErrorCategory.REGISTRATION

    def test_execution_errors(self):
        missing = MissingSharedKeyError("config_key", kind="core-config-fs:get")
        assert isinstance(missing, ExecutionError)
        assert missing.message == "Missing required shared state key: config_key"
        assert missing.context.kind == "core-config-fs:get"

        trace = TraceNotFoundError("abc")
        assert trace.message == "Trace abc not found"
        assert trace.category == ErrorCategory.STORAGE

    def test_schema_error(self):
        assert SchemaError("bad").category == ErrorCategory.CONFIG

    @pytest.mark.parametrize(
        "error, expected",
        [
            (HamiError("x", retryable=True), True),
            (ConfigurationError(["x"]), False),
            (ConnectionError(), True),
            (TimeoutError(), True),
            (ValueError(), False),
        ],
    )
    def test_is_retryable(self, error, expected):
        assert is_retryable(error) is expected
