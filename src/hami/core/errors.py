"""
Structured error types for the hami runtime.

Every failure the runtime raises itself is a ``HamiError``: a typed exception
carrying a category, an explicit retry flag, structured context and an
optional chained cause. Errors raised by user code inside ``Node.execute``
are never wrapped; they propagate out of ``run()`` unchanged.

Manifesto:
    - **Typed hierarchy:** Configuration, registration and execution failures
      are distinct types, so callers catch exactly what they can handle
    - **Explicit retry semantics:** Each error knows if it's retryable
    - **Rich context:** Errors carry node kind, plugin and flow metadata
    - **Routing is not failure:** An action without a successor ends a flow
      normally, so there is deliberately no routing error type

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        HamiError                            │
        │  (category, retryable, context, cause)                      │
        ├─────────────────────────────────────────────────────────────┤
        │                                                             │
        │  ConfigurationError   SchemaError      RegistrationError    │
        │  (CONFIG)             (CONFIG)         (REGISTRATION)       │
        │                                             │               │
        │                              PluginAlreadyRegisteredError   │
        │                              NodeKindNotFoundError          │
        │                                                             │
        │  ExecutionError (EXECUTION)                                 │
        │       │                                                     │
        │  MissingSharedKeyError   TraceNotFoundError                 │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> err = ConfigurationError(["name is required"], kind="core:log-result")
    >>> err.errors
    ['name is required']
    >>> err.retryable
    False

    >>> NodeKindNotFoundError("unknown:kind").kind
    'unknown:kind'

Tags:
    error-handling, exception-hierarchy, error-context, hami

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    CONFIG = "CONFIG"                  # Node/flow configuration, schema descriptors
    REGISTRATION = "REGISTRATION"      # Plugin and kind registry
    EXECUTION = "EXECUTION"            # Leaf node work
    STORAGE = "STORAGE"                # Filesystem backed state
    INTERNAL = "INTERNAL"              # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Typed fields cover what the runtime knows when it raises (node kind,
    plugin, flow); anything else goes into ``metadata``.
    """

    kind: str | None = None
    plugin: str | None = None
    flow: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["kind", "plugin", "flow", "path"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class HamiError(Exception):
    """
    Base class for all errors raised by the runtime.

    Subclasses set ``default_category`` and ``default_retryable``; both can be
    overridden per instance.

    Examples:
        >>> error = HamiError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(kind="core:debug").context.kind
        'core:debug'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> HamiError:
        """
        Add context to this error (fluent API).

        Usage:
            raise RegistrationError("Failed").with_context(plugin="core-fs")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS (Never Retryable)
# =============================================================================


class ConfigurationError(HamiError):
    """
    A node or flow was constructed with a config that fails its schema.

    Carries the full list of violations; the node is never usable.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False

    def __init__(
        self,
        errors: list[str],
        *,
        kind: str | None = None,
        **kwargs: Any,
    ):
        label = kind or "node"
        super().__init__(f"Invalid configuration for {label}: {'; '.join(errors)}", **kwargs)
        self.errors = list(errors)
        self.kind = kind
        if kind:
            self.context.kind = kind

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = list(self.errors)
        return result


class SchemaError(HamiError):
    """A schema descriptor is itself malformed (unknown type, bad shape)."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# REGISTRATION ERRORS
# =============================================================================


class RegistrationError(HamiError):
    """Base for registry failures."""

    default_category = ErrorCategory.REGISTRATION
    default_retryable = False


class PluginAlreadyRegisteredError(RegistrationError):
    """A plugin with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Plugin {name} is already registered")
        self.name = name
        self.context.plugin = name


class NodeKindNotFoundError(RegistrationError):
    """No node class is registered for the requested kind."""

    def __init__(self, kind: str):
        super().__init__(f"No node class registered for kind: {kind}")
        self.kind = kind
        self.context.kind = kind


# =============================================================================
# EXECUTION ERRORS
# =============================================================================


class ExecutionError(HamiError):
    """Base for failures raised by leaf operation nodes."""

    default_category = ErrorCategory.EXECUTION
    default_retryable = False


class MissingSharedKeyError(ExecutionError):
    """A node's required shared-state input is absent."""

    def __init__(self, key: str, *, kind: str | None = None):
        super().__init__(f"Missing required shared state key: {key}")
        self.key = key
        if kind:
            self.context.kind = kind


class TraceNotFoundError(ExecutionError):
    """No trace entry with the requested id exists in the trace index."""

    default_category = ErrorCategory.STORAGE

    def __init__(self, trace_id: str):
        super().__init__(f"Trace {trace_id} not found")
        self.trace_id = trace_id


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, HamiError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "HamiError",
    "ConfigurationError",
    "SchemaError",
    "RegistrationError",
    "PluginAlreadyRegisteredError",
    "NodeKindNotFoundError",
    "ExecutionError",
    "MissingSharedKeyError",
    "TraceNotFoundError",
    "is_retryable",
]
