"""
hami.core - the runtime.

Node lifecycle and retry, the flow graph walker, the schema validation
engine that gates construction, and the registration manager that turns
kind strings into nodes at run time.
"""

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
from hami.core.flow import Flow
from hami.core.node import DEFAULT_ACTION, Node, SharedState, Transition
from hami.core.plugin import Plugin, SimplePlugin, create_plugin
from hami.core.registry import PluginState, RegistrationEvent, RegistrationManager
from hami.core.validation import (
    AnySchema,
    ArraySchema,
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    Schema,
    StringSchema,
    ValidationResult,
    schema_from_dict,
    validate,
)

__all__ = [
    # Errors
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "ExecutionError",
    "HamiError",
    "MissingSharedKeyError",
    "NodeKindNotFoundError",
    "PluginAlreadyRegisteredError",
    "RegistrationError",
    "SchemaError",
    "TraceNotFoundError",
    "is_retryable",
    # Runtime
    "DEFAULT_ACTION",
    "Flow",
    "Node",
    "SharedState",
    "Transition",
    # Registry
    "Plugin",
    "PluginState",
    "RegistrationEvent",
    "RegistrationManager",
    "SimplePlugin",
    "create_plugin",
    # Validation
    "AnySchema",
    "ArraySchema",
    "BooleanSchema",
    "NumberSchema",
    "ObjectSchema",
    "Schema",
    "StringSchema",
    "ValidationResult",
    "schema_from_dict",
    "validate",
]
