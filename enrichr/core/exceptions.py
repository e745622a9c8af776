"""enrichr exception hierarchy.

All exceptions are enrichr-specific. Errors raised by containers, accessors
or host callables are wrapped so that callers only need to handle
``EnrichrError`` subclasses.
"""

from __future__ import annotations

from typing import Any


class EnrichrError(Exception):
    """Base exception for all enrichr errors."""


# --- Configuration ---


class ConfigurationError(EnrichrError):
    """Base for configuration errors.

    Configuration errors are raised before any target object is mutated.
    """


class ContainerNotFoundError(ConfigurationError):
    """Raised when a container namespace is not registered."""

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace
        super().__init__(f"Container not found: '{namespace}'")


class DuplicateContainerError(ConfigurationError):
    """Raised when a namespace is registered twice without ``replace=True``."""

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace
        super().__init__(f"Container already registered: '{namespace}'")


class InvalidOperationError(ConfigurationError):
    """Raised when an operation declaration is malformed."""


class PropertyNotFoundError(ConfigurationError):
    """Raised when a declared property cannot be read or written on a type."""

    def __init__(self, target_type: type, property_name: str) -> None:
        self.target_type = target_type
        self.property_name = property_name
        super().__init__(
            f"Property '{property_name}' is not accessible on {target_type.__name__}"
        )


class HandlerNotFoundError(ConfigurationError):
    """Raised when an operation names a handler the executor does not know."""

    def __init__(self, handler_name: str, available: list[str]) -> None:
        self.handler_name = handler_name
        super().__init__(f"Handler not found: '{handler_name}'. Available: {available}")


class OperationParseError(ConfigurationError):
    """Raised when the operations of a type cannot be resolved."""

    def __init__(self, element: Any, detail: str) -> None:
        self.element = element
        name = getattr(element, "__qualname__", repr(element))
        super().__init__(f"Cannot parse operations of {name}: {detail}")


# --- Execution ---


class ExecutionError(EnrichrError):
    """Base for operation execution errors."""


class ContainerLookupError(ExecutionError):
    """Raised when a container fails to answer a bulk lookup."""

    def __init__(self, namespace: str, detail: str) -> None:
        self.namespace = namespace
        super().__init__(f"Lookup in container '{namespace}' failed: {detail}")


# --- Mapping ---


class MappingError(EnrichrError):
    """Base for value mapping errors."""


class PropertyCoercionError(MappingError):
    """Raised when a resolved value cannot be coerced to the declared field type."""

    def __init__(self, target_type: type, property_name: str, detail: str) -> None:
        self.target_type = target_type
        self.property_name = property_name
        super().__init__(
            f"Cannot assign to {target_type.__name__}.{property_name}: {detail}"
        )
