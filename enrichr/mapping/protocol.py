"""Collaborator protocols.

The engine talks to data sources, property access and metadata sources only
through these interfaces. Hosts may supply any object that implements them.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from enrichr.mapping.plan import (
        AssembleExecution,
        DisassembleOperation,
        KeyTriggerOperation,
        ResolvedOperations,
    )


@runtime_checkable
class Container(Protocol):
    """Batch key -> value data source identified by a namespace."""

    @property
    def namespace(self) -> str:
        """Namespace the container is registered under."""
        ...

    def get(self, keys: Collection[Any]) -> Mapping[Any, Any]:
        """Look up all keys at once.

        Missing keys are absent from the result. An empty key collection
        yields an empty mapping, never None.
        """
        ...


@runtime_checkable
class PropertyAccessor(Protocol):
    """Reads and writes named properties on arbitrary objects."""

    def read(self, target_type: type, instance: Any, name: str) -> Any:
        """Read property ``name`` of ``instance``."""
        ...

    def write(self, target_type: type, instance: Any, name: str, value: Any) -> None:
        """Write ``value`` to property ``name`` of ``instance``, coercing if needed."""
        ...


@runtime_checkable
class OperationResolver(Protocol):
    """Contributes operation declarations for one class or scope element."""

    def resolve(self, element: Any) -> ResolvedOperations:
        """Return the operations declared directly on ``element``."""
        ...


class AssembleHandler(Protocol):
    """Looks up sources for a batch of executions and writes mapped fields."""

    def process(self, container: Container, executions: Collection[AssembleExecution]) -> None:
        ...


class DisassembleHandler(Protocol):
    """Discovers nested objects held by a property of the targets."""

    def process(self, operation: DisassembleOperation, targets: Collection[Any]) -> list[Any]:
        ...


class Condition(Protocol):
    """Activation condition evaluated per target before an operation runs."""

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        ...
