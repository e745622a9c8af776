"""Operation declaration DSL builder.

Provides a fluent builder for declaring operations of a type in code rather
than on the type itself, e.g. for classes the host does not own.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from enrichr.core.enums import HandlerType
from enrichr.core.exceptions import InvalidOperationError
from enrichr.mapping.plan import (
    DEFAULT_DISASSEMBLE_HANDLER,
    DEFAULT_SORT,
    AssembleOperation,
    DisassembleOperation,
    PropertyMapping,
    ResolvedOperations,
)


def operations_for(target_type: type) -> OperationsBuilder:
    """Entry point for the operation DSL.

    Args:
        target_type: The class the operations apply to.

    Returns:
        A builder for chaining operation declarations.
    """
    return OperationsBuilder(target_type)


class OperationsBuilder:
    """Fluent builder for operation declarations."""

    def __init__(self, target_type: type) -> None:
        self._target_type = target_type
        self._assembles: list[dict[str, Any]] = []
        self._disassembles: list[DisassembleOperation] = []

    @property
    def target_type(self) -> type:
        return self._target_type

    def assemble(
        self,
        key: str,
        container: str = "",
        *,
        handler: HandlerType | str = HandlerType.ONE_TO_ONE,
        groups: Iterable[str] | str = (),
        sort: int = DEFAULT_SORT,
        condition: Any = None,
        key_type: type | None = None,
    ) -> OperationsBuilder:
        """Start an assemble operation; follow with ``map()`` or ``props()``."""
        self._assembles.append(
            {
                "key": key,
                "container": container,
                "handler": handler,
                "groups": groups,
                "sort": sort,
                "condition": condition,
                "key_type": key_type,
                "mappings": [],
            }
        )
        return self

    def one_to_many(self, key: str, container: str, **options: Any) -> OperationsBuilder:
        return self.assemble(key, container, handler=HandlerType.ONE_TO_MANY, **options)

    def many_to_many(self, key: str, container: str, **options: Any) -> OperationsBuilder:
        return self.assemble(key, container, handler=HandlerType.MANY_TO_MANY, **options)

    def map(self, source: str | None = None, reference: str | None = None) -> OperationsBuilder:
        """Map ``source`` onto ``reference`` for the current assemble operation.

        ``map("name")`` maps a property onto the property of the same name;
        ``map(reference="label")`` assigns the whole source value.
        """
        if reference is None:
            if source is None:
                raise InvalidOperationError("map() needs a source or a reference property")
            reference = source
        self._current()["mappings"].append(PropertyMapping(reference=reference, source=source))
        return self

    def props(self, mappings: str | Iterable[str | PropertyMapping]) -> OperationsBuilder:
        """Add mappings in ``"source:reference"`` notation."""
        self._current()["mappings"].extend(PropertyMapping.parse_all(mappings))
        return self

    def disassemble(
        self,
        key: str,
        nested_type: type | None = None,
        *,
        handler: str = DEFAULT_DISASSEMBLE_HANDLER,
        groups: Iterable[str] | str = (),
        sort: int = DEFAULT_SORT,
        condition: Any = None,
    ) -> OperationsBuilder:
        """Declare a property holding nested objects to process recursively."""
        self._disassembles.append(
            DisassembleOperation(
                key=key,
                nested_type=nested_type,
                handler=handler,
                groups=groups,  # type: ignore[arg-type]
                sort=sort,
                condition=condition,
            )
        )
        return self

    def _current(self) -> dict[str, Any]:
        if not self._assembles:
            raise InvalidOperationError("Mappings must follow an assemble() declaration")
        return self._assembles[-1]

    def build(self) -> ResolvedOperations:
        """Compile and validate the declarations."""
        assembles = []
        for declared in self._assembles:
            if not declared["mappings"]:
                raise InvalidOperationError(
                    f"Assemble operation on '{declared['key']}' of "
                    f"{self._target_type.__name__} has no property mappings"
                )
            assembles.append(AssembleOperation(**declared))
        return ResolvedOperations(assemble=assembles, disassemble=list(self._disassembles))
