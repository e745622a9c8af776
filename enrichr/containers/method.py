"""Container backed by a host callable, e.g. a repository query.

The callable receives the requested keys and returns either a mapping or a
list of records that the container indexes by a key property.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from typing import Any

from enrichr.accessors.mapping import MappingPropertyAccessor
from enrichr.core.enums import MappingType
from enrichr.core.exceptions import InvalidOperationError
from enrichr.mapping.protocol import PropertyAccessor


class MethodContainer:
    """Container delegating lookups to ``method(keys)``.

    Args:
        namespace: Namespace the container is registered under.
        method: Callable receiving a list of keys.
        key_property: Property of each returned record holding its key.
            Required unless ``mapping_type`` is NO_MAPPING.
        mapping_type: ONE_TO_ONE indexes records by key (first record wins),
            ONE_TO_MANY groups records per key into lists, NO_MAPPING expects
            the method to return a mapping itself.
        accessor: Accessor used to read ``key_property`` from records.
    """

    def __init__(
        self,
        namespace: str,
        method: Callable[[list[Any]], Any],
        key_property: str | None = None,
        mapping_type: MappingType = MappingType.ONE_TO_ONE,
        accessor: PropertyAccessor | None = None,
    ) -> None:
        if mapping_type is not MappingType.NO_MAPPING and not key_property:
            raise InvalidOperationError(
                f"Container '{namespace}' needs a key_property for {mapping_type.value} mapping"
            )
        self._namespace = namespace
        self._method = method
        # Unused for NO_MAPPING, which returns the mapping as is.
        self._key_property: str = key_property or ""
        self._mapping_type = mapping_type
        self._accessor = accessor or MappingPropertyAccessor()

    @property
    def namespace(self) -> str:
        return self._namespace

    def get(self, keys: Collection[Any]) -> Mapping[Any, Any]:
        if not keys:
            return {}
        result = self._method(list(keys))
        if result is None:
            return {}
        if self._mapping_type is MappingType.NO_MAPPING:
            return dict(result)
        return self._index(result)

    def _index(self, records: Any) -> dict[Any, Any]:
        indexed: dict[Any, Any] = {}
        for record in records:
            if record is None:
                continue
            key = self._accessor.read(type(record), record, self._key_property)
            if self._mapping_type is MappingType.ONE_TO_MANY:
                indexed.setdefault(key, []).append(record)
            else:
                indexed.setdefault(key, record)
        return indexed

    def __repr__(self) -> str:
        return f"MethodContainer(namespace={self._namespace!r}, mapping={self._mapping_type.value})"
