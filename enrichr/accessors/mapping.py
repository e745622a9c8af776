"""Key-based property access for dict-like targets."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from enrichr.accessors.reflective import ReflectivePropertyAccessor
from enrichr.core.exceptions import PropertyNotFoundError
from enrichr.mapping.protocol import PropertyAccessor


class MappingPropertyAccessor:
    """Indexes mappings by property name and delegates for everything else.

    Reading a missing key yields None, the same as a missing column.
    """

    def __init__(self, delegate: PropertyAccessor | None = None) -> None:
        self._delegate = delegate or ReflectivePropertyAccessor()

    def read(self, target_type: type, instance: Any, name: str) -> Any:
        if isinstance(instance, Mapping):
            return instance.get(name)
        return self._delegate.read(target_type, instance, name)

    def write(self, target_type: type, instance: Any, name: str, value: Any) -> None:
        if isinstance(instance, MutableMapping):
            instance[name] = value
            return
        if isinstance(instance, Mapping):
            raise PropertyNotFoundError(target_type, name)
        self._delegate.write(target_type, instance, name, value)
