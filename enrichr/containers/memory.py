"""In-memory containers backed by a fixed mapping."""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from enum import Enum
from typing import Any


class MapContainer:
    """Container over a constant mapping.

    Only the requested keys are returned; unknown keys are absent.

    Args:
        namespace: Namespace the container is registered under.
        data: Key -> value mapping. Copied on construction.
    """

    def __init__(self, namespace: str, data: Mapping[Any, Any]) -> None:
        self._namespace = namespace
        self._data = dict(data)

    @property
    def namespace(self) -> str:
        return self._namespace

    def get(self, keys: Collection[Any]) -> Mapping[Any, Any]:
        if not keys:
            return {}
        data = self._data
        return {key: data[key] for key in keys if key in data}

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MapContainer(namespace={self._namespace!r}, size={len(self._data)})"


class EnumContainer:
    """Factories building MapContainers from Enum classes."""

    @staticmethod
    def for_enum(
        enum_type: type[Enum],
        namespace: str | None = None,
        key: str | Callable[[Enum], Any] | None = None,
        value: str | Callable[[Enum], Any] | None = None,
    ) -> MapContainer:
        """Build a container over the members of ``enum_type``.

        Args:
            enum_type: The Enum class.
            namespace: Defaults to the enum class name.
            key: Attribute name or callable producing each member's key.
                Defaults to the member name.
            value: Attribute name or callable producing each member's value.
                Defaults to the member itself.
        """
        key_of = _getter(key, lambda member: member.name)
        value_of = _getter(value, lambda member: member)
        data = {key_of(member): value_of(member) for member in enum_type}
        return MapContainer(namespace or enum_type.__name__, data)


def _getter(source: str | Callable[[Enum], Any] | None, default: Callable[[Enum], Any]) -> Callable[[Enum], Any]:
    if source is None:
        return default
    if callable(source):
        return source
    return lambda member: getattr(member, source)
