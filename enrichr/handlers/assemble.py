"""Assemble handlers - look up sources for a batch and write mapped fields.

Every handler follows the same steps for one ``process`` call:

1. collect a (target, key) pair for every target of every execution,
2. query the container once with the union of all non-null keys,
3. find the associated source of each target,
4. map properties of the source onto the target.

Handlers differ in how keys are derived and how sources are associated:

    one_to_one      key -> single source value
    one_to_many     key -> collection of source values
    many_to_many    key split into several keys -> list of source values
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Collection, Iterable, Mapping, Sized
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from enrichr.accessors import default_accessor
from enrichr.containers.empty import EMPTY_NAMESPACE
from enrichr.core.exceptions import ContainerLookupError, EnrichrError, PropertyCoercionError
from enrichr.mapping.plan import AssembleExecution, PropertyMapping
from enrichr.mapping.protocol import Container, PropertyAccessor

logger = logging.getLogger(__name__)


def is_empty(value: Any) -> bool:
    """None, or an empty string or collection."""
    if value is None:
        return True
    return isinstance(value, Sized) and len(value) == 0


@lru_cache(maxsize=256)
def _key_adapter(key_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(key_type)


@dataclass
class _Target:
    execution: AssembleExecution
    origin: Any
    key: Any


class AbstractAssembleHandler(ABC):
    """Template for assemble handlers.

    Args:
        accessor: Reads keys and source properties, writes target properties.
    """

    def __init__(self, accessor: PropertyAccessor | None = None) -> None:
        self._accessor = accessor or default_accessor()

    @property
    def accessor(self) -> PropertyAccessor:
        return self._accessor

    def process(self, container: Container, executions: Collection[AssembleExecution]) -> None:
        targets = self._collect_targets(executions)
        if not targets:
            return

        # The empty container marks operations mapping a target onto itself.
        if container.namespace == EMPTY_NAMESPACE:
            for target in targets:
                self._complete_mapping(target.origin, target)
            return

        keys = self._collect_keys(targets)
        if not keys:
            return
        sources = self._lookup(container, keys)
        if not sources:
            return

        for target in targets:
            source = self._associated_source(target, sources)
            if not is_empty(source):
                self._complete_mapping(source, target)

    def _collect_targets(self, executions: Iterable[AssembleExecution]) -> list[_Target]:
        targets = []
        for execution in executions:
            key_type = execution.operation.key_type
            adapter = _key_adapter(key_type) if key_type is not None else None
            for origin in execution.targets:
                key = self._derive_key(self._read_key(execution, origin))
                if adapter is not None:
                    key = self._coerce_derived(execution, adapter, key)
                targets.append(_Target(execution, origin, key))
        return targets

    def _read_key(self, execution: AssembleExecution, origin: Any) -> Any:
        key = execution.operation.key
        # No key property: the target itself is the key.
        if not key:
            return origin
        return self._accessor.read(type(origin), origin, key)

    @staticmethod
    def _coerce_key(execution: AssembleExecution, adapter: TypeAdapter[Any], key: Any) -> Any:
        try:
            return adapter.validate_python(key)
        except ValidationError as e:
            raise PropertyCoercionError(execution.target_type, execution.operation.key, str(e)) from e

    def _coerce_derived(self, execution: AssembleExecution, adapter: TypeAdapter[Any], key: Any) -> Any:
        """Coerce a derived key to the operation's ``key_type``."""
        if key is None:
            return None
        return self._coerce_key(execution, adapter, key)

    def _derive_key(self, key: Any) -> Any:
        return key

    def _collect_keys(self, targets: Iterable[_Target]) -> list[Any]:
        keys: dict[Any, None] = {}
        for target in targets:
            if target.key is not None:
                keys[target.key] = None
        return list(keys)

    @staticmethod
    def _lookup(container: Container, keys: list[Any]) -> Mapping[Any, Any]:
        try:
            result = container.get(keys)
        except EnrichrError:
            raise
        except Exception as e:
            raise ContainerLookupError(container.namespace, str(e)) from e
        logger.debug(
            "container '%s' resolved %d of %d keys", container.namespace, len(result or ()), len(keys)
        )
        return result or {}

    def _associated_source(self, target: _Target, sources: Mapping[Any, Any]) -> Any:
        if target.key is None:
            return None
        return sources.get(target.key)

    @abstractmethod
    def _complete_mapping(self, source: Any, target: _Target) -> None:
        """Write the mapped properties of ``source`` onto ``target.origin``."""

    def _write(self, target: _Target, mapping: PropertyMapping, value: Any) -> None:
        if is_empty(value):
            return
        origin = target.origin
        self._accessor.write(type(origin), origin, mapping.reference, value)


class OneToOneAssembleHandler(AbstractAssembleHandler):
    """One key, one source value."""

    def _complete_mapping(self, source: Any, target: _Target) -> None:
        for mapping in target.execution.operation.mappings:
            if mapping.has_source:
                value = self._accessor.read(type(source), source, mapping.source)  # type: ignore[arg-type]
            else:
                value = source
            self._write(target, mapping, value)


def as_collection(value: Any) -> list[Any]:
    """Adapt a source value to a list of elements.

    Strings, bytes and mappings count as a single element.
    """
    if value is None:
        return []
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


class OneToManyAssembleHandler(AbstractAssembleHandler):
    """One key, a collection of source values.

    A mapping with a source property collects that property from every
    element in order; without one, the elements themselves are written.
    """

    def _complete_mapping(self, source: Any, target: _Target) -> None:
        sources = as_collection(source)
        for mapping in target.execution.operation.mappings:
            if mapping.has_source:
                values = [
                    self._accessor.read(type(s), s, mapping.source)  # type: ignore[arg-type]
                    for s in sources
                    if s is not None
                ]
            else:
                values = sources
            self._write(target, mapping, values)


class KeySplitter(Protocol):
    """Splits a many-to-many key value into individual keys."""

    def split(self, key: Any) -> list[Any]:
        ...


class DefaultKeySplitter:
    """Splits strings on a separator and passes collections through.

    String parts are stripped and de-duplicated, keeping first occurrence
    order; blank parts are dropped. Any other scalar (e.g. an ``int``) yields
    no keys at all.
    """

    def __init__(self, separator: str = ",") -> None:
        if not separator:
            raise ValueError("separator must not be empty")
        self.separator = separator

    def split(self, key: Any) -> list[Any]:
        if key is None:
            return []
        if isinstance(key, str):
            parts = (part.strip() for part in key.split(self.separator))
            return list(dict.fromkeys(part for part in parts if part))
        if isinstance(key, (bytes, bytearray, Mapping)):
            return []
        if isinstance(key, Iterable):
            return [k for k in key if k is not None]
        return []


class ManyToManyAssembleHandler(OneToManyAssembleHandler):
    """A key holding several keys; sources are the hits in key order.

    Args:
        accessor: Property accessor.
        key_splitter: Splits key values. Defaults to comma separation.
    """

    def __init__(
        self,
        accessor: PropertyAccessor | None = None,
        key_splitter: KeySplitter | None = None,
    ) -> None:
        super().__init__(accessor)
        self._key_splitter = key_splitter or DefaultKeySplitter()

    def _derive_key(self, key: Any) -> list[Any]:
        return self._key_splitter.split(key)

    def _coerce_derived(self, execution: AssembleExecution, adapter: TypeAdapter[Any], key: Any) -> list[Any]:
        return [self._coerce_key(execution, adapter, k) for k in key]

    def _collect_keys(self, targets: Iterable[_Target]) -> list[Any]:
        keys: dict[Any, None] = {}
        for target in targets:
            for key in target.key:
                keys[key] = None
        return list(keys)

    def _associated_source(self, target: _Target, sources: Mapping[Any, Any]) -> list[Any]:
        return [sources[key] for key in target.key if sources.get(key) is not None]
