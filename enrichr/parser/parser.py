"""Operation parser - resolves and caches the operations of a type.

The parser walks the class hierarchy from the most general class to the
target itself, asks every registered resolver for the operations declared at
each level and merges them: an operation at a more specific level replaces
one with the same identity from a more general level.

Nested types named by disassemble operations are parsed eagerly. A type that
is still being parsed higher up the stack is returned as a forward reference
(an inactive BeanOperations that is completed later), so self- and mutually
referential models resolve without infinite recursion.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from collections.abc import Hashable, Iterable
from typing import Any

from enrichr.accessors.reflective import declared_fields
from enrichr.core.exceptions import EnrichrError, InvalidOperationError, OperationParseError
from enrichr.mapping.plan import (
    AssembleOperation,
    BeanOperations,
    DisassembleOperation,
    KeyTriggerOperation,
)
from enrichr.mapping.protocol import OperationResolver
from enrichr.parser.declarations import is_library_class
from enrichr.parser.resolvers import AnnotatedFieldResolver, DecoratorResolver

logger = logging.getLogger(__name__)


def _hierarchy(target_type: type) -> list[type]:
    """Ancestors from most general to most specific, then the type itself."""
    ancestors = [
        cls for cls in reversed(target_type.__mro__[1:]) if not is_library_class(cls)
    ]
    return [*ancestors, target_type]


class OperationParser:
    """Builds BeanOperations per type and caches them for the process lifetime.

    Thread-safe: concurrent parses of the same type compute it once.

    Args:
        resolvers: Resolvers consulted in order at every hierarchy level.
            Defaults to decorator and ``Annotated`` field resolvers.
        log_execution_time: Log parse durations at DEBUG level.
    """

    def __init__(
        self,
        resolvers: Iterable[OperationResolver] | None = None,
        *,
        log_execution_time: bool = False,
    ) -> None:
        if resolvers is None:
            resolvers = [DecoratorResolver(), AnnotatedFieldResolver()]
        self._resolvers: list[OperationResolver] = list(resolvers)
        self._log_execution_time = log_execution_time
        self._lock = threading.RLock()
        self._cache: dict[Hashable, BeanOperations] = {}
        self._in_progress: dict[Hashable, BeanOperations] = {}
        # Results of the parse in progress, published when the outermost one succeeds.
        self._staged: dict[Hashable, BeanOperations] = {}

    @property
    def resolvers(self) -> list[OperationResolver]:
        return list(self._resolvers)

    def add_resolver(self, resolver: OperationResolver) -> None:
        """Append a resolver and drop cached results that did not consult it."""
        with self._lock:
            if resolver in self._resolvers:
                self._resolvers.remove(resolver)
            self._resolvers.append(resolver)
            self._cache.clear()

    def parse(self, target_type: type, *, scope: Hashable | None = None) -> BeanOperations:
        """Return the operations of ``target_type``, parsing them if necessary.

        Args:
            target_type: Class whose operations are resolved.
            scope: Optional extra element (e.g. a function) whose declarations
                apply on top of the type's own. Cached separately per scope.

        Returns:
            The BeanOperations. While the type itself is still being parsed
            on the current stack the result is an inactive forward reference.

        Raises:
            OperationParseError: If resolution fails. Nothing from the failed
                parse is left in the cache.
        """
        if not isinstance(target_type, type):
            raise TypeError(f"target_type must be a class, got {target_type!r}")
        cache_key: Hashable = target_type if scope is None else (target_type, scope)

        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        with self._lock:
            cached = self._cache.get(cache_key) or self._staged.get(cache_key)
            if cached is not None:
                return cached
            in_progress = self._in_progress.get(cache_key)
            if in_progress is not None:
                logger.debug("%s is being parsed, returning forward reference", target_type.__qualname__)
                return in_progress

            outermost = not self._in_progress
            try:
                result = self._do_parse(cache_key, target_type, scope)
                if outermost:
                    # Staged results reference forward references that are
                    # only complete now, so they are published together.
                    self._cache.update(self._staged)
            except EnrichrError:
                self._in_progress.pop(cache_key, None)
                raise
            except Exception as e:
                self._in_progress.pop(cache_key, None)
                raise OperationParseError(target_type, str(e)) from e
            finally:
                if outermost:
                    self._in_progress.clear()
                    self._staged.clear()
            return result

    def _do_parse(self, cache_key: Hashable, target_type: type, scope: Any) -> BeanOperations:
        start = time.perf_counter()
        result = BeanOperations(target_type=target_type, active=False)
        self._in_progress[cache_key] = result

        elements: list[Any] = _hierarchy(target_type)
        if scope is not None:
            elements.append(scope)

        assembles: dict[Hashable, AssembleOperation] = {}
        disassembles: dict[Hashable, DisassembleOperation] = {}
        for element in elements:
            for resolver in self._resolvers:
                resolved = resolver.resolve(element)
                for operation in resolved.assemble:
                    assembles[operation.identity] = operation
                for disassemble_operation in resolved.disassemble:
                    disassembles[disassemble_operation.identity] = disassemble_operation

        assemble_operations = sorted(assembles.values(), key=lambda op: op.sort)
        disassemble_operations = sorted(disassembles.values(), key=lambda op: op.sort)
        self._validate_keys(target_type, [*assemble_operations, *disassemble_operations])

        result.assemble_operations = assemble_operations
        result.disassemble_operations = [
            self._link_nested(operation) for operation in disassemble_operations
        ]

        result.active = True
        self._in_progress.pop(cache_key)
        self._staged[cache_key] = result

        if self._log_execution_time:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug("parsing of %s completed in %.2f ms", target_type.__qualname__, elapsed)
        logger.debug(
            "resolved %d assemble and %d disassemble operations for %s",
            len(result.assemble_operations),
            len(result.disassemble_operations),
            target_type.__qualname__,
        )
        return result

    def _link_nested(self, operation: DisassembleOperation) -> DisassembleOperation:
        if operation.nested_type is None or operation.nested_operations is not None:
            return operation
        return dataclasses.replace(operation, nested_operations=self.parse(operation.nested_type))

    @staticmethod
    def _validate_keys(target_type: type, operations: list[KeyTriggerOperation]) -> None:
        """Reject keys the type does not declare, when it declares its fields."""
        fields = declared_fields(target_type)
        if fields is None:
            return
        for operation in operations:
            if not operation.key:
                continue
            root = operation.key.split(".")[0]
            if root not in fields and not hasattr(target_type, root):
                raise InvalidOperationError(
                    f"{target_type.__qualname__} has no property '{root}' "
                    f"(declared by operation on '{operation.key}')"
                )

    def clear(self) -> None:
        """Drop all cached operations."""
        with self._lock:
            self._cache.clear()

    def __contains__(self, target_type: object) -> bool:
        return target_type in self._cache

    def __len__(self) -> int:
        """Number of cached entries."""
        return len(self._cache)
