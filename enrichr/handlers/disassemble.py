"""Disassemble handler - discovers objects nested in a property of the targets."""

from __future__ import annotations

from collections import deque
from collections.abc import Collection
from typing import Any

from enrichr.accessors import default_accessor
from enrichr.mapping.plan import DisassembleOperation
from enrichr.mapping.protocol import PropertyAccessor

# Containers flattened while discovering nested objects. Strings, bytes and
# mappings are leaves.
_FLATTENED = (list, tuple, set, frozenset, deque)


class ReflectiveDisassembleHandler:
    """Reads ``operation.key`` of every target and flattens the values.

    Nested collections are flattened breadth-first, so ``[[a, b], c]`` yields
    ``c`` before ``a`` and ``b``. None values are dropped, duplicates kept.
    """

    def __init__(self, accessor: PropertyAccessor | None = None) -> None:
        self._accessor = accessor or default_accessor()

    def process(self, operation: DisassembleOperation, targets: Collection[Any]) -> list[Any]:
        pending: deque[Any] = deque()
        for target in targets:
            if target is None:
                continue
            pending.append(self._accessor.read(type(target), target, operation.key))

        discovered = []
        while pending:
            value = pending.popleft()
            if value is None:
                continue
            if isinstance(value, _FLATTENED):
                pending.extend(value)
            else:
                discovered.append(value)
        return discovered
