"""Group filters selecting which operations run in one execution."""

from __future__ import annotations

from collections.abc import Callable

from enrichr.mapping.plan import KeyTriggerOperation

OperationFilter = Callable[[KeyTriggerOperation], bool]


def always_match() -> OperationFilter:
    return lambda operation: True


def any_match(*groups: str) -> OperationFilter:
    """Operations tagged with at least one of ``groups``."""
    wanted = frozenset(groups)
    return lambda operation: not wanted.isdisjoint(operation.groups)


def all_match(*groups: str) -> OperationFilter:
    """Operations tagged with every one of ``groups``."""
    wanted = frozenset(groups)
    return lambda operation: wanted <= operation.groups


def none_match(*groups: str) -> OperationFilter:
    """Operations tagged with none of ``groups``."""
    wanted = frozenset(groups)
    return lambda operation: wanted.isdisjoint(operation.groups)
