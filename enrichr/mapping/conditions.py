"""Activation conditions for operations.

A condition decides per target whether an operation applies to it.
Conditions compose with ``&``, ``|`` and ``~``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sized
from typing import Any

from enrichr.mapping.plan import KeyTriggerOperation
from enrichr.mapping.protocol import PropertyAccessor


class BaseCondition(ABC):
    """Base class providing boolean composition."""

    @abstractmethod
    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        """Whether ``operation`` applies to ``target``."""

    def __and__(self, other: BaseCondition) -> BaseCondition:
        return AllOf(self, other)

    def __or__(self, other: BaseCondition) -> BaseCondition:
        return AnyOf(self, other)

    def __invert__(self) -> BaseCondition:
        return Not(self)


class AllOf(BaseCondition):
    def __init__(self, *conditions: BaseCondition) -> None:
        if not conditions:
            raise ValueError("conditions must not be empty")
        self.conditions = conditions

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        return all(c.test(target, operation, accessor) for c in self.conditions)


class AnyOf(BaseCondition):
    def __init__(self, *conditions: BaseCondition) -> None:
        if not conditions:
            raise ValueError("conditions must not be empty")
        self.conditions = conditions

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        return any(c.test(target, operation, accessor) for c in self.conditions)


class Not(BaseCondition):
    def __init__(self, condition: BaseCondition) -> None:
        self.condition = condition

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        return not self.condition.test(target, operation, accessor)


class PropertyNotNull(BaseCondition):
    """Passes when the property (the operation key by default) is not None."""

    def __init__(self, property_name: str | None = None) -> None:
        self.property_name = property_name

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        name = self.property_name or operation.key
        return accessor.read(type(target), target, name) is not None


class PropertyNotEmpty(BaseCondition):
    """Passes when the property is neither None nor an empty string/collection."""

    def __init__(self, property_name: str | None = None) -> None:
        self.property_name = property_name

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        name = self.property_name or operation.key
        value = accessor.read(type(target), target, name)
        if value is None:
            return False
        return not (isinstance(value, Sized) and len(value) == 0)


class PropertyEquals(BaseCondition):
    def __init__(self, property_name: str, value: Any) -> None:
        self.property_name = property_name
        self.value = value

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        return accessor.read(type(target), target, self.property_name) == self.value


class TargetTypeIs(BaseCondition):
    """Passes for instances of the given types (subclasses included unless strict)."""

    def __init__(self, *types: type, strict: bool = False) -> None:
        self.types = types
        self.strict = strict

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        if self.strict:
            return type(target) in self.types
        return isinstance(target, self.types)


class Predicate(BaseCondition):
    """Wraps a plain ``callable(target) -> bool``."""

    def __init__(self, func: Callable[[Any], bool]) -> None:
        self.func = func

    def test(self, target: Any, operation: KeyTriggerOperation, accessor: PropertyAccessor) -> bool:
        return bool(self.func(target))
