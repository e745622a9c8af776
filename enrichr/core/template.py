"""High-level entry points over an executor.

OperateTemplate enriches single objects or batches. ``auto_operate`` enriches
the return value of a function, and OperatorFactory turns a stub class into
an operator object whose methods each run a fixed set of operations.
"""

from __future__ import annotations

import functools
import inspect
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from enrichr.core.exceptions import InvalidOperationError
from enrichr.core.executor import OperationExecutor
from enrichr.core.groups import OperationFilter, all_match, any_match, none_match
from enrichr.mapping.plan import BeanOperations
from enrichr.mapping.protocol import Container
from enrichr.parser.declarations import field_hints, infer_nested_type

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

_BATCH_TYPES = (list, tuple, set, frozenset, deque)


def _as_batch(target: Any) -> list[Any]:
    if target is None:
        return []
    if isinstance(target, _BATCH_TYPES):
        return [t for t in target if t is not None]
    return [target]


class OperateTemplate:
    """Enriches objects through an executor.

    Every ``execute*`` method accepts a single object or a list, tuple or set
    of objects of one type, and returns its argument after enriching it in
    place.
    """

    def __init__(self, executor: OperationExecutor) -> None:
        self._executor = executor

    @property
    def executor(self) -> OperationExecutor:
        return self._executor

    def execute(
        self,
        target: T,
        operations: type | BeanOperations | None = None,
        *,
        filter: OperationFilter | None = None,  # noqa: A002
        containers: Mapping[str, Container] | None = None,
        scope: Any = None,
    ) -> T:
        """Enrich ``target``.

        Args:
            target: Object or batch of objects.
            operations: Type or BeanOperations; inferred when omitted.
            filter: Group predicate selecting operations.
            containers: Temporary containers for this call.
            scope: Element whose declarations apply on top of the type's.
        """
        batch = _as_batch(target)
        if not batch:
            return target
        if operations is None:
            operations = type(batch[0])
        if scope is not None and not isinstance(operations, BeanOperations):
            operations = self._executor.parser.parse(operations, scope=scope)
        self._executor.execute(batch, operations, filter=filter, containers=containers)
        return target

    def execute_if_match_any_groups(self, target: T, *groups: str, **options: Any) -> T:
        """Run only operations tagged with at least one of ``groups``."""
        return self.execute(target, filter=any_match(*groups), **options)

    def execute_if_match_all_groups(self, target: T, *groups: str, **options: Any) -> T:
        """Run only operations tagged with every one of ``groups``."""
        return self.execute(target, filter=all_match(*groups), **options)

    def execute_if_none_match_groups(self, target: T, *groups: str, **options: Any) -> T:
        """Skip operations tagged with any of ``groups``."""
        return self.execute(target, filter=none_match(*groups), **options)


def _group_filter(includes: tuple[str, ...], excludes: tuple[str, ...]) -> OperationFilter | None:
    if not includes and not excludes:
        return None
    include = any_match(*includes) if includes else None
    exclude = none_match(*excludes)

    def matches(operation: Any) -> bool:
        if include is not None and not include(operation):
            return False
        return exclude(operation)

    return matches


def auto_operate(
    template: OperateTemplate,
    target_type: type | None = None,
    *,
    includes: tuple[str, ...] = (),
    excludes: tuple[str, ...] = (),
) -> Callable[[F], F]:
    """Enrich the return value of the decorated function.

    ``@assemble`` / ``@disassemble`` declarations on the function itself apply
    on top of those of the result type. Place this decorator outermost::

        @auto_operate(template)
        @assemble("gender", "genders", props=":gender_label")
        def load_people() -> list[Person]: ...

    Args:
        template: Template used to run the operations.
        target_type: Type of the result elements. Inferred from the first
            element when omitted.
        includes: Run only operations in at least one of these groups.
        excludes: Skip operations in any of these groups.
    """
    op_filter = _group_filter(includes, excludes)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = func(*args, **kwargs)
            template.execute(result, target_type, filter=op_filter, scope=func)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


@dataclass(frozen=True)
class Invocation:
    """One operator method: fixed operations applied to the first argument."""

    name: str
    template: OperateTemplate
    operations: BeanOperations

    def __call__(self, target: T, *, containers: Mapping[str, Container] | None = None) -> T:
        return self.template.execute(target, self.operations, containers=containers)


class Operator:
    """Object built by OperatorFactory, one Invocation per stub method."""

    def __init__(self, stub: type, invocations: Mapping[str, Invocation]) -> None:
        self.stub = stub
        self.invocations = dict(invocations)
        for name, invocation in self.invocations.items():
            setattr(self, name, invocation)

    def __repr__(self) -> str:
        return f"Operator({self.stub.__qualname__}, methods={sorted(self.invocations)})"


class OperatorFactory:
    """Builds operators from stub classes.

    Each public method of the stub declares the target type through the
    annotation of its first parameter (after ``self``) and may carry its own
    ``@assemble`` / ``@disassemble`` declarations::

        class PersonOperator:
            @assemble("gender", "genders", props=":gender_label")
            def fill(self, people: list[Person]) -> None: ...

        operator = factory.create(PersonOperator)
        operator.fill(people, containers={"genders": override})

    Method bodies are never called. Operations are parsed when the operator
    is created, so declaration errors surface at configuration time.
    """

    def __init__(self, template: OperateTemplate) -> None:
        self._template = template

    def create(self, stub: type) -> Operator:
        invocations = {}
        for name, method in inspect.getmembers(stub, inspect.isfunction):
            if name.startswith("_"):
                continue
            invocations[name] = self._invocation(stub, name, method)
        if not invocations:
            raise InvalidOperationError(f"{stub.__qualname__} declares no operator methods")
        return Operator(stub, invocations)

    def _invocation(self, stub: type, name: str, method: Callable[..., Any]) -> Invocation:
        target_type = self._target_type(stub, name, method)
        operations = self._template.executor.parser.parse(target_type, scope=method)
        return Invocation(name=name, template=self._template, operations=operations)

    @staticmethod
    def _target_type(stub: type, name: str, method: Callable[..., Any]) -> type:
        parameters = [
            p for p in inspect.signature(method).parameters.values()
            if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        ]
        if len(parameters) < 2:
            raise InvalidOperationError(
                f"{stub.__qualname__}.{name} must take the targets as its first argument"
            )
        hints = field_hints(method)
        target_type = infer_nested_type(hints.get(parameters[1].name))
        if target_type is None:
            raise InvalidOperationError(
                f"{stub.__qualname__}.{name} must annotate '{parameters[1].name}' with a class"
            )
        return target_type
