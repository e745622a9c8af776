"""Declaration markers and decorators.

Operations are declared either on fields with ``typing.Annotated``::

    @dataclass
    class Person:
        gender: Annotated[int, Assemble("genders", props=":gender_label")]
        pets: Annotated[list[Pet], Disassemble()]

or on classes and functions with decorators::

    @assemble("gender", "genders", props=":gender_label")
    class Person: ...
"""

from __future__ import annotations

import collections.abc
import inspect
import types
import typing
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

from enrichr.core.enums import HandlerType
from enrichr.core.exceptions import InvalidOperationError
from enrichr.mapping.plan import (
    DEFAULT_DISASSEMBLE_HANDLER,
    DEFAULT_SORT,
    AssembleOperation,
    DisassembleOperation,
    PropertyMapping,
)

OPERATIONS_ATTRIBUTE = "__enrichr_operations__"

E = TypeVar("E")

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Iterable,
    collections.abc.Collection,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
)


@dataclass(frozen=True)
class Assemble:
    """Assemble marker. Inside ``Annotated`` the key defaults to the field name."""

    container: str = ""
    props: str | tuple[str | PropertyMapping, ...] = ()
    key: str | None = None
    handler: HandlerType | str = HandlerType.ONE_TO_ONE
    groups: tuple[str, ...] | str = ()
    sort: int = DEFAULT_SORT
    condition: Any = None
    key_type: type | None = None

    def to_operation(self, key: str | None = None) -> AssembleOperation:
        key = self.key if self.key is not None else key
        if key is None:
            raise InvalidOperationError(
                f"Assemble declaration for container '{self.container}' has no key"
            )
        return AssembleOperation(
            key=key,
            container=self.container,
            mappings=PropertyMapping.parse_all(self.props),
            handler=self.handler,  # type: ignore[arg-type]
            groups=self.groups,  # type: ignore[arg-type]
            sort=self.sort,
            condition=self.condition,
            key_type=self.key_type,
        )


@dataclass(frozen=True)
class Disassemble:
    """Disassemble marker. ``type`` is inferred from the annotation when omitted."""

    key: str | None = None
    type: type | None = None
    handler: str = DEFAULT_DISASSEMBLE_HANDLER
    groups: tuple[str, ...] | str = ()
    sort: int = DEFAULT_SORT
    condition: Any = None

    def to_operation(self, key: str | None = None, inferred_type: type | None = None) -> DisassembleOperation:
        key = self.key if self.key is not None else key
        if key is None:
            raise InvalidOperationError("Disassemble declaration has no key")
        return DisassembleOperation(
            key=key,
            nested_type=self.type if self.type is not None else inferred_type,
            handler=self.handler,
            groups=self.groups,  # type: ignore[arg-type]
            sort=self.sort,
            condition=self.condition,
        )


def infer_nested_type(hint: Any) -> type | None:
    """Find the element class of a possibly nested collection annotation.

    ``list[list[Item]]`` and ``Item | None`` give ``Item``. Generic or
    ambiguous annotations give None, meaning the type is resolved per
    runtime object.
    """
    if get_origin(hint) is Annotated:
        return infer_nested_type(get_args(hint)[0])
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(hint) if a is not type(None)]
        return infer_nested_type(args[0]) if len(args) == 1 else None
    if origin in _SEQUENCE_ORIGINS:
        args = {a for a in get_args(hint) if a is not Ellipsis}
        return infer_nested_type(args.pop()) if len(args) == 1 else None
    if origin is not None:
        return None
    if hint is Any or hint is object or isinstance(hint, TypeVar):
        return None
    return hint if isinstance(hint, type) else None


# Classes from these modules never declare operations.
_LIBRARY_MODULES = ("builtins", "abc", "typing", "collections", "enum", "pydantic")


def is_library_class(cls: type) -> bool:
    module = getattr(cls, "__module__", "") or ""
    return module.split(".")[0] in _LIBRARY_MODULES


def field_hints(element: type | Callable[..., Any]) -> dict[str, Any]:
    """Evaluated annotations of a class or function, Annotated extras kept.

    Classes contribute the annotations of every non-library class in their
    MRO, most specific last. Quoted references nested inside annotations
    (``list["Node"]``) are evaluated too.

    Raises:
        InvalidOperationError: If the annotations reference undefined names.
    """
    hints: dict[str, Any] = {}
    try:
        if not isinstance(element, type):
            return typing.get_type_hints(element, include_extras=True)
        for owner in reversed(element.__mro__):
            own = inspect.get_annotations(owner)
            if not own or is_library_class(owner):
                continue
            # Evaluate one class at a time so library bases are never touched.
            holder = type(owner.__name__, (), {"__annotations__": own, "__module__": owner.__module__})
            hints.update(typing.get_type_hints(holder, localns={owner.__name__: owner}, include_extras=True))
    except (NameError, TypeError) as e:
        name = getattr(element, "__qualname__", repr(element))
        raise InvalidOperationError(f"Cannot resolve annotations of {name}: {e}") from e
    return hints


def declarations_of(element: Any) -> list[Assemble | Disassemble]:
    """Declarations attached by decorators directly to ``element``."""
    return list(getattr(element, "__dict__", {}).get(OPERATIONS_ATTRIBUTE, ()))


def _declare(element: Any, declaration: Assemble | Disassemble) -> None:
    # Read from __dict__ so subclasses never share their parent's list.
    declared = element.__dict__.get(OPERATIONS_ATTRIBUTE)
    if declared is None:
        declared = []
        setattr(element, OPERATIONS_ATTRIBUTE, declared)
    # Decorators apply bottom-up; prepend to keep source order.
    declared.insert(0, declaration)


def assemble(
    key: str,
    container: str = "",
    props: str | Iterable[str | PropertyMapping] = (),
    *,
    handler: HandlerType | str = HandlerType.ONE_TO_ONE,
    groups: Iterable[str] | str = (),
    sort: int = DEFAULT_SORT,
    condition: Any = None,
    key_type: type | None = None,
) -> Callable[[E], E]:
    """Declare an assemble operation on a class or function."""
    declaration = Assemble(
        container=container,
        props=props if isinstance(props, str) else tuple(props),
        key=key,
        handler=handler,
        groups=groups if isinstance(groups, str) else tuple(groups),
        sort=sort,
        condition=condition,
        key_type=key_type,
    )

    def decorator(element: E) -> E:
        _declare(element, declaration)
        return element

    return decorator


def disassemble(
    key: str,
    type: type | None = None,  # noqa: A002
    *,
    handler: str = DEFAULT_DISASSEMBLE_HANDLER,
    groups: Iterable[str] | str = (),
    sort: int = DEFAULT_SORT,
    condition: Any = None,
) -> Callable[[E], E]:
    """Declare a disassemble operation on a class or function."""
    declaration = Disassemble(
        key=key,
        type=type,
        handler=handler,
        groups=groups if isinstance(groups, str) else tuple(groups),
        sort=sort,
        condition=condition,
    )

    def decorator(element: E) -> E:
        _declare(element, declaration)
        return element

    return decorator
