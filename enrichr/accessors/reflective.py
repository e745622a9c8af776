"""Attribute-based property access with type coercion.

Values are coerced to the declared annotation of the target field with a
cached Pydantic TypeAdapter. Fields without a usable annotation receive the
value unchanged.
"""

from __future__ import annotations

import dataclasses
import inspect
import typing
from functools import lru_cache
from typing import Any

from pydantic import ConfigDict, PydanticUserError, TypeAdapter, ValidationError

from enrichr.core.exceptions import PropertyCoercionError, PropertyNotFoundError

_ARBITRARY_TYPES = ConfigDict(arbitrary_types_allowed=True)


def declared_fields(cls: type) -> dict[str, Any] | None:
    """Return declared field annotations of a class, or None if it declares none.

    Pydantic models and dataclasses report their fields; other classes report
    the annotations found along their MRO.
    """
    if hasattr(cls, "model_fields"):
        return {name: f.annotation for name, f in cls.model_fields.items()}

    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        return {f.name: hints.get(f.name, Any) for f in dataclasses.fields(cls)}

    annotations: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        annotations.update(inspect.get_annotations(klass))
    if not annotations:
        return None
    hints = _type_hints(cls)
    return {name: hints.get(name, Any) for name in annotations}


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, localns={cls.__name__: cls})
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to no coercion.
        return {}


@lru_cache(maxsize=1024)
def _adapter_for(target_type: type, name: str) -> TypeAdapter[Any] | None:
    fields = declared_fields(target_type)
    if not fields:
        return None
    annotation = fields.get(name, Any)
    if annotation is Any or isinstance(annotation, str):
        return None
    try:
        return TypeAdapter(annotation, config=_ARBITRARY_TYPES)
    except PydanticUserError:
        # Models and dataclasses carry their own config.
        try:
            return TypeAdapter(annotation)
        except PydanticUserError:
            return None
    except (TypeError, ValueError):
        return None


class ReflectivePropertyAccessor:
    """Reads and writes properties with ``getattr``/``setattr``."""

    def __init__(self, coerce: bool = True) -> None:
        self._coerce = coerce

    def read(self, target_type: type, instance: Any, name: str) -> Any:
        try:
            return getattr(instance, name)
        except AttributeError:
            raise PropertyNotFoundError(target_type, name) from None

    def write(self, target_type: type, instance: Any, name: str, value: Any) -> None:
        if self._coerce:
            value = self.coerce(target_type, name, value)
        try:
            setattr(instance, name, value)
        except ValidationError as e:
            raise PropertyCoercionError(target_type, name, str(e)) from e
        except (AttributeError, ValueError) as e:
            raise PropertyNotFoundError(target_type, name) from e

    def coerce(self, target_type: type, name: str, value: Any) -> Any:
        """Coerce ``value`` to the annotation of ``target_type.name``."""
        adapter = _adapter_for(target_type, name)
        if adapter is None:
            return value
        try:
            return adapter.validate_python(value)
        except ValidationError as e:
            raise PropertyCoercionError(target_type, name, str(e)) from e
