"""Built-in operation resolvers.

Each resolver inspects a single element (one class of a hierarchy, or a scope
object such as a function) and reports the operations declared directly on
it. The OperationParser walks hierarchies and merges the results.
"""

from __future__ import annotations

import importlib
import inspect
import threading
from collections.abc import Iterable, Mapping
from typing import Annotated, Any, get_args, get_origin

from pydantic import BaseModel, ValidationError, field_validator

from enrichr.core.exceptions import InvalidOperationError
from enrichr.mapping.builder import OperationsBuilder
from enrichr.mapping.plan import (
    DEFAULT_DISASSEMBLE_HANDLER,
    DEFAULT_SORT,
    AssembleOperation,
    DisassembleOperation,
    ResolvedOperations,
)
from enrichr.parser.declarations import (
    Assemble,
    Disassemble,
    declarations_of,
    field_hints,
    infer_nested_type,
)


class DecoratorResolver:
    """Reads declarations attached with ``@assemble`` / ``@disassemble``.

    Disassemble declarations on a class without an explicit type infer it
    from the annotation of the named field.
    """

    def resolve(self, element: Any) -> ResolvedOperations:
        declarations = declarations_of(element)
        result = ResolvedOperations()
        if not declarations:
            return result
        hints: dict[str, Any] | None = None
        for declaration in declarations:
            if isinstance(declaration, Assemble):
                result.assemble.append(declaration.to_operation())
                continue
            inferred = None
            if declaration.type is None and isinstance(element, type):
                if hints is None:
                    hints = field_hints(element)
                inferred = infer_nested_type(hints.get(declaration.key, Any))
            result.disassemble.append(declaration.to_operation(inferred_type=inferred))
        return result


class AnnotatedFieldResolver:
    """Reads ``Assemble`` / ``Disassemble`` markers from ``Annotated`` fields."""

    def resolve(self, element: Any) -> ResolvedOperations:
        result = ResolvedOperations()
        if not isinstance(element, type):
            return result
        own = inspect.get_annotations(element)
        if not own:
            return result
        hints = field_hints(element)
        for name in own:
            hint = hints.get(name)
            if get_origin(hint) is not Annotated:
                continue
            base, *metadata = get_args(hint)
            for marker in metadata:
                if isinstance(marker, Assemble):
                    result.assemble.append(marker.to_operation(key=name))
                elif isinstance(marker, Disassemble):
                    result.disassemble.append(
                        marker.to_operation(key=name, inferred_type=infer_nested_type(base))
                    )
        return result


# --- Configuration ---


def _import_target(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    module_path, _, attribute = value.replace(":", ".").rpartition(".")
    if not module_path:
        raise ValueError(f"'{value}' is not an import path")
    try:
        module = importlib.import_module(module_path)
        return getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Cannot import '{value}': {e}") from e


class AssembleConfig(BaseModel):
    """Assemble operation in dict configuration."""

    key: str
    container: str = ""
    props: str | list[str]
    handler: str = "one_to_one"
    groups: list[str] = []
    sort: int = DEFAULT_SORT

    def to_operation(self) -> AssembleOperation:
        return AssembleOperation(
            key=self.key,
            container=self.container,
            mappings=self.props,  # type: ignore[arg-type]
            handler=self.handler,
            groups=self.groups,  # type: ignore[arg-type]
            sort=self.sort,
        )


class DisassembleConfig(BaseModel):
    """Disassemble operation in dict configuration."""

    key: str
    type: Any = None
    handler: str = DEFAULT_DISASSEMBLE_HANDLER
    groups: list[str] = []
    sort: int = DEFAULT_SORT

    @field_validator("type", mode="before")
    @classmethod
    def _load_type(cls, value: Any) -> Any:
        return _import_target(value)

    def to_operation(self) -> DisassembleOperation:
        return DisassembleOperation(
            key=self.key,
            nested_type=self.type,
            handler=self.handler,
            groups=self.groups,  # type: ignore[arg-type]
            sort=self.sort,
        )


class OperationConfig(BaseModel):
    """Operations of one target type in dict configuration.

    ``target`` is a class or an import path such as ``"app.models:User"``.
    """

    target: Any
    assemble: list[AssembleConfig] = []
    disassemble: list[DisassembleConfig] = []

    @field_validator("target", mode="before")
    @classmethod
    def _load_target(cls, value: Any) -> Any:
        target = _import_target(value)
        if not isinstance(target, type):
            raise ValueError(f"target must be a class, got {target!r}")
        return target


class ConfigurationResolver:
    """Operations registered in code or loaded from dict configuration.

    Registering operations for a type that already has some appends to them;
    same-identity operations are collapsed by the parser.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._declared: dict[Any, ResolvedOperations] = {}

    def register(
        self,
        target: Any,
        operations: ResolvedOperations | OperationsBuilder | None = None,
    ) -> None:
        """Register operations for ``target`` (a class or scope element).

        ``register(builder)`` takes the target from the builder.
        """
        if isinstance(target, OperationsBuilder) and operations is None:
            operations, target = target, target.target_type
        if isinstance(operations, OperationsBuilder):
            operations = operations.build()
        if operations is None:
            raise InvalidOperationError(f"No operations given for {target!r}")
        with self._lock:
            existing = self._declared.setdefault(target, ResolvedOperations())
            existing.assemble.extend(operations.assemble)
            existing.disassemble.extend(operations.disassemble)

    def load_config(self, config: Iterable[Mapping[str, Any]]) -> None:
        """Validate and register operations from plain dict configuration.

        Raises:
            InvalidOperationError: If an entry fails validation.
        """
        for entry in config:
            try:
                parsed = OperationConfig.model_validate(entry)
            except ValidationError as e:
                raise InvalidOperationError(f"Invalid operation configuration: {e}") from e
            self.register(
                parsed.target,
                ResolvedOperations(
                    assemble=[a.to_operation() for a in parsed.assemble],
                    disassemble=[d.to_operation() for d in parsed.disassemble],
                ),
            )

    def resolve(self, element: Any) -> ResolvedOperations:
        declared = self._declared.get(element)
        if declared is None:
            return ResolvedOperations()
        return ResolvedOperations(
            assemble=list(declared.assemble),
            disassemble=list(declared.disassemble),
        )

    def clear(self) -> None:
        with self._lock:
            self._declared.clear()
