"""Operation model data classes.

Frozen dataclasses describe what to enrich on a type. They are produced by
resolvers, merged and cached by the OperationParser, and consumed by the
executors and handlers at execution time.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Union

from enrichr.core.enums import HandlerType
from enrichr.core.exceptions import InvalidOperationError

DEFAULT_SORT = sys.maxsize
DEFAULT_DISASSEMBLE_HANDLER = "default"

_PAIR_SEPARATOR = ":"
_LIST_SEPARATOR = ","


@dataclass(frozen=True)
class PropertyMapping:
    """Maps a property of the source value onto a property of the target.

    ``source=None`` assigns the whole resolved source value.
    """

    reference: str
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.reference:
            raise InvalidOperationError("Property mapping must name a reference property")
        if self.source == "":
            object.__setattr__(self, "source", None)

    @property
    def has_source(self) -> bool:
        return self.source is not None

    @classmethod
    def parse(cls, text: str) -> PropertyMapping:
        """Parse ``"source:reference"``, ``"name"`` or ``":reference"``.

        A bare name maps the property of the same name on both sides.
        """
        text = text.strip()
        pair = text.split(_PAIR_SEPARATOR)
        if not text or len(pair) > 2:
            raise InvalidOperationError(f"Illegal property mapping: '{text}'")
        if len(pair) == 1:
            return cls(reference=pair[0], source=pair[0])
        return cls(reference=pair[1].strip(), source=pair[0].strip() or None)

    @classmethod
    def parse_all(cls, mappings: str | Iterable[str | PropertyMapping]) -> tuple[PropertyMapping, ...]:
        """Normalize mappings to an ordered tuple without duplicates."""
        if isinstance(mappings, str):
            mappings = [m for m in mappings.split(_LIST_SEPARATOR) if m.strip()]
        result: dict[PropertyMapping, None] = {}
        for mapping in mappings:
            if isinstance(mapping, str):
                mapping = cls.parse(mapping)
            result[mapping] = None
        return tuple(result)


def _normalize_groups(groups: Iterable[str] | str | None) -> frozenset[str]:
    if groups is None:
        return frozenset()
    if isinstance(groups, str):
        return frozenset({groups})
    return frozenset(groups)


@dataclass(frozen=True)
class AssembleOperation:
    """Look up ``key`` in ``container`` and write ``mappings`` onto the target.

    An empty ``container`` namespace means the target is its own source.
    """

    key: str
    container: str
    mappings: tuple[PropertyMapping, ...]
    handler: str = HandlerType.ONE_TO_ONE.value
    groups: frozenset[str] = frozenset()
    sort: int = DEFAULT_SORT
    condition: Any = field(default=None, compare=False)
    key_type: type | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mappings", PropertyMapping.parse_all(self.mappings))
        object.__setattr__(self, "groups", _normalize_groups(self.groups))
        if isinstance(self.handler, HandlerType):
            object.__setattr__(self, "handler", self.handler.value)
        if not self.mappings:
            raise InvalidOperationError(
                f"Assemble operation on '{self.key}' must declare at least one property mapping"
            )

    @property
    def identity(self) -> tuple[str, str, str, str]:
        return ("assemble", self.key, self.container, self.handler)


@dataclass(frozen=True)
class DisassembleOperation:
    """Discover nested objects held by property ``key``.

    ``nested_type`` is None for generic or polymorphic properties; their
    operations are resolved per runtime type during execution.
    """

    key: str
    nested_type: type | None = None
    handler: str = DEFAULT_DISASSEMBLE_HANDLER
    groups: frozenset[str] = frozenset()
    sort: int = DEFAULT_SORT
    condition: Any = field(default=None, compare=False)
    nested_operations: BeanOperations | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.key:
            raise InvalidOperationError("Disassemble operation must name a property")
        object.__setattr__(self, "groups", _normalize_groups(self.groups))

    @property
    def identity(self) -> tuple[str, str]:
        return ("disassemble", self.key)

    @property
    def is_dynamic(self) -> bool:
        return self.nested_type is None


KeyTriggerOperation = Union[AssembleOperation, DisassembleOperation]


@dataclass
class ResolvedOperations:
    """Operations contributed by one resolver for one element."""

    assemble: list[AssembleOperation] = field(default_factory=list)
    disassemble: list[DisassembleOperation] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.assemble and not self.disassemble


@dataclass(eq=False)
class BeanOperations:
    """Resolved, merged and sorted operations of one type.

    Instances compare by identity: while a type is still being parsed, its
    BeanOperations is handed out as a forward reference and filled in later.
    """

    target_type: type
    assemble_operations: list[AssembleOperation] = field(default_factory=list)
    disassemble_operations: list[DisassembleOperation] = field(default_factory=list)
    active: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.assemble_operations and not self.disassemble_operations

    @classmethod
    def empty(cls, target_type: type) -> BeanOperations:
        return cls(target_type=target_type)


@dataclass(frozen=True)
class AssembleExecution:
    """One assemble operation paired with a homogeneous batch of targets."""

    bean_operations: BeanOperations
    operation: AssembleOperation
    container: Any
    targets: tuple[Any, ...]

    @property
    def target_type(self) -> type:
        return self.bean_operations.target_type
