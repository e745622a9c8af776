"""enrichr - declarative batch enrichment of in-memory object graphs."""

from __future__ import annotations

from enrichr.accessors import (
    ChainPropertyAccessor,
    MappingPropertyAccessor,
    ReflectivePropertyAccessor,
    default_accessor,
)
from enrichr.containers import (
    EMPTY_CONTAINER,
    EmptyContainer,
    EnumContainer,
    MapContainer,
    MethodContainer,
)
from enrichr.core.config import ExecutorConfig
from enrichr.core.enums import ExecutionPolicy, HandlerType, MappingType
from enrichr.core.exceptions import (
    ConfigurationError,
    ContainerLookupError,
    ContainerNotFoundError,
    DuplicateContainerError,
    EnrichrError,
    ExecutionError,
    HandlerNotFoundError,
    InvalidOperationError,
    MappingError,
    OperationParseError,
    PropertyCoercionError,
    PropertyNotFoundError,
)
from enrichr.core.executor import DisorderedExecutor, OperationExecutor, OrderedExecutor
from enrichr.core.groups import all_match, always_match, any_match, none_match
from enrichr.core.registry import ContainerRegistry
from enrichr.core.template import OperateTemplate, OperatorFactory, auto_operate
from enrichr.mapping.builder import operations_for
from enrichr.mapping.plan import (
    AssembleOperation,
    BeanOperations,
    DisassembleOperation,
    PropertyMapping,
)
from enrichr.parser import (
    AnnotatedFieldResolver,
    Assemble,
    ConfigurationResolver,
    DecoratorResolver,
    Disassemble,
    OperationParser,
    assemble,
    disassemble,
)

__all__ = [
    # Declarations
    "Assemble",
    "Disassemble",
    "assemble",
    "disassemble",
    "operations_for",
    # Parser
    "OperationParser",
    "DecoratorResolver",
    "AnnotatedFieldResolver",
    "ConfigurationResolver",
    # Model
    "AssembleOperation",
    "DisassembleOperation",
    "BeanOperations",
    "PropertyMapping",
    # Execution
    "ExecutorConfig",
    "OperationExecutor",
    "DisorderedExecutor",
    "OrderedExecutor",
    "OperateTemplate",
    "OperatorFactory",
    "auto_operate",
    # Groups
    "always_match",
    "any_match",
    "all_match",
    "none_match",
    # Containers
    "ContainerRegistry",
    "MapContainer",
    "EnumContainer",
    "MethodContainer",
    "EmptyContainer",
    "EMPTY_CONTAINER",
    # Accessors
    "ReflectivePropertyAccessor",
    "MappingPropertyAccessor",
    "ChainPropertyAccessor",
    "default_accessor",
    # Enums
    "HandlerType",
    "ExecutionPolicy",
    "MappingType",
    # Exceptions
    "EnrichrError",
    "ConfigurationError",
    "ContainerNotFoundError",
    "DuplicateContainerError",
    "InvalidOperationError",
    "PropertyNotFoundError",
    "HandlerNotFoundError",
    "OperationParseError",
    "ExecutionError",
    "ContainerLookupError",
    "MappingError",
    "PropertyCoercionError",
]
