"""Operation executors.

An executor enriches a batch of targets of one type, level by level:

    resolve     BeanOperations of the batch type (cached by the parser)
    filter      operations by group predicate, targets by activation condition
    assemble    resolve all containers first, then run the assemble handlers
    disassemble discover nested objects and recurse per nested model

All mutation is in place. Cycles in the *data* graph are not detected; a
target reachable from itself is processed again on every visit.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from enrichr.accessors import default_accessor
from enrichr.core.config import ExecutorConfig
from enrichr.core.enums import ExecutionPolicy, HandlerType
from enrichr.core.exceptions import HandlerNotFoundError
from enrichr.core.groups import OperationFilter, always_match
from enrichr.core.registry import ContainerRegistry
from enrichr.handlers.assemble import (
    DefaultKeySplitter,
    ManyToManyAssembleHandler,
    OneToManyAssembleHandler,
    OneToOneAssembleHandler,
)
from enrichr.handlers.disassemble import ReflectiveDisassembleHandler
from enrichr.mapping.plan import (
    DEFAULT_DISASSEMBLE_HANDLER,
    AssembleExecution,
    AssembleOperation,
    BeanOperations,
    DisassembleOperation,
    KeyTriggerOperation,
)
from enrichr.mapping.protocol import AssembleHandler, Container, DisassembleHandler, PropertyAccessor
from enrichr.parser.parser import OperationParser

logger = logging.getLogger(__name__)


class OperationExecutor(ABC):
    """Base executor; subclasses decide how assemble executions are scheduled.

    Args:
        registry: Containers looked up by namespace.
        parser: Parser providing BeanOperations. A default one is created
            when omitted.
        accessor: Property accessor shared by the built-in handlers.
        config: Executor configuration.
        handlers: Extra or replacement assemble handlers by name.
        disassemble_handlers: Extra or replacement disassemble handlers by name.
    """

    def __init__(
        self,
        registry: ContainerRegistry,
        parser: OperationParser | None = None,
        *,
        accessor: PropertyAccessor | None = None,
        config: ExecutorConfig | None = None,
        handlers: Mapping[str, AssembleHandler] | None = None,
        disassemble_handlers: Mapping[str, DisassembleHandler] | None = None,
    ) -> None:
        self._config = config or ExecutorConfig()
        self._registry = registry
        self._parser = parser or OperationParser(log_execution_time=self._config.log_execution_time)
        self._accessor = accessor or default_accessor()

        splitter = DefaultKeySplitter(self._config.key_separator)
        self._handlers: dict[str, AssembleHandler] = {
            HandlerType.ONE_TO_ONE.value: OneToOneAssembleHandler(self._accessor),
            HandlerType.ONE_TO_MANY.value: OneToManyAssembleHandler(self._accessor),
            HandlerType.MANY_TO_MANY.value: ManyToManyAssembleHandler(self._accessor, splitter),
        }
        self._handlers.update(handlers or {})
        self._disassemble_handlers: dict[str, DisassembleHandler] = {
            DEFAULT_DISASSEMBLE_HANDLER: ReflectiveDisassembleHandler(self._accessor),
        }
        self._disassemble_handlers.update(disassemble_handlers or {})

    @classmethod
    def from_config(
        cls,
        config: ExecutorConfig,
        registry: ContainerRegistry,
        parser: OperationParser | None = None,
        **kwargs: Any,
    ) -> OperationExecutor:
        """Create the executor matching ``config.policy``.

        Args:
            config: ExecutorConfig instance
            registry: ContainerRegistry instance
            parser: Optional shared OperationParser

        Returns:
            DisorderedExecutor or OrderedExecutor
        """
        executor_cls = OrderedExecutor if config.policy is ExecutionPolicy.ORDERED else DisorderedExecutor
        return executor_cls(registry, parser, config=config, **kwargs)

    @property
    def parser(self) -> OperationParser:
        return self._parser

    @property
    def registry(self) -> ContainerRegistry:
        return self._registry

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    @property
    def accessor(self) -> PropertyAccessor:
        return self._accessor

    def register_handler(self, name: str, handler: AssembleHandler) -> None:
        self._handlers[name] = handler

    def register_disassemble_handler(self, name: str, handler: DisassembleHandler) -> None:
        self._disassemble_handlers[name] = handler

    def execute(
        self,
        targets: Iterable[Any],
        operations: type | BeanOperations | None = None,
        *,
        filter: OperationFilter | None = None,  # noqa: A002
        containers: Mapping[str, Container] | None = None,
    ) -> None:
        """Enrich ``targets`` in place.

        Args:
            targets: Objects of one type. None entries are ignored.
            operations: The targets' type or its BeanOperations. Inferred
                from the first target when omitted.
            filter: Group predicate selecting operations. Defaults to all.
            containers: Temporary containers by namespace, taking precedence
                over the registry for this call only.

        Raises:
            ContainerNotFoundError: If an operation names an unknown namespace.
                Raised before any target is modified.
            HandlerNotFoundError: If an operation names an unknown handler.
            ContainerLookupError: If a container fails.
        """
        batch = [target for target in targets if target is not None]
        if not batch:
            return
        if operations is None:
            operations = type(batch[0])
        bean_operations = (
            operations if isinstance(operations, BeanOperations) else self._parser.parse(operations)
        )

        start = time.perf_counter()
        self._execute_level(bean_operations, batch, filter or always_match(), containers or {})
        if self._config.log_execution_time:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug(
                "execution of %d %s targets completed in %.2f ms",
                len(batch),
                bean_operations.target_type.__qualname__,
                elapsed,
            )

    def _execute_level(
        self,
        bean_operations: BeanOperations,
        targets: list[Any],
        op_filter: OperationFilter,
        overrides: Mapping[str, Container],
    ) -> None:
        if bean_operations.is_empty:
            return
        if not bean_operations.active and not self._config.execute_inactive:
            logger.warning(
                "operations of %s are not active yet, skipping %d targets",
                bean_operations.target_type.__qualname__,
                len(targets),
            )
            return

        assemble_operations = [op for op in bean_operations.assemble_operations if op_filter(op)]
        disassemble_operations = [
            op for op in bean_operations.disassemble_operations if op_filter(op)
        ]

        if assemble_operations:
            executions = self._prepare_executions(
                bean_operations, assemble_operations, targets, overrides
            )
            if executions:
                self._run_executions(executions)

        for operation in disassemble_operations:
            self._disassemble(operation, targets, op_filter, overrides)

    def _prepare_executions(
        self,
        bean_operations: BeanOperations,
        operations: list[AssembleOperation],
        targets: list[Any],
        overrides: Mapping[str, Container],
    ) -> list[AssembleExecution]:
        # Resolve every container and handler before touching any target.
        containers = {}
        for operation in operations:
            if operation.container not in containers:
                containers[operation.container] = self._container(operation.container, overrides)
            self._handler(operation.handler)

        executions = []
        for operation in operations:
            matched = self._matching(operation, targets)
            for chunk in self._split(matched):
                executions.append(
                    AssembleExecution(
                        bean_operations=bean_operations,
                        operation=operation,
                        container=containers[operation.container],
                        targets=tuple(chunk),
                    )
                )
        return executions

    @abstractmethod
    def _run_executions(self, executions: list[AssembleExecution]) -> None:
        """Hand the executions to their assemble handlers."""

    def _disassemble(
        self,
        operation: DisassembleOperation,
        targets: list[Any],
        op_filter: OperationFilter,
        overrides: Mapping[str, Container],
    ) -> None:
        matched = self._matching(operation, targets)
        if not matched:
            return
        handler = self._disassemble_handler(operation.handler)
        nested = handler.process(operation, matched)
        if not nested:
            return

        if not operation.is_dynamic and operation.nested_operations is not None:
            self._execute_level(operation.nested_operations, nested, op_filter, overrides)
            return

        # Generic or polymorphic property: resolve per runtime type.
        by_type: dict[type, list[Any]] = {}
        for obj in nested:
            by_type.setdefault(type(obj), []).append(obj)
        for nested_type, group in by_type.items():
            nested_operations = self._parser.parse(nested_type)
            self._execute_level(nested_operations, group, op_filter, overrides)

    def _matching(self, operation: KeyTriggerOperation, targets: list[Any]) -> list[Any]:
        condition = operation.condition
        if condition is None:
            return targets
        return [target for target in targets if condition.test(target, operation, self._accessor)]

    def _split(self, targets: list[Any]) -> list[list[Any]]:
        if not targets:
            return []
        size = self._config.batch_size
        if size <= 0 or len(targets) <= size:
            return [targets]
        return [targets[i : i + size] for i in range(0, len(targets), size)]

    def _container(self, namespace: str, overrides: Mapping[str, Container]) -> Container:
        container = overrides.get(namespace)
        if container is not None:
            return container
        return self._registry.get(namespace)

    def _handler(self, name: str) -> AssembleHandler:
        handler = self._handlers.get(name)
        if handler is None:
            raise HandlerNotFoundError(name, sorted(self._handlers))
        return handler

    def _disassemble_handler(self, name: str) -> DisassembleHandler:
        handler = self._disassemble_handlers.get(name)
        if handler is None:
            raise HandlerNotFoundError(name, sorted(self._disassemble_handlers))
        return handler


class DisorderedExecutor(OperationExecutor):
    """Groups executions sharing a container and handler into one handler call.

    Operations on the same container are looked up together, so the relative
    order of operations is undefined.
    """

    def _run_executions(self, executions: list[AssembleExecution]) -> None:
        groups: dict[tuple[int, str, int], list[AssembleExecution]] = {}
        chunk_index: dict[int, int] = {}
        for execution in executions:
            # Batches of one operation never share a handler call.
            index = chunk_index.get(id(execution.operation), 0)
            chunk_index[id(execution.operation)] = index + 1
            key = (id(execution.container), execution.operation.handler, index)
            groups.setdefault(key, []).append(execution)

        for group in groups.values():
            first = group[0]
            self._handler(first.operation.handler).process(first.container, group)


class OrderedExecutor(OperationExecutor):
    """Runs executions one at a time by ascending operation sort value.

    A later operation may read a field written by an earlier one.
    """

    def _run_executions(self, executions: list[AssembleExecution]) -> None:
        for execution in sorted(executions, key=lambda e: e.operation.sort):
            self._handler(execution.operation.handler).process(execution.container, [execution])
