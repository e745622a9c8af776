"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

import pytest

from enrichr.containers.memory import MapContainer
from enrichr.core.config import ExecutorConfig
from enrichr.core.executor import DisorderedExecutor, OrderedExecutor
from enrichr.core.registry import ContainerRegistry
from enrichr.core.template import OperateTemplate
from enrichr.parser.parser import OperationParser
from enrichr.parser.resolvers import (
    AnnotatedFieldResolver,
    ConfigurationResolver,
    DecoratorResolver,
)


class RecordingContainer:
    """MapContainer wrapper recording every bulk lookup."""

    def __init__(self, namespace: str, data: Mapping[Any, Any]) -> None:
        self._delegate = MapContainer(namespace, data)
        self.calls: list[set[Any]] = []

    @property
    def namespace(self) -> str:
        return self._delegate.namespace

    def get(self, keys: Collection[Any]) -> Mapping[Any, Any]:
        self.calls.append(set(keys))
        return self._delegate.get(keys)


@pytest.fixture
def genders() -> RecordingContainer:
    """The ``genders`` container: 0 -> "F", 1 -> "M"."""
    return RecordingContainer("genders", {0: "F", 1: "M"})


@pytest.fixture
def registry(genders: RecordingContainer) -> ContainerRegistry:
    return ContainerRegistry(genders)


@pytest.fixture
def config_resolver() -> ConfigurationResolver:
    return ConfigurationResolver()


@pytest.fixture
def parser(config_resolver: ConfigurationResolver) -> OperationParser:
    """Parser with decorator, Annotated field and configuration resolvers."""
    return OperationParser([DecoratorResolver(), AnnotatedFieldResolver(), config_resolver])


@pytest.fixture
def executor(registry: ContainerRegistry, parser: OperationParser) -> DisorderedExecutor:
    return DisorderedExecutor(registry, parser)


@pytest.fixture
def ordered_executor(registry: ContainerRegistry, parser: OperationParser) -> OrderedExecutor:
    return OrderedExecutor(registry, parser, config=ExecutorConfig(policy="ordered"))


@pytest.fixture
def template(executor: DisorderedExecutor) -> OperateTemplate:
    return OperateTemplate(executor)


@pytest.fixture
def make_container():
    """Factory for recording in-memory containers.

    Usage:
        tags = make_container("tags", {"a": "A"})
        ...
        assert tags.calls == [{"a"}]
    """

    def _make(namespace: str, data: Mapping[Any, Any]) -> RecordingContainer:
        return RecordingContainer(namespace, data)

    return _make
