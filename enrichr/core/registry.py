"""Container Registry - resolves containers by namespace.

Namespace convention:
    "genders"           -> a container registered under that name
    ""                  -> the empty container (self-introspection)

Containers are registered once at startup by the composition root and looked
up by executors on every execution.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from enrichr.containers.empty import EMPTY_CONTAINER, EMPTY_NAMESPACE
from enrichr.core.exceptions import ContainerNotFoundError, DuplicateContainerError
from enrichr.mapping.protocol import Container

logger = logging.getLogger(__name__)


class ContainerRegistry:
    """Thread-safe namespace -> container registry.

    Containers may be registered directly or as factories that are invoked
    once, on first lookup.

    Args:
        containers: Containers registered under their own namespace.
    """

    def __init__(self, *containers: Container) -> None:
        self._lock = threading.RLock()
        self._containers: dict[str, Container] = {}
        self._factories: dict[str, Callable[[], Container]] = {}
        for container in containers:
            self.register(container)

    def register(
        self,
        container: Container,
        namespace: str | None = None,
        *,
        replace: bool = False,
    ) -> None:
        """Register a container under ``namespace`` (defaults to its own).

        Raises:
            DuplicateContainerError: If the namespace is taken and ``replace``
                is False.
        """
        namespace = container.namespace if namespace is None else namespace
        with self._lock:
            self._check_free(namespace, replace)
            self._factories.pop(namespace, None)
            self._containers[namespace] = container
        logger.debug("registered container '%s': %r", namespace, container)

    def register_factory(
        self,
        namespace: str,
        factory: Callable[[], Container],
        *,
        replace: bool = False,
    ) -> None:
        """Register a factory creating the container on first lookup."""
        with self._lock:
            self._check_free(namespace, replace)
            self._containers.pop(namespace, None)
            self._factories[namespace] = factory

    def _check_free(self, namespace: str, replace: bool) -> None:
        if namespace == EMPTY_NAMESPACE:
            raise DuplicateContainerError(namespace)
        if not replace and (namespace in self._containers or namespace in self._factories):
            raise DuplicateContainerError(namespace)

    def get(self, namespace: str) -> Container:
        """Look up a container by namespace.

        Raises:
            ContainerNotFoundError: If nothing is registered under the namespace.
        """
        if namespace == EMPTY_NAMESPACE:
            return EMPTY_CONTAINER
        container = self._containers.get(namespace)
        if container is not None:
            return container
        with self._lock:
            container = self._containers.get(namespace)
            if container is not None:
                return container
            factory = self._factories.get(namespace)
            if factory is None:
                raise ContainerNotFoundError(namespace)
            container = factory()
            self._containers[namespace] = container
            del self._factories[namespace]
        logger.debug("created container '%s' from factory", namespace)
        return container

    def has(self, namespace: str) -> bool:
        """Check if a namespace is registered."""
        return (
            namespace == EMPTY_NAMESPACE
            or namespace in self._containers
            or namespace in self._factories
        )

    def unregister(self, namespace: str) -> Container | None:
        """Remove a namespace, returning the container if it was created."""
        with self._lock:
            self._factories.pop(namespace, None)
            return self._containers.pop(namespace, None)

    def clear(self) -> None:
        with self._lock:
            self._containers.clear()
            self._factories.clear()

    @property
    def namespaces(self) -> list[str]:
        """List all registered namespaces, sorted alphabetically."""
        return sorted({*self._containers, *self._factories})

    def __len__(self) -> int:
        """Number of registered namespaces."""
        return len(self.namespaces)
