"""The empty container - marks operations whose target is its own source."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

EMPTY_NAMESPACE = ""


class EmptyContainer:
    """Container that never resolves anything.

    Assemble handlers treat it as "no container": each target is mapped from
    its own properties instead of a looked-up source.
    """

    @property
    def namespace(self) -> str:
        return EMPTY_NAMESPACE

    def get(self, keys: Collection[Any]) -> Mapping[Any, Any]:
        return {}

    def __repr__(self) -> str:
        return "EmptyContainer()"


EMPTY_CONTAINER = EmptyContainer()
