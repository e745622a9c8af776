"""Containers - namespace-identified batch data sources."""

from __future__ import annotations

from enrichr.containers.empty import EMPTY_CONTAINER, EMPTY_NAMESPACE, EmptyContainer
from enrichr.containers.memory import EnumContainer, MapContainer
from enrichr.containers.method import MethodContainer

__all__ = [
    "EMPTY_CONTAINER",
    "EMPTY_NAMESPACE",
    "EmptyContainer",
    "EnumContainer",
    "MapContainer",
    "MethodContainer",
]
