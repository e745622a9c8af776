"""Operation model - what to enrich on a type and how."""

from __future__ import annotations

from enrichr.mapping.builder import OperationsBuilder, operations_for
from enrichr.mapping.plan import (
    AssembleExecution,
    AssembleOperation,
    BeanOperations,
    DisassembleOperation,
    PropertyMapping,
    ResolvedOperations,
)

__all__ = [
    "OperationsBuilder",
    "operations_for",
    "AssembleExecution",
    "AssembleOperation",
    "BeanOperations",
    "DisassembleOperation",
    "PropertyMapping",
    "ResolvedOperations",
]
