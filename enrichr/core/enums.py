"""Enumerations shared across the engine."""

from __future__ import annotations

from enum import Enum


class HandlerType(Enum):
    """Built-in assemble handler names."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"


class ExecutionPolicy(Enum):
    """How assemble operations of one batch are scheduled."""

    DISORDERED = "disordered"
    ORDERED = "ordered"


class MappingType(Enum):
    """How a MethodContainer turns a result list into a key -> value mapping."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    NO_MAPPING = "no_mapping"
