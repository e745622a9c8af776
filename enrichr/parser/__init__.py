"""Operation parsing - declaration markers, resolvers and the cached parser."""

from __future__ import annotations

from enrichr.parser.declarations import Assemble, Disassemble, assemble, disassemble
from enrichr.parser.parser import OperationParser
from enrichr.parser.resolvers import (
    AnnotatedFieldResolver,
    ConfigurationResolver,
    DecoratorResolver,
)

__all__ = [
    "AnnotatedFieldResolver",
    "Assemble",
    "ConfigurationResolver",
    "DecoratorResolver",
    "Disassemble",
    "OperationParser",
    "assemble",
    "disassemble",
]
