"""Operation handlers - apply assemble and disassemble operations to targets."""

from __future__ import annotations

from enrichr.handlers.assemble import (
    AbstractAssembleHandler,
    DefaultKeySplitter,
    KeySplitter,
    ManyToManyAssembleHandler,
    OneToManyAssembleHandler,
    OneToOneAssembleHandler,
)
from enrichr.handlers.disassemble import ReflectiveDisassembleHandler

__all__ = [
    "AbstractAssembleHandler",
    "DefaultKeySplitter",
    "KeySplitter",
    "ManyToManyAssembleHandler",
    "OneToManyAssembleHandler",
    "OneToOneAssembleHandler",
    "ReflectiveDisassembleHandler",
]
