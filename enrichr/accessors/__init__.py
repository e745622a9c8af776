"""Property accessors - read and write named properties on targets."""

from __future__ import annotations

from enrichr.accessors.chain import ChainPropertyAccessor
from enrichr.accessors.mapping import MappingPropertyAccessor
from enrichr.accessors.reflective import ReflectivePropertyAccessor, declared_fields


def default_accessor() -> ChainPropertyAccessor:
    """Dotted paths over dicts and objects, with coercion on attribute writes."""
    return ChainPropertyAccessor(MappingPropertyAccessor(ReflectivePropertyAccessor()))


__all__ = [
    "ChainPropertyAccessor",
    "MappingPropertyAccessor",
    "ReflectivePropertyAccessor",
    "declared_fields",
    "default_accessor",
]
