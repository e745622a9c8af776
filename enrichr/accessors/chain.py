"""Dotted-path property access (``"address.city"``)."""

from __future__ import annotations

from typing import Any

from enrichr.mapping.protocol import PropertyAccessor


class ChainPropertyAccessor:
    """Resolves dotted property paths through a delegate accessor.

    A None intermediate reads as None, and a write through it is skipped.
    Names without the separator go straight to the delegate.
    """

    def __init__(self, delegate: PropertyAccessor, separator: str = ".") -> None:
        self._delegate = delegate
        self._separator = separator

    def read(self, target_type: type, instance: Any, name: str) -> Any:
        if self._separator not in name:
            return self._delegate.read(target_type, instance, name)
        current = instance
        for part in name.split(self._separator):
            if current is None:
                return None
            current = self._delegate.read(type(current), current, part)
        return current

    def write(self, target_type: type, instance: Any, name: str, value: Any) -> None:
        if self._separator not in name:
            self._delegate.write(target_type, instance, name, value)
            return
        *path, last = name.split(self._separator)
        current = instance
        for part in path:
            current = self._delegate.read(type(current), current, part)
            if current is None:
                return
        self._delegate.write(type(current), current, last, value)
