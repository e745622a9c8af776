"""Unit tests for ReflectiveDisassembleHandler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from enrichr.handlers.disassemble import ReflectiveDisassembleHandler
from enrichr.mapping.plan import DisassembleOperation


@dataclass
class Box:
    items: Any = None


@dataclass
class Item:
    id: int
    tags: list[str] = field(default_factory=list)


ITEMS = DisassembleOperation("items", Item)


class TestReflectiveDisassembleHandler:
    def test_single_object(self) -> None:
        item = Item(1)
        assert ReflectiveDisassembleHandler().process(ITEMS, [Box(item)]) == [item]

    def test_flat_list(self) -> None:
        a, b = Item(1), Item(2)
        assert ReflectiveDisassembleHandler().process(ITEMS, [Box([a, b])]) == [a, b]

    def test_nested_lists_flatten_to_leaves(self) -> None:
        a, b, c, d = Item(1), Item(2), Item(3), Item(4)
        box = Box([[a, None], [[b, c]], (d,), set()])
        result = ReflectiveDisassembleHandler().process(ITEMS, [box])
        assert sorted(i.id for i in result) == [1, 2, 3, 4]
        assert len(result) == 4

    def test_breadth_first_order(self) -> None:
        a, b, c = Item(1), Item(2), Item(3)
        result = ReflectiveDisassembleHandler().process(ITEMS, [Box([[a, b], c])])
        assert result == [c, a, b]

    def test_across_targets_in_order(self) -> None:
        a, b, c = Item(1), Item(2), Item(3)
        result = ReflectiveDisassembleHandler().process(ITEMS, [Box([a]), Box([b, c])])
        assert result == [a, b, c]

    def test_duplicates_kept(self) -> None:
        a = Item(1)
        assert ReflectiveDisassembleHandler().process(ITEMS, [Box([a, a]), Box(a)]) == [a, a, a]

    def test_empty_and_absent(self) -> None:
        handler = ReflectiveDisassembleHandler()
        assert handler.process(ITEMS, [Box(), Box([]), Box([[], [None]])]) == []

    def test_null_targets_skipped(self) -> None:
        a = Item(1)
        assert ReflectiveDisassembleHandler().process(ITEMS, [None, Box([a]), None]) == [a]

    def test_strings_and_mappings_are_leaves(self) -> None:
        result = ReflectiveDisassembleHandler().process(ITEMS, [Box(["ab", {"id": 1}])])
        assert result == ["ab", {"id": 1}]

    def test_dict_targets(self) -> None:
        a = Item(1)
        assert ReflectiveDisassembleHandler().process(ITEMS, [{"items": [a]}]) == [a]
