"""Unit tests for declaration markers and decorators."""

from __future__ import annotations

from typing import Annotated, Any, Optional, TypeVar, get_args

import pytest
from pydantic import BaseModel

from enrichr.core.exceptions import InvalidOperationError
from enrichr.parser.declarations import (
    Assemble,
    Disassemble,
    assemble,
    declarations_of,
    disassemble,
    field_hints,
    infer_nested_type,
)

T = TypeVar("T")


class Item:
    pass


class Other:
    pass


@assemble("gender", "genders", props=":gender_label")
@assemble("dept_id", "depts", props="name:dept_name", sort=1)
class Decorated:
    pass


class DecoratedChild(Decorated):
    pass


class TestInferNestedType:
    @pytest.mark.parametrize(
        "hint",
        [
            Item,
            list[Item],
            list[list[Item]],
            tuple[Item, ...],
            set[Item],
            Optional[Item],
            Item | None,
            Optional[list[Item]],
            Annotated[list[Item], "meta"],
        ],
    )
    def test_element_class(self, hint: Any) -> None:
        assert infer_nested_type(hint) is Item

    @pytest.mark.parametrize("hint", [Any, object, T, list[Any], Item | Other, dict[str, Item], None])
    def test_dynamic(self, hint: Any) -> None:
        assert infer_nested_type(hint) is None


class TestMarkers:
    def test_assemble_key_defaults_to_field(self) -> None:
        op = Assemble("genders", props=":label").to_operation(key="gender")
        assert op.key == "gender"
        assert op.container == "genders"

    def test_assemble_explicit_key_wins(self) -> None:
        op = Assemble("genders", props=":label", key="gender_id").to_operation(key="gender")
        assert op.key == "gender_id"

    def test_assemble_without_key(self) -> None:
        with pytest.raises(InvalidOperationError, match="has no key"):
            Assemble("genders", props=":label").to_operation()

    def test_disassemble_inferred_type(self) -> None:
        op = Disassemble().to_operation(key="items", inferred_type=Item)
        assert op.nested_type is Item

    def test_disassemble_explicit_type_wins(self) -> None:
        op = Disassemble(type=Other).to_operation(key="items", inferred_type=Item)
        assert op.nested_type is Other


class TestDecorators:
    def test_declarations_in_source_order(self) -> None:
        declarations = declarations_of(Decorated)
        assert [d.key for d in declarations] == ["gender", "dept_id"]

    def test_subclass_does_not_inherit_declarations(self) -> None:
        assert declarations_of(DecoratedChild) == []

    def test_decorating_subclass_leaves_parent_untouched(self) -> None:
        @disassemble("children", Item)
        class Child(Decorated):
            pass

        assert len(declarations_of(Child)) == 1
        assert len(declarations_of(Decorated)) == 2

    def test_function_declarations(self) -> None:
        @assemble("id", "users", props="name")
        def load() -> None:
            pass

        (declaration,) = declarations_of(load)
        assert isinstance(declaration, Assemble)
        assert declaration.props == "name"

    def test_undecorated(self) -> None:
        assert declarations_of(Item) == []


class HintedBase(BaseModel):
    id: int = 0


class Hinted(HintedBase):
    scores: Annotated[list[int], Disassemble()] = []


class Unresolvable:
    ghost: MissingName  # type: ignore[name-defined]  # noqa: F821


class Tree:
    children: Annotated[list["Tree"] | None, Disassemble()] = None


class TestFieldHints:
    def test_pydantic_model_fields_only(self) -> None:
        hints = field_hints(Hinted)
        assert set(hints) == {"id", "scores"}
        assert hints["id"] is int

    def test_annotated_extras_kept(self) -> None:
        base, marker = get_args(field_hints(Hinted)["scores"])
        assert base == list[int]
        assert isinstance(marker, Disassemble)

    def test_function(self) -> None:
        def load(items: list[Item]) -> None:
            pass

        assert field_hints(load)["items"] == list[Item]

    def test_undefined_name(self) -> None:
        with pytest.raises(InvalidOperationError, match="Unresolvable"):
            field_hints(Unresolvable)

    def test_quoted_reference_inside_annotation(self) -> None:
        hint = field_hints(Tree)["children"]
        assert infer_nested_type(hint) is Tree
