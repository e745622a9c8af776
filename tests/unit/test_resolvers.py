"""Unit tests for the built-in operation resolvers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any

import pytest
from pydantic import BaseModel

from enrichr.core.exceptions import InvalidOperationError
from enrichr.mapping.builder import operations_for
from enrichr.parser.declarations import Assemble, Disassemble, assemble, disassemble
from enrichr.parser.resolvers import (
    AnnotatedFieldResolver,
    ConfigurationResolver,
    DecoratorResolver,
)


@dataclass
class Pet:
    name: str


@disassemble("pets")
@disassemble("best_friend", Pet)
@assemble("gender", "genders", props=":gender_label")
@dataclass
class Owner:
    gender: int
    pets: list[Pet] = field(default_factory=list)
    best_friend: Any = None
    gender_label: str | None = None


@dataclass
class TaggedOwner:
    gender: Annotated[int, Assemble("genders", props=":gender_label", groups="basic")]
    pets: Annotated[list[list[Pet]], Disassemble()] = field(default_factory=list)
    gender_label: str | None = None


@dataclass
class AnnotatedChild(TaggedOwner):
    dept: Annotated[int, Assemble("depts", props="name:dept_name")] = 0


class AnnotatedModel(BaseModel):
    gender: Annotated[int, Assemble("genders", props=":gender_label")]
    gender_label: str | None = None


class TestDecoratorResolver:
    def test_assemble_declarations(self) -> None:
        resolved = DecoratorResolver().resolve(Owner)
        assert [op.key for op in resolved.assemble] == ["gender"]

    def test_disassemble_type_inferred_from_annotation(self) -> None:
        resolved = DecoratorResolver().resolve(Owner)
        by_key = {op.key: op for op in resolved.disassemble}
        assert by_key["pets"].nested_type is Pet
        assert by_key["best_friend"].nested_type is Pet

    def test_undecorated_element(self) -> None:
        assert DecoratorResolver().resolve(Pet).is_empty


class TestAnnotatedFieldResolver:
    def test_field_markers(self) -> None:
        resolved = AnnotatedFieldResolver().resolve(TaggedOwner)
        (op,) = resolved.assemble
        assert op.key == "gender"
        assert op.groups == frozenset({"basic"})
        (nested,) = resolved.disassemble
        assert nested.key == "pets"
        assert nested.nested_type is Pet

    def test_only_own_fields(self) -> None:
        resolved = AnnotatedFieldResolver().resolve(AnnotatedChild)
        assert [op.key for op in resolved.assemble] == ["dept"]
        assert resolved.disassemble == []

    def test_pydantic_model(self) -> None:
        resolved = AnnotatedFieldResolver().resolve(AnnotatedModel)
        assert [op.key for op in resolved.assemble] == ["gender"]

    def test_ignores_functions(self) -> None:
        assert AnnotatedFieldResolver().resolve(len).is_empty


class TestConfigurationResolver:
    def test_register_builder(self) -> None:
        resolver = ConfigurationResolver()
        resolver.register(operations_for(Pet).assemble("name", "pets").map(reference="pet"))
        resolved = resolver.resolve(Pet)
        assert [op.container for op in resolved.assemble] == ["pets"]

    def test_register_appends(self) -> None:
        resolver = ConfigurationResolver()
        resolver.register(Pet, operations_for(Pet).assemble("name", "a").map(reference="x"))
        resolver.register(Pet, operations_for(Pet).assemble("name", "b").map(reference="y"))
        assert len(resolver.resolve(Pet).assemble) == 2

    def test_resolve_returns_copy(self) -> None:
        resolver = ConfigurationResolver()
        resolver.register(operations_for(Pet).assemble("name", "a").map(reference="x"))
        resolver.resolve(Pet).assemble.clear()
        assert len(resolver.resolve(Pet).assemble) == 1

    def test_unknown_element(self) -> None:
        assert ConfigurationResolver().resolve(Pet).is_empty

    def test_load_config(self) -> None:
        resolver = ConfigurationResolver()
        resolver.load_config(
            [
                {
                    "target": f"{__name__}:Owner",
                    "assemble": [
                        {"key": "gender", "container": "genders", "props": ":gender_label", "sort": 1}
                    ],
                    "disassemble": [{"key": "pets", "type": f"{__name__}.Pet"}],
                }
            ]
        )
        resolved = resolver.resolve(Owner)
        assert resolved.assemble[0].sort == 1
        assert resolved.disassemble[0].nested_type is Pet

    def test_load_config_accepts_classes(self) -> None:
        resolver = ConfigurationResolver()
        resolver.load_config([{"target": Pet, "assemble": [{"key": "name", "props": ["name"]}]}])
        assert resolver.resolve(Pet).assemble[0].container == ""

    def test_load_config_invalid_target(self) -> None:
        with pytest.raises(InvalidOperationError, match="Invalid operation configuration"):
            ConfigurationResolver().load_config([{"target": "no.such.module:Thing"}])

    def test_load_config_missing_props(self) -> None:
        with pytest.raises(InvalidOperationError):
            ConfigurationResolver().load_config([{"target": Pet, "assemble": [{"key": "name"}]}])

    def test_clear(self) -> None:
        resolver = ConfigurationResolver()
        resolver.register(operations_for(Pet).assemble("name", "a").map(reference="x"))
        resolver.clear()
        assert resolver.resolve(Pet).is_empty
