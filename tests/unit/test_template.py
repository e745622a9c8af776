"""Unit tests for OperateTemplate, auto_operate and OperatorFactory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any

import pytest

from enrichr.containers.memory import MapContainer
from enrichr.core.exceptions import InvalidOperationError
from enrichr.core.template import Operator, OperateTemplate, OperatorFactory, auto_operate
from enrichr.parser.declarations import Assemble, assemble


@dataclass
class Person:
    gender: Annotated[int | None, Assemble("genders", props=":gender_label", groups="basic")] = None
    dept: Annotated[int | None, Assemble("genders", props=":dept_label", groups="detail")] = None
    gender_label: str | None = None
    dept_label: str | None = None
    name: str | None = None


@dataclass
class Account:
    owner: int | None = None
    owner_label: str | None = None


class AccountOperator:
    @assemble("owner", "genders", props=":owner_label")
    def fill(self, accounts: list[Account]) -> None: ...

    def fill_one(self, account: Account) -> None: ...

    def _helper(self) -> None: ...


class UntypedOperator:
    def fill(self, accounts) -> None: ...


class EmptyOperator:
    pass


class TestOperateTemplate:
    def test_single_object(self, template: OperateTemplate) -> None:
        person = Person(gender=0)
        assert template.execute(person) is person
        assert person.gender_label == "F"

    def test_list(self, template: OperateTemplate) -> None:
        people = [Person(gender=0), None, Person(gender=1)]
        assert template.execute(people) is people
        assert [p.gender_label for p in people if p] == ["F", "M"]

    def test_none(self, template: OperateTemplate, genders: Any) -> None:
        assert template.execute(None) is None
        assert template.execute([]) == []
        assert genders.calls == []

    def test_match_any_groups(self, template: OperateTemplate) -> None:
        person = template.execute_if_match_any_groups(Person(gender=0, dept=1), "basic")
        assert person.gender_label == "F"
        assert person.dept_label is None

    def test_match_all_groups(self, template: OperateTemplate) -> None:
        person = template.execute_if_match_all_groups(Person(gender=0, dept=1), "basic", "detail")
        assert person.gender_label is None
        assert person.dept_label is None

    def test_none_match_groups(self, template: OperateTemplate) -> None:
        person = template.execute_if_none_match_groups(Person(gender=0, dept=1), "basic")
        assert person.gender_label is None
        assert person.dept_label == "M"

    def test_temporary_containers(self, template: OperateTemplate) -> None:
        person = template.execute(Person(gender=0), containers={"genders": MapContainer("genders", {0: "W"})})
        assert person.gender_label == "W"


class TestAutoOperate:
    def test_enriches_return_value(self, template: OperateTemplate) -> None:
        @auto_operate(template)
        def load() -> list[Person]:
            return [Person(gender=1)]

        assert load()[0].gender_label == "M"

    def test_function_declarations(self, template: OperateTemplate) -> None:
        @auto_operate(template, Account)
        @assemble("owner", "genders", props=":owner_label")
        def load(owner: int) -> Account:
            return Account(owner=owner)

        assert load(0).owner_label == "F"
        assert load.__name__ == "load"

    def test_scope_does_not_leak(self, template: OperateTemplate) -> None:
        @auto_operate(template)
        @assemble("owner", "genders", props=":owner_label")
        def load() -> Account:
            return Account(owner=0)

        load()
        plain = template.execute(Account(owner=0))
        assert plain.owner_label is None

    def test_groups(self, template: OperateTemplate) -> None:
        @auto_operate(template, excludes=("detail",))
        def load() -> Person:
            return Person(gender=0, dept=1)

        person = load()
        assert person.gender_label == "F"
        assert person.dept_label is None

    def test_none_result(self, template: OperateTemplate) -> None:
        @auto_operate(template)
        def load() -> None:
            return None

        assert load() is None


class TestOperatorFactory:
    def test_create(self, template: OperateTemplate) -> None:
        operator = OperatorFactory(template).create(AccountOperator)
        assert isinstance(operator, Operator)
        assert sorted(operator.invocations) == ["fill", "fill_one"]

    def test_invocation(self, template: OperateTemplate) -> None:
        operator: Any = OperatorFactory(template).create(AccountOperator)
        accounts = [Account(owner=0), Account(owner=1)]
        assert operator.fill(accounts) is accounts
        assert [a.owner_label for a in accounts] == ["F", "M"]

    def test_method_without_declarations(self, template: OperateTemplate) -> None:
        operator: Any = OperatorFactory(template).create(AccountOperator)
        account = operator.fill_one(Account(owner=0))
        assert account.owner_label is None

    def test_containers_override(self, template: OperateTemplate) -> None:
        operator: Any = OperatorFactory(template).create(AccountOperator)
        account = operator.fill(Account(owner=0), containers={"genders": MapContainer("genders", {0: "X"})})
        assert account.owner_label == "X"

    def test_untyped_parameter(self, template: OperateTemplate) -> None:
        with pytest.raises(InvalidOperationError, match="annotate"):
            OperatorFactory(template).create(UntypedOperator)

    def test_no_methods(self, template: OperateTemplate) -> None:
        with pytest.raises(InvalidOperationError, match="no operator methods"):
            OperatorFactory(template).create(EmptyOperator)
