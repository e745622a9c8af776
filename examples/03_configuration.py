"""
Example 03: Configuration, Groups and Operators

This example demonstrates operations declared without touching the model
classes: the fluent builder, dict configuration, groups and OperatorFactory.
"""

from enrichr import (
    ConfigurationResolver,
    ContainerRegistry,
    DecoratorResolver,
    ExecutorConfig,
    MapContainer,
    OperateTemplate,
    OperationExecutor,
    OperationParser,
    OperatorFactory,
    assemble,
    operations_for,
)


class Employee:
    def __init__(self, name, dept_id, manager_id=None):
        self.name = name
        self.dept_id = dept_id
        self.manager_id = manager_id
        self.dept_name = None
        self.manager_name = None

    def __repr__(self):
        return f"Employee({self.name!r}, dept={self.dept_name!r}, manager={self.manager_name!r})"


class EmployeeOperator:
    @assemble("manager_id", "managers", props=":manager_name")
    def with_manager(self, employees: list[Employee]): ...


def main():
    resolver = ConfigurationResolver()

    # Fluent builder
    resolver.register(
        operations_for(Employee).assemble("dept_id", "departments", groups="org").map(reference="dept_name")
    )

    # Plain dict configuration, e.g. loaded from YAML or JSON
    resolver.load_config(
        [
            {
                "target": Employee,
                "assemble": [
                    {"key": "manager_id", "container": "managers", "props": [":manager_name"], "groups": ["people"]}
                ],
            }
        ]
    )

    registry = ContainerRegistry(
        MapContainer("departments", {1: "Engineering", 2: "Sales"}),
        MapContainer("managers", {7: "Grace"}),
    )
    parser = OperationParser([DecoratorResolver(), resolver])
    config = ExecutorConfig(policy="ordered", batch_size=100)
    template = OperateTemplate(OperationExecutor.from_config(config, registry, parser))

    print("=== Configuration ===\n")

    print(f"all groups:  {template.execute(Employee('Ada', 1, 7))}")
    print(f"'org' only:  {template.execute_if_match_any_groups(Employee('Linus', 2, 7), 'org')}")
    print(f"not 'org':   {template.execute_if_none_match_groups(Employee('Ken', 1, 7), 'org')}")

    # Operators enrich whatever their methods receive
    operator = OperatorFactory(template).create(EmployeeOperator)
    staff = operator.with_manager([Employee("Barbara", 2, 7)])
    print(f"operator:    {staff}")


if __name__ == "__main__":
    main()
