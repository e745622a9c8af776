"""
Example 01: Basic Assembly

This example demonstrates filling properties of plain dataclasses from a
container with enrichr's OperateTemplate and ContainerRegistry.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Optional

from enrichr import (
    Assemble,
    ContainerRegistry,
    EnumContainer,
    ExecutorConfig,
    MapContainer,
    OperateTemplate,
    OperationExecutor,
)


class Gender(Enum):
    FEMALE = 0
    MALE = 1


@dataclass
class Student:
    name: str
    gender: Annotated[int, Assemble("Gender", props="name:gender_name", key_type=str)]
    class_id: Annotated[int, Assemble("classes", props=":class_name")]
    gender_name: Optional[str] = None
    class_name: Optional[str] = None


def main():
    # Containers are looked up by namespace
    registry = ContainerRegistry(
        EnumContainer.for_enum(Gender, key=lambda m: str(m.value)),
        MapContainer("classes", {1: "Physics", 2: "History"}),
    )
    executor = OperationExecutor.from_config(ExecutorConfig(), registry)
    template = OperateTemplate(executor)

    print("=== Basic Assembly ===\n")

    # A single object
    alice = template.execute(Student("Alice", 0, 1))
    print(f"single: {alice}")

    # A batch: each container is queried once for all students
    students = [Student("Bob", 1, 2), Student("Carol", 0, 2), Student("Dave", 1, 3)]
    template.execute(students)
    print("batch:")
    for s in students:
        # Dave's class is unknown, so class_name stays None
        print(f"   - {s.name}: {s.gender_name}, {s.class_name}")


if __name__ == "__main__":
    main()
