"""
Example 02: Nested Objects and Collections

This example demonstrates disassembling nested objects, one-to-many and
many-to-many lookups, and containers backed by SQLite queries.
"""

import sqlite3
from dataclasses import dataclass, field
from typing import Annotated, List, Optional

from enrichr import (
    Assemble,
    ContainerRegistry,
    Disassemble,
    ExecutorConfig,
    HandlerType,
    MappingType,
    MethodContainer,
    OperateTemplate,
    OperationExecutor,
)


@dataclass
class Item:
    product_id: Annotated[int, Assemble("products", props="name:product_name")]
    product_name: Optional[str] = None


@dataclass
class Order:
    id: Annotated[int, Assemble("order_notes", props="text:notes", handler=HandlerType.ONE_TO_MANY)]
    tag_codes: Annotated[str, Assemble("tags", props="label:tags", handler=HandlerType.MANY_TO_MANY)]
    items: Annotated[List[Item], Disassemble()] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


def query(conn, sql, keys):
    placeholders = ", ".join("?" for _ in keys)
    print(f"   query: {sql.format(placeholders='...')} {sorted(keys)}")
    return [dict(row) for row in conn.execute(sql.format(placeholders=placeholders), keys)]


def main():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.executescript("""
        CREATE TABLE products (id INTEGER PRIMARY KEY, name TEXT);
        CREATE TABLE notes (order_id INTEGER, text TEXT);
        CREATE TABLE tags (code TEXT PRIMARY KEY, label TEXT);
        INSERT INTO products VALUES (1, 'Pen'), (2, 'Ink'), (3, 'Pad');
        INSERT INTO notes VALUES (10, 'gift wrap'), (10, 'call first'), (11, 'leave at door');
        INSERT INTO tags VALUES ('new', 'New'), ('vip', 'VIP');
    """)

    registry = ContainerRegistry(
        MethodContainer(
            "products",
            lambda keys: query(conn, "SELECT * FROM products WHERE id IN ({placeholders})", keys),
            "id",
        ),
        MethodContainer(
            "order_notes",
            lambda keys: query(conn, "SELECT * FROM notes WHERE order_id IN ({placeholders})", keys),
            "order_id",
            MappingType.ONE_TO_MANY,
        ),
        MethodContainer(
            "tags",
            lambda keys: query(conn, "SELECT * FROM tags WHERE code IN ({placeholders})", keys),
            "code",
        ),
    )
    template = OperateTemplate(OperationExecutor.from_config(ExecutorConfig(), registry))

    print("=== Nested Objects ===\n")

    orders = [
        Order(10, "vip, new", [Item(1), Item(2)]),
        Order(11, "new", [Item(2), Item(3)]),
    ]
    # Three queries in total, however many orders and items there are
    template.execute(orders)

    for order in orders:
        print(f"order {order.id}: tags={order.tags} notes={order.notes}")
        for item in order.items:
            print(f"   - {item.product_name}")

    conn.close()


if __name__ == "__main__":
    main()
